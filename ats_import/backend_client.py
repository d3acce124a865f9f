import httpx
from typing import Any, Optional
from ats_import.field_map import RESPONSE_LIST_KEYS
from ats_import.models import ExistingLookup


class BackendError(Exception):
    """The backend rejected a request; message is the backend's own when it sent one"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return fallback


def as_text(value: Any) -> str:
    """Render a value the way the backend stores it: lowercase booleans, whole floats as ints"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def extract_record_list(endpoint: str, data: Any) -> list:
    """Pull the record list out of a list response, whichever key the backend used"""
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []
    list_key = RESPONSE_LIST_KEYS.get(endpoint, endpoint)
    for key in (list_key, endpoint, "data"):
        value = data.get(key)
        if value:
            return value if isinstance(value, list) else []
    return []


class BackendClient:
    def __init__(self, base_url: str, token: str):
        self.base_url = base_url.rstrip("/")
        self.token = token

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}/api/{path}"
        headers = {"Authorization": f"Bearer {self.token}"}
        return httpx.request(method, url, headers=headers, **kwargs)

    def find_existing(self, endpoint: str, unique_field: str, unique_value: Any) -> ExistingLookup:
        """
        Look up records whose unique field equals unique_value, ignoring case.

        The backend may ignore the query filter, so the returned list is always
        filtered here as well. Failures come back as an ExistingLookup with
        ``error`` set rather than raising.
        """
        wanted = as_text(unique_value).lower()
        try:
            response = self._request("GET", endpoint, params={unique_field: as_text(unique_value)})
            if not response.is_success:
                return ExistingLookup(error=f"lookup returned HTTP {response.status_code}")
            candidates = extract_record_list(endpoint, response.json())
        except Exception as e:
            return ExistingLookup(error=str(e) or e.__class__.__name__)

        matches = [
            r
            for r in candidates
            if isinstance(r, dict)
            and r.get(unique_field) is not None
            and as_text(r[unique_field]).lower() == wanted
        ]
        return ExistingLookup(records=matches)

    def create_record(self, endpoint: str, payload: dict) -> dict:
        """Create a record, returns the backend's response body"""
        response = self._request("POST", endpoint, json=payload)
        if not response.is_success:
            raise BackendError(_error_message(response, "Failed to create record"), response.status_code)
        return response.json() if response.content else {}

    def update_record(self, endpoint: str, record_id: Any, payload: dict) -> dict:
        """Replace an existing record with payload, returns the backend's response body"""
        response = self._request("PUT", f"{endpoint}/{record_id}", json=payload)
        if not response.is_success:
            raise BackendError(_error_message(response, "Failed to update record"), response.status_code)
        return response.json() if response.content else {}

    def fetch_field_labels(self, entity_type: str) -> dict[str, str]:
        """Map custom field names to their display labels for one entity type"""
        response = self._request("GET", f"custom-fields/entity/{entity_type}")
        if not response.is_success:
            raise BackendError(_error_message(response, "Failed to fetch custom fields"), response.status_code)
        data = response.json()
        if isinstance(data, dict):
            fields = data.get("customFields") or data.get("data") or []
        else:
            fields = data if isinstance(data, list) else []
        labels = {}
        for field in fields:
            if not isinstance(field, dict):
                continue
            name, label = field.get("field_name"), field.get("field_label")
            if name and label:
                labels[name] = label
        return labels
