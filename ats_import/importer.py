import logging
from typing import Any, Mapping, Optional
from ats_import.backend_client import BackendClient, BackendError, as_text
from ats_import.field_map import ENTITY_ENDPOINTS, get_unique_field, map_record_to_backend_payload
from ats_import.models import ImportOptions, ImportSummary

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error occurred"


class ImportRequestError(Exception):
    """The batch as a whole cannot be processed"""


class InvalidImportRequest(ImportRequestError):
    def __init__(self, message: str = "Invalid request data"):
        super().__init__(message)


class UnsupportedEntityType(ImportRequestError):
    def __init__(self, entity_type: Any):
        super().__init__(f"Unsupported entity type: {as_text(entity_type)}")
        self.entity_type = entity_type


def resolve_endpoint(entity_type: Any) -> str:
    endpoint = ENTITY_ENDPOINTS.get(entity_type) if isinstance(entity_type, str) else None
    if endpoint is None:
        raise UnsupportedEntityType(entity_type)
    return endpoint


def import_record(
    client: BackendClient,
    entity_type: str,
    endpoint: str,
    record: Mapping[str, Any],
    options: ImportOptions,
    field_name_to_label: Optional[Mapping[str, Any]] = None,
) -> list[str]:
    """Skip, update or create one row. Returns its error messages, empty on success."""
    if not isinstance(record, Mapping):
        raise TypeError(f"Row must be an object, got {type(record).__name__}")

    payload = map_record_to_backend_payload(entity_type, record, field_name_to_label)

    unique_field = get_unique_field(entity_type)
    unique_value = payload.get(unique_field)
    if unique_value is None:
        unique_value = record.get(unique_field)

    if options.checks_existing and unique_value:
        lookup = client.find_existing(endpoint, unique_field, unique_value)
        if not lookup.ok:
            # Existence check is advisory; fall through to create
            logger.warning("Could not check for existing %s record: %s", entity_type, lookup.error)
        elif lookup.first is not None:
            if options.skips_existing:
                return [f"Record already exists ({unique_field}: {as_text(unique_value)})"]
            if options.update_existing:
                try:
                    client.update_record(endpoint, lookup.first.get("id"), payload)
                except BackendError as e:
                    return [e.message]
                return []

    try:
        client.create_record(endpoint, payload)
    except BackendError as e:
        return [e.message]
    return []


def import_batch(
    client: BackendClient,
    entity_type: str,
    records: list,
    options: Optional[ImportOptions] = None,
    field_name_to_label: Optional[Mapping[str, Any]] = None,
) -> ImportSummary:
    """
    Import rows one at a time, in order, and summarize the outcome.

    Request-level problems (no entity type, records not a list, unknown
    entity type) raise ImportRequestError before any row is touched. After
    that nothing raises: every row ends up counted as successful or failed,
    with failures reported under their 1-based row number.
    """
    if not entity_type or not isinstance(records, list):
        raise InvalidImportRequest()
    endpoint = resolve_endpoint(entity_type)
    options = options or ImportOptions()

    logger.info("Importing %d %s records", len(records), entity_type)
    summary = ImportSummary(total_rows=len(records))

    for i, record in enumerate(records):
        row_number = i + 1
        try:
            errors = import_record(client, entity_type, endpoint, record, options, field_name_to_label)
        except Exception as e:
            logger.warning("Row %d failed: %s", row_number, e)
            errors = [str(e) or UNKNOWN_ERROR]

        if errors:
            summary.record_failure(row_number, errors)
        else:
            summary.record_success()

    logger.info(
        "Imported %s: %d successful, %d failed",
        entity_type,
        summary.successful,
        summary.failed,
    )
    return summary
