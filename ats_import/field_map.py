from types import MappingProxyType
from typing import Any, Mapping, Optional

CUSTOM_FIELDS = "custom_fields"

_PERSON_FIELDS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "email": "email",
    "phone": "phone",
    "mobile_phone": "mobilePhone",
    "title": "title",
    "status": "status",
}

# Input field name (Field Management snake_case or alias) -> backend API key
FIELD_NAME_TO_BACKEND: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "job-seekers": MappingProxyType(
            {
                **_PERSON_FIELDS,
                "address": "address",
                "city": "city",
                "state": "state",
                "zip": "zip",
                "zip_code": "zip",
                "current_organization": "currentOrganization",
                "resume_text": "resumeText",
                "skills": "skills",
                "desired_salary": "desiredSalary",
                "owner": "owner",
                "date_added": "dateAdded",
                "last_contact_date": "lastContactDate",
                "custom_fields": CUSTOM_FIELDS,
            }
        ),
        "leads": MappingProxyType(
            {
                **_PERSON_FIELDS,
                "organization_id": "organizationId",
                "organizationId": "organizationId",
                "address": "address",
                "department": "department",
                "owner": "owner",
                "custom_fields": CUSTOM_FIELDS,
            }
        ),
        "hiring-managers": MappingProxyType(
            {
                **_PERSON_FIELDS,
                "organization_id": "organizationId",
                "organizationId": "organizationId",
                "custom_fields": CUSTOM_FIELDS,
            }
        ),
        "jobs": MappingProxyType(
            {
                "job_title": "jobTitle",
                "title": "jobTitle",
                "organization_id": "organizationId",
                "organizationId": "organizationId",
                "category": "category",
                "status": "status",
                "custom_fields": CUSTOM_FIELDS,
            }
        ),
        "organizations": MappingProxyType(
            {
                "name": "name",
                "contact_phone": "contact_phone",
                "website": "website",
                "status": "status",
                "address": "address",
                "nicknames": "nicknames",
                "custom_fields": CUSTOM_FIELDS,
            }
        ),
        "placements": MappingProxyType(
            {
                "job_seeker_id": "jobSeekerId",
                "job_id": "jobId",
                "status": "status",
                "custom_fields": CUSTOM_FIELDS,
            }
        ),
    }
)

# Keys that may hold an organization's name when Field Management uses a custom field_name
ORGANIZATION_NAME_ALTERNATIVES = (
    "name",
    "company_name",
    "organization_name",
    "org_name",
    "company",
    "organization",
    "Company Name",
    "Organization Name",
    "Name",
    "field_1",
    "Field_1",
    "field1",
    "Field1",
)

ENTITY_ENDPOINTS: Mapping[str, str] = MappingProxyType(
    {
        "organizations": "organizations",
        "job-seekers": "job-seekers",
        "jobs": "jobs",
        "hiring-managers": "hiring-managers",
        "placements": "placements",
        "leads": "leads",
    }
)

# Key holding the record list in the backend's list response
RESPONSE_LIST_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "job-seekers": "jobSeekers",
        "hiring-managers": "hiringManagers",
        "organizations": "organizations",
        "jobs": "jobs",
        "leads": "leads",
        "placements": "placements",
    }
)

UNIQUE_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "organizations": "name",
        "jobs": "jobTitle",
        "placements": "jobSeekerId",
    }
)
DEFAULT_UNIQUE_FIELD = "email"


def get_unique_field(entity_type: str) -> str:
    return UNIQUE_FIELDS.get(entity_type, DEFAULT_UNIQUE_FIELD)


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _fill_organization_name(record: Mapping[str, Any], out: dict[str, Any]):
    """Use the first populated alternative key when the mapped name is blank"""
    if not _is_blank(out.get("name")):
        return
    for alt in ORGANIZATION_NAME_ALTERNATIVES:
        if alt == "name":
            continue
        value = record.get(alt)
        if value is None:
            value = out.get(alt)
        if not _is_blank(value):
            out["name"] = str(value).strip()
            return


def map_record_to_backend_payload(
    entity_type: str,
    record: Mapping[str, Any],
    field_name_to_label: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """
    Translate one input row into the backend's payload shape.

    Known fields go to the top level under their backend key. Everything the
    entity's table does not know is collected into ``custom_fields``, keyed by
    its label from ``field_name_to_label`` when one is given. Values that are
    None or empty strings count as not provided.
    """
    mapping = FIELD_NAME_TO_BACKEND.get(entity_type)
    if mapping is None:
        return dict(record)

    labels = field_name_to_label or {}
    out: dict[str, Any] = {}
    custom_fields: dict[str, Any] = {}

    for key, value in record.items():
        if value is None or value == "":
            continue
        backend_key = mapping.get(key)
        if backend_key is None:
            label = labels.get(key)
            custom_fields[key if label is None else str(label)] = value
        elif backend_key == CUSTOM_FIELDS:
            if isinstance(value, dict):
                custom_fields.update(value)
        else:
            out[backend_key] = value

    if custom_fields:
        out[CUSTOM_FIELDS] = custom_fields

    if entity_type == "organizations":
        _fill_organization_name(record, out)

    return out
