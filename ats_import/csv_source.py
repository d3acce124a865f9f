import csv
import re
from ats_import.field_map import ORGANIZATION_NAME_ALTERNATIVES

_PERSON_HEADERS = {
    "first_name": ["first name", "firstname", "fname", "given name", "first_name"],
    "last_name": ["last name", "lastname", "lname", "surname", "family name", "last_name"],
    "email": ["email", "email address", "e-mail"],
    "phone": ["phone", "telephone", "phone number"],
    "status": ["status"],
    "title": ["title", "job title", "position"],
}

# Field name -> CSV header spellings that auto-map to it (compared case-insensitively)
HEADER_VARIANTS: dict[str, dict[str, list[str]]] = {
    "organizations": {
        "name": ["name", "organization name", "company name", "org name"],
        "nicknames": ["nicknames", "nickname", "aliases"],
        "status": ["status"],
        "contact_phone": ["phone", "contact phone", "telephone", "contact_phone"],
        "address": ["address", "street address"],
        "website": ["website", "url", "web"],
    },
    "leads": {
        **_PERSON_HEADERS,
        "organization_id": ["organization", "organization id", "org id", "company", "organization_id"],
        "department": ["department"],
    },
    "hiring-managers": {
        **_PERSON_HEADERS,
        "organization_id": ["organization", "organization id", "org id", "company", "organization_id"],
    },
    "job-seekers": {
        **_PERSON_HEADERS,
        "mobile_phone": ["mobile", "mobile phone", "cell", "mobile_phone"],
        "city": ["city"],
        "state": ["state"],
        "zip": ["zip", "zip code", "postal code", "zip_code"],
    },
    "jobs": {
        "job_title": ["job title", "title", "position", "role", "job_title"],
        "category": ["category", "job category", "type"],
        "status": ["status"],
        "organization_id": ["organization", "organization id", "org id", "company", "organization_id"],
    },
    "placements": {
        "job_seeker_id": ["job seeker id", "candidate id", "job_seeker_id"],
        "job_id": ["job id", "job_id"],
        "status": ["status"],
    },
}

REQUIRED_FIELDS: dict[str, list[str]] = {
    "organizations": ["name"],
    "leads": ["first_name", "last_name"],
    "job-seekers": ["first_name", "last_name"],
    "jobs": ["job_title"],
}

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def read_csv_records(path: str) -> list[dict[str, str]]:
    """Read a CSV file into one dict per data row, headers and values trimmed"""
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.reader(f)
        try:
            headers = [h.strip() for h in next(reader)]
        except StopIteration:
            return []

        rows = []
        for values in reader:
            if not any(v.strip() for v in values):
                continue
            row = {}
            for i, header in enumerate(headers):
                row[header] = values[i].strip() if i < len(values) else ""
            rows.append(row)
        return rows


def auto_map_headers(entity_type: str, headers: list[str]) -> dict[str, str]:
    """
    Pick a field name for each CSV header.

    Headers matching a known spelling for the entity map to that field; the
    rest keep their own name so the importer files them under custom fields.
    """
    variants = HEADER_VARIANTS.get(entity_type, {})
    header_map = {}
    for header in headers:
        lowered = header.strip().lower()
        header_map[header] = header
        for field_name, spellings in variants.items():
            if lowered in spellings:
                header_map[header] = field_name
                break
    return header_map


def apply_header_mapping(rows: list[dict], header_map: dict[str, str]) -> list[dict]:
    """
    Rename each row's keys through header_map.

    When several headers map to one field, the first non-blank value wins.
    A later non-blank value for an already filled field stays under its own
    header so nothing in the file is dropped.
    """
    mapped = []
    for row in rows:
        out = {}
        for header, value in row.items():
            field_name = header_map.get(header, header)
            if field_name not in out or _is_blank(out[field_name]):
                out[field_name] = value
            elif not _is_blank(value):
                out[header] = value
        mapped.append(out)
    return mapped


def _is_blank(value) -> bool:
    return value is None or str(value).strip() == ""


def validate_rows(entity_type: str, rows: list[dict]) -> tuple[list[str], list[str]]:
    """Returns (errors, warnings). Line numbers count the header as line 1."""
    errors = []
    warnings = []
    required = REQUIRED_FIELDS.get(entity_type, [])

    for index, row in enumerate(rows):
        line = index + 2
        for field_name in required:
            if entity_type == "organizations" and field_name == "name":
                # The importer recovers the name from alternative columns
                candidates = [row.get(alt) for alt in ORGANIZATION_NAME_ALTERNATIVES]
            else:
                candidates = [row.get(field_name)]
            if all(_is_blank(v) for v in candidates):
                errors.append(f'Row {line}: Missing required field "{field_name}"')

        email = row.get("email")
        if email and not EMAIL_PATTERN.match(str(email)):
            warnings.append(f"Row {line}: Invalid email format")

    return errors, warnings
