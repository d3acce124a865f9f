from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntityType(str, Enum):
    """Record categories the backend accepts imports for"""

    JOB_SEEKERS = "job-seekers"
    LEADS = "leads"
    HIRING_MANAGERS = "hiring-managers"
    JOBS = "jobs"
    ORGANIZATIONS = "organizations"
    PLACEMENTS = "placements"


class ImportOptions(BaseModel):
    """Duplicate handling flags, any of which enables the existence lookup"""

    model_config = ConfigDict(populate_by_name=True)

    skip_duplicates: bool = Field(False, alias="skipDuplicates")
    import_new_only: bool = Field(False, alias="importNewOnly")
    update_existing: bool = Field(False, alias="updateExisting")

    @field_validator("skip_duplicates", "import_new_only", "update_existing", mode="before")
    @classmethod
    def _truthy(cls, value):
        return bool(value)

    @property
    def checks_existing(self) -> bool:
        return self.skip_duplicates or self.import_new_only or self.update_existing

    @property
    def skips_existing(self) -> bool:
        return self.skip_duplicates or self.import_new_only


class RowError(BaseModel):
    row: int
    errors: list[str]


class ImportSummary(BaseModel):
    """Per-batch outcome, serialized with the dashboard's camelCase keys"""

    model_config = ConfigDict(populate_by_name=True)

    total_rows: int = Field(0, alias="totalRows")
    successful: int = 0
    failed: int = 0
    errors: list[RowError] = []

    def record_success(self):
        self.successful += 1

    def record_failure(self, row: int, errors: list[str]):
        self.failed += 1
        self.errors.append(RowError(row=row, errors=errors))


class ImportRequest(BaseModel):
    """Body of POST /api/admin/data-uploader/import"""

    model_config = ConfigDict(populate_by_name=True)

    # Checked against the supported types by the importer, not here
    entity_type: Any = Field(alias="entityType")
    # Rows stay untyped so a malformed row fails on its own instead of the batch
    records: list[Any]
    options: ImportOptions = ImportOptions()
    field_name_to_label: Optional[dict[str, Any]] = Field(None, alias="fieldNameToLabel")

    @field_validator("options", mode="before")
    @classmethod
    def _options_object(cls, value):
        return value if isinstance(value, dict) else {}


class ExistingLookup(BaseModel):
    """Outcome of an existence check: matching records, or why the check failed"""

    records: list[dict[str, Any]] = []
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def first(self) -> Optional[dict[str, Any]]:
        return self.records[0] if self.records else None
