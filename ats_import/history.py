import json
import sqlite_utils
from datetime import datetime
from pathlib import Path
from typing import Optional
from ats_import.models import ImportOptions, ImportSummary


class ImportHistory:
    def __init__(self, db_path: str = "data/imports.db"):
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.db = sqlite_utils.Database(db_path)
        self._init_tables()

    def _init_tables(self):
        if "import_runs" not in self.db.table_names():
            self.db["import_runs"].create(
                {
                    "id": int,
                    "entity_type": str,
                    "source": str,
                    "options": str,  # JSON
                    "total_rows": int,
                    "successful": int,
                    "failed": int,
                    "errors": str,  # JSON
                    "imported_at": str,
                },
                pk="id",
            )

    def record_run(self, entity_type: str, source: str, options: ImportOptions, summary: ImportSummary) -> int:
        table = self.db["import_runs"].insert(
            {
                "entity_type": entity_type,
                "source": source,
                "options": options.model_dump_json(by_alias=True),
                "total_rows": summary.total_rows,
                "successful": summary.successful,
                "failed": summary.failed,
                "errors": json.dumps([e.model_dump() for e in summary.errors]),
                "imported_at": datetime.now().isoformat(),
            }
        )
        return table.last_pk

    def get_run(self, run_id: int) -> Optional[dict]:
        try:
            return self.db["import_runs"].get(run_id)
        except sqlite_utils.db.NotFoundError:
            return None

    def list_runs(self, entity_type: Optional[str] = None) -> list[dict]:
        if entity_type:
            return list(self.db["import_runs"].rows_where("entity_type = ?", [entity_type], order_by="id desc"))
        return list(self.db["import_runs"].rows_where(order_by="id desc"))

    def clear(self, entity_type: Optional[str] = None) -> int:
        runs = self.list_runs(entity_type)
        if entity_type:
            self.db.execute("DELETE FROM import_runs WHERE entity_type = ?", [entity_type])
        else:
            self.db.execute("DELETE FROM import_runs")
        self.db.conn.commit()
        return len(runs)
