import pytest
import respx
from httpx import Response
from typer.testing import CliRunner

BASE = "http://backend.test/api"

runner = CliRunner()

LEADS_CSV = "First Name,Last Name,Email,Referral\nJane,Doe,jane@co.com,friend\nBob,Smith,bob@co.com,\n"


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("API_BASE_URL", "http://backend.test")
    monkeypatch.setenv("API_TOKEN", "cli-token")
    monkeypatch.setenv("COLUMNS", "200")
    monkeypatch.setenv("IMPORT_HISTORY_DB", str(tmp_path / "imports.db"))
    (tmp_path / "leads.csv").write_text(LEADS_CSV)
    return tmp_path


class TestImportCommand:
    def test_dry_run_previews_payloads(self, workdir):
        from cli import app

        with respx.mock(assert_all_mocked=True) as mock:
            result = runner.invoke(app, ["import", "leads", "leads.csv", "--dry-run"])
            assert not mock.calls

        assert result.exit_code == 0
        assert "firstName" in result.output
        assert not (workdir / "imports.db").exists()

    def test_missing_required_fields_abort(self, workdir):
        from cli import app

        (workdir / "bad.csv").write_text("First Name,Email\nJane,jane@co.com\n")
        result = runner.invoke(app, ["import", "leads", "bad.csv"])

        assert result.exit_code == 1
        assert 'Missing required field "last_name"' in result.output

    @respx.mock
    def test_imports_and_records_history(self, workdir):
        from cli import app
        from ats_import.history import ImportHistory

        respx.get(f"{BASE}/custom-fields/entity/leads").mock(
            return_value=Response(200, json={"customFields": [{"field_name": "Referral", "field_label": "Referred By"}]})
        )
        create = respx.post(f"{BASE}/leads").mock(return_value=Response(201, json={"id": 1}))

        result = runner.invoke(app, ["import", "leads", "leads.csv"])

        assert result.exit_code == 0, result.output
        assert "Done: 2 successful, 0 failed of 2 rows" in result.output
        assert create.call_count == 2
        assert create.calls[0].request.headers["Authorization"] == "Bearer cli-token"
        assert b"Referred By" in create.calls[0].request.content

        runs = ImportHistory(str(workdir / "imports.db")).list_runs()
        assert len(runs) == 1
        assert runs[0]["successful"] == 2

    @respx.mock
    def test_labels_file_skips_backend_lookup(self, workdir):
        from cli import app

        labels = respx.get(f"{BASE}/custom-fields/entity/leads").mock(return_value=Response(200, json={}))
        create = respx.post(f"{BASE}/leads").mock(return_value=Response(201, json={"id": 1}))
        (workdir / "labels.yaml").write_text("Referral: How They Heard\n")

        result = runner.invoke(app, ["import", "leads", "leads.csv", "--labels", "labels.yaml"])

        assert result.exit_code == 0, result.output
        assert not labels.called
        assert b"How They Heard" in create.calls[0].request.content

    @respx.mock
    def test_config_options_and_row_errors(self, workdir):
        from cli import app

        (workdir / "config").mkdir()
        (workdir / "config" / "import.yaml").write_text(
            "options:\n  skipDuplicates: true\nfield_labels:\n  leads:\n    Referral: Referral Source\n"
        )
        respx.get(f"{BASE}/leads").mock(
            return_value=Response(200, json={"leads": [{"id": 5, "email": "JANE@co.com"}]})
        )
        respx.post(f"{BASE}/leads").mock(return_value=Response(201, json={"id": 6}))

        result = runner.invoke(app, ["import", "leads", "leads.csv"])

        assert result.exit_code == 0, result.output
        assert "Done: 1 successful, 1 failed of 2 rows" in result.output
        assert "already exists" in result.output


class TestHistoryCommands:
    def _seed(self, workdir):
        from ats_import.history import ImportHistory
        from ats_import.models import ImportOptions, ImportSummary

        history = ImportHistory(str(workdir / "imports.db"))
        history.record_run("leads", "leads.csv", ImportOptions(), ImportSummary(total_rows=2, successful=2))
        history.record_run("jobs", "jobs.csv", ImportOptions(), ImportSummary(total_rows=1, failed=1))
        return history

    def test_history_lists_runs(self, workdir):
        from cli import app

        self._seed(workdir)
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "leads.csv" in result.output
        assert "jobs.csv" in result.output

    def test_history_filters_by_entity(self, workdir):
        from cli import app

        self._seed(workdir)
        result = runner.invoke(app, ["history", "--entity-type", "jobs"])

        assert "jobs.csv" in result.output
        assert "leads.csv" not in result.output

    def test_history_shows_one_run_errors(self, workdir):
        from cli import app
        from ats_import.history import ImportHistory
        from ats_import.models import ImportOptions, ImportSummary

        summary = ImportSummary(total_rows=2)
        summary.record_success()
        summary.record_failure(2, ["Record already exists (email: bob@co.com)"])
        run_id = ImportHistory(str(workdir / "imports.db")).record_run("leads", "leads.csv", ImportOptions(), summary)

        result = runner.invoke(app, ["history", "--run", str(run_id)])

        assert result.exit_code == 0, result.output
        assert "1 successful, 1 failed of 2 rows" in result.output
        assert "Record already exists (email: bob@co.com)" in result.output

    def test_history_unknown_run(self, workdir):
        from cli import app

        self._seed(workdir)
        result = runner.invoke(app, ["history", "--run", "99"])

        assert result.exit_code == 1
        assert "No import run with id 99" in result.output

    def test_clear_history(self, workdir):
        from cli import app

        history = self._seed(workdir)
        result = runner.invoke(app, ["clear-history", "--entity-type", "leads", "--yes"])

        assert result.exit_code == 0
        assert "Cleared 1 runs for 'leads'." in result.output
        assert [r["entity_type"] for r in history.list_runs()] == ["jobs"]

    def test_clear_history_aborts_without_confirmation(self, workdir):
        from cli import app

        history = self._seed(workdir)
        result = runner.invoke(app, ["clear-history"], input="n\n")

        assert "Aborted." in result.output
        assert len(history.list_runs()) == 2
