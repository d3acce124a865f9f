import json
import logging
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from ats_import.models import EntityType

app = typer.Typer()
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show importer log output")):
    """Bulk import CSV data into the recruiting CRM"""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(message)s", handlers=[RichHandler(console=console)])


def _resolve_labels(entity_type: str, labels_path: str, config: dict, client) -> dict:
    from httpx import HTTPError
    from ats_import.backend_client import BackendError
    from ats_import.settings import load_field_labels

    if labels_path:
        return load_field_labels(labels_path)
    configured = config.get("field_labels", {}).get(entity_type)
    if configured:
        return {str(k): str(v) for k, v in configured.items()}
    if client is None:
        return {}
    try:
        return client.fetch_field_labels(entity_type)
    except (BackendError, HTTPError, ValueError) as e:
        console.print(f"[yellow]Could not load custom field labels: {e}[/yellow]")
        return {}


def _print_preview(entity_type: str, rows: list[dict], labels: dict, limit: int):
    from ats_import.field_map import map_record_to_backend_payload

    table = Table(title=f"Preview: {entity_type}")
    table.add_column("Row")
    table.add_column("Payload")
    for i, row in enumerate(rows[:limit], start=1):
        payload = map_record_to_backend_payload(entity_type, row, labels)
        table.add_row(str(i), json.dumps(payload, ensure_ascii=False))
    console.print(table)
    if len(rows) > limit:
        console.print(f"... and {len(rows) - limit} more rows")


@app.command("import")
def import_file(
    entity_type: EntityType = typer.Argument(..., help="Record type to import"),
    csv_path: str = typer.Argument(..., help="CSV file with a header row"),
    skip_duplicates: bool = typer.Option(False, "--skip-duplicates", help="Fail rows that already exist"),
    import_new_only: bool = typer.Option(False, "--import-new-only", help="Only create records that do not exist"),
    update_existing: bool = typer.Option(False, "--update-existing", help="Update records that already exist"),
    labels: str = typer.Option(None, help="YAML file mapping field names to custom field labels"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview mapped payloads without importing"),
    force: bool = typer.Option(False, "--force", help="Import even when required fields are missing"),
    preview_rows: int = typer.Option(10, help="Rows shown by --dry-run"),
):
    """Import records from a CSV file"""
    from ats_import.backend_client import BackendClient
    from ats_import.csv_source import apply_header_mapping, auto_map_headers, read_csv_records, validate_rows
    from ats_import.history import ImportHistory
    from ats_import.importer import ImportRequestError, import_batch
    from ats_import.models import ImportOptions
    from ats_import.settings import get_api_base_url, get_api_token, get_history_db_path, load_import_config

    entity = entity_type.value
    raw_rows = read_csv_records(csv_path)
    if not raw_rows:
        console.print("No rows to import.")
        return

    header_map = auto_map_headers(entity, list(raw_rows[0].keys()))
    rows = apply_header_mapping(raw_rows, header_map)

    errors, warnings = validate_rows(entity, rows)
    for warning in warnings:
        console.print(f"[yellow]{warning}[/yellow]")
    if errors:
        for error in errors[:20]:
            console.print(f"[red]{error}[/red]")
        if len(errors) > 20:
            console.print(f"[red]... and {len(errors) - 20} more[/red]")
        if not force:
            console.print("Fix the rows above or pass --force.")
            raise typer.Exit(code=1)

    config = load_import_config()
    defaults = ImportOptions.model_validate(config.get("options") or {})
    options = ImportOptions(
        skip_duplicates=skip_duplicates or defaults.skip_duplicates,
        import_new_only=import_new_only or defaults.import_new_only,
        update_existing=update_existing or defaults.update_existing,
    )

    client = None if dry_run else BackendClient(get_api_base_url(), get_api_token())
    field_labels = _resolve_labels(entity, labels, config, client)

    if dry_run:
        _print_preview(entity, rows, field_labels, preview_rows)
        return

    try:
        summary = import_batch(client, entity, rows, options, field_labels)
    except ImportRequestError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    ImportHistory(get_history_db_path()).record_run(entity, csv_path, options, summary)

    console.print(
        f"\nDone: {summary.successful} successful, {summary.failed} failed of {summary.total_rows} rows"
    )
    if summary.errors:
        table = Table(title="Row Errors")
        table.add_column("Row")
        table.add_column("Errors")
        for row_error in summary.errors:
            table.add_row(str(row_error.row), "; ".join(row_error.errors))
        console.print(table)


@app.command()
def history(
    entity_type: EntityType = typer.Option(None, help="Only show runs for this record type"),
    run_id: int = typer.Option(None, "--run", help="Show the row errors of one run"),
):
    """Show recorded import runs"""
    from ats_import.history import ImportHistory
    from ats_import.settings import get_history_db_path

    store = ImportHistory(get_history_db_path())

    if run_id is not None:
        run = store.get_run(run_id)
        if run is None:
            console.print(f"[red]No import run with id {run_id}[/red]")
            raise typer.Exit(code=1)
        console.print(
            f"Run {run['id']}: {run['entity_type']} from {run['source']} at {run['imported_at']}, "
            f"{run['successful']} successful, {run['failed']} failed of {run['total_rows']} rows"
        )
        row_errors = json.loads(run["errors"] or "[]")
        if row_errors:
            table = Table(title="Row Errors")
            table.add_column("Row")
            table.add_column("Errors")
            for row_error in row_errors:
                table.add_row(str(row_error["row"]), "; ".join(row_error["errors"]))
            console.print(table)
        return

    runs = store.list_runs(entity_type.value if entity_type else None)

    table = Table(title="Import History")
    table.add_column("ID")
    table.add_column("Imported At")
    table.add_column("Entity")
    table.add_column("Source")
    table.add_column("Rows")
    table.add_column("Successful")
    table.add_column("Failed")

    for run in runs:
        table.add_row(
            str(run["id"]),
            run["imported_at"],
            run["entity_type"],
            run["source"],
            str(run["total_rows"]),
            str(run["successful"]),
            str(run["failed"]),
        )

    console.print(table)


@app.command()
def clear_history(
    entity_type: EntityType = typer.Option(None, help="Only clear runs for this record type"),
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Clear the import history database"""
    from ats_import.history import ImportHistory
    from ats_import.settings import get_history_db_path

    store = ImportHistory(get_history_db_path())
    entity = entity_type.value if entity_type else None
    count = len(store.list_runs(entity))
    target = f"{count} runs for '{entity}'" if entity else f"all {count} runs"

    if count == 0:
        console.print("No runs to clear.")
        return

    if not confirm:
        if not typer.confirm(f"Clear {target}?"):
            console.print("Aborted.")
            return

    store.clear(entity)
    console.print(f"Cleared {target}.")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind"),
    port: int = typer.Option(5000, help="Port to listen on"),
):
    """Run the import API server"""
    from ats_import.web import create_app

    create_app().run(host=host, port=port)


if __name__ == "__main__":
    app()
