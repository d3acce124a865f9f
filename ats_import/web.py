"""
Flask routes for the dashboard's data uploader.
"""

from typing import Optional

from flask import Flask, current_app, jsonify, request
from pydantic import ValidationError

from ats_import.backend_client import BackendClient
from ats_import.importer import ImportRequestError, import_batch
from ats_import.models import ImportRequest
from ats_import.settings import get_api_base_url

TOKEN_COOKIE = "token"


def _failure(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def register_import_routes(app: Flask):
    """Register the bulk import API route"""

    @app.route("/api/admin/data-uploader/import", methods=["POST"])
    def api_import_records():
        """
        Import a batch of records into the backend.
        Rows are processed in order; the response summarizes every row.
        """
        try:
            token = request.cookies.get(TOKEN_COOKIE)
            if not token:
                return _failure("Authentication required", 401)

            body = request.get_json(force=True)
            if not isinstance(body, dict):
                return _failure("Invalid request data", 400)

            try:
                import_request = ImportRequest.model_validate(body)
            except ValidationError as e:
                current_app.logger.info(f"Rejected import request: {e.error_count()} validation errors")
                return _failure("Invalid request data", 400)

            client = BackendClient(current_app.config["API_BASE_URL"], token)
            summary = import_batch(
                client,
                import_request.entity_type,
                import_request.records,
                import_request.options,
                import_request.field_name_to_label,
            )
            return jsonify({"success": True, "summary": summary.model_dump(by_alias=True)})

        except ImportRequestError as e:
            return _failure(str(e), 400)
        except Exception as e:
            current_app.logger.error(f"Error processing CSV import: {str(e)}", exc_info=True)
            return _failure(str(e) or "Internal server error", 500)


def create_app(config: Optional[dict] = None) -> Flask:
    app = Flask(__name__)
    app.config["API_BASE_URL"] = get_api_base_url()
    if config:
        app.config.update(config)

    register_import_routes(app)
    return app
