import os
import yaml
from dotenv import load_dotenv

load_dotenv("config/.env")

DEFAULT_API_BASE_URL = "http://localhost:8080"
DEFAULT_HISTORY_DB = "data/imports.db"
IMPORT_CONFIG_PATH = "config/import.yaml"


def get_api_base_url() -> str:
    return os.getenv("API_BASE_URL") or DEFAULT_API_BASE_URL


def get_api_token() -> str:
    return os.getenv("API_TOKEN", "")


def get_history_db_path() -> str:
    return os.getenv("IMPORT_HISTORY_DB") or DEFAULT_HISTORY_DB


def load_import_config(path: str = IMPORT_CONFIG_PATH) -> dict:
    """Default CLI options and per-entity field labels; empty when the file is absent"""
    try:
        with open(path) as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}


def load_field_labels(path: str) -> dict[str, str]:
    """Read a flat field_name -> field_label YAML mapping"""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of field names to labels")
    return {str(k): str(v) for k, v in data.items()}
