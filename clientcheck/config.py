"""
Loading, validating and scaffolding client configuration files.

A client configuration is a YAML or JSON mapping. Only `client` and
`api.base_url` are required; everything else has a default.
"""
import os
import json
import copy
import logging
from typing import Dict, Any, List, Optional

import yaml

from .errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigFormatError,
    MissingKeysError,
    ConfigValueError,
)
from .models import ClientConfig, TestRecord
from .settings import AUTH_TYPES

logger = logging.getLogger("clientcheck.config")

FORMATS = {
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
}

# Credential fields each authentication type must carry
AUTH_FIELDS = {
    "api_key": ["key"],
    "bearer": ["token"],
    "basic": ["username", "password"],
    "none": [],
}

RECORD_FIELDS = ("id", "name", "price")

API_NUMBER_FIELDS = ("timeout", "max_response_ms")
API_PATH_FIELDS = ("health_path", "resource_path")

TEMPLATE: Dict[str, Any] = {
    "client": "Acme Online Store",
    "api": {
        "base_url": "https://api.example.com/v1",
        "timeout": 10,
        "resource_path": "/products",
    },
    "authentication": {
        "type": "api_key",
        "key": "REPLACE_ME",
        "header": "X-API-Key",
    },
    "tests": [
        "connectivity",
        "authentication",
        "unauthorized_access",
        "response_time",
        "json_content_type",
        "test_data",
    ],
    "test_data": [
        {"id": 1, "name": "Wireless Mouse", "price": 24.99},
        {"id": 2, "name": "USB-C Hub", "price": 39.5},
    ],
    "notes": "Staging environment only. Rotate the API key after the engagement.",
}


def detect_format(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    if ext not in FORMATS:
        raise ConfigFormatError(f"Unsupported file extension '{ext}' (expected .yaml, .yml or .json)", path)
    return FORMATS[ext]


def load_document(path: str) -> Dict[str, Any]:
    """Reads a YAML or JSON file into a plain dict."""
    fmt = detect_format(path)
    if not os.path.exists(path):
        raise ConfigNotFoundError("File not found", path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            if fmt == "yaml":
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except yaml.YAMLError as e:
        raise ConfigFormatError(f"Invalid YAML: {e}", path) from e
    except json.JSONDecodeError as e:
        raise ConfigFormatError(f"Invalid JSON: {e}", path) from e
    except UnicodeDecodeError as e:
        raise ConfigFormatError(f"Not valid UTF-8: {e}", path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read file: {e.strerror or e}", path) from e

    # Empty YAML file
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigFormatError(f"Top level must be a mapping, got {type(data).__name__}", path)

    logger.debug("Loaded %s document from %s (%d top-level keys)", fmt, path, len(data))
    return data


def missing_required_keys(data: Dict[str, Any]) -> List[str]:
    missing = []
    if "client" not in data:
        missing.append("client")
    api = data.get("api")
    if api is None:
        missing.append("api")
    elif not isinstance(api, dict) or "base_url" not in api:
        missing.append("api.base_url")
    return missing


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    """First present key wins."""
    for k in keys:
        if k in data:
            return data[k]
    return None


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _validate_api_options(api: Dict[str, Any], path: Optional[str]):
    for key in API_NUMBER_FIELDS:
        if key in api and not _is_positive_number(api[key]):
            raise ConfigValueError(f"'api.{key}' must be a positive number, got {api[key]!r}", path)
    for key in API_PATH_FIELDS:
        if key in api and not isinstance(api[key], str):
            raise ConfigValueError(f"'api.{key}' must be a string", path)
    if "headers" in api and not isinstance(api["headers"], dict):
        raise ConfigValueError("'api.headers' must be a mapping", path)


def validate(data: Dict[str, Any], path: Optional[str] = None):
    missing = missing_required_keys(data)
    if missing:
        raise MissingKeysError(missing, path)

    if not isinstance(data["client"], str) or not data["client"].strip():
        raise ConfigValueError("'client' must be a non-empty string", path)
    if not isinstance(data["api"]["base_url"], str) or not data["api"]["base_url"].startswith(("http://", "https://")):
        raise ConfigValueError("'api.base_url' must be an http(s) URL", path)
    _validate_api_options(data["api"], path)

    auth = data.get("authentication")
    if auth is not None:
        if not isinstance(auth, dict):
            raise ConfigValueError("'authentication' must be a mapping", path)
        auth_type = auth.get("type", "none")
        if auth_type not in AUTH_TYPES:
            raise ConfigValueError(
                f"authentication.type '{auth_type}' is not one of {', '.join(AUTH_TYPES)}", path
            )
        absent = [f for f in AUTH_FIELDS[auth_type] if not auth.get(f)]
        if absent:
            raise ConfigValueError(f"authentication type '{auth_type}' requires: {', '.join(absent)}", path)

    tests = _pick(data, "tests", "test_scenarios")
    if tests is not None:
        if not isinstance(tests, list) or not all(isinstance(t, str) for t in tests):
            raise ConfigValueError("'tests' must be a list of test names", path)

    records = _pick(data, "test_data", "test_products")
    if records is not None:
        if not isinstance(records, list):
            raise ConfigValueError("'test_data' must be a list of records", path)
        for idx, rec in enumerate(records):
            if not isinstance(rec, dict):
                raise ConfigValueError(f"test_data[{idx}] must be a mapping", path)
            absent = [f for f in RECORD_FIELDS if f not in rec]
            if absent:
                raise ConfigValueError(f"test_data[{idx}] is missing: {', '.join(absent)}", path)


def from_mapping(data: Dict[str, Any], source: Optional[str] = None) -> ClientConfig:
    validate(data, source)
    records = _pick(data, "test_data", "test_products") or []
    return ClientConfig(
        client=data["client"],
        api=dict(data["api"]),
        authentication=dict(data.get("authentication") or {"type": "none"}),
        tests=list(_pick(data, "tests", "test_scenarios") or []),
        test_data=[TestRecord(id=r["id"], name=r["name"], price=r["price"]) for r in records],
        notes=data.get("notes"),
        source=source,
        raw=data,
    )


def load_config(path: str) -> ClientConfig:
    return from_mapping(load_document(path), path)


def dump_document(data: Dict[str, Any], fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    raise ConfigFormatError(f"Unknown format '{fmt}'")


def write_template(path: str, fmt: Optional[str] = None, overwrite: bool = False) -> str:
    """Writes the example client configuration. Returns the path written."""
    fmt = fmt or detect_format(path)
    if os.path.exists(path) and not overwrite:
        raise FileExistsError(f"{path} already exists (use overwrite to replace it)")

    parent = os.path.dirname(path)
    if parent and not os.path.exists(parent):
        os.makedirs(parent)

    with open(path, "w", encoding="utf-8") as f:
        f.write(dump_document(copy.deepcopy(TEMPLATE), fmt))
    logger.info("Wrote %s template to %s", fmt, path)
    return path


def load_or_init(path: str) -> Optional[ClientConfig]:
    """Loads the config, or writes a template and returns None if the file is missing."""
    try:
        return load_config(path)
    except ConfigNotFoundError:
        write_template(path)
        return None


__all__ = [
    "ConfigError",
    "TEMPLATE",
    "detect_format",
    "load_document",
    "missing_required_keys",
    "validate",
    "from_mapping",
    "load_config",
    "dump_document",
    "write_template",
    "load_or_init",
]
