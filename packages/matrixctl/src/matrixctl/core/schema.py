from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from .errors import ScriptError
from .exit_codes import ERR_CONFIG, ERR_VALIDATION


def load_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ScriptError(f"invalid YAML in {path}: {exc}", ERR_CONFIG, kind="config_error") from exc


def load_schema(name: str) -> dict[str, Any]:
    text = resources.files("matrixctl.schemas").joinpath(name).read_text(encoding="utf-8")
    return json.loads(text)


def validate_payload(payload: Any, schema_name: str, *, source: str = "<payload>") -> None:
    schema = load_schema(schema_name)
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        pointer = "/".join(str(p) for p in exc.absolute_path)
        loc = pointer or "<root>"
        raise ScriptError(f"{source}: schema validation failed at {loc}: {exc.message}", ERR_VALIDATION) from exc


def validate_json_file(path: Path, schema_name: str) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ScriptError(f"cannot read {path}: {exc}", ERR_VALIDATION) from exc
    validate_payload(payload, schema_name, source=str(path))
    return payload
