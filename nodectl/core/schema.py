"""JSON Schema loading and validation for packaged nodectl schemas."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any

from jsonschema import ValidationError, validators

from nodectl.core.errors import ConfigError, NodectlError, SchemaError


@lru_cache(maxsize=None)
def load_validator(name: str) -> Any:
    schema_text = resources.files("nodectl.schemas").joinpath(f"{name}.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _failure_message(exc: ValidationError, source: object) -> str:
    path = ".".join(str(p) for p in exc.path)
    where = f" ({path})" if path else ""
    return f"Schema validation failed for {source}{where}: {exc.message}"


def validate_document(
    name: str,
    doc: Any,
    *,
    source: object,
    error_cls: type[NodectlError] = SchemaError,
) -> None:
    validator = load_validator(name)
    try:
        validator.validate(doc)
    except ValidationError as exc:
        raise error_cls(_failure_message(exc, source)) from exc


def validate_config(doc: Any, *, source: object) -> None:
    validate_document("config", doc, source=source, error_cls=ConfigError)
