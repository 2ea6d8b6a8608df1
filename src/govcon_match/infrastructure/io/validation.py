"""Pydantic-based validation helpers for inbound and persisted payloads.

Domain records are plain frozen dataclasses; ``TypeAdapter`` validates JSON
payloads straight into them (tuples, dates and ``Literal`` fields included)
and dumps them back to JSON-compatible dictionaries.
"""

from __future__ import annotations

from functools import cache
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

SchemaT = TypeVar("SchemaT")


class IncomingDataError(ValueError):
    """Raised when inbound data fails validation."""


@cache
def _adapter(schema: type[SchemaT]) -> TypeAdapter[SchemaT]:
    return TypeAdapter(schema)


def format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",))) or "<root>"
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def validate_as(schema: type[SchemaT], payload: object) -> SchemaT:
    try:
        return _adapter(schema).validate_python(payload)
    except ValidationError as exc:
        message = f"Invalid payload for {schema.__name__}: {format_validation_error(exc)}"
        raise IncomingDataError(message) from exc


def validate_json_as(schema: type[SchemaT], payload: str | bytes | bytearray) -> SchemaT:
    try:
        return _adapter(schema).validate_json(payload)
    except ValidationError as exc:
        message = f"Invalid JSON payload for {schema.__name__}: {format_validation_error(exc)}"
        raise IncomingDataError(message) from exc


def dump_as_json_dict(schema: type[SchemaT], value: SchemaT) -> dict[str, object]:
    """Dump a dataclass record to a JSON-compatible dictionary."""
    dumped: dict[str, object] = _adapter(schema).dump_python(value, mode="json")
    return dumped
