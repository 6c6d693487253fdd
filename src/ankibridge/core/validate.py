"""Small composable parsers for loosely-typed data (YAML, JSON).

Each field parser takes a raw value and returns ``Ok(value)`` or
``Err(errors)``. ``parse_mapping`` runs a schema of field parsers over a
mapping and collects every error instead of stopping at the first one.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    errors: list[str] = field(default_factory=list)


Result = Union[Ok[T], Err]
FieldParser = Callable[[Any], "Result[Any]"]


def _is_number(value: Any) -> bool:
    # bool is an int subclass; YAML "yes"/"true" must not become 1
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def nullable_int(value: Any) -> Result[int | None]:
    """Accept ints, integral floats and numeric strings; ``None`` stays ``None``."""
    if value is None:
        return Ok(None)
    if isinstance(value, bool):
        return Err(["must be a number, got a boolean"])
    if isinstance(value, int):
        return Ok(value)
    if isinstance(value, float):
        if value.is_integer():
            return Ok(int(value))
        return Err([f"must be a whole number, got {value!r}"])
    if isinstance(value, str):
        try:
            return Ok(int(value.strip()))
        except ValueError:
            return Err([f"must be a number, got {value!r}"])
    return Err([f"must be a number, got {type(value).__name__}"])


def optional_str(empty_as_unset: bool = False) -> FieldParser:
    """Text field; numbers are coerced, containers rejected."""

    def parse(value: Any) -> Result[str | None]:
        if value is None:
            return Ok(None)
        if _is_number(value):
            value = str(value)
        if not isinstance(value, str):
            return Err([f"must be a string, got {type(value).__name__}"])
        if empty_as_unset and value == "":
            return Ok(None)
        return Ok(value)

    return parse


def optional_str_list(value: Any) -> Result[list[str] | None]:
    """Sequence of scalar text values. A bare string is not a sequence here."""
    if value is None:
        return Ok(None)
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Sequence):
        return Err([f"must be a list of strings, got {type(value).__name__}"])

    items: list[str] = []
    errors: list[str] = []
    for i, item in enumerate(value):
        if _is_number(item):
            item = str(item)
        if not isinstance(item, str):
            errors.append(f"[{i}] must be a string, got {type(item).__name__}")
            continue
        items.append(item)
    if errors:
        return Err(errors)
    return Ok(items)


def optional_bool(value: Any) -> Result[bool | None]:
    if value is None:
        return Ok(None)
    if isinstance(value, bool):
        return Ok(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return Ok(value.strip().lower() == "true")
    return Err([f"must be true or false, got {value!r}"])


def parse_mapping(
    raw: Any, schema: Mapping[str, FieldParser]
) -> Result[tuple[dict[str, Any], dict[str, Any]]]:
    """Run ``schema`` over ``raw``.

    Returns ``Ok((known, extra))`` where ``known`` has one entry per schema key
    (absent keys parse as ``None``) and ``extra`` keeps unrecognised keys in
    their original order.
    """
    if not isinstance(raw, Mapping):
        return Err([f"expected a mapping, got {type(raw).__name__}"])

    known: dict[str, Any] = {}
    errors: list[str] = []
    for key, parser in schema.items():
        result = parser(raw.get(key))
        if isinstance(result, Err):
            errors.extend(f"{key}: {msg}" for msg in result.errors)
        else:
            known[key] = result.value

    extra = {k: v for k, v in raw.items() if k not in schema}
    if errors:
        return Err(errors)
    return Ok((known, extra))
