"""Per-note configuration embedded in a note block."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any

import yaml

from .errors import ConfigValidationError
from .model import ParseNoteResult
from .validate import (
    Err,
    Ok,
    Result,
    nullable_int,
    optional_bool,
    optional_str,
    optional_str_list,
    parse_mapping,
)

CONFIG_SCHEMA = {
    "id": nullable_int,
    "deck": optional_str(empty_as_unset=True),
    "tags": optional_str_list,
    "delete": optional_bool,
    "enabled": optional_bool,
    "cloze": optional_bool,
}

# Render order; also the order of CONFIG_SCHEMA
CONFIG_KEYS = tuple(CONFIG_SCHEMA)


@dataclass
class Config:
    """User overrides. ``None`` everywhere means "inherit from settings"."""

    deck: str | None = None
    tags: list[str] | None = None
    delete: bool | None = None
    enabled: bool | None = None
    cloze: bool | None = None
    # Keys we do not interpret, kept so a re-render does not drop them
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class ParseConfig(Config):
    id: int | None = None

    @classmethod
    def from_text(cls, text: str | None) -> ParseConfig:
        result = parse_config(text)
        if isinstance(result, Err):
            raise ConfigValidationError(result.errors)
        return result.value

    @classmethod
    def from_result(cls, result: ParseNoteResult) -> ParseConfig:
        return cls.from_text(result.config)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key in CONFIG_KEYS:
            value = getattr(self, key)
            if value is not None:
                out[key] = list(value) if key == "tags" else value
        for key, value in self.extra.items():
            out.setdefault(key, value)
        return out

    def dump(self) -> str:
        """Canonical YAML for this config, "" when nothing is set."""
        data = self.to_dict()
        if not data:
            return ""
        buf = io.StringIO()
        yaml.safe_dump(data, buf, sort_keys=False, allow_unicode=True)
        return buf.getvalue()


def parse_config(text: str | None) -> Result[ParseConfig]:
    if text is None or not text.strip():
        return Ok(ParseConfig())

    try:
        raw = yaml.safe_load(io.StringIO(text))
    except yaml.YAMLError as e:
        return Err([f"invalid YAML: {e}"])
    if raw is None:
        return Ok(ParseConfig())

    parsed = parse_mapping(raw, CONFIG_SCHEMA)
    if isinstance(parsed, Err):
        return parsed
    known, extra = parsed.value
    return Ok(ParseConfig(extra=extra, **known))
