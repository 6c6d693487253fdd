from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, Literal

from .errors import ValidationError

ModelName = Literal["Basic", "Cloze"]
AnkiFields = dict[str, str]


@dataclass(frozen=True)
class ParseLocationMarker:
    offset: int  # character offset into the document
    line: int  # 1-based
    column: int  # 0-based

    def __post_init__(self) -> None:
        errors = []
        for name, value, minimum in (
            ("offset", self.offset, 0),
            ("line", self.line, 1),
            ("column", self.column, 0),
        ):
            if not isinstance(value, int) or isinstance(value, bool):
                errors.append(f"{name}: must be an integer, got {value!r}")
            elif value < minimum:
                errors.append(f"{name}: must be >= {minimum}, got {value}")
        if errors:
            raise ValidationError(errors)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ParseLocationMarker:
        missing = [k for k in ("offset", "line", "column") if k not in data]
        if missing:
            raise ValidationError([f"{k}: required" for k in missing])
        return cls(offset=data["offset"], line=data["line"], column=data["column"])

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class ParseLocation:
    """Half-open span ``[start, end)`` in a source document."""

    start: ParseLocationMarker
    end: ParseLocationMarker
    source: str | None = None

    def __post_init__(self) -> None:
        if self.start.offset > self.end.offset:
            raise ValidationError(
                f"location start ({self.start.offset}) is after end ({self.end.offset})"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ParseLocation:
        missing = [k for k in ("start", "end") if k not in data]
        if missing:
            raise ValidationError([f"{k}: required" for k in missing])
        source = data.get("source")
        if source is not None and not isinstance(source, str):
            raise ValidationError("source: must be a string")
        return cls(
            start=ParseLocationMarker.from_dict(data["start"]),
            end=ParseLocationMarker.from_dict(data["end"]),
            source=source,
        )

    def slice(self, text: str) -> str:
        return text[self.start.offset : self.end.offset]


@dataclass(frozen=True)
class ParseNoteResult:
    """One note block as segmented by the parser, before any interpretation."""

    type: str  # blueprint tag, e.g. "anki" or "anki-cloze"
    config: str | None
    front: str | None
    back: str | None
    location: ParseLocation

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ParseNoteResult:
        errors = []
        if not isinstance(data.get("type"), str):
            errors.append("type: must be a string")
        for key in ("config", "front", "back"):
            if key not in data:
                errors.append(f"{key}: required (may be null)")
            elif data[key] is not None and not isinstance(data[key], str):
                errors.append(f"{key}: must be a string or null")
        if "location" not in data:
            errors.append("location: required")
        if errors:
            raise ValidationError(errors)
        return cls(
            type=data["type"],
            config=data["config"],
            front=data["front"],
            back=data["back"],
            location=ParseLocation.from_dict(data["location"]),
        )


class NoteField(str, Enum):
    FRONTLIKE = "Frontlike"
    BACKLIKE = "Backlike"


NoteFields = dict[NoteField, str]


def make_fields(front: str | None, back: str | None) -> NoteFields:
    return {NoteField.FRONTLIKE: front or "", NoteField.BACKLIKE: back or ""}


@dataclass(frozen=True)
class Media:
    path: str  # as written in the note, e.g. "images/cell.png"


@dataclass(frozen=True)
class SourceFile:
    path: str  # vault-relative, "/"-separated, e.g. "Biology/Cells.md"
    parent: str  # "" for the vault root

    @classmethod
    def from_path(cls, path: Path | str, root: Path | str | None = None) -> SourceFile:
        p = Path(path)
        if root is not None:
            p = p.relative_to(Path(root))
        rel = PurePosixPath(p.as_posix())
        parent = rel.parent.as_posix()
        return cls(path=rel.as_posix(), parent="" if parent == "." else parent)


@dataclass(frozen=True)
class SourceDescriptor:
    file: SourceFile
    location: ParseLocation


@dataclass(frozen=True)
class NoteInfoField:
    value: str
    order: int = 0


@dataclass
class NotesInfoResponseEntity:
    """A note record as reported by the remote store's ``notesInfo`` call."""

    note_id: int
    model_name: str
    fields: dict[str, NoteInfoField]
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NotesInfoResponseEntity:
        try:
            raw_fields = data["fields"]
            fields = {
                name: NoteInfoField(value=f["value"], order=f.get("order", 0))
                for name, f in raw_fields.items()
            }
            return cls(
                note_id=int(data["noteId"]),
                model_name=data["modelName"],
                fields=fields,
                tags=list(data.get("tags") or []),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ValidationError(f"malformed notesInfo record: {e}") from e
