"""Note block dialects, keyed by the tag the parser reports."""

from enum import Enum

from ..core.errors import BlueprintError
from ..core.ports import Blueprint
from .basic import BasicNoteFormat
from .cloze import ClozeNoteFormat


class NoteFormat(str, Enum):
    BASIC = "anki"
    CLOZE = "anki-cloze"


BLUEPRINTS: dict[str, Blueprint] = {
    NoteFormat.BASIC.value: BasicNoteFormat(),
    NoteFormat.CLOZE.value: ClozeNoteFormat(),
}


def get_blueprint(tag: str | NoteFormat) -> Blueprint:
    key = tag.value if isinstance(tag, NoteFormat) else tag
    try:
        return BLUEPRINTS[key]
    except KeyError:
        raise BlueprintError(f"no blueprint registered for note type '{key}'") from None


__all__ = [
    "BLUEPRINTS",
    "BasicNoteFormat",
    "ClozeNoteFormat",
    "NoteFormat",
    "get_blueprint",
]
