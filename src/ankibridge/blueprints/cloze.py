"""Cloze blocks: ```anki-cloze fences. Front is the cloze text, back the extra."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.model import NoteField, NoteFields, ParseNoteResult, make_fields
from .layout import newline_of, render_block

if TYPE_CHECKING:
    from ..core.note import Note


@dataclass(frozen=True)
class ClozeNoteFormat:
    tag: str = "anki-cloze"

    def render_as_text(self, note: Note) -> str:
        return render_block(
            self.tag,
            note.config.dump(),
            note.fields.get(NoteField.FRONTLIKE, ""),
            note.fields.get(NoteField.BACKLIKE, ""),
            newline=newline_of(note.source_text),
        )

    def parse_fields(self, result: ParseNoteResult) -> NoteFields:
        return make_fields(result.front, result.back)

    def detect_cloze(self, fields: NoteFields) -> bool:
        return True
