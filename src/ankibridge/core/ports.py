from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from .model import NoteFields, NotesInfoResponseEntity, ParseNoteResult, SourceFile

if TYPE_CHECKING:
    from .note import Note


class Blueprint(Protocol):
    """
    A text dialect for note blocks: how a note is laid out in a document and
    how the parser's segments map onto the two logical fields.
    """

    tag: str

    def render_as_text(self, note: Note) -> str:
        pass

    def parse_fields(self, result: ParseNoteResult) -> NoteFields:
        pass

    def detect_cloze(self, fields: NoteFields) -> bool:
        pass


class NoteBlockParser(Protocol):
    """
    Segment a document into note blocks. Knows nothing about configuration
    semantics; hands back raw text segments with their locations.
    """

    def parse(self, text: str, source: str | None = None) -> list[ParseNoteResult]:
        pass


class TagCache(Protocol):
    """
    Read-only snapshot of the tags visible in each document, "#"-prefixed.
    ``None`` means the document is unknown to the cache.
    """

    def get_all_tags(self, file: SourceFile) -> list[str] | None:
        pass


class NoteInfoSource(Protocol):
    """
    Lookup of remote records by id. Ids unknown to the remote are omitted.
    """

    def notes_info(self, ids: Iterable[int]) -> list[NotesInfoResponseEntity]:
        pass


class ResolverSettings(Protocol):
    """
    The global options deck and tag resolution read. Treated as read-only.
    """

    inherit_deck: bool | None
    default_deck_maps: dict[str, str]
    fallback_deck: str
    inherit_tags: bool
    tag_in_anki: str
