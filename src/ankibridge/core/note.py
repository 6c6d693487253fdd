from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TypeGuard

from .errors import BlueprintError, ShapeMismatchError
from .media import scan_field_medias
from .model import (
    AnkiFields,
    Media,
    ModelName,
    NoteField,
    NoteFields,
    NotesInfoResponseEntity,
    ParseNoteResult,
    SourceDescriptor,
    SourceFile,
)
from .note_config import ParseConfig
from .ports import Blueprint, ResolverSettings, TagCache
from .resolve import resolve_deck_name, resolve_tags

# Remote field names for the two logical slots, per model
MODEL_FIELDS: dict[ModelName, tuple[str, str]] = {
    "Basic": ("Front", "Back"),
    "Cloze": ("Text", "Back Extra"),
}


@dataclass
class Note:
    """
    One flashcard as written in a document.

    ``is_cloze`` comes from the blueprint at construction time and is never
    re-derived from ``config.cloze``; see ``cloze_conflict``.
    """

    blueprint: Blueprint
    id: int | None
    fields: NoteFields
    source: SourceDescriptor
    source_text: str
    config: ParseConfig
    medias: list[Media] = field(default_factory=list)
    is_cloze: bool = False

    def render_as_text(self) -> str:
        return self.blueprint.render_as_text(self)

    def should_update_file(self) -> bool:
        return self.get_enabled() and self.render_as_text() != self.source_text

    def get_model_name(self) -> ModelName:
        return "Cloze" if self.is_cloze else "Basic"

    def fields_to_anki_fields(self, fields: NoteFields | None = None) -> AnkiFields:
        if fields is None:
            fields = self.fields
        front, back = MODEL_FIELDS[self.get_model_name()]
        return {
            front: fields.get(NoteField.FRONTLIKE) or "",
            back: fields.get(NoteField.BACKLIKE) or "",
        }

    def normalise_note_info_fields(self, note_info: NotesInfoResponseEntity) -> NoteFields:
        # Cloze-ness of the remote record decides the names, not our own flag
        model: ModelName = "Cloze" if note_info.model_name == "Cloze" else "Basic"
        front, back = MODEL_FIELDS[model]
        missing = [name for name in (front, back) if name not in note_info.fields]
        if missing:
            raise ShapeMismatchError(note_info.model_name, missing)
        return {
            NoteField.FRONTLIKE: note_info.fields[front].value,
            NoteField.BACKLIKE: note_info.fields[back].value,
        }

    def get_deck_name(self, settings: ResolverSettings) -> str:
        """Returns the resolved deck name"""
        return resolve_deck_name(self.config, self.source.file, settings)

    def get_tags(self, settings: ResolverSettings, tag_cache: TagCache | None = None) -> list[str]:
        return resolve_tags(self.config, self.source.file, settings, tag_cache)

    def get_enabled(self) -> bool:
        return self.config.enabled is None or self.config.enabled

    @property
    def cloze_conflict(self) -> bool:
        return self.config.cloze is not None and self.config.cloze != self.is_cloze

    def with_id(self, id: int | None) -> Note:
        config = dataclasses.replace(self.config, id=id)
        return dataclasses.replace(self, id=id, config=config)

    def with_fields(self, fields: NoteFields) -> Note:
        """
        Copy with new field text, e.g. pulled from the remote store.

        Raises LayoutError when the text cannot be written back into a block.
        """
        note = dataclasses.replace(
            self, fields=dict(fields), medias=scan_field_medias(fields)
        )
        note.render_as_text()
        return note


class NoteWithID(Note):
    """A note that already exists remotely."""

    id: int


def has_id(note: Note) -> TypeGuard[NoteWithID]:
    return note.id is not None


def build_note(
    result: ParseNoteResult,
    file: SourceFile,
    blueprints: Mapping[str, Blueprint],
    document: str,
) -> Note:
    """
    Interpret one parsed block of ``document``.

    Raises ConfigValidationError for a bad config block and BlueprintError
    when ``result.type`` names no registered blueprint.
    """
    blueprint = blueprints.get(result.type)
    if blueprint is None:
        raise BlueprintError(f"no blueprint registered for note type '{result.type}'")

    config = ParseConfig.from_result(result)
    fields = blueprint.parse_fields(result)
    return Note(
        blueprint=blueprint,
        id=config.id,
        fields=fields,
        source=SourceDescriptor(file=file, location=result.location),
        source_text=result.location.slice(document),
        config=config,
        medias=scan_field_medias(fields),
        is_cloze=blueprint.detect_cloze(fields),
    )
