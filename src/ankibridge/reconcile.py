"""One pass over a document: parse blocks, build notes, decide what to do.

Errors are scoped to a single note. A block with a broken config becomes a
finding at its location; the rest of the document is processed as usual.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from .blueprints import BLUEPRINTS
from .core.errors import BlueprintError, ConfigValidationError, ShapeMismatchError
from .core.model import AnkiFields, NotesInfoResponseEntity, ParseLocation, SourceFile
from .core.note import Note, build_note, has_id
from .core.ports import (
    Blueprint,
    NoteBlockParser,
    NoteInfoSource,
    ResolverSettings,
    TagCache,
)

logger = logging.getLogger(__name__)

ActionKind = Literal["skip", "create", "update", "delete", "recreate"]


@dataclass
class Finding:
    severity: str  # "info" | "warn" | "error"
    message: str
    file: SourceFile | None = None
    location: ParseLocation | None = None

    def __str__(self) -> str:
        where = self.file.path if self.file else "<unknown>"
        if self.location:
            where = f"{where}:{self.location.start}"
        return f"{where}: {self.message}"


@dataclass
class DocumentScan:
    file: SourceFile
    notes: list[Note] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(f.severity == "error" for f in self.findings)

    @property
    def needs_rewrite(self) -> bool:
        return any(note.should_update_file() for note in self.notes)


@dataclass
class SyncAction:
    kind: ActionKind
    note: Note
    deck: str
    tags: list[str]
    fields: AnkiFields
    reason: str = ""


def scan_document(
    text: str,
    file: SourceFile,
    parser: NoteBlockParser,
    blueprints: Mapping[str, Blueprint] = BLUEPRINTS,
) -> DocumentScan:
    scan = DocumentScan(file=file)

    for result in parser.parse(text, source=file.path):
        try:
            note = build_note(result, file, blueprints, text)
        except ConfigValidationError as e:
            finding = Finding("error", f"invalid note configuration: {e}", file, result.location)
            logger.warning("%s", finding)
            scan.findings.append(finding)
            continue
        except BlueprintError as e:
            finding = Finding("error", str(e), file, result.location)
            logger.warning("%s", finding)
            scan.findings.append(finding)
            continue

        if note.cloze_conflict:
            detected = "cloze" if note.is_cloze else "basic"
            scan.findings.append(
                Finding(
                    "warn",
                    f"config says cloze: {str(note.config.cloze).lower()} "
                    f"but the block is a {detected} note; using {detected}",
                    file,
                    result.location,
                )
            )
        scan.notes.append(note)

    return scan


def render_document(text: str, notes: list[Note]) -> str:
    """Splice canonical text for every note that needs it back into ``text``."""
    pending = [n for n in notes if n.should_update_file()]
    # Right to left so earlier offsets stay valid
    for note in sorted(pending, key=lambda n: n.source.location.start.offset, reverse=True):
        loc = note.source.location
        text = text[: loc.start.offset] + note.render_as_text() + text[loc.end.offset :]
    return text


def plan_note(
    note: Note,
    settings: ResolverSettings,
    tag_cache: TagCache | None = None,
    remote: NotesInfoResponseEntity | None = None,
) -> SyncAction:
    """
    Decide the remote action for one note. Local text is authoritative.

    Raises ShapeMismatchError when ``remote`` lacks its model's fields.
    """
    deck = note.get_deck_name(settings)
    tags = note.get_tags(settings, tag_cache)
    fields = note.fields_to_anki_fields()

    def action(kind: ActionKind, reason: str) -> SyncAction:
        logger.debug("%s: %s (%s)", note.source.file.path, kind, reason)
        return SyncAction(kind=kind, note=note, deck=deck, tags=tags, fields=fields, reason=reason)

    if not note.get_enabled():
        return action("skip", "disabled")

    if note.config.delete:
        if has_id(note):
            return action("delete", "marked for deletion")
        return action("skip", "marked for deletion but never created")

    if not has_id(note):
        return action("create", "new note")

    if remote is None:
        return action("create", f"note {note.id} not found remotely")

    remote_fields = note.fields_to_anki_fields(note.normalise_note_info_fields(remote))
    if remote.model_name != note.get_model_name():
        return action("recreate", f"model changed from {remote.model_name} to {note.get_model_name()}")

    if remote_fields != fields:
        return action("update", "fields changed")
    if sorted(remote.tags) != sorted(tags):
        return action("update", "tags changed")
    return action("skip", "unchanged")


def fetch_remote_infos(
    scans: Iterable[DocumentScan], source: NoteInfoSource
) -> dict[int, NotesInfoResponseEntity]:
    """Remote records for every scanned note that has an id, in one lookup."""
    ids = sorted({note.id for scan in scans for note in scan.notes if note.id is not None})
    if not ids:
        return {}
    return {info.note_id: info for info in source.notes_info(ids)}


def plan_document(
    scan: DocumentScan,
    settings: ResolverSettings,
    tag_cache: TagCache | None = None,
    remote_infos: Mapping[int, NotesInfoResponseEntity] | None = None,
) -> list[SyncAction]:
    remote_infos = remote_infos or {}
    actions: list[SyncAction] = []
    for note in scan.notes:
        remote = remote_infos.get(note.id) if note.id is not None else None
        try:
            actions.append(plan_note(note, settings, tag_cache, remote))
        except ShapeMismatchError as e:
            finding = Finding("error", str(e), scan.file, note.source.location)
            logger.warning("%s", finding)
            scan.findings.append(finding)
    return actions
