"""Embedded asset references in note field text."""

import re

from .model import Media, NoteFields

WIKI_EMBED_RE = re.compile(r"!\[\[([^\]]+)\]\]")
MD_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")


def scan_medias(text: str) -> list[Media]:
    """Return the assets embedded in ``text``, in order of first appearance.

    Handles ``![[file.png]]`` (with optional ``|size`` or ``#anchor`` suffix)
    and ``![alt](path "title")``. Remote URLs are not media.
    """
    found: list[tuple[int, str]] = []

    for match in WIKI_EMBED_RE.finditer(text):
        target = match.group(1).split("|", 1)[0].split("#", 1)[0].strip()
        if target:
            found.append((match.start(), target))

    for match in MD_IMAGE_RE.finditer(text):
        path = match.group(2).strip()
        if path.startswith("<") and ">" in path:
            path = path[1 : path.index(">")]
        elif " " in path:
            # Drop an optional title: ![alt](path "title")
            path = path.split(" ", 1)[0]
        if not path or path.startswith(("http://", "https://", "//", "data:")):
            continue
        found.append((match.start(), path))

    medias: list[Media] = []
    seen: set[str] = set()
    for _, path in sorted(found):
        if path not in seen:
            seen.add(path)
            medias.append(Media(path))
    return medias


def scan_field_medias(fields: NoteFields) -> list[Media]:
    medias: list[Media] = []
    for text in fields.values():
        for media in scan_medias(text):
            if media not in medias:
                medias.append(media)
    return medias
