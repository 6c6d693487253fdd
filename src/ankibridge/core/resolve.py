"""Deck and tag resolution.

Everything here is a pure function of its arguments: the note's config, where
the note lives, the global settings and (for tags) a tag cache snapshot.
"""

from collections.abc import Iterable, Mapping
from posixpath import dirname

from .model import SourceFile
from .note_config import Config
from .ports import ResolverSettings, TagCache

DECK_SEPARATOR = "::"


def get_default_deck_for_folder(folder: str, deck_maps: Mapping[str, str]) -> str | None:
    """
    Deck mapped to ``folder`` or its nearest mapped ancestor.

    Folders are vault-relative ("Biology/Cells"); the vault root is "". Keys in
    ``deck_maps`` may carry leading/trailing slashes.
    """
    maps = {k.strip("/"): v for k, v in deck_maps.items() if v}
    current = folder.strip("/")
    while True:
        if current in maps:
            return maps[current]
        if not current:
            return None
        current = dirname(current)


def resolve_deck_name(config: Config, file: SourceFile, settings: ResolverSettings) -> str:
    if settings.inherit_deck is False:
        if config.deck:
            return config.deck
        mapped = get_default_deck_for_folder(file.parent, settings.default_deck_maps)
        if mapped:
            return mapped
    elif settings.inherit_deck is True:
        # Mirror the file's full path (file name included) under the fallback deck
        return DECK_SEPARATOR.join([settings.fallback_deck, *file.path.split("/")])

    return settings.fallback_deck


def normalise_tag(tag: str) -> str:
    """"#Bio/Cells" -> "Bio::Cells"."""
    return tag.removeprefix("#").replace("/", DECK_SEPARATOR)


def _unique(tags: Iterable[str], exclude: str) -> list[str]:
    out: list[str] = []
    for tag in tags:
        if tag and tag != exclude and tag not in out:
            out.append(tag)
    return out


def resolve_tags(
    config: Config,
    file: SourceFile,
    settings: ResolverSettings,
    tag_cache: TagCache | None = None,
) -> list[str]:
    """Marker tag first, then inherited document tags, then the note's own tags."""
    marker = settings.tag_in_anki
    own = config.tags or []

    inherited: list[str] | None = None
    if settings.inherit_tags and tag_cache is not None:
        inherited = tag_cache.get_all_tags(file)

    if inherited is None:
        return [marker, *_unique(own, marker)]

    tags = [normalise_tag(t) for t in inherited] + list(own)
    return [marker, *_unique(tags, marker)]
