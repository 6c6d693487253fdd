"""Document tag lookup: frontmatter tags plus inline #tags."""

import io
import re
from pathlib import Path

import yaml

from ..blueprints.layout import FENCE_OPEN_RE, closes_fence
from ..core.model import SourceFile
from ..core.ports import TagCache

_FM = re.compile(r"^\s*---\s*\n(.*?)\n---\s*\n?", re.DOTALL)
# "#tag", "#nested/tag"; not "#" inside words, not markdown headings ("# Title")
INLINE_TAG_RE = re.compile(r"(?<![\w#&/])#([^\s#!\"$%&'()*+,.:;<=>?@\[\\\]^`{|}~]+)")


def _frontmatter_tags(meta: dict) -> list[str]:
    tags: list[str] = []
    for key in ("tags", "tag"):
        value = meta.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            items = re.split(r"[,\s]+", value)
        elif isinstance(value, list):
            items = [str(v) for v in value if v is not None]
        else:
            items = [str(value)]
        tags.extend(t.strip().lstrip("#") for t in items if t.strip().lstrip("#"))
    return tags


def get_all_tags(text: str) -> list[str]:
    """All tags visible in a document, "#"-prefixed, in first-seen order."""
    tags: list[str] = []

    body = text
    m = _FM.match(text)
    if m:
        try:
            meta = yaml.safe_load(io.StringIO(m.group(1))) or {}
        except yaml.YAMLError:
            meta = {}
        if isinstance(meta, dict):
            tags.extend(_frontmatter_tags(meta))
        body = text[m.end() :]

    fence = ""
    for line in body.splitlines():
        marker = line.strip()
        if fence:
            if closes_fence(marker, fence):
                fence = ""
            continue
        opening = FENCE_OPEN_RE.match(marker)
        if opening:
            fence = opening.group(1)
            continue
        for match in INLINE_TAG_RE.finditer(line):
            tag = match.group(1)
            # Purely numeric "#123" is not a tag
            if not tag.replace("/", "").isdigit():
                tags.append(tag)

    out: list[str] = []
    for tag in tags:
        if f"#{tag}" not in out:
            out.append(f"#{tag}")
    return out


class DictTagCache(TagCache):
    """A fixed snapshot, keyed by vault-relative path."""

    def __init__(self, tags: dict[str, list[str]] | None = None):
        self._tags = dict(tags or {})

    def get_all_tags(self, file: SourceFile) -> list[str] | None:
        tags = self._tags.get(file.path)
        return list(tags) if tags is not None else None


class VaultTagCache(TagCache):
    """Reads documents under ``root`` on first use and remembers the result."""

    def __init__(self, root: Path):
        self.root = root
        self._cache: dict[str, list[str] | None] = {}

    def get_all_tags(self, file: SourceFile) -> list[str] | None:
        if file.path not in self._cache:
            p = self.root / file.path
            self._cache[file.path] = (
                get_all_tags(p.read_text(encoding="utf-8")) if p.exists() else None
            )
        tags = self._cache[file.path]
        return list(tags) if tags is not None else None

    def invalidate(self, file: SourceFile | None = None) -> None:
        if file is None:
            self._cache.clear()
        else:
            self._cache.pop(file.path, None)
