"""Tests for document tag lookup."""

import tempfile
from pathlib import Path

from ankibridge.adapters.tag_cache import DictTagCache, VaultTagCache, get_all_tags
from ankibridge.core.model import SourceFile


def test_frontmatter_and_inline_tags():
    """Test that frontmatter tags come first, then inline tags, deduplicated."""
    text = """---
tags: [Bio/Cells, exam]
---

# Heading

Text #exam and #new-tag, also #Bio/Membranes.

```
#not-a-tag
```
"""
    assert get_all_tags(text) == ["#Bio/Cells", "#exam", "#new-tag", "#Bio/Membranes"]


def test_frontmatter_string_tags():
    """Test comma/space separated tag strings and the singular key."""
    assert get_all_tags("---\ntags: a, b c\n---\n") == ["#a", "#b", "#c"]
    assert get_all_tags("---\ntag: '#solo'\n---\n") == ["#solo"]


def test_not_tags():
    """Test headings, numbers and mid-word hashes."""
    text = "# Title\nIssue #123 and C#sharp and url.com/#anchor"

    assert get_all_tags(text) == []


def test_invalid_frontmatter_is_ignored():
    """Test that broken YAML does not hide inline tags."""
    assert get_all_tags("---\ntags: [a\n---\n#inline") == ["#inline"]


def test_dict_tag_cache():
    """Test the snapshot cache returns copies and None for unknown files."""
    cache = DictTagCache({"a.md": ["#x"]})

    tags = cache.get_all_tags(SourceFile.from_path("a.md"))
    tags.append("#y")

    assert cache.get_all_tags(SourceFile.from_path("a.md")) == ["#x"]
    assert cache.get_all_tags(SourceFile.from_path("b.md")) is None


def test_vault_tag_cache():
    """Test reading tags from documents under the vault root."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "Biology").mkdir()
        doc = root / "Biology" / "Cells.md"
        doc.write_text("---\ntags: [bio]\n---\nSome #exam text\n")

        cache = VaultTagCache(root)
        file = SourceFile.from_path("Biology/Cells.md")

        assert cache.get_all_tags(file) == ["#bio", "#exam"]
        assert cache.get_all_tags(SourceFile.from_path("missing.md")) is None

        # Cached until invalidated
        doc.write_text("#changed\n")
        assert cache.get_all_tags(file) == ["#bio", "#exam"]
        cache.invalidate(file)
        assert cache.get_all_tags(file) == ["#changed"]


def test_longer_fences_hide_inner_fences():
    """Test that a four-backtick fence is only closed by four or more backticks."""
    text = "````anki\n```\n#hidden\n```\n````\n#seen"

    assert get_all_tags(text) == ["#seen"]
