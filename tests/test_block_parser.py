"""Tests for the Markdown note block parser."""

from ankibridge.adapters.block_parser import MarkdownBlockParser

DOC = """---
tags: [bio]
---
# Cells

Intro text.

```python
print("not a note")
```

```anki
---
id: 1
---
What is a cell?
---
The unit of life.
```

  ```anki-cloze
A {{c1::membrane}} surrounds it.
```
"""


def test_finds_note_blocks_only():
    """Test that only note fences are reported."""
    results = MarkdownBlockParser().parse(DOC, source="Biology/Cells.md")

    assert [r.type for r in results] == ["anki"]
    basic = results[0]
    assert basic.config == "id: 1"
    assert basic.front == "What is a cell?"
    assert basic.back == "The unit of life."
    assert basic.location.source == "Biology/Cells.md"


def test_indented_fence_is_not_a_note():
    """Test that fences must start at column 0."""
    results = MarkdownBlockParser().parse(DOC)

    assert all(r.type != "anki-cloze" for r in results)


def test_locations():
    """Test that the span covers the fences exactly."""
    doc = "Intro\n\n```anki\nQ\n---\nA\n```\nAfter\n"
    result = MarkdownBlockParser().parse(doc)[0]
    loc = result.location

    assert loc.start.line == 3
    assert loc.start.column == 0
    assert loc.start.offset == doc.index("```anki")
    assert loc.end.line == 7
    assert loc.end.column == 3
    assert loc.slice(doc) == "```anki\nQ\n---\nA\n```"


def test_multiple_blocks_in_order():
    """Test several blocks in one document."""
    doc = "```anki\nQ1\n```\n\n```anki-cloze\n{{c1::Q2}}\n```\n```anki\nQ3\n```"
    results = MarkdownBlockParser().parse(doc)

    assert [r.front for r in results] == ["Q1", "{{c1::Q2}}", "Q3"]
    assert [r.type for r in results] == ["anki", "anki-cloze", "anki"]
    assert results[0].location.end.offset <= results[1].location.start.offset


def test_unclosed_fence_ignored():
    """Test that a fence left open at the end of the document is not a note."""
    assert MarkdownBlockParser().parse("```anki\nQ\n---\nA\n") == []


def test_note_fence_inside_other_fence():
    """Test that a note fence inside another code block is just code."""
    doc = "```markdown\nExample:\n```\n```anki\nQ\n```"
    results = MarkdownBlockParser().parse(doc)

    # The first ``` closes the markdown fence; the anki block after it is real
    assert len(results) == 1
    assert results[0].front == "Q"


def test_crlf_line_endings():
    """Test offsets with Windows line endings."""
    doc = "x\r\n```anki\r\nQ\r\n```\r\n"
    result = MarkdownBlockParser().parse(doc)[0]

    assert result.front == "Q"
    assert result.location.slice(doc) == "```anki\r\nQ\r\n```"


def test_custom_tags():
    """Test restricting the parser to other fence tags."""
    parser = MarkdownBlockParser(tags=frozenset({"flashcard"}))

    results = parser.parse("```flashcard\nQ\n```\n```anki\nQ\n```")

    assert [r.type for r in results] == ["flashcard"]


def test_longer_fence_holds_inner_fences():
    """Test that a four-backtick block is closed only by four or more backticks."""
    doc = "````anki\nQ\n---\ncode:\n```\nprint(1)\n```\n````\nAfter\n"
    result = MarkdownBlockParser().parse(doc)[0]

    assert result.front == "Q"
    assert result.back == "code:\n```\nprint(1)\n```"
    assert result.location.end.column == 4
    assert result.location.slice(doc) == doc[: doc.index("\nAfter")]


def test_longer_fence_wrapping_a_note_example():
    """Test that a note shown inside a longer code fence is not a note."""
    doc = "````markdown\n```anki\nQ\n```\n````\n```anki\nReal\n```"
    results = MarkdownBlockParser().parse(doc)

    assert [r.front for r in results] == ["Real"]
