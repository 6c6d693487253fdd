"""Fenced-block layout shared by the Markdown dialects.

    ```anki
    ---
    <YAML config>
    ---
    <front>
    ---
    <back>
    ```

The config section is present only when the config has something to say, and
the back section only when the back is non-empty. A front cannot contain a
line that is exactly ``---``; that line always ends the front. Fields that
contain a bare backtick fence get a longer fence, as in CommonMark.
"""

import re

from ..core.errors import LayoutError

FENCE = "```"
SEPARATOR = "---"
FENCE_OPEN_RE = re.compile(r"^(`{3,})([^`]*)$")
CLOZE_RE = re.compile(r"\{\{c\d+::")


def closes_fence(line: str, fence: str) -> bool:
    """True when ``line`` closes a block opened with ``fence``."""
    line = line.rstrip()
    return len(line) >= len(fence) and line == "`" * len(line)


def fence_for(*texts: str) -> str:
    """Shortest fence that no line of ``texts`` would close."""
    longest = 0
    for text in texts:
        for line in text.split("\n"):
            line = line.strip()
            if line and line == "`" * len(line):
                longest = max(longest, len(line))
    return "`" * max(len(FENCE), longest + 1)


def newline_of(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def render_block(
    fence_tag: str, config_text: str, front: str, back: str, newline: str = "\n"
) -> str:
    """
    Lay out one note block.

    Raises LayoutError when the front or config has a ``---`` line, since
    reading the block back would split the text there.
    """
    config_text = config_text.rstrip("\n")
    for name, text in (("config", config_text), ("front", front)):
        if any(line.strip() == SEPARATOR for line in text.split("\n")):
            raise LayoutError(f"{name} has a line that is exactly '{SEPARATOR}'")

    fence = fence_for(config_text, front, back)
    lines = [fence + fence_tag]
    if config_text:
        lines.append(SEPARATOR)
        lines.append(config_text)
        lines.append(SEPARATOR)
    lines.append(front)
    if back:
        lines.append(SEPARATOR)
        lines.append(back)
    lines.append(fence)
    text = "\n".join(lines)
    return text if newline == "\n" else text.replace("\n", newline)


def split_body(lines: list[str]) -> tuple[str | None, str | None, str | None]:
    """Split the lines between the fences into (config, front, back)."""
    config = None
    if lines and lines[0].strip() == SEPARATOR:
        try:
            close = next(i for i in range(1, len(lines)) if lines[i].strip() == SEPARATOR)
        except StopIteration:
            # Unterminated config: everything is config
            return "\n".join(lines[1:]), None, None
        config = "\n".join(lines[1:close])
        lines = lines[close + 1 :]

    for i, line in enumerate(lines):
        if line.strip() == SEPARATOR:
            return config, "\n".join(lines[:i]), "\n".join(lines[i + 1 :])
    return config, "\n".join(lines), None


def has_cloze_deletions(text: str) -> bool:
    return CLOZE_RE.search(text) is not None
