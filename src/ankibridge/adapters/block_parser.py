from ..blueprints import NoteFormat
from ..blueprints.layout import FENCE_OPEN_RE, closes_fence, split_body
from ..core.model import ParseLocation, ParseLocationMarker, ParseNoteResult
from ..core.ports import NoteBlockParser

NOTE_TAGS = frozenset(f.value for f in NoteFormat)


class MarkdownBlockParser(NoteBlockParser):
    """
    Find note blocks in a Markdown document.

    Only fences whose info string is a registered note tag are notes; other
    fences are skipped as a whole so their content is never mistaken for a
    note. An unclosed fence at the end of the document is not a note.
    """

    def __init__(self, tags: frozenset[str] = NOTE_TAGS):
        self.tags = tags

    def parse(self, text: str, source: str | None = None) -> list[ParseNoteResult]:
        results: list[ParseNoteResult] = []

        lines = text.splitlines(keepends=True)
        offset = 0
        in_fence = False
        fence = ""
        fence_tag = ""
        fence_start: ParseLocationMarker | None = None
        body: list[str] = []

        for i, ln in enumerate(lines):
            line_stripped = ln.rstrip("\n\r")

            if not in_fence:
                fence_match = FENCE_OPEN_RE.match(line_stripped)
                if fence_match:
                    in_fence = True
                    fence = fence_match.group(1)
                    fence_tag = fence_match.group(2).strip()
                    fence_start = ParseLocationMarker(offset=offset, line=i + 1, column=0)
                    body = []
            elif closes_fence(line_stripped, fence):
                # Closing fence; the span ends right after the backticks
                width = len(line_stripped.rstrip())
                in_fence = False
                if fence_tag in self.tags and fence_start is not None:
                    end = ParseLocationMarker(
                        offset=offset + width, line=i + 1, column=width
                    )
                    config, front, back = split_body(body)
                    results.append(
                        ParseNoteResult(
                            type=fence_tag,
                            config=config,
                            front=front,
                            back=back,
                            location=ParseLocation(start=fence_start, end=end, source=source),
                        )
                    )
            else:
                body.append(line_stripped)

            offset += len(ln)

        return results
