from pathlib import Path
from typing import Iterable

from ..core.model import SourceFile


class FsDocuments:
    """Markdown documents under a vault root, addressed by vault-relative path."""

    def __init__(self, root: Path):
        self.root = root

    def _path(self, rel: str) -> Path:
        return self.root / rel

    def source_file(self, path: Path | str) -> SourceFile:
        """Map a path (vault-relative, or absolute/cwd-relative inside the vault)."""
        p = Path(path)
        if not p.is_absolute() and not self._path(p.as_posix()).exists():
            p = p.resolve()
        if p.is_absolute():
            # Raises ValueError for paths outside the vault
            return SourceFile.from_path(p.resolve(), self.root.resolve())
        return SourceFile.from_path(p)

    def read_text(self, file: SourceFile) -> str | None:
        """Text with its line endings as stored. Raises UnicodeDecodeError."""
        p = self._path(file.path)
        if not p.exists():
            return None
        with p.open(encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, file: SourceFile, contents: str) -> None:
        p = self._path(file.path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(contents, encoding="utf-8", newline="")

    def list_all(self) -> Iterable[SourceFile]:
        if not self.root.exists():
            return []
        return (
            SourceFile.from_path(p, self.root)
            for p in sorted(self.root.rglob("*.md"))
            if not any(part.startswith(".") for part in p.relative_to(self.root).parts)
        )
