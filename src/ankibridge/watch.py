"""Watch mode - re-scan documents as they change."""

import json
import signal
import sys
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .core.model import SourceFile
from .runtime import Runtime


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        vault_path: Path,
        on_batch: Callable[[set[str], set[str]], None] | None,
        debounce_ms: int = 150,
    ):
        super().__init__()
        self.vault_path = vault_path.resolve()
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms

        # Pending changes by vault-relative path; written by the observer thread
        self.changed: set[str] = set()
        self.deleted: set[str] = set()
        self.last_event_time = 0.0
        self._lock = threading.Lock()

    def _should_skip(self, path: Path) -> bool:
        """Check if file should be skipped."""
        name = path.name

        # Skip hidden files
        if name.startswith("."):
            return True

        # Skip temp/swap files
        if name.endswith("~") or name.endswith(".swp") or name.startswith(".#"):
            return True

        # Only process .md files
        if not name.endswith(".md"):
            return True

        return False

    def _relative(self, path: Path) -> str | None:
        """Vault-relative path, or None for files we ignore."""
        if self._should_skip(path):
            return None
        try:
            rel = path.resolve().relative_to(self.vault_path)
        except ValueError:
            return None
        if any(part.startswith(".") for part in rel.parts):
            return None
        return rel.as_posix()

    def _record(self, src_path: Any, kind: str) -> None:
        rel = self._relative(Path(str(src_path)))
        if rel:
            with self._lock:
                getattr(self, kind).add(rel)
                self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, "changed")

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, "changed")

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, "deleted")

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, "deleted")
            self._record(getattr(event, "dest_path", ""), "changed")

    def check_and_flush(self) -> None:
        """Check if debounce period has elapsed and flush if so."""
        if not (self.changed or self.deleted):
            return

        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        """Process accumulated events."""
        with self._lock:
            changed, self.changed = self.changed, set()
            deleted, self.deleted = self.deleted, set()
        if not (changed or deleted):
            return

        # A file deleted and re-created in one window counts as changed
        deleted -= changed

        if self.on_batch:
            self.on_batch(changed, deleted)


def watch_vault(
    rt: Runtime,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch the vault and re-scan every document that changes.

    Args:
        rt: Wired runtime (documents, parser, tag cache)
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    vault_path = rt.documents.root
    if not vault_path.exists():
        print(f"Error: Vault not found: {vault_path}", file=sys.stderr)
        return 1

    running = True

    def handle_batch(changed: set[str], deleted: set[str]) -> None:
        """Handle a batch of changes."""
        for rel in deleted:
            rt.tag_cache.invalidate(SourceFile.from_path(rel))

        for rel in sorted(changed):
            file = SourceFile.from_path(rel)
            rt.tag_cache.invalidate(file)
            try:
                _, scan = rt.scan(file)
            except Exception as e:
                if json_output:
                    print(json.dumps({"type": "error", "file": rel, "message": str(e)}), flush=True)
                else:
                    print(f"Error: {rel}: {e}", file=sys.stderr, flush=True)
                continue

            if json_output:
                event = {
                    "type": "scan",
                    "file": rel,
                    "notes": len(scan.notes),
                    "needs_rewrite": scan.needs_rewrite,
                    "findings": [
                        {"severity": f.severity, "message": str(f)} for f in scan.findings
                    ],
                }
                print(json.dumps(event), flush=True)
            elif not quiet:
                status = "needs fmt" if scan.needs_rewrite else "ok"
                print(f"{rel}: {len(scan.notes)} note(s), {status}", flush=True)
                for f in scan.findings:
                    print(f"  [{f.severity}] {f}", flush=True)

    # Set up signal handlers for graceful shutdown
    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(vault_path, handle_batch, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)

    if not quiet and not json_output:
        print(f"Watching {vault_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()

    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
