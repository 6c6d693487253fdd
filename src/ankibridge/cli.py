"""CLI for ankibridge - flashcards in Markdown notes, mirrored into Anki."""

import argparse
import difflib
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .core.model import SourceFile
from .reconcile import Finding, render_document
from .runtime import Runtime, build_runtime


def _selected_files(args: argparse.Namespace, rt: Runtime) -> list[SourceFile]:
    if args.paths:
        return [rt.documents.source_file(p) for p in args.paths]
    return list(rt.documents.list_all())


def cmd_scan(args: argparse.Namespace, rt: Runtime) -> int:
    """List note blocks with their resolved deck and tags."""
    all_findings: list[Finding] = []
    output: list[dict[str, Any]] = []

    for file in _selected_files(args, rt):
        _, scan = rt.scan(file)
        all_findings.extend(scan.findings)
        for note in scan.notes:
            loc = note.source.location
            output.append(
                {
                    "file": file.path,
                    "line": loc.start.line,
                    "id": note.id,
                    "model": note.get_model_name(),
                    "deck": note.get_deck_name(rt.config),
                    "tags": note.get_tags(rt.config, rt.tag_cache),
                    "enabled": note.get_enabled(),
                    "needs_rewrite": note.should_update_file(),
                    "medias": [m.path for m in note.medias],
                }
            )

    if args.json:
        print(
            json.dumps(
                {
                    "notes": output,
                    "findings": [
                        {"severity": f.severity, "message": str(f)} for f in all_findings
                    ],
                },
                indent=2,
            )
        )
    elif not args.quiet:
        for row in output:
            flags = []
            if not row["enabled"]:
                flags.append("disabled")
            if row["needs_rewrite"]:
                flags.append("needs fmt")
            note_id = row["id"] if row["id"] is not None else "new"
            print(
                f"{row['file']}:{row['line']}  {note_id}  {row['model']}  "
                f"{row['deck']}  [{' '.join(row['tags'])}]"
                + (f"  ({', '.join(flags)})" if flags else "")
            )
        for f in all_findings:
            print(f"[{f.severity}] {f}")

    return 1 if any(f.severity == "error" for f in all_findings) else 0


def cmd_fmt(args: argparse.Namespace, rt: Runtime) -> int:
    """Rewrite note blocks into their canonical form."""
    changed: list[str] = []
    errors: list[Finding] = []

    for file in _selected_files(args, rt):
        text, scan = rt.scan(file)
        errors.extend(f for f in scan.findings if f.severity == "error")
        new_text = render_document(text, scan.notes)
        if new_text == text:
            continue
        changed.append(file.path)

        if args.diff:
            diff = difflib.unified_diff(
                text.splitlines(keepends=True),
                new_text.splitlines(keepends=True),
                fromfile=f"a/{file.path}",
                tofile=f"b/{file.path}",
            )
            sys.stdout.writelines(diff)
        if not args.check:
            rt.documents.write_text(file, new_text)
            rt.tag_cache.invalidate(file)

    if not args.quiet:
        verb = "Would reformat" if args.check else "Reformatted"
        for path in changed:
            print(f"{verb}: {path}")
        if not changed:
            print("Nothing to do")
    for f in errors:
        print(f"[error] {f}", file=sys.stderr)

    return 1 if errors or (args.check and changed) else 0


def cmd_watch(args: argparse.Namespace, rt: Runtime) -> int:
    """Watch vault for changes and re-scan."""
    from .watch import watch_vault

    return watch_vault(
        rt,
        debounce_ms=args.debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def _version_string() -> str:
    return (
        f"ankibridge {__version__} "
        f"(python {platform.python_version()}, platform {sys.platform})"
    )


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="ankibridge", description="ankibridge CLI"
    )
    parser.add_argument(
        "--version", action="version", version=_version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/ankibridge.toml, vault/ankibridge.toml)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # scan command
    parser_scan = subparsers.add_parser("scan", help="List notes and problems")
    parser_scan.add_argument("paths", nargs="*", help="Documents (default: whole vault)")

    # fmt command
    parser_fmt = subparsers.add_parser("fmt", help="Rewrite blocks into canonical form")
    parser_fmt.add_argument("paths", nargs="*", help="Documents (default: whole vault)")
    parser_fmt.add_argument(
        "--check", action="store_true",
        help="Exit 1 if anything would change; write nothing"
    )
    parser_fmt.add_argument(
        "--diff", action="store_true", help="Print a unified diff of changes"
    )

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Watch vault for changes")
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=150,
        help="Debounce window in milliseconds (default: 150)"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    handlers = {
        "scan": cmd_scan,
        "fmt": cmd_fmt,
        "watch": cmd_watch,
    }
    handler = handlers.get(args.cmd)
    if handler is None:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)

    try:
        rt = build_runtime(vault_path=args.vault, config_path=args.config)
        exit_code = handler(args, rt)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
