"""Runtime wiring helper for CLI applications."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .adapters.block_parser import MarkdownBlockParser
from .adapters.fs_documents import FsDocuments
from .adapters.tag_cache import VaultTagCache
from .blueprints import BLUEPRINTS
from .config import BridgeConfig, load_config
from .core.model import SourceFile
from .core.ports import Blueprint
from .reconcile import DocumentScan, Finding, scan_document

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Container for all wired components."""
    documents: FsDocuments
    parser: MarkdownBlockParser
    tag_cache: VaultTagCache
    blueprints: Mapping[str, Blueprint]
    config: BridgeConfig

    def scan(self, file: SourceFile) -> tuple[str, DocumentScan]:
        """
        Read and scan one document. Missing documents scan as empty.

        A document that is not valid UTF-8 scans as empty with an error finding.
        """
        try:
            text = self.documents.read_text(file) or ""
        except UnicodeDecodeError as e:
            finding = Finding("error", f"cannot read as UTF-8: {e.reason} at byte {e.start}", file)
            logger.warning("%s", finding)
            return "", DocumentScan(file=file, findings=[finding])
        return text, scan_document(text, file, self.parser, self.blueprints)


def build_runtime(
    vault_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    config = load_config(config_path=config_path, vault_path=vault_path)

    # Use config values if CLI args not provided
    if vault_path is None:
        vault_path = config.vault.root

    return Runtime(
        documents=FsDocuments(vault_path),
        parser=MarkdownBlockParser(),
        tag_cache=VaultTagCache(vault_path),
        blueprints=BLUEPRINTS,
        config=config,
    )
