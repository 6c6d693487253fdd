"""Configuration loader for ankibridge.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_FILENAME = "ankibridge.toml"


@dataclass
class VaultConfig:
    """Vault-specific configuration."""
    root: Path


@dataclass
class DeckConfig:
    """Deck resolution configuration.

    ``inherit`` is deliberately tri-state:
    - False: per-note ``deck``, then folder mappings, then ``fallback``
    - True: mirror the file path under ``fallback``
    - None: always ``fallback``
    """
    inherit: bool | None = None
    fallback: str = "Default"
    maps: dict[str, str] = field(default_factory=dict)


@dataclass
class TagConfig:
    """Tag resolution configuration."""
    inherit: bool = False
    marker: str = "obsidian"


@dataclass
class BridgeConfig:
    """Complete ankibridge configuration."""
    vault: VaultConfig
    deck: DeckConfig = field(default_factory=DeckConfig)
    tags: TagConfig = field(default_factory=TagConfig)

    # Flat names used by the resolvers
    @property
    def inherit_deck(self) -> bool | None:
        return self.deck.inherit

    @property
    def default_deck_maps(self) -> dict[str, str]:
        return self.deck.maps

    @property
    def fallback_deck(self) -> str:
        return self.deck.fallback

    @property
    def inherit_tags(self) -> bool:
        return self.tags.inherit

    @property
    def tag_in_anki(self) -> str:
        return self.tags.marker


def _expect(value: Any, kind: type | tuple[type, ...], name: str) -> Any:
    if not isinstance(value, kind):
        raise ValueError(f"{CONFIG_FILENAME}: '{name}' has the wrong type ({type(value).__name__})")
    return value


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> BridgeConfig:
    """
    Load configuration from ankibridge.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/ankibridge.toml
    3. vault_path/ankibridge.toml

    Args:
        config_path: Explicit path to config file
        vault_path: Vault root path for fallback search

    Returns:
        BridgeConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    # Search for config file
    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_FILENAME)
    if vault_path:
        search_paths.append(vault_path / CONFIG_FILENAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    # Parse vault config
    vault_data = _expect(toml_data.get("vault", {}), dict, "vault")
    vault_root = Path(vault_path or vault_data.get("root", "."))

    # Parse deck config; a missing "inherit" key stays None
    deck_data = _expect(toml_data.get("deck", {}), dict, "deck")
    inherit_deck = deck_data.get("inherit")
    if inherit_deck is not None:
        _expect(inherit_deck, bool, "deck.inherit")
    maps = _expect(deck_data.get("maps", {}), dict, "deck.maps")
    for folder, deck in maps.items():
        _expect(deck, str, f"deck.maps.{folder}")

    deck_config = DeckConfig(
        inherit=inherit_deck,
        fallback=_expect(deck_data.get("fallback", "Default"), str, "deck.fallback"),
        maps={folder.strip("/"): deck for folder, deck in maps.items()},
    )

    # Parse tag config
    tag_data = _expect(toml_data.get("tags", {}), dict, "tags")
    tag_config = TagConfig(
        inherit=_expect(tag_data.get("inherit", False), bool, "tags.inherit"),
        marker=_expect(tag_data.get("marker", "obsidian"), str, "tags.marker"),
    )

    return BridgeConfig(
        vault=VaultConfig(root=vault_root),
        deck=deck_config,
        tags=tag_config,
    )
