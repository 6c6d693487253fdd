"""Tests for per-note configuration parsing."""

import pytest

from ankibridge.core.errors import ConfigValidationError, ValidationError
from ankibridge.core.model import ParseLocation, ParseLocationMarker, ParseNoteResult
from ankibridge.core.note_config import ParseConfig, parse_config
from ankibridge.core.validate import Err, Ok


def _result(config: str | None) -> ParseNoteResult:
    loc = ParseLocation(
        start=ParseLocationMarker(0, 1, 0), end=ParseLocationMarker(10, 3, 3)
    )
    return ParseNoteResult(type="anki", config=config, front="Q", back="A", location=loc)


@pytest.mark.parametrize("text", [None, "", "   \n", "# only a comment"])
def test_empty_config_defaults(text):
    """Test that an empty config block leaves everything unset."""
    config = ParseConfig.from_text(text)

    assert config.id is None
    assert config.deck is None
    assert config.tags is None
    assert config.delete is None
    assert config.enabled is None
    assert config.cloze is None
    assert config.extra == {}


def test_full_config():
    """Test that every known key is parsed."""
    config = ParseConfig.from_result(
        _result("id: 1700000000\ndeck: Biology\ntags: [cells, exam]\n"
                "delete: false\nenabled: true\ncloze: false")
    )

    assert config.id == 1700000000
    assert config.deck == "Biology"
    assert config.tags == ["cells", "exam"]
    assert config.delete is False
    assert config.enabled is True
    assert config.cloze is False


def test_empty_deck_is_unset():
    """Test that an empty deck string means no deck."""
    assert ParseConfig.from_text("deck: ''").deck is None
    assert ParseConfig.from_text("deck:").deck is None


def test_null_booleans_are_unset():
    """Test that explicit nulls inherit instead of meaning false."""
    config = ParseConfig.from_text("enabled: null\ndelete: ~\ncloze:")

    assert config.enabled is None
    assert config.delete is None
    assert config.cloze is None


def test_id_coercion():
    """Test that ids written as floats or strings become ints."""
    assert ParseConfig.from_text("id: 12.0").id == 12
    assert ParseConfig.from_text("id: '42'").id == 42


def test_numeric_tags_become_strings():
    """Test that YAML numbers in tags are kept as text."""
    assert ParseConfig.from_text("tags: [2024, exam]").tags == ["2024", "exam"]


@pytest.mark.parametrize(
    "text",
    [
        "tags: exam",
        "tags: {a: 1}",
        "tags: [[nested]]",
        "id: abc",
        "id: 1.5",
        "id: true",
        "enabled: sometimes",
        "deck: [a, b]",
    ],
)
def test_wrong_shapes_fail(text):
    """Test that a field with the wrong shape rejects the config."""
    with pytest.raises(ConfigValidationError):
        ParseConfig.from_text(text)


def test_yaml_syntax_error():
    """Test that malformed YAML is a validation error, not a YAML error."""
    with pytest.raises(ConfigValidationError) as exc_info:
        ParseConfig.from_text("id: [1")

    assert "invalid YAML" in str(exc_info.value)


def test_non_mapping_config():
    """Test that a config block must be a mapping."""
    with pytest.raises(ConfigValidationError) as exc_info:
        ParseConfig.from_text("- a\n- b")

    assert "mapping" in str(exc_info.value)


def test_all_errors_reported():
    """Test that every bad field is reported at once."""
    with pytest.raises(ConfigValidationError) as exc_info:
        ParseConfig.from_text("id: x\ntags: y\nenabled: z")

    errors = exc_info.value.errors
    assert len(errors) == 3
    assert any(e.startswith("id:") for e in errors)
    assert any(e.startswith("tags:") for e in errors)
    assert any(e.startswith("enabled:") for e in errors)
    assert isinstance(exc_info.value, ValidationError)
    assert isinstance(exc_info.value, ValueError)


def test_parse_config_result_types():
    """Test that parse_config returns Ok/Err instead of raising."""
    assert isinstance(parse_config("id: 1"), Ok)
    assert isinstance(parse_config("tags: nope"), Err)


def test_unknown_keys_preserved():
    """Test that keys we do not interpret survive a dump."""
    config = ParseConfig.from_text("id: 3\nsource: textbook\npage: 12")

    assert config.extra == {"source": "textbook", "page": 12}
    assert config.dump() == "id: 3\nsource: textbook\npage: 12\n"


def test_dump_canonical_order():
    """Test that dump writes known keys in a fixed order."""
    config = ParseConfig(enabled=False, tags=["x"], deck="D", id=5)

    assert config.dump() == "id: 5\ndeck: D\ntags:\n- x\nenabled: false\n"


def test_dump_empty():
    """Test that an all-unset config dumps to nothing."""
    assert ParseConfig().dump() == ""
