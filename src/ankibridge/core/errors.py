"""Exceptions raised by the note model."""


class AnkiBridgeError(Exception):
    """Base class for ankibridge errors."""


class ValidationError(AnkiBridgeError, ValueError):
    """Input failed to parse or violated a constraint.

    ``errors`` holds one message per offending field, so a single report can
    describe everything wrong with a block instead of only the first problem.
    """

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ConfigValidationError(ValidationError):
    """The configuration embedded in a note block is malformed."""


class ShapeMismatchError(AnkiBridgeError, KeyError):
    """A remote note lacks the fields its model is expected to have."""

    def __init__(self, model_name: str, missing: list[str]):
        self.model_name = model_name
        self.missing = missing
        super().__init__(model_name, missing)

    def __str__(self) -> str:
        return f"Remote {self.model_name} note is missing field(s): {', '.join(self.missing)}"


class BlueprintError(AnkiBridgeError, LookupError):
    """No blueprint is registered for a note block's dialect tag."""


class LayoutError(ValidationError):
    """Field text cannot be written into a note block and read back unchanged."""
