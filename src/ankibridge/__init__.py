"""ankibridge - flashcards authored in Markdown notes, mirrored into Anki."""

__version__ = "0.1.0"
