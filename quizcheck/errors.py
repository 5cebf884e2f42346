"""
Error Taxonomy
==============
Exceptions and warnings raised while checking a quiz.

    QuizCheckError
    ├── FatalInputError    → bad directory, missing input file, bad config
    └── ExtractionError    → a document could not be turned into text

    MalformedInputWarning  → logged only; never aborts a run
"""

from __future__ import annotations


class QuizCheckError(Exception):
    """Base class for errors that abort a quiz check."""


class FatalInputError(QuizCheckError):
    """The inputs needed for a run are missing or invalid."""


class ExtractionError(QuizCheckError):
    """Text extraction failed for a document."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class MalformedInputWarning(UserWarning):
    """A document parsed into something unusable, but the run can continue."""
