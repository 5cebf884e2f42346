"""
Data Models
===========
Pydantic models for parsed quiz documents and grading results.
Parsed models are frozen: once a document is parsed nothing mutates it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ─── Enums ────────────────────────────────────────────────────────────────────


class MarkerConvention(str, Enum):
    """How a document marks selected options."""
    AUTO = "auto"
    PLAIN = "plain"          # "A. Paris ="
    SENTINEL = "sentinel"    # "A. Paris;[*] ="


class Classification(str, Enum):
    """Verdict for one reference question."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    UNANSWERED = "unanswered"
    MISSING_COUNTERPART = "missing_counterpart"


# ─── Question Models ──────────────────────────────────────────────────────────


class Option(BaseModel):
    """A single answer option, e.g. "C. Paris"."""
    model_config = ConfigDict(frozen=True)

    text: str = Field(
        description="Label and body with markers stripped"
    )
    is_correct: bool = False


class Question(BaseModel):
    """
    A multiple-choice question and its options in display order.
    """
    model_config = ConfigDict(frozen=True)

    question_text: str = Field(
        description="Numeral token followed by the question body"
    )
    options: tuple[Option, ...] = ()

    @computed_field
    @property
    def numeral(self) -> str:
        """Leading "N." token used to match questions across documents."""
        parts = self.question_text.split(maxsplit=1)
        return parts[0] if parts else ""

    @property
    def correct_options(self) -> list[Option]:
        return [opt for opt in self.options if opt.is_correct]


class QuestionSet(BaseModel):
    """All questions recovered from one document, in source order."""
    model_config = ConfigDict(frozen=True)

    source: str = ""
    convention: MarkerConvention = MarkerConvention.PLAIN
    questions: tuple[Question, ...] = ()

    def __len__(self) -> int:
        return len(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]


# ─── Grading Models ───────────────────────────────────────────────────────────


class ClassificationRecord(BaseModel):
    """
    Everything a presentation layer needs to render one verdict.
    Correct answers never produce a record.
    """
    model_config = ConfigDict(frozen=True)

    classification: Classification
    question_text: str
    options: tuple[Option, ...] = ()
    submitted_answers: tuple[str, ...] = ()
    correct_answers: tuple[str, ...] = ()


class Tally(BaseModel):
    """Running count of verdicts for one comparison pass."""
    model_config = ConfigDict(frozen=True)

    correct: int = Field(default=0, ge=0)
    incorrect: int = Field(default=0, ge=0)
    unanswered: int = Field(default=0, ge=0)

    @computed_field
    @property
    def total(self) -> int:
        return self.correct + self.incorrect + self.unanswered

    @computed_field
    @property
    def percentage(self) -> str:
        """Share of correct answers, e.g. "66.7%"."""
        if self.total == 0:
            return "0.0%"
        return f"{self.correct / self.total * 100:.1f}%"

    def record(self, classification: Classification) -> Tally:
        """Return a new tally with one more verdict counted."""
        if classification == Classification.CORRECT:
            return self.model_copy(update={"correct": self.correct + 1})
        if classification == Classification.INCORRECT:
            return self.model_copy(update={"incorrect": self.incorrect + 1})
        # Missing counterparts are accounted as unanswered
        return self.model_copy(update={"unanswered": self.unanswered + 1})


# ─── Parse Result Models ──────────────────────────────────────────────────────


class ValidationReport(BaseModel):
    """Post-parse validation report for one document."""
    total_questions: int = 0
    duplicate_numerals: list[str] = Field(default_factory=list)
    missing_count: int = 0
    # Capped at validator.MAX_LISTED_MISSING entries; missing_count is exact
    missing_numbers: list[int] = Field(default_factory=list)
    questions_without_options: list[str] = Field(default_factory=list)
    questions_without_marks: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def marked_rate(self) -> float:
        if self.total_questions == 0:
            return 0.0
        marked = self.total_questions - len(self.questions_without_marks)
        return round(marked / self.total_questions * 100, 2)


class ParseResult(BaseModel):
    """
    Complete output of parsing one document.
    This is what `quizcheck parse --json-output` prints.
    """
    parser_version: str = "1.0.0"
    question_set: QuestionSet
    validation: ValidationReport = Field(
        default_factory=ValidationReport
    )
    warnings: list[str] = Field(default_factory=list)
