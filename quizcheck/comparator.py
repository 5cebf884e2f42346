"""
Answer Comparator
=================
Aligns a reference (answer key) QuestionSet with a submitted QuestionSet
by numeral token and classifies every reference question.

    reference ─┐
               ├─► classify() per question ─► Reporter.emit()
    submitted ─┘            │
                            └─► reduce(Tally.record) ─► Reporter.summarize()
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import Iterable, Optional

from .models import (
    Classification,
    ClassificationRecord,
    Question,
    QuestionSet,
    Tally,
)
from .reporter import RecordingReporter

logger = logging.getLogger(__name__)


def normalize_option_text(text: str) -> str:
    """Lowercase and collapse whitespace so "Paris" equals " paris ". """
    return " ".join(text.split()).lower()


def answers_match(expected: Iterable[str], given: Iterable[str]) -> bool:
    """Unordered, case- and whitespace-insensitive set equality."""
    return (
        {normalize_option_text(text) for text in expected}
        == {normalize_option_text(text) for text in given}
    )


def classify(
    question: Question,
    counterpart: Optional[Question],
) -> ClassificationRecord:
    """Classify one reference question against its submitted counterpart."""
    correct_answers = tuple(opt.text for opt in question.correct_options)

    if counterpart is None:
        return ClassificationRecord(
            classification=Classification.MISSING_COUNTERPART,
            question_text=question.question_text,
            options=question.options,
            correct_answers=correct_answers,
        )

    submitted_answers = tuple(opt.text for opt in counterpart.correct_options)

    if not submitted_answers:
        classification = Classification.UNANSWERED
    elif answers_match(correct_answers, submitted_answers):
        classification = Classification.CORRECT
    else:
        classification = Classification.INCORRECT

    return ClassificationRecord(
        classification=classification,
        question_text=question.question_text,
        options=question.options,
        submitted_answers=submitted_answers,
        correct_answers=correct_answers,
    )


class AnswerComparator:
    """
    Grades a submitted QuestionSet against a reference QuestionSet.

    Verdicts other than CORRECT are emitted to the reporter as they are
    found; the final tally is emitted once all questions are processed.
    """

    def __init__(self, reporter: Optional[RecordingReporter] = None):
        self.reporter = reporter or RecordingReporter()

    def compare(
        self,
        reference: QuestionSet,
        submitted: QuestionSet,
        suppress_unanswered_output: bool = False,
    ) -> Tally:
        """
        Compare two parsed documents.

        Args:
            reference: Questions with the correct options marked.
            submitted: Questions with the user's selections marked.
            suppress_unanswered_output: Do not emit UNANSWERED records.

        Returns:
            Tally covering every reference question.
        """
        # Last occurrence wins when a numeral repeats
        counterparts = {q.numeral: q for q in submitted.questions}

        def step(tally: Tally, question: Question) -> Tally:
            record = classify(question, counterparts.get(question.numeral))
            self._emit(record, suppress_unanswered_output)
            return tally.record(record.classification)

        tally = reduce(step, reference.questions, Tally())

        logger.info(
            f"Compared {tally.total} questions: {tally.correct} correct, "
            f"{tally.incorrect} incorrect, {tally.unanswered} unanswered "
            f"({tally.percentage})"
        )
        self.reporter.summarize(tally)
        return tally

    def _emit(self, record: ClassificationRecord, suppress_unanswered: bool):
        if record.classification == Classification.CORRECT:
            return

        if record.classification == Classification.MISSING_COUNTERPART:
            logger.warning(
                f"No corresponding answer found for question: "
                f"{record.question_text}"
            )
        elif (
            record.classification == Classification.UNANSWERED
            and suppress_unanswered
        ):
            return

        self.reporter.emit(record)
