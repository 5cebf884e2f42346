"""
Validation Engine
=================
Post-parse validation and reporting for one QuestionSet.

After parsing each document, generates a report:
    - Total Questions Detected
    - Duplicate Numerals (ambiguous cross-document matches)
    - Missing Question Numbers (gaps in sequence)
    - Questions Without Options
    - Questions Without Any Marked Option

Never raises; problems are reported, not fixed.
"""

from __future__ import annotations

import logging
from collections import Counter

from .models import QuestionSet, ValidationReport

logger = logging.getLogger(__name__)


# Upper bound on how many missing numbers a report lists
MAX_LISTED_MISSING = 100


def _numeral_value(numeral: str) -> int:
    return int(numeral.rstrip("."))


def _find_gaps(numbers: list[int]) -> tuple[int, list[int]]:
    """
    Walk sorted unique numbers and collect the gaps between neighbours.

    Returns:
        (total missing count, first MAX_LISTED_MISSING missing numbers)
    """
    count = 0
    listed: list[int] = []
    for prev, curr in zip(numbers, numbers[1:]):
        gap = curr - prev - 1
        if gap <= 0:
            continue
        count += gap
        room = MAX_LISTED_MISSING - len(listed)
        if room > 0:
            listed.extend(range(prev + 1, prev + 1 + min(gap, room)))
    return count, listed


class ValidationEngine:
    """
    Validates a parsed QuestionSet and produces a report.
    """

    def validate(self, question_set: QuestionSet) -> ValidationReport:
        """
        Run full validation on a parsed document.

        Args:
            question_set: Questions recovered from one document.

        Returns:
            ValidationReport with all detected issues.
        """
        report = ValidationReport()

        if not question_set.questions:
            logger.debug(
                f"No questions to validate in {question_set.source or 'input'}"
            )
            return report

        report.total_questions = len(question_set.questions)

        numerals = [q.numeral for q in question_set.questions]
        numeral_counts = Counter(numerals)

        report.duplicate_numerals = sorted(
            (num for num, count in numeral_counts.items() if count > 1),
            key=_numeral_value,
        )

        report.missing_count, report.missing_numbers = _find_gaps(
            sorted({_numeral_value(num) for num in numerals})
        )

        for q in question_set.questions:
            if not q.options:
                report.questions_without_options.append(q.numeral)
            if not q.correct_options:
                report.questions_without_marks.append(q.numeral)

        logger.info("=" * 60)
        logger.info(f"VALIDATION REPORT: {question_set.source or 'input'}")
        logger.info("=" * 60)
        logger.info(f"Total Questions Detected: {report.total_questions}")
        logger.info(
            f"Duplicate Numerals: {len(report.duplicate_numerals)}"
        )
        logger.info(
            f"Missing Question Numbers: {report.missing_count}"
        )
        logger.info(
            f"Questions Without Options: "
            f"{len(report.questions_without_options)}"
        )
        logger.info(
            f"Questions Without Marks: {len(report.questions_without_marks)} "
            f"(marked rate {report.marked_rate}%)"
        )
        logger.info("=" * 60)

        return report
