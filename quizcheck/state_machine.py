"""
State Machine Parser
====================
Deterministic, line-oriented state machine that turns flattened quiz text
into Question records.

Each physical line is classified on its own (no lookahead):
    - question start   "1. Capital of France?"  (options may follow inline)
    - option           "C. Paris ="  or  "C. Paris;[*] ="
    - anything else    inert, ignored
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Iterable, Optional

from .errors import MalformedInputWarning
from .models import MarkerConvention, Option, Question, QuestionSet

logger = logging.getLogger(__name__)

# ─── Anchor Patterns ──────────────────────────────────────────────────────────

SENTINEL = ";[*]"

# Matches "1. Question text?" with an optional inline "A. ..." tail
QUESTION_PATTERN = re.compile(
    r"^\s*(\d+\.)\s+(.*?[?:])(?:\s*(A\..*?))?\s*$"
)

# Matches "A. Option text" with an optional "=" marker on either side
# of the trailing ";" separator
PLAIN_OPTION_PATTERN = re.compile(
    r"^\s*([A-Z])\.\s+(.+?)\s*;?\s*(=)?\s*;?\s*$"
)

# Matches "A. Option text;[*]" with an optional "=" after the sentinel
SENTINEL_OPTION_PATTERN = re.compile(
    r"^\s*([A-Z])\.\s+(.*?)\s*;\[\*\]\s*(=)?\s*$"
)

# A line that begins with an option label
OPTION_START_PATTERN = re.compile(r"^\s*[A-Z]\.\s")

# Start of an option token inside a combined line: "B. " not preceded by
# a letter, digit or dot, so "U.S. Army" stays one token
OPTION_BOUNDARY_PATTERN = re.compile(
    r"(?<![A-Za-z0-9.])(?=[A-Z]\.\s)"
)


def split_options(text: str) -> list[str]:
    """Split a combined line such as "A. x; B. y =" into option tokens."""
    return [
        token.strip()
        for token in OPTION_BOUNDARY_PATTERN.split(text)
        if token.strip()
    ]


def detect_convention(lines: Iterable[str]) -> MarkerConvention:
    """A document using the sentinel anywhere uses it everywhere."""
    if any(SENTINEL in line for line in lines):
        return MarkerConvention.SENTINEL
    return MarkerConvention.PLAIN


class ParserState(Enum):
    """Whether a question is currently collecting options."""
    NO_OPEN_QUESTION = "NO_OPEN_QUESTION"
    ACCUMULATING_OPTIONS = "ACCUMULATING_OPTIONS"


class DocumentParser:
    """
    Two-state machine that transforms document lines into a QuestionSet.

    The marker convention is fixed per document: either given explicitly
    or detected from the text before parsing starts.
    """

    def __init__(self, convention: MarkerConvention = MarkerConvention.AUTO):
        self.convention = convention
        self.warnings: list[MalformedInputWarning] = []
        self._reset()

    def _reset(self):
        self.state = ParserState.NO_OPEN_QUESTION
        self.current_text: Optional[str] = None
        self.current_options: list[Option] = []
        self.questions: list[Question] = []
        self.warnings = []

    def parse(self, lines: Iterable[str], source: str = "") -> QuestionSet:
        """
        Parse document lines into questions.

        Args:
            lines: Physical lines of the flattened document text.
            source: Name of the document, used in log messages.

        Returns:
            QuestionSet with questions in the order they appear.
        """
        lines = list(lines)
        self._reset()

        convention = self.convention
        if convention == MarkerConvention.AUTO:
            convention = detect_convention(lines)
        option_pattern = (
            SENTINEL_OPTION_PATTERN
            if convention == MarkerConvention.SENTINEL
            else PLAIN_OPTION_PATTERN
        )
        logger.debug(
            f"Parsing {len(lines)} lines from {source or '<text>'} "
            f"({convention.value} markers)"
        )

        for line in lines:
            self._process_line(line, option_pattern)

        if self.state == ParserState.ACCUMULATING_OPTIONS:
            self._finalize_question()

        if not self.questions:
            warning = MalformedInputWarning(
                f"No valid questions found in {source or 'input'}."
            )
            self.warnings.append(warning)
            logger.warning(str(warning))

        return QuestionSet(
            source=source,
            convention=convention,
            questions=tuple(self.questions),
        )

    def _process_line(self, line: str, option_pattern: re.Pattern):
        q_match = QUESTION_PATTERN.match(line)
        if q_match:
            self._start_new_question(
                f"{q_match.group(1)} {q_match.group(2).strip()}"
            )
            if q_match.group(3):
                for token in split_options(q_match.group(3)):
                    self._process_option(token, option_pattern)
            return

        # A standalone option line may still hold several options
        if OPTION_START_PATTERN.match(line):
            for token in split_options(line):
                self._process_option(token, option_pattern)

    def _process_option(self, text: str, option_pattern: re.Pattern):
        opt_match = option_pattern.match(text)
        if not opt_match:
            return

        if self.state == ParserState.NO_OPEN_QUESTION:
            logger.debug(f"Skipping option before first question: {text!r}")
            return

        self.current_options.append(Option(
            text=f"{opt_match.group(1)}. {opt_match.group(2).strip()}",
            is_correct=opt_match.group(3) is not None,
        ))

    def _start_new_question(self, question_text: str):
        """Finalize the open question (if any) and open a new one."""
        if self.state == ParserState.ACCUMULATING_OPTIONS:
            self._finalize_question()

        self.state = ParserState.ACCUMULATING_OPTIONS
        self.current_text = question_text
        self.current_options = []

    def _finalize_question(self):
        question = Question(
            question_text=self.current_text,
            options=tuple(self.current_options),
        )
        logger.debug(
            f"Detected question {question.numeral} "
            f"with {len(question.options)} options"
        )
        self.questions.append(question)

        self.state = ParserState.NO_OPEN_QUESTION
        self.current_text = None
        self.current_options = []


def parse(
    lines: Iterable[str],
    convention: MarkerConvention = MarkerConvention.AUTO,
    source: str = "",
) -> QuestionSet:
    """Parse lines with a fresh DocumentParser."""
    return DocumentParser(convention).parse(lines, source=source)
