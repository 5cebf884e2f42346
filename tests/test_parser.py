"""
Test Suite for the Quiz Document Parser
=======================================
Unit tests for models, anchor patterns, the state machine and validation.
"""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from quizcheck.errors import MalformedInputWarning
from quizcheck.models import (
    MarkerConvention,
    Option,
    ParseResult,
    Question,
    QuestionSet,
    ValidationReport,
)
from quizcheck.state_machine import (
    PLAIN_OPTION_PATTERN,
    QUESTION_PATTERN,
    SENTINEL_OPTION_PATTERN,
    DocumentParser,
    ParserState,
    detect_convention,
    parse,
    split_options,
)
from quizcheck.validator import MAX_LISTED_MISSING, ValidationEngine


# ═══════════════════════════════════════════════════════════════════════════════
# MODEL TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestQuestion:
    """Test Question model."""

    def test_numeral_is_leading_token(self):
        q = Question(question_text="12. What is EC2?")
        assert q.numeral == "12."

    def test_correct_options_keep_display_order(self):
        q = Question(
            question_text="1. Pick two:",
            options=(
                Option(text="A. One", is_correct=True),
                Option(text="B. Two"),
                Option(text="C. Three", is_correct=True),
            ),
        )
        assert [o.text for o in q.correct_options] == ["A. One", "C. Three"]

    def test_question_is_frozen(self):
        q = Question(question_text="1. Frozen?")
        with pytest.raises(ValidationError):
            q.question_text = "2. Thawed?"

    def test_serialization_includes_numeral(self):
        q = Question(
            question_text="3. Largest planet?",
            options=(Option(text="A. Jupiter", is_correct=True),),
        )
        data = q.model_dump()
        assert data["numeral"] == "3."
        assert data["options"][0] == {"text": "A. Jupiter", "is_correct": True}


class TestQuestionSet:
    """Test QuestionSet model."""

    def test_len_and_indexing(self):
        qs = QuestionSet(questions=(
            Question(question_text="1. A?"),
            Question(question_text="2. B?"),
        ))
        assert len(qs) == 2
        assert qs[1].numeral == "2."

    def test_empty_set(self):
        assert len(QuestionSet()) == 0


class TestValidationReport:
    """Test ValidationReport model."""

    def test_marked_rate(self):
        report = ValidationReport(
            total_questions=4,
            questions_without_marks=["3."],
        )
        assert report.marked_rate == 75.0

    def test_empty_report(self):
        report = ValidationReport()
        assert report.marked_rate == 0.0
        assert report.total_questions == 0


# ═══════════════════════════════════════════════════════════════════════════════
# REGEX PATTERN TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestAnchorPatterns:
    """Test regex patterns for structural anchors."""

    def test_question_patterns(self):
        # Should match
        assert QUESTION_PATTERN.match("1. Capital of France?")
        assert QUESTION_PATTERN.match("  12. Choose the odd one out:")
        assert QUESTION_PATTERN.match("3. Which? A. x;[*] B. y;[*] =")

        # Should NOT match
        assert not QUESTION_PATTERN.match("1. No terminator here")
        assert not QUESTION_PATTERN.match("1.Missing space?")
        assert not QUESTION_PATTERN.match("Question 1?")
        assert not QUESTION_PATTERN.match("A. Is this an option?")

    def test_question_pattern_keeps_inline_tail_separate(self):
        match = QUESTION_PATTERN.match(
            "1. Is it? Really? A. yes;[*] = B. no;[*]"
        )
        assert match.group(2) == "Is it? Really?"
        assert match.group(3) == "A. yes;[*] = B. no;[*]"

    def test_plain_option_patterns(self):
        match = PLAIN_OPTION_PATTERN.match("C. Paris =")
        assert match.group(1) == "C"
        assert match.group(2) == "Paris"
        assert match.group(3) == "="

        match = PLAIN_OPTION_PATTERN.match("D. Rome;")
        assert match.group(2) == "Rome"
        assert match.group(3) is None

        match = PLAIN_OPTION_PATTERN.match("C. Paris =;")
        assert match.group(2) == "Paris"
        assert match.group(3) == "="

        assert not PLAIN_OPTION_PATTERN.match("c. lowercase label")
        assert not PLAIN_OPTION_PATTERN.match("AB. two letters")

    def test_sentinel_option_patterns(self):
        match = SENTINEL_OPTION_PATTERN.match("B. Madrid;[*] =")
        assert match.group(2) == "Madrid"
        assert match.group(3) == "="

        match = SENTINEL_OPTION_PATTERN.match("B. Madrid ;[*]")
        assert match.group(2) == "Madrid"
        assert match.group(3) is None

        # The sentinel is mandatory under this convention
        assert not SENTINEL_OPTION_PATTERN.match("B. Madrid =")

    def test_split_options(self):
        assert split_options("A. Berlin;[*] B. Madrid;[*] = C. Paris;[*]") == [
            "A. Berlin;[*]",
            "B. Madrid;[*] =",
            "C. Paris;[*]",
        ]
        assert split_options("A. x; B. y =") == ["A. x;", "B. y ="]
        assert split_options("   ") == []

    def test_split_options_keeps_abbreviations(self):
        assert split_options("A. The U.S. Army =; B. Navy") == [
            "A. The U.S. Army =;",
            "B. Navy",
        ]

    def test_detect_convention(self):
        assert detect_convention(["1. Q?", "A. x;[*]"]) == MarkerConvention.SENTINEL
        assert detect_convention(["1. Q?", "A. x ="]) == MarkerConvention.PLAIN
        assert detect_convention([]) == MarkerConvention.PLAIN


# ═══════════════════════════════════════════════════════════════════════════════
# STATE MACHINE TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestDocumentParser:
    """Test the state machine parser."""

    def test_single_question_plain_markers(self):
        questions = parse([
            "1. Capital of France?",
            "A. Berlin",
            "B. Madrid",
            "C. Paris =",
            "D. Rome",
        ])

        assert len(questions) == 1
        q = questions[0]
        assert q.question_text == "1. Capital of France?"
        assert [o.text for o in q.options] == [
            "A. Berlin", "B. Madrid", "C. Paris", "D. Rome",
        ]
        assert [o.is_correct for o in q.options] == [False, False, True, False]
        assert questions.convention == MarkerConvention.PLAIN

    def test_sentinel_marker_is_stripped(self):
        questions = parse(["1. Q?", "A. foo;[*] ="])

        option = questions[0].options[0]
        assert ";[*]" not in option.text
        assert option.text == "A. foo"
        assert option.is_correct is True
        assert questions.convention == MarkerConvention.SENTINEL

    def test_inline_options_on_question_line(self):
        questions = parse([
            "1. Capital of France? A. Berlin;[*] B. Madrid;[*] "
            "C. Paris;[*] = D. Rome;[*]",
        ])

        q = questions[0]
        assert q.question_text == "1. Capital of France?"
        assert [o.text for o in q.options] == [
            "A. Berlin", "B. Madrid", "C. Paris", "D. Rome",
        ]
        assert [o.text for o in q.correct_options] == ["C. Paris"]

    def test_inline_and_standalone_options_combine(self):
        questions = parse([
            "1. Pick one: A. Red",
            "B. Green =",
        ])
        assert [o.text for o in questions[0].options] == ["A. Red", "B. Green"]

    def test_options_on_their_own_line_sentinel_markers(self):
        questions = parse([
            "1. Capital of France?",
            "A. Berlin;[*] B. Madrid;[*] C. Paris;[*] = D. Rome;[*]",
        ])

        q = questions[0]
        assert [o.text for o in q.options] == [
            "A. Berlin", "B. Madrid", "C. Paris", "D. Rome",
        ]
        assert [o.is_correct for o in q.options] == [False, False, True, False]
        assert all(";[*]" not in o.text for o in q.options)

    def test_options_on_their_own_line_plain_markers(self):
        questions = parse([
            "1. Capital of France?",
            "A. Berlin; B. Madrid; C. Paris =; D. Rome",
        ])

        q = questions[0]
        assert questions.convention == MarkerConvention.PLAIN
        assert [o.text for o in q.options] == [
            "A. Berlin", "B. Madrid", "C. Paris", "D. Rome",
        ]
        assert [o.text for o in q.correct_options] == ["C. Paris"]

    def test_inline_options_plain_markers(self):
        questions = parse([
            "1. Capital of France? A. Berlin; B. Madrid; C. Paris =; D. Rome;",
            "2. Pick the even numbers: A. 2 =; B. 3; C. 4 =",
        ])

        assert [o.text for o in questions[0].options] == [
            "A. Berlin", "B. Madrid", "C. Paris", "D. Rome",
        ]
        assert [o.text for o in questions[0].correct_options] == ["C. Paris"]
        assert [o.text for o in questions[1].correct_options] == ["A. 2", "C. 4"]

    def test_stored_text_never_keeps_sentinel(self):
        questions = parse([
            "1. Q1? A. a;[*] = B. b;[*]",
            "2. Q2?",
            "A. c;[*] B. d ;[*] =",
            "C. e;[*]",
        ])

        texts = [o.text for q in questions.questions for o in q.options]
        assert texts == ["A. a", "B. b", "A. c", "B. d", "C. e"]
        assert not any(";[*]" in t for t in texts)

    def test_prose_mentioning_an_option_is_not_split(self):
        questions = parse([
            "1. Q?",
            "See option B. for details",
            "A. x =",
        ])
        assert [o.text for o in questions[0].options] == ["A. x"]

    def test_multiple_questions_keep_order(self):
        questions = parse([
            "2. Second in file?",
            "A. x =",
            "1. First in file?",
            "A. y",
        ])
        assert [q.numeral for q in questions.questions] == ["2.", "1."]

    def test_multi_select_question(self):
        questions = parse([
            "1. Pick all primes:",
            "A. 2 =",
            "B. 3 =",
            "C. 4",
        ])
        assert len(questions[0].correct_options) == 2

    def test_inert_lines_ignored(self):
        questions = parse([
            "Quiz: Geography",
            "",
            "1. Capital of France?",
            "Some stray extraction artifact",
            "",
            "A. Paris =",
            "   ",
            "Page 1 of 3",
            "B. Rome",
        ])
        assert len(questions) == 1
        assert len(questions[0].options) == 2

    def test_options_before_first_question_ignored(self):
        questions = parse([
            "A. Orphan =",
            "1. Real question?",
            "A. Kept",
        ])
        assert [o.text for o in questions[0].options] == ["A. Kept"]

    def test_question_without_options(self):
        questions = parse(["1. Lonely?", "2. Also lonely?"])
        assert len(questions) == 2
        assert questions[0].options == ()

    def test_sentinel_document_ignores_lines_without_sentinel(self):
        questions = parse([
            "1. Q?",
            "A. with sentinel;[*]",
            "B. without sentinel =",
        ])
        assert [o.text for o in questions[0].options] == ["A. with sentinel"]

    def test_explicit_convention_skips_detection(self):
        parser = DocumentParser(MarkerConvention.PLAIN)
        questions = parser.parse(["1. Q?", "A. foo;[*] ="])

        assert questions.convention == MarkerConvention.PLAIN
        # Under the plain convention the sentinel is ordinary body text
        assert questions[0].options[0].text == "A. foo;[*]"
        assert questions[0].options[0].is_correct is True

    def test_body_whitespace_is_trimmed(self):
        questions = parse(["  1.   Spaced   out?  ", "  A.   Paris    =  "])
        assert questions[0].question_text == "1. Spaced   out?"
        assert questions[0].options[0].text == "A. Paris"

    def test_parse_is_deterministic(self):
        lines = [
            "1. Q1? A. a;[*] = B. b;[*]",
            "2. Q2?",
            "A. c;[*]",
            "B. d;[*] =",
        ]
        assert parse(lines) == parse(lines)

    def test_parser_reusable_across_documents(self):
        parser = DocumentParser()
        first = parser.parse(["1. Q?", "A. x ="])
        second = parser.parse(["5. Other?", "A. y;[*]"])

        assert [q.numeral for q in first.questions] == ["1."]
        assert [q.numeral for q in second.questions] == ["5."]
        assert parser.state == ParserState.NO_OPEN_QUESTION

    def test_empty_input_warns(self, caplog):
        parser = DocumentParser()
        with caplog.at_level(logging.WARNING, logger="quizcheck"):
            questions = parser.parse([], source="questions.docx")

        assert len(questions) == 0
        assert len(parser.warnings) == 1
        assert isinstance(parser.warnings[0], MalformedInputWarning)
        assert "No valid questions found in questions.docx" in caplog.text

    def test_unrecognized_input_warns(self):
        parser = DocumentParser()
        parser.parse(["Just some prose.", "Nothing numbered here"])
        assert len(parser.warnings) == 1

    def test_successful_parse_has_no_warnings(self):
        parser = DocumentParser()
        parser.parse(["1. Q?", "A. x ="])
        assert parser.warnings == []


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION ENGINE TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestValidationEngine:
    """Test the validation engine."""

    def test_empty_question_set(self):
        report = ValidationEngine().validate(QuestionSet())
        assert report.total_questions == 0
        assert report.marked_rate == 0.0

    def test_clean_document(self):
        questions = parse([
            line
            for n in range(1, 6)
            for line in (f"{n}. Question {n}?", "A. yes =", "B. no")
        ])
        report = ValidationEngine().validate(questions)

        assert report.total_questions == 5
        assert report.duplicate_numerals == []
        assert report.missing_numbers == []
        assert report.missing_count == 0
        assert report.questions_without_marks == []
        assert report.marked_rate == 100.0

    def test_duplicate_detection(self):
        questions = parse([
            "10. Q?", "A. x =",
            "2. Q?", "A. x =",
            "10. Q again?", "A. y =",
            "2. Q again?", "A. y =",
        ])
        report = ValidationEngine().validate(questions)

        # Sorted numerically, not lexically
        assert report.duplicate_numerals == ["2.", "10."]

    def test_gap_detection(self):
        questions = parse([f"{n}. Q?" for n in (1, 2, 5, 6, 9)])
        report = ValidationEngine().validate(questions)
        assert report.missing_numbers == [3, 4, 7, 8]
        assert report.missing_count == 4

    def test_gap_detection_with_huge_numeral(self):
        questions = parse(["1. Q? A. x =", "30000000. Total points:"])
        report = ValidationEngine().validate(questions)

        assert report.missing_count == 29_999_998
        assert len(report.missing_numbers) == MAX_LISTED_MISSING
        assert report.missing_numbers[:3] == [2, 3, 4]

    def test_gap_listing_cap_spans_several_gaps(self):
        questions = parse([f"{n}. Q?" for n in (1, 3, 500)])
        report = ValidationEngine().validate(questions)

        assert report.missing_count == 497
        assert report.missing_numbers[:2] == [2, 4]
        assert len(report.missing_numbers) == MAX_LISTED_MISSING

    def test_unmarked_and_optionless_questions(self):
        questions = parse([
            "1. Answered?", "A. x =",
            "2. Unanswered?", "A. x", "B. y",
            "3. No options?",
        ])
        report = ValidationEngine().validate(questions)

        assert report.questions_without_options == ["3."]
        assert report.questions_without_marks == ["2.", "3."]


# ═══════════════════════════════════════════════════════════════════════════════
# SERIALIZATION TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestParseResultSerialization:
    """Test that ParseResult serializes correctly for JSON consumers."""

    def test_full_result_json(self):
        question_set = parse(
            ["1. Capital of France?", "A. Paris;[*] =", "B. Rome;[*]"],
            source="questions.docx",
        )
        result = ParseResult(
            question_set=question_set,
            validation=ValidationEngine().validate(question_set),
        )

        parsed = json.loads(result.model_dump_json())

        assert parsed["parser_version"] == "1.0.0"
        assert parsed["question_set"]["source"] == "questions.docx"
        assert parsed["question_set"]["convention"] == "sentinel"
        q = parsed["question_set"]["questions"][0]
        assert q["question_text"] == "1. Capital of France?"
        assert q["numeral"] == "1."
        assert q["options"][0] == {"text": "A. Paris", "is_correct": True}
        assert parsed["validation"]["marked_rate"] == 100.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
