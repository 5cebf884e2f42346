"""
Quiz Check Engine
=================
Main orchestrator that combines input validation, text extraction,
state machine parsing, validation and answer comparison.

Usage:
    engine = CheckerEngine(config)
    tally = engine.run("path/to/folder", reporter=ConsoleReporter())

Architecture:
    folder → questions.docx / answers.docx → TextExtractor → lines →
    DocumentParser → QuestionSet ×2 → AnswerComparator → Tally
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import __version__
from .comparator import AnswerComparator
from .errors import FatalInputError
from .extractor import TextExtractor
from .models import MarkerConvention, ParseResult, Tally
from .reporter import RecordingReporter
from .state_machine import DocumentParser
from .validator import ValidationEngine

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_HANDLER_NAME = "quizcheck.console"
FILE_HANDLER_NAME = "quizcheck.file"


@dataclass
class CheckerConfig:
    """Configuration for the quiz check engine."""

    # Input files expected inside the target folder
    questions_filename: str = "questions.docx"
    answers_filename: str = "answers.docx"

    # Parsing
    marker_convention: MarkerConvention = MarkerConvention.AUTO

    # Output
    suppress_unanswered_output: bool = False

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, **overrides) -> "CheckerConfig":
        """Build a config from QUIZCHECK_* environment variables."""
        convention = os.environ.get("QUIZCHECK_MARKER_CONVENTION", "auto")
        try:
            marker_convention = MarkerConvention(convention.strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in MarkerConvention)
            raise FatalInputError(
                f"Invalid QUIZCHECK_MARKER_CONVENTION '{convention}' "
                f"(expected one of: {choices})"
            ) from None

        config = cls(
            marker_convention=marker_convention,
            log_level=os.environ.get("QUIZCHECK_LOG_LEVEL", cls.log_level),
            log_file=os.environ.get("QUIZCHECK_LOG_FILE") or None,
        )
        for key, value in overrides.items():
            setattr(config, key, value)
        return config


class CheckerEngine:
    """
    Main quiz checking engine.

    Orchestrates the full pipeline:
        1. Input folder validation
        2. Text extraction (both documents, before any comparison)
        3. State machine parsing
        4. Validation
        5. Comparison and reporting
    """

    def __init__(self, config: Optional[CheckerConfig] = None):
        self.config = config or CheckerConfig()
        self.extractor = TextExtractor()
        self.validator = ValidationEngine()
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.WARNING)

        # Configure root logger for the quizcheck package
        package_logger = logging.getLogger("quizcheck")
        package_logger.setLevel(log_level)

        # Replace handlers installed by an earlier engine
        for handler in list(package_logger.handlers):
            if handler.get_name() in (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME):
                package_logger.removeHandler(handler)
                handler.close()

        # Console handler
        console = logging.StreamHandler()
        console.set_name(CONSOLE_HANDLER_NAME)
        console.setLevel(log_level)
        console.setFormatter(
            logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        )
        package_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_dir = Path(self.config.log_file).parent
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(
                self.config.log_file, encoding="utf-8"
            )
            file_handler.set_name(FILE_HANDLER_NAME)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(
                logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
            )
            package_logger.addHandler(file_handler)

    def resolve_inputs(self, directory: str | Path) -> tuple[Path, Path]:
        """
        Locate the reference and submitted documents.

        Returns:
            (questions_path, answers_path)

        Raises:
            FatalInputError: If the folder or either file is missing.
        """
        folder = Path(directory).expanduser().resolve()

        if not folder.is_dir():
            raise FatalInputError(
                f"The specified path is not a valid directory: {folder}"
            )

        questions_path = folder / self.config.questions_filename
        answers_path = folder / self.config.answers_filename

        missing = [p.name for p in (questions_path, answers_path) if not p.is_file()]
        if missing:
            raise FatalInputError(
                f"Both {self.config.questions_filename} and "
                f"{self.config.answers_filename} must be present in {folder} "
                f"(missing: {', '.join(missing)})"
            )

        return questions_path, answers_path

    def parse_document(self, path: str | Path) -> ParseResult:
        """
        Extract, parse and validate a single document.

        Raises:
            ExtractionError: If the document cannot be read.
        """
        path = Path(path)
        lines = self.extractor.extract_lines(path)

        parser = DocumentParser(self.config.marker_convention)
        question_set = parser.parse(lines, source=path.name)
        validation = self.validator.validate(question_set)

        return ParseResult(
            parser_version=__version__,
            question_set=question_set,
            validation=validation,
            warnings=[str(w) for w in parser.warnings],
        )

    def run(
        self,
        directory: str | Path,
        reporter: Optional[RecordingReporter] = None,
    ) -> Tally:
        """
        Grade the answers document in a folder against its questions document.

        Args:
            directory: Folder containing the two fixed-named documents.
            reporter: Receives classification records and the final tally.

        Returns:
            Tally for the whole comparison.

        Raises:
            FatalInputError: If the inputs are missing.
            ExtractionError: If either document cannot be read.
        """
        questions_path, answers_path = self.resolve_inputs(directory)
        logger.info(f"Checking {answers_path.name} against {questions_path.name}")

        reference = self.parse_document(questions_path)
        submitted = self.parse_document(answers_path)

        duplicates = submitted.validation.duplicate_numerals
        if duplicates:
            logger.warning(
                f"Duplicate question numbers in {answers_path.name}: "
                f"{', '.join(duplicates)}; the last occurrence of each is used"
            )

        comparator = AnswerComparator(reporter)
        return comparator.compare(
            reference.question_set,
            submitted.question_set,
            suppress_unanswered_output=self.config.suppress_unanswered_output,
        )
