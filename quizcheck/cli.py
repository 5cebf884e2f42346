"""
CLI Interface
=============
Command-line interface for the quiz checker.

Usage:
    quizcheck compare <directory> [--nolog-unanswered]
    quizcheck parse <document> [--json-output]
"""

from __future__ import annotations

import os
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .engine import CheckerConfig, CheckerEngine
from .errors import ExtractionError, FatalInputError
from .reporter import ConsoleReporter

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="quizcheck")
def cli():
    """Quiz Check — grade quiz answers against an answer key."""
    pass


@cli.command()
@click.argument("directory", type=click.Path())
@click.option(
    "--nolog-unanswered",
    is_flag=True,
    default=False,
    help="Suppress logging of unanswered questions",
)
def compare(directory: str, nolog_unanswered: bool):
    """Compare answers.docx against questions.docx in DIRECTORY."""

    try:
        config = CheckerConfig.from_env(
            suppress_unanswered_output=nolog_unanswered,
        )
        engine = CheckerEngine(config)

        console.print()
        console.print(
            Panel.fit(
                Text.assemble(
                    (f"Quiz Check v{__version__}\n", "bold cyan"),
                    (f"Folder: {os.path.abspath(directory)}", "dim"),
                ),
                border_style="cyan",
            )
        )
        console.print()

        engine.run(directory, reporter=ConsoleReporter(console))

    except FatalInputError as e:
        console.print(Text.assemble(("Error:", "red"), f" {e}"))
        sys.exit(1)
    except ExtractionError as e:
        console.print(
            Text.assemble(("Could not read document:", "red"), f" {e}")
        )
        if e.__cause__ is not None:
            console.print(Text(f"Cause: {e.__cause__!r}", style="dim"))
        sys.exit(1)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output only JSON result to stdout (for programmatic use)",
)
def parse(document: str, json_output: bool):
    """Parse a single DOCUMENT and report what was recognized."""

    try:
        config = CheckerConfig.from_env()
        if json_output:
            # Keep stdout clean for JSON consumers
            config.log_level = "ERROR"
        engine = CheckerEngine(config)
        result = engine.parse_document(document)
    except (FatalInputError, ExtractionError) as e:
        console.print(Text.assemble(("Error:", "red"), f" {e}"))
        sys.exit(1)

    if json_output:
        click.echo(result.model_dump_json(indent=2))
        return

    console.print()
    console.print(
        Panel.fit(
            Text.assemble(
                (f"Quiz Check v{__version__}\n", "bold cyan"),
                (
                    f"Parsed: {os.path.basename(document)} "
                    f"({result.question_set.convention.value} markers)",
                    "dim",
                ),
            ),
            border_style="cyan",
        )
    )
    console.print()

    _display_questions(result.question_set)
    _display_validation_table(result.validation.model_dump())

    for warning in result.warnings:
        console.print(Text.assemble(("Warning:", "yellow"), f" {warning}"))


# ─── Display Helpers ──────────────────────────────────────────────────────────


def _display_questions(question_set):
    """Display parsed questions with their marked options."""
    table = Table(title="Questions", border_style="cyan")
    table.add_column("#", style="bold")
    table.add_column("Question")
    table.add_column("Options", justify="right")
    table.add_column("Marked")

    for q in question_set.questions:
        marked = ", ".join(opt.text for opt in q.correct_options)
        table.add_row(
            q.numeral,
            Text(q.question_text[len(q.numeral):].strip()),
            str(len(q.options)),
            Text(marked) if marked else Text("-", style="dim"),
        )

    console.print(table)
    console.print()


def _display_validation_table(validation: dict):
    """Display validation report as a rich table."""
    table = Table(title="Validation Report", border_style="green")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Status", justify="center")

    def status_icon(count, threshold=0):
        if count <= threshold:
            return "[green]✓[/]"
        return "[red]✗[/]"

    total = validation.get("total_questions", 0)
    table.add_row(
        "Total Questions Detected",
        str(total),
        "[green]✓[/]" if total > 0 else "[red]✗[/]",
    )

    dupes = validation.get("duplicate_numerals", [])
    table.add_row(
        "Duplicate Numerals",
        ", ".join(dupes) or "0",
        status_icon(len(dupes)),
    )

    missing = validation.get("missing_count", 0)
    table.add_row(
        "Missing Question Numbers",
        str(missing),
        status_icon(missing),
    )

    no_options = validation.get("questions_without_options", [])
    table.add_row(
        "Questions Without Options",
        str(len(no_options)),
        status_icon(len(no_options)),
    )

    no_marks = validation.get("questions_without_marks", [])
    rate = validation.get("marked_rate", 0.0)
    table.add_row(
        "Questions Without Marks",
        f"{len(no_marks)} ({rate}% marked)",
        "[green]✓[/]" if not no_marks else "[yellow]⚠[/]",
    )

    console.print(table)
    console.print()


# ─── Entry point (for python -m quizcheck.cli) ────────────────────────────────


if __name__ == "__main__":
    cli()
