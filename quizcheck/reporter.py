"""
Reporters
=========
Output collaborators for the comparator. A reporter receives one
ClassificationRecord per noteworthy question and one final Tally.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import Classification, ClassificationRecord, Tally


class RecordingReporter:
    """Keeps every record and the final tally for programmatic callers."""

    def __init__(self):
        self.records: list[ClassificationRecord] = []
        self.tally: Optional[Tally] = None

    def emit(self, record: ClassificationRecord):
        self.records.append(record)

    def summarize(self, tally: Tally):
        self.tally = tally


class ConsoleReporter(RecordingReporter):
    """
    Renders verdicts as colored blocks and the tally as a rich table.

        [X] Incorrect question:
        2. Largest planet?
        - Your answers:
          + B. Mars
        - Correct answers:
          + C. Jupiter
    """

    def __init__(self, console: Optional[Console] = None):
        super().__init__()
        self.console = console or Console()

    def emit(self, record: ClassificationRecord):
        super().emit(record)

        if record.classification == Classification.MISSING_COUNTERPART:
            self.console.print(Text(
                "[!] No corresponding answer found for question:\n"
                f"{record.question_text}\n",
                style="yellow",
            ))

        elif record.classification == Classification.UNANSWERED:
            lines = ["[U] Unanswered question:", record.question_text]
            lines += [f"{opt.text};" for opt in record.options]
            self.console.print(Text("\n".join(lines) + "\n", style="cyan"))

        elif record.classification == Classification.INCORRECT:
            block = Text()
            block.append(
                f"[X] Incorrect question:\n{record.question_text}\n"
                "- Your answers:\n"
                + _bullets(record.submitted_answers),
                style="red",
            )
            block.append(
                "- Correct answers:\n" + _bullets(record.correct_answers),
                style="green",
            )
            self.console.print(block)

    def summarize(self, tally: Tally):
        super().summarize(tally)

        table = Table(title="Summary", border_style="cyan")
        table.add_column("Result", style="bold")
        table.add_column("Count", justify="right")

        table.add_row("Total questions", str(tally.total))
        table.add_row("Correct", f"[green]{tally.correct}[/]")
        table.add_row("Incorrect", f"[red]{tally.incorrect}[/]")
        table.add_row("Unanswered", f"[cyan]{tally.unanswered}[/]")
        table.add_row("Correct percentage", f"[bold]{tally.percentage}[/]")

        self.console.print()
        self.console.print(table)
        self.console.print()


def _bullets(answers: tuple[str, ...]) -> str:
    return "".join(f"  + {answer}\n" for answer in answers)
