"""
Module entry point for: python -m quizcheck

Allows running the checker directly as a module:
    python -m quizcheck compare <directory> [--nolog-unanswered]
    python -m quizcheck parse <document> [--json-output]
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
