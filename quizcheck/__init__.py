"""
Quiz Check
==========
Grades multiple-choice quiz answers written in a Word document against
an answer key in the same format.

Architecture:
    - Text Extractor: Flattens .docx / .pdf / .txt documents into lines
    - State Machine: Detects questions and marked options line by line
    - Validation Engine: Flags duplicate numerals, gaps and unmarked questions
    - Answer Comparator: Matches questions by numeral and tallies verdicts
    - Reporter: Renders verdict blocks and a summary table

Version: 1.0.0
"""

__version__ = "1.0.0"
