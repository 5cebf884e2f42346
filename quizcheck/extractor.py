"""
Text Extractor
==============
Flattens quiz documents into plain text lines for the state machine.

Supported formats:
    - .docx  via python-docx (body paragraphs and table cells in order,
             soft breaks become lines)
    - .pdf   via PyMuPDF (page text in reading order)
    - .txt   read as UTF-8
"""

from __future__ import annotations

import logging
from pathlib import Path

import docx
import fitz  # PyMuPDF
from docx.table import Table

from .errors import ExtractionError

logger = logging.getLogger(__name__)


class TextExtractor:
    """
    Handles document ingestion and returns newline-delimited text.

    Any failure to read or decode a document is raised as an
    ExtractionError chained to the original exception.
    """

    SUPPORTED_SUFFIXES = (".docx", ".pdf", ".txt")

    def extract_lines(self, path: str | Path) -> list[str]:
        """
        Extract the text of a document as a list of lines.

        Args:
            path: Path to a .docx, .pdf or .txt document.

        Returns:
            Physical lines in document order, blank lines included.

        Raises:
            ExtractionError: If the format is unsupported or the
                document cannot be read.
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix not in self.SUPPORTED_SUFFIXES:
            raise ExtractionError(
                str(path), f"unsupported document type '{suffix or path.name}'"
            )

        logger.info(f"Extracting text from {path}")

        try:
            if suffix == ".docx":
                text = self._extract_docx(path)
            elif suffix == ".pdf":
                text = self._extract_pdf(path)
            else:
                text = path.read_text(encoding="utf-8")
        except Exception as e:
            raise ExtractionError(str(path), str(e) or type(e).__name__) from e

        lines = text.splitlines()
        logger.debug(f"Extracted {len(lines)} lines from {path.name}")
        return lines

    def _extract_docx(self, path: Path) -> str:
        """Join paragraph texts; python-docx renders soft breaks as newlines."""
        document = docx.Document(str(path))
        return "\n".join(_iter_block_text(document))

    def _extract_pdf(self, path: Path) -> str:
        """Concatenate page text, sorted into reading order."""
        pages = []
        with fitz.open(str(path)) as doc:
            for page in doc:
                pages.append(page.get_text("text", sort=True))
        return "\n".join(pages)


def _iter_block_text(container):
    """
    Yield paragraph texts of a document body or table cell in order,
    descending into tables cell by cell.
    """
    for block in container.iter_inner_content():
        if isinstance(block, Table):
            seen = set()
            for row in block.rows:
                for cell in row.cells:
                    # merged cells are returned once per grid position
                    if cell._tc in seen:
                        continue
                    seen.add(cell._tc)
                    yield from _iter_block_text(cell)
        else:
            yield block.text
