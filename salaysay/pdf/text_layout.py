"""Layout-aware text extraction from PDF documents.

Walks the text spans of each page in rendering order and rebuilds line and
paragraph breaks from the vertical position of consecutive spans.
"""

import asyncio
import re
from collections.abc import Iterator

import fitz

from salaysay.exceptions import ExtractionError
from salaysay.models import ExtractedText
from salaysay.utils.logger import get_logger

logger = get_logger(__name__)

NO_TEXT_SENTINEL = "No text content could be extracted from this PDF."

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_EXCESS_SPACES = re.compile(r"[ \t]{2,}")


class TextLayoutExtractor:
    """Extracts text from PDF bytes, preserving paragraph breaks.

    Args:
        y_threshold: Vertical distance (PDF points) above which two
            consecutive spans are treated as separate lines.
    """

    def __init__(self, y_threshold: float = 5.0) -> None:
        self.y_threshold = y_threshold

    def extract(self, pdf_bytes: bytes) -> ExtractedText:
        """Extract the text content of every page.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Extracted text with pages separated by a blank line, or
            ``NO_TEXT_SENTINEL`` when the PDF carries no text layer.

        Raises:
            ExtractionError: If the bytes cannot be parsed as a PDF.
        """
        try:
            with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
                pages = [self._page_text(page) for page in doc]
        except Exception as exc:
            raise ExtractionError(f"PDF text extraction failed: {exc}") from exc

        text = "".join(page_text + "\n\n" for page_text in pages)
        text = _EXCESS_NEWLINES.sub("\n\n", text)
        text = _EXCESS_SPACES.sub(" ", text).strip()

        logger.info("Extracted %d characters from %d pages", len(text), len(pages))
        if not text:
            logger.info("PDF has no text layer, returning sentinel text")
            return ExtractedText(text=NO_TEXT_SENTINEL, page_count=len(pages))
        return ExtractedText(text=text, page_count=len(pages))

    async def extract_async(self, pdf_bytes: bytes) -> ExtractedText:
        """Run :meth:`extract` without blocking the event loop."""
        return await asyncio.to_thread(self.extract, pdf_bytes)

    def _page_text(self, page: fitz.Page) -> str:
        parts: list[str] = []
        last_y: float | None = None

        for text, y in _iter_spans(page):
            if last_y is not None:
                delta = abs(y - last_y)
                if delta > self.y_threshold:
                    parts.append("\n")
                elif delta > 0:
                    parts.append(" ")
            parts.append(text)
            last_y = y

        return "".join(parts)


def _iter_spans(page: fitz.Page) -> Iterator[tuple[str, float]]:
    """Yield ``(text, baseline_y)`` for each text span in content-stream order."""
    page_dict = page.get_text("dict", sort=False)
    for block in page_dict.get("blocks", []):
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                yield span["text"], span["origin"][1]
