"""Tests for layout-aware PDF text extraction."""

from collections.abc import Callable
from unittest.mock import MagicMock, patch

import fitz
import pytest

from salaysay.exceptions import ExtractionError
from salaysay.pdf.text_layout import NO_TEXT_SENTINEL, TextLayoutExtractor


def _blank_pdf() -> bytes:
    doc = fitz.open()
    doc.new_page()
    data = doc.tobytes()
    doc.close()
    return data


class TestPageText:
    """Span joining by vertical position, independent of MuPDF."""

    @patch("salaysay.pdf.text_layout._iter_spans")
    def test_same_baseline_concatenates(self, mock_spans: MagicMock) -> None:
        mock_spans.return_value = [("Juan", 100.0), ("Cruz", 100.0)]
        assert TextLayoutExtractor()._page_text(MagicMock()) == "JuanCruz"

    @patch("salaysay.pdf.text_layout._iter_spans")
    def test_small_shift_inserts_space(self, mock_spans: MagicMock) -> None:
        mock_spans.return_value = [("Student", 100.0), ("Number", 102.5)]
        assert TextLayoutExtractor()._page_text(MagicMock()) == "Student Number"

    @patch("salaysay.pdf.text_layout._iter_spans")
    def test_large_shift_inserts_newline(self, mock_spans: MagicMock) -> None:
        mock_spans.return_value = [("Dear Sir,", 100.0), ("I was absent.", 116.0)]
        text = TextLayoutExtractor()._page_text(MagicMock())
        assert text == "Dear Sir,\nI was absent."

    @patch("salaysay.pdf.text_layout._iter_spans")
    def test_threshold_is_configurable(self, mock_spans: MagicMock) -> None:
        mock_spans.return_value = [("a", 100.0), ("b", 104.0)]
        assert TextLayoutExtractor(y_threshold=3.0)._page_text(MagicMock()) == "a\nb"

    @patch("salaysay.pdf.text_layout._iter_spans")
    def test_upward_jump_counts_as_new_line(self, mock_spans: MagicMock) -> None:
        mock_spans.return_value = [("footer", 800.0), ("header", 40.0)]
        assert TextLayoutExtractor()._page_text(MagicMock()) == "footer\nheader"


class TestTextLayoutExtractor:
    def test_lines_become_newlines(self, make_pdf: Callable[..., bytes]) -> None:
        pdf_bytes = make_pdf("Dear Sir Gaspar,\nI was absent.")
        result = TextLayoutExtractor().extract(pdf_bytes)
        assert result.text == "Dear Sir Gaspar,\nI was absent."
        assert result.page_count == 1

    def test_pages_separated_by_blank_line(
        self, make_pdf: Callable[..., bytes]
    ) -> None:
        result = TextLayoutExtractor().extract(make_pdf("First page", "Second page"))
        assert result.text == "First page\n\nSecond page"
        assert result.page_count == 2

    def test_empty_page_between_pages_collapses(
        self, make_pdf: Callable[..., bytes]
    ) -> None:
        result = TextLayoutExtractor().extract(make_pdf("One", "", "Three"))
        assert result.text == "One\n\nThree"
        assert result.page_count == 3

    def test_no_text_layer_returns_sentinel(self) -> None:
        result = TextLayoutExtractor().extract(_blank_pdf())
        assert result.text == NO_TEXT_SENTINEL
        assert result.page_count == 1

    def test_extraction_is_deterministic(self, english_pdf: bytes) -> None:
        extractor = TextLayoutExtractor()
        assert extractor.extract(english_pdf) == extractor.extract(english_pdf)

    def test_letter_round_trip(self, english_pdf: bytes, english_letter: str) -> None:
        assert TextLayoutExtractor().extract(english_pdf).text == english_letter

    def test_invalid_bytes_raise(self) -> None:
        with pytest.raises(ExtractionError, match="PDF text extraction failed"):
            TextLayoutExtractor().extract(b"this is not a pdf")

    @pytest.mark.asyncio
    async def test_extract_async(self, make_pdf: Callable[..., bytes]) -> None:
        pdf_bytes = make_pdf("Petsa: Abril 2, 2025")
        result = await TextLayoutExtractor().extract_async(pdf_bytes)
        assert result.text == "Petsa: Abril 2, 2025"
