"""Shared test fixtures for the salaysay intake test suite."""

import io
from collections.abc import Callable
from datetime import date
from pathlib import Path

import fitz
import numpy as np
import pytest
from PIL import Image

from salaysay.records import SubmissionRecord

ENGLISH_LETTER = """Date: April 2, 2025
Dear Sir Gaspar,
Position
I apologize for breaking the chair in the laboratory by accident.
It happened during our experiment on Monday. I will replace it soon.
Sincerely,
Juan Dela Cruz
Student Number: 21-12345-678
Course/Subject: IT 101
Section: BSIT-3A"""

TAGALOG_LETTER = """Petsa: Abril 2, 2025
Kapatid na Gng. Santos,
Ako po ay humihingi ng paumanhin sa hindi ko pagpasok kahapon.
Ako ay nagkasakit ng lagnat at hindi nakabangon. Babawi po ako.
Ang inyong Kapatid sa Panginoon,
Maria Clara Reyes
Numero ng Mag-aaral: 22-54321-987
Kurso: BSED
Seksyon: 2B"""


class FakeRecognizer:
    """Recognizer returning canned text and remembering its calls."""

    def __init__(
        self, text: str = "", on_call: Callable[[], None] | None = None
    ) -> None:
        self.text = text
        self.on_call = on_call
        self.calls: list[tuple[tuple[int, ...], str | None]] = []

    def recognize(self, image: np.ndarray, lang: str | None = None) -> str:
        self.calls.append((image.shape, lang))
        if self.on_call is not None:
            self.on_call()
        return self.text


class FakeSink:
    """Submission sink that keeps saved submissions in memory."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.saved: list[tuple[str, bytes, SubmissionRecord]] = []

    async def save(
        self, filename: str, pdf_bytes: bytes, record: SubmissionRecord
    ) -> None:
        if self.error is not None:
            raise self.error
        self.saved.append((filename, pdf_bytes, record))


def build_text_pdf(
    *pages: str, fontsize: float = 11, line_spacing: float = 16
) -> bytes:
    """Build a PDF with one text span per line of each page."""
    doc = fitz.open()
    for page_text in pages:
        page = doc.new_page()
        y = 72.0
        for line in page_text.splitlines():
            if line.strip():
                page.insert_text((72, y), line, fontsize=fontsize)
            y += line_spacing
    data = doc.tobytes()
    doc.close()
    return data


def build_png(width: int = 400, height: int = 300) -> bytes:
    """Encode a synthetic white page with a dark block as PNG."""
    pixels = np.full((height, width, 3), 255, dtype=np.uint8)
    pixels[height // 4 : height // 2, width // 8 : width // 2] = (30, 30, 30)
    buffer = io.BytesIO()
    Image.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def english_letter() -> str:
    return ENGLISH_LETTER


@pytest.fixture
def tagalog_letter() -> str:
    return TAGALOG_LETTER


@pytest.fixture
def english_pdf() -> bytes:
    return build_text_pdf(ENGLISH_LETTER)


@pytest.fixture
def tagalog_pdf() -> bytes:
    return build_text_pdf(TAGALOG_LETTER)


@pytest.fixture
def png_bytes() -> bytes:
    return build_png()


@pytest.fixture
def fixed_today() -> date:
    return date(2025, 1, 15)


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    return build_text_pdf


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    return build_png


@pytest.fixture
def make_recognizer() -> type[FakeRecognizer]:
    return FakeRecognizer


@pytest.fixture
def make_sink() -> type[FakeSink]:
    return FakeSink
