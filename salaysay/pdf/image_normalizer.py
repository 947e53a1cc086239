"""Image to searchable-PDF conversion.

Places an uploaded photo or scan on a single PDF page and lays the OCR text
underneath it as an invisible text layer, so the page renders exactly like
the image but can be searched and text-extracted.
"""

import asyncio
import io
import math
from dataclasses import dataclass
from pathlib import PurePath

import fitz
import numpy as np
from PIL import Image, UnidentifiedImageError

from salaysay.exceptions import ConversionError
from salaysay.ocr.tesseract_engine import Recognizer
from salaysay.utils.config import ConversionConfig
from salaysay.utils.logger import get_logger

logger = get_logger(__name__)

_LAYER_FONT = "helv"
# Render mode 3 draws glyphs with neither fill nor stroke.
_INVISIBLE = 3


@dataclass(frozen=True)
class DecodedImage:
    """An uploaded image with its decoded pixel data."""

    data: bytes
    width: int
    height: int
    pixels: np.ndarray


@dataclass(frozen=True)
class Placement:
    """Where the image lands on the PDF page, in points."""

    x: float
    y: float
    width: float
    height: float

    @property
    def rect(self) -> fitz.Rect:
        return fitz.Rect(self.x, self.y, self.x + self.width, self.y + self.height)


def fit_image(
    image_width: int,
    image_height: int,
    page_width: float,
    page_height: float,
    margin: float,
) -> Placement:
    """Scale an image to fit inside the page margins and center it.

    Args:
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        page_width: Page width in points.
        page_height: Page height in points.
        margin: Margin kept free on every side, in points.

    Returns:
        The image's placement on the page.
    """
    scale = min(
        (page_width - 2 * margin) / image_width,
        (page_height - 2 * margin) / image_height,
    )
    width = image_width * scale
    height = image_height * scale
    return Placement(
        x=(page_width - width) / 2,
        y=(page_height - height) / 2,
        width=width,
        height=height,
    )


def wrap_words(text: str, chars_per_line: int) -> list[str]:
    """Greedily wrap whitespace-separated words into lines.

    A line is closed before a word that would push it past
    ``chars_per_line`` characters. Words longer than a whole line get a
    line of their own.
    """
    lines: list[str] = []
    current: list[str] = []
    length = 0

    for word in text.split():
        if current and length + len(word) > chars_per_line:
            lines.append(" ".join(current))
            current, length = [], 0
        current.append(word)
        length += len(word) + 1

    if current:
        lines.append(" ".join(current))
    return lines


def layout_lines(
    lines: list[str],
    placement: Placement,
    font_size: float,
    line_height: float,
) -> list[tuple[fitz.Point, str]]:
    """Assign baselines to wrapped lines inside the image's bounding box.

    Lines whose baseline would fall past the bottom edge are dropped.
    """
    bottom = placement.y + placement.height
    y = placement.y + font_size
    placed: list[tuple[fitz.Point, str]] = []

    for line in lines:
        if y > bottom:
            break
        placed.append((fitz.Point(placement.x, y), line))
        y += line_height
    return placed


class ImageNormalizer:
    """Converts JPEG/PNG uploads into single-page searchable PDFs.

    Args:
        recognizer: OCR capability producing the text layer.
        config: Page geometry and text-layer settings.
        ocr_lang: Language hint passed to the recognizer.
    """

    def __init__(
        self,
        recognizer: Recognizer,
        config: ConversionConfig | None = None,
        ocr_lang: str = "eng",
    ) -> None:
        self.recognizer = recognizer
        self.config = config or ConversionConfig()
        self.ocr_lang = ocr_lang

    def decode(self, image_bytes: bytes) -> DecodedImage:
        """Decode an image to get its dimensions and pixels.

        Raises:
            ConversionError: If the bytes are not a readable image.
        """
        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                img.load()
                pixels = np.array(img.convert("RGB"))
                width, height = img.size
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise ConversionError(f"Image decode failed: {exc}") from exc

        logger.debug("Decoded %dx%d image", width, height)
        return DecodedImage(data=image_bytes, width=width, height=height, pixels=pixels)

    async def recognize(self, image: DecodedImage) -> str:
        """Run OCR on a decoded image off the event loop.

        Returns:
            Recognized text; empty when the recognizer found nothing.
        """
        text = await asyncio.to_thread(
            self.recognizer.recognize, image.pixels, self.ocr_lang
        )
        if not text.strip():
            logger.warning("OCR returned no text, PDF will not be searchable")
        return text

    def render(self, image: DecodedImage, ocr_text: str) -> bytes:
        """Build the PDF page: invisible text layer first, image on top.

        Args:
            image: Decoded source image.
            ocr_text: Recognized text for the invisible layer, may be empty.

        Returns:
            The PDF document as bytes.

        Raises:
            ConversionError: If the image cannot be embedded in the page.
        """
        cfg = self.config
        page_width, page_height = fitz.paper_size(cfg.page_format)
        placement = fit_image(
            image.width, image.height, page_width, page_height, cfg.margin
        )

        doc = fitz.open()
        try:
            page = doc.new_page(width=page_width, height=page_height)
            placed = self._text_layer(page, ocr_text, placement)
            page.insert_image(placement.rect, stream=image.data)
            pdf_bytes = doc.tobytes(garbage=3, deflate=True)
        except (RuntimeError, ValueError) as exc:
            raise ConversionError(f"PDF rendering failed: {exc}") from exc
        finally:
            doc.close()

        logger.info(
            "Rendered %dx%d image to PDF with %d invisible text lines",
            image.width,
            image.height,
            placed,
        )
        return pdf_bytes

    async def convert(self, image_bytes: bytes) -> bytes:
        """Decode, recognize and render an image into a searchable PDF."""
        image = await asyncio.to_thread(self.decode, image_bytes)
        text = await self.recognize(image)
        return await asyncio.to_thread(self.render, image, text)

    def _text_layer(self, page: fitz.Page, text: str, placement: Placement) -> int:
        if not text.strip():
            return 0

        font_size = self.config.font_size
        avg_char_width = fitz.get_text_length(
            "a", fontname=_LAYER_FONT, fontsize=font_size
        )
        chars_per_line = max(1, math.floor(placement.width / avg_char_width))
        lines = wrap_words(text, chars_per_line)
        placed = layout_lines(
            lines,
            placement,
            font_size,
            font_size * self.config.line_height_factor,
        )

        for point, line in placed:
            page.insert_text(
                point,
                line,
                fontname=_LAYER_FONT,
                fontsize=font_size,
                render_mode=_INVISIBLE,
                fill_opacity=0,
            )
        return len(placed)


def pdf_filename(filename: str) -> str:
    """Name of the converted PDF for an uploaded image file."""
    return PurePath(filename).stem + ".pdf"
