"""Tesseract OCR engine wrapper used to build invisible text layers.

Recognition is best-effort: any engine failure is logged and reported as
an empty string so that image conversion can still produce a purely visual
PDF.
"""

from typing import Protocol

import numpy as np
import pytesseract
from PIL import Image

from salaysay.utils.logger import get_logger

logger = get_logger(__name__)


class Recognizer(Protocol):
    """Capability that turns an image into raw recognized text."""

    def recognize(self, image: np.ndarray, lang: str | None = None) -> str: ...


class TesseractEngine:
    """Wrapper around Tesseract OCR for page text recognition.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def recognize(self, image: np.ndarray, lang: str | None = None) -> str:
        """Recognize the text in an image.

        Args:
            image: Input image as a numpy array.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            Recognized text, or an empty string if Tesseract fails.
        """
        lang = lang or self.default_lang
        try:
            text = pytesseract.image_to_string(
                Image.fromarray(image), lang=lang, config=f"--psm {self.psm}"
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            logger.warning("OCR failed, continuing without a text layer: %s", exc)
            return ""

        logger.info("OCR recognized %d characters (lang=%s)", len(text), lang)
        return text
