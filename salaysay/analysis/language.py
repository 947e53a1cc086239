"""Template-language detection for excuse letters.

Counts distinct Tagalog marker phrases taken from the salutations and form
labels of the Tagalog letter template. This favors precision over recall:
free-form Tagalog prose without template markers reads as English.
"""

from salaysay.models import Language
from salaysay.utils.logger import get_logger

logger = get_logger(__name__)

TAGALOG_MARKERS: tuple[str, ...] = (
    "Kapatid na",
    "inyong",
    "Kapatid sa",
    "Pangino",
    "Petsa",
    "Seksyon",
    "Kurso",
    "Numero ng Mag-aaral",
)


class LanguageDetector:
    """Classifies extracted text as English or Tagalog.

    Args:
        min_markers: Number of distinct markers needed to call a text Tagalog.
        markers: Marker phrases, matched case-insensitively as substrings.
    """

    def __init__(
        self,
        min_markers: int = 2,
        markers: tuple[str, ...] = TAGALOG_MARKERS,
    ) -> None:
        self.min_markers = min_markers
        self.markers = markers

    def count_markers(self, text: str) -> int:
        lowered = text.lower()
        return sum(1 for marker in self.markers if marker.lower() in lowered)

    def detect(self, text: str) -> Language:
        """Return the template language of ``text``."""
        found = self.count_markers(text)
        language = Language.TAGALOG if found >= self.min_markers else Language.ENGLISH
        logger.info("Detected %s (%d Tagalog markers)", language, found)
        return language
