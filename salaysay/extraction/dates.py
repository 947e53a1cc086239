"""Bilingual date parsing for letter dates.

Candidates are normalized (Tagalog month names replaced with English ones,
whitespace collapsed, trailing punctuation dropped) and then tried against
a fixed list of formats.
"""

import re
from datetime import date, datetime

from salaysay.utils.logger import get_logger

logger = get_logger(__name__)

TAGALOG_MONTHS: dict[str, str] = {
    "enero": "January",
    "pebrero": "February",
    "marso": "March",
    "abril": "April",
    "mayo": "May",
    "hunyo": "June",
    "hulyo": "July",
    "agosto": "August",
    "setyembre": "September",
    "oktubre": "October",
    "nobyembre": "November",
    "disyembre": "December",
}

ENGLISH_MONTHS: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MONTH_NAMES = "|".join(
    sorted(
        [*ENGLISH_MONTHS, *(m.capitalize() for m in TAGALOG_MONTHS)],
        key=len,
        reverse=True,
    )
)

DATE_FORMATS: list[str] = [
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %B, %Y",
]

_TAGALOG_MONTH_WORD = re.compile(
    r"\b(" + "|".join(TAGALOG_MONTHS) + r")\b", re.IGNORECASE
)


def normalize_date_text(value: str) -> str:
    """Prepare a date candidate for ``strptime``."""
    value = _TAGALOG_MONTH_WORD.sub(lambda m: TAGALOG_MONTHS[m.group(1).lower()], value)
    value = re.sub(r"\s+", " ", value)
    value = re.sub(r"\s*,\s*", ", ", value)
    return value.strip().rstrip(".;:")


def parse_date(value: str) -> date | None:
    """Parse a date candidate in any supported format.

    Args:
        value: Raw candidate text, English or Tagalog.

    Returns:
        The parsed date, or ``None`` if no format matches.
    """
    candidate = normalize_date_text(value)
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    logger.debug("Discarding unparseable date candidate %r", value)
    return None
