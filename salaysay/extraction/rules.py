"""Ordered first-match-wins rule chains for field recovery.

Each field is described by a tuple of rules ordered from the most
template-specific to the most general. A rule produces candidates from the
text and passes each through its transform; a transform returning ``None``
rejects the candidate. The first accepted value ends the chain.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from salaysay.utils.logger import get_logger

logger = get_logger(__name__)

Transform = Callable[[str], Any]

_SENTENCE_END = re.compile(r"[.!?]+[\"']?(?:\s|$)")
_LINE_BREAKS = re.compile(r"[\r\n]+")
_MULTI_SPACE = re.compile(r"\s{2,}")


def _strip(value: str) -> str | None:
    value = value.strip()
    return value or None


class FieldRule(Protocol):
    """A single step of a field's recovery chain."""

    name: str

    def apply(self, text: str) -> Any | None: ...


@dataclass(frozen=True)
class RegexRule:
    """Match a regex and transform the captured group.

    Every match in the text is tried in order, so a candidate rejected by
    the transform does not hide a later acceptable one.
    """

    name: str
    pattern: re.Pattern[str]
    transform: Transform = _strip
    group: int = 1

    def apply(self, text: str) -> Any | None:
        for match in self.pattern.finditer(text):
            raw = match.group(self.group) if self.pattern.groups else match.group(0)
            if raw is None:
                continue
            value = self.transform(raw)
            if value is not None:
                return value
        return None


@dataclass(frozen=True)
class LineAfterRule:
    """Take the first non-empty line following a line that matches ``marker``."""

    name: str
    marker: re.Pattern[str]
    transform: Transform = _strip

    def apply(self, text: str) -> Any | None:
        lines = [line.strip() for line in _LINE_BREAKS.split(text) if line.strip()]
        for index, line in enumerate(lines[:-1]):
            if self.marker.search(line):
                value = self.transform(lines[index + 1])
                if value is not None:
                    return value
        return None


@dataclass(frozen=True)
class AnchoredBodyRule:
    """Take the letter body that follows the earliest structural anchor.

    The body starts at the first line after the anchor line that is longer
    than ``min_line_length`` and mentions no anchor, and stops before the
    first line matching ``closing`` (or at the end of the text).
    """

    name: str
    anchors: tuple[str, ...]
    closing: re.Pattern[str]
    transform: Transform = _strip
    min_line_length: int = 20

    def apply(self, text: str) -> Any | None:
        positions = [pos for pos in (text.find(a) for a in self.anchors) if pos != -1]
        if not positions:
            return None

        body: list[str] = []
        for line in _LINE_BREAKS.split(text[min(positions) :])[1:]:
            stripped = line.strip()
            if self.closing.search(stripped):
                break
            if body:
                body.append(stripped)
            elif len(stripped) > self.min_line_length and not any(
                a in stripped for a in self.anchors
            ):
                body.append(stripped)

        if not body:
            return None
        return self.transform(" ".join(body))


def first_match(
    rules: Sequence[FieldRule], text: str, field_name: str = ""
) -> Any | None:
    """Evaluate rules in order and return the first accepted value."""
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            logger.debug("Field %s recovered by rule %s", field_name, rule.name)
            return value
    return None


def collapse_lines(text: str) -> str:
    """Join wrapped lines into one space-separated string."""
    return _MULTI_SPACE.sub(" ", _LINE_BREAKS.sub(" ", text)).strip()


def first_sentences(text: str, max_sentences: int = 2, char_limit: int = 150) -> str:
    """Return the first ``max_sentences`` sentences of ``text``.

    A sentence ends at ``.``, ``!`` or ``?`` followed by an optional quote
    and whitespace or the end of the text. With no sentence boundary at
    all, long text is cut to ``char_limit`` characters with an ellipsis.
    """
    if not text:
        return ""

    endings = list(_SENTENCE_END.finditer(text))
    if not endings:
        if len(text) > char_limit:
            return text[: char_limit - 3] + "..."
        return text

    end = endings[min(max_sentences, len(endings)) - 1].end()
    return text[:end].strip()


def clean_name(name: str) -> str:
    """Remove digits and collapse whitespace in a sender name."""
    return _MULTI_SPACE.sub(" ", re.sub(r"\d+", "", name)).strip()
