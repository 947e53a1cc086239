"""Keyword-based violation classification.

The nature of excuse is classified first since it is the most focused
text; the full extracted text is only consulted when the excuse gives no
decision.
"""

import re

from salaysay.models import ViolationType
from salaysay.utils.logger import get_logger

logger = get_logger(__name__)

PROPERTY_DAMAGE_KEYWORDS: tuple[str, ...] = (
    "damage", "damaged", "broke", "breaking", "broken",
    "destroy", "destroyed", "vandal", "graffiti",
    "spill", "spilled", "stain", "property",
    "equipment", "chair", "table", "desk", "window", "computer",
    "laboratory", "accidentally breaking", "broke the", "damaged the",
    "cracked", "shattered", "tore", "ripped", "scratched",
)

ATTENDANCE_KEYWORDS: tuple[str, ...] = (
    "absent", "absence", "attendance", "missed class",
    "not present", "couldn't attend", "couldn't make it",
    "failed to attend", "unable to join", "skipped class", "skip class",
    "late", "tardy", "didn't show up", "no show",
    "not in class", "missing from class", "wasn't in class",
)

ACADEMIC_KEYWORDS: tuple[str, ...] = (
    "plagiarism", "plagiarize", "plagiarized", "copied",
    "cheat", "cheating", "cheated", "academic dishonesty",
    "academic misconduct", "test", "exam", "quiz",
    "academic integrity", "answers", "assignment", "homework",
    "paper", "thesis", "dissertation", "unauthorized help",
    "unauthorized source", "unauthorized material",
)

BEHAVIORAL_KEYWORDS: tuple[str, ...] = (
    "behavior", "behaviour", "misbehave", "misbehavior",
    "disrupt", "disruption", "inappropriate",
    "disrespect", "disrespectful", "conduct", "misconduct",
    "disturbing class", "talking", "noise", "outburst",
    "rude", "impolite", "disorderly", "unruly", "aggressive",
    "argument", "shouting", "disruptive", "phone use", "using phone",
)

DRESS_CODE_KEYWORDS: tuple[str, ...] = (
    "uniform", "dress code", "attire", "clothing",
    "dress policy", "improper dress", "inappropriate clothing",
    "not wearing", "shoes", "shirt", "pants", "id",
    "identification", "badge", "required attire",
    "inappropriate outfit", "dress requirement", "improper uniform",
)

_DAMAGE_VERBS = ("breaking", "broke", "damage", "destroy")
_DAMAGE_CONTEXT = ("accident", "broke", "damage")
_DAMAGED_OBJECTS = ("chair", "laboratory")


def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    # Short keywords must be whole words; longer ones only need a word start.
    parts = [
        re.escape(kw) + (r"\b" if len(kw) <= 3 else "")
        for kw in sorted(keywords, key=len, reverse=True)
    ]
    return re.compile(r"\b(?:" + "|".join(parts) + ")", re.IGNORECASE)


class ViolationClassifier:
    """Maps an excuse letter onto a ``ViolationType``."""

    def __init__(self) -> None:
        self._property = _keyword_pattern(PROPERTY_DAMAGE_KEYWORDS)
        self._attendance = _keyword_pattern(ATTENDANCE_KEYWORDS)
        self._academic = _keyword_pattern(ACADEMIC_KEYWORDS)
        self._behavioral = _keyword_pattern(BEHAVIORAL_KEYWORDS)
        self._dress_code = _keyword_pattern(DRESS_CODE_KEYWORDS)
        self._damage_verb = _keyword_pattern(_DAMAGE_VERBS)
        self._damage_context = _keyword_pattern(_DAMAGE_CONTEXT)
        self._damaged_object = _keyword_pattern(_DAMAGED_OBJECTS)

    def classify(
        self, nature_of_excuse: str | None, extracted_text: str
    ) -> ViolationType:
        """Classify a letter from its excuse summary and full text.

        Args:
            nature_of_excuse: English excuse summary, may be empty.
            extracted_text: Full text of the letter.

        Returns:
            The decided violation type, ``Other`` when neither pass decides.
        """
        if nature_of_excuse and nature_of_excuse.strip():
            decided = self.classify_text(nature_of_excuse)
            if decided is not None:
                logger.info("Classified as %s from nature of excuse", decided)
                return decided

        decided = self.classify_text(extracted_text or "")
        if decided is not None:
            logger.info("Classified as %s from full text", decided)
            return decided

        logger.info("No violation keywords found, classified as Other")
        return ViolationType.OTHER

    def classify_text(self, text: str) -> ViolationType | None:
        """Run one classification pass; ``None`` means no decision."""
        has_property_keyword = bool(self._property.search(text))

        if has_property_keyword and self._is_property_damage(text):
            return ViolationType.PROPERTY_DAMAGE
        if self._attendance.search(text):
            return ViolationType.ATTENDANCE_ISSUE
        if self._academic.search(text):
            return ViolationType.ACADEMIC_MISCONDUCT
        if self._behavioral.search(text) and not has_property_keyword:
            return ViolationType.BEHAVIORAL_ISSUE
        if self._dress_code.search(text):
            return ViolationType.DRESS_CODE_VIOLATION
        return None

    def _is_property_damage(self, text: str) -> bool:
        if self._damage_verb.search(text):
            return True
        return bool(
            self._damaged_object.search(text) and self._damage_context.search(text)
        )
