"""Bilingual field extraction for excuse letters.

Each field is recovered by an ordered chain of rules (see ``rules``),
evaluated first-match-wins from the most template-specific pattern to the
most general one. Fields that no rule recovers stay ``None``; nothing is
guessed here.
"""

import re
from dataclasses import dataclass
from datetime import date

from salaysay.extraction.dates import MONTH_NAMES, parse_date
from salaysay.extraction.rules import (
    AnchoredBodyRule,
    FieldRule,
    LineAfterRule,
    RegexRule,
    clean_name,
    collapse_lines,
    first_match,
    first_sentences,
)
from salaysay.models import Language
from salaysay.utils.logger import get_logger

logger = get_logger(__name__)

_I = re.IGNORECASE
_IS = re.IGNORECASE | re.DOTALL

_ID_FORMAT = r"([0-9X]{2}-[0-9X]{4,7}-[0-9X]{3})"
_NAME_WORDS = r"([A-Z][a-zA-Z.'\-]+(?:[ \t]+[A-Z][a-zA-Z.'\-]*){0,3})"
_TITLE = r"(?:Ma'am|Sir|Prof\.?|Professor|Dr\.?|Mrs\.?|Mr\.?|Ms\.?|Ma\.?)"
_COURSE_CODE = r"([A-Z]{2,4}\s*\d{3,4}[A-Z]?)\b"

_CLOSING_PHRASE = re.compile(
    r"^(?:sincerely|respectfully|regards|yours truly|thank you|"
    r"ang inyong kapatid sa panginoon)[,.]?$",
    _I,
)
_NAME_FILLER = re.compile(r"hope for your|thank you for|appreciate your", _I)


@dataclass
class ExtractedFields:
    """Fields recovered from one letter; absent fields stay ``None``."""

    student_id: str | None = None
    student_name: str | None = None
    course_code: str | None = None
    section: str | None = None
    addressee: str | None = None
    submission_date: date | None = None
    nature_of_excuse: str | None = None


def _sender_name(value: str) -> str | None:
    raw = collapse_lines(value)
    if raw.isdigit() or raw[:1].isdigit():
        return None
    name = clean_name(raw)
    if len(name) < 4 or _CLOSING_PHRASE.match(name) or _NAME_FILLER.search(name):
        return None
    return name


def _addressee(value: str) -> str | None:
    value = collapse_lines(value).rstrip(",.").strip()
    return value or None


def _student_id_token(value: str) -> str | None:
    return value if any(ch.isdigit() for ch in value) else None


def _label_value(value: str) -> str | None:
    value = value.strip()
    return value or None


_DATE_RULES: tuple[FieldRule, ...] = (
    RegexRule(
        "date_slash",
        re.compile(r"\b(\d{1,2}/\d{1,2}/(?:\d{4}|\d{2}))\b"),
        parse_date,
    ),
    RegexRule("date_iso", re.compile(r"\b(\d{4}-\d{2}-\d{2})\b"), parse_date),
    RegexRule(
        "date_month_name",
        re.compile(rf"\b((?:{MONTH_NAMES})\s+\d{{1,2}},?\s+\d{{4}})\b", _I),
        parse_date,
    ),
    RegexRule(
        "date_day_first",
        re.compile(rf"\b(\d{{1,2}}\s+(?:{MONTH_NAMES}),?\s+\d{{4}})\b", _I),
        parse_date,
    ),
)

_LABELED_DATE = RegexRule(
    "date_label",
    re.compile(
        r"\bDate[ \t]*(?:\(Month Day, Year\))?[ \t]*:?[ \t]*\n?[ \t]*([^\n]+)", _I
    ),
    parse_date,
)

_BARE_ID = RegexRule("bare_student_id", re.compile(r"\b(\d{2}-\d{4,7}-\d{3})\b"))
_DIGIT_RUN_ID = RegexRule("digit_run_student_id", re.compile(r"\b(\d{8,10})\b"))
_LABELED_STUDENT_NUMBER = RegexRule(
    "student_number_label",
    re.compile(r"Student\s+Number(?::|/|\()?(?:[^)\n]*\))?[\s:]*" + _ID_FORMAT, _I),
)

_LABELED_COURSE = (
    RegexRule(
        "course_subject_label",
        re.compile(
            r"(?i:Course/Subject)(?:\s*\((?i:if necessary)\))?\s*:?\s*" + _COURSE_CODE
        ),
    ),
    RegexRule(
        "course_label",
        re.compile(r"\b(?i:course|subject|class)[ \t]*:[ \t]*" + _COURSE_CODE),
    ),
)


class FieldExtractor:
    """Base strategy: subclasses supply the ordered rule chain per field.

    Args:
        max_sentences: Sentences kept in the nature-of-excuse summary.
        char_limit: Cut-off for summaries with no sentence boundary.
    """

    language: Language = Language.ENGLISH

    student_id_rules: tuple[FieldRule, ...] = ()
    student_name_rules: tuple[FieldRule, ...] = ()
    addressee_rules: tuple[FieldRule, ...] = ()
    date_rules: tuple[FieldRule, ...] = ()
    section_rules: tuple[FieldRule, ...] = ()
    course_rules: tuple[FieldRule, ...] = ()

    def __init__(self, max_sentences: int = 2, char_limit: int = 150) -> None:
        self.max_sentences = max_sentences
        self.char_limit = char_limit
        self.excuse_rules = self._excuse_rules()

    def extract(self, text: str) -> ExtractedFields:
        """Recover every field the rule chains can find in ``text``."""
        fields = ExtractedFields(
            student_id=first_match(self.student_id_rules, text, "student_id"),
            student_name=first_match(self.student_name_rules, text, "student_name"),
            course_code=first_match(self.course_rules, text, "course_code"),
            section=first_match(self.section_rules, text, "section"),
            addressee=first_match(self.addressee_rules, text, "addressee"),
            submission_date=first_match(self.date_rules, text, "submission_date"),
            nature_of_excuse=first_match(self.excuse_rules, text, "nature_of_excuse"),
        )
        found = [name for name, value in vars(fields).items() if value is not None]
        logger.info(
            "%s extraction recovered %d fields: %s",
            self.language,
            len(found),
            ", ".join(found) or "none",
        )
        return fields

    def _excuse_rules(self) -> tuple[FieldRule, ...]:
        return ()

    def _summary(self, value: str) -> str | None:
        """Summarize a body span to its first sentences."""
        content = collapse_lines(value)
        if len(content) <= 20:
            return None
        return first_sentences(content, self.max_sentences, self.char_limit)

    def _one_sentence(self, value: str) -> str | None:
        content = collapse_lines(value)
        if len(content) <= 5:
            return None
        return first_sentences(content, 1, self.char_limit)


class EnglishFieldExtractor(FieldExtractor):
    """Rule chains for the English letter template."""

    language = Language.ENGLISH

    student_id_rules = (
        _LABELED_STUDENT_NUMBER,
        _BARE_ID,
        RegexRule(
            "student_id_token",
            re.compile(r"Student\s+(?:ID|Number):\s*([a-zA-Z0-9-]+)", _I),
            _student_id_token,
        ),
        _DIGIT_RUN_ID,
    )

    student_name_rules = (
        RegexRule(
            "sincerely_close",
            re.compile(r"(?i:sincerely),\s+" + _NAME_WORDS),
            _sender_name,
        ),
        RegexRule(
            "complimentary_close",
            re.compile(
                r"(?i:respectfully|regards|yours truly|thank you),\s+" + _NAME_WORDS
            ),
            _sender_name,
        ),
        LineAfterRule(
            "line_after_close",
            re.compile(r"^(?:sincerely|respectfully),?$", _I),
            _sender_name,
        ),
        RegexRule(
            "name_label",
            re.compile(
                r"\b(?i:name)\s*(?:\((?i:first name middle initial surname)\))?\s*:?\s*"
                r"([A-Z][a-z]+(?:[ \t]+[A-Z][a-zA-Z.\-]+){1,3})"
            ),
            _sender_name,
        ),
        RegexRule(
            "self_identification",
            re.compile(
                r"(?:\b(?i:i am|my name is|this is)|\bI,)\s+"
                r"([A-Z][a-z]+(?:[ \t]+[A-Z][a-zA-Z.\-]+){1,3})"
            ),
            _sender_name,
        ),
        RegexRule(
            "submitted_by",
            re.compile(
                r"(?i:submitted by):\s*([A-Z][a-z]+(?:[ \t]+[A-Z][a-zA-Z.\-]+){1,3})"
            ),
            _sender_name,
        ),
    )

    addressee_rules = (
        RegexRule(
            "generic_salutation",
            re.compile(r"To whom it may concern|Dear Sir/Madam", _I),
            _addressee,
        ),
        RegexRule(
            "dear_title",
            re.compile(r"\bDear\s+(" + _TITLE + r"[^,\n]*)", _I),
            _addressee,
        ),
        RegexRule(
            "dear_until_comma",
            re.compile(r"\bDear\s+([^,\n]+?)(?:,|\s*\n\s*Position)", _I),
            _addressee,
        ),
        RegexRule(
            "attention_title_name",
            re.compile(
                r"(?:\bDear|\bTo|Attention:)\s+("
                + _TITLE
                + r"\s*[A-Z][a-z]+(?:[ \t]+[A-Z][a-zA-Z.\-]+)*)"
            ),
            _addressee,
        ),
        RegexRule(
            "attention_name",
            re.compile(
                r"(?:\bDear|\bTo|Attention:)\s+([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*)"
            ),
            _addressee,
        ),
    )

    date_rules = (_LABELED_DATE, *_DATE_RULES)

    section_rules = (
        RegexRule(
            "section_label",
            re.compile(
                r"\b(?i:section)(?:\s*\((?i:if necessary|if included)\))?"
                r"[ \t]*[:\n][ \t\n]*([A-Z0-9][A-Z0-9-]*)\b"
            ),
        ),
    )

    course_rules = _LABELED_COURSE

    def _excuse_rules(self) -> tuple[FieldRule, ...]:
        summary, one = self._summary, self._one_sentence
        return (
            RegexRule(
                "position_to_closing",
                re.compile(r"Position\s+(.*?)\s+(?:Sincerely|Respectfully),?", _IS),
                self._template_body,
            ),
            RegexRule(
                "apology",
                re.compile(
                    r"([^.!?\n]*\b(?:apologize|apology|sorry|regret)\s+for\s+"
                    r"[^.;:!?]{10,150}[.!?])",
                    _I,
                ),
                one,
            ),
            RegexRule(
                "stated_reason",
                re.compile(
                    r"([^.!?\n]*\b(?:excuse|reason|explanation)\s+(?:is|for)\s+"
                    r"[^.;:!?]{10,150}[.!?])",
                    _I,
                ),
                one,
            ),
            RegexRule(
                "regarding",
                re.compile(
                    r"([^.!?\n]*\b(?:regarding|concerning|about)\s+"
                    r"[^.;:!?]{10,150}[.!?])",
                    _I,
                ),
                one,
            ),
            RegexRule(
                "consideration_request",
                re.compile(
                    r"([^.!?\n]*\b(?:request|ask)\s+(?:your|for)\s+"
                    r"(?:consideration|understanding)\s+(?:for|regarding)\s+"
                    r"[^.;:!?]{10,150}[.!?])",
                    _I,
                ),
                one,
            ),
            RegexRule(
                "salutation_to_closing",
                re.compile(
                    r"Dear\s+[^,\n]*,?\s+(.*?)\s+(?:Sincerely|Respectfully)", _IS
                ),
                summary,
            ),
        )

    def _template_body(self, value: str) -> str | None:
        if re.match(r"Salaysay Content", value.strip(), _I):
            return None
        return self._summary(value)


_TAGALOG_ADDRESSEE_ANCHORS = (
    "Guro",
    "Kapatid na",
    "Sir",
    "Ma'am",
    "Professor",
    "Propesor",
)
_TAGALOG_CLOSING = re.compile(r"Ang inyong|Sender Name", _I)


class TagalogFieldExtractor(FieldExtractor):
    """Rule chains for the Tagalog letter template."""

    language = Language.TAGALOG

    student_id_rules = (
        _LABELED_STUDENT_NUMBER,
        RegexRule(
            "numero_label",
            re.compile(r"Numero ng Mag-aaral\s*[:(]?\s*" + _ID_FORMAT, _I),
        ),
        _BARE_ID,
        RegexRule("placeholder_student_id", re.compile(r"\((X{2}-X{5,6}-X{3})\)", _I)),
        _DIGIT_RUN_ID,
    )

    student_name_rules = (
        RegexRule(
            "kapatid_sa_panginoon_close",
            re.compile(r"Ang inyong Kapatid sa Panginoon,[ \t]*\n+[ \t]*([^\n]+)", _I),
            _sender_name,
        ),
        RegexRule(
            "sender_name_label",
            re.compile(r"Sender Name[ \t]*:?[ \t]*\n?[ \t]*([^\n]+)", _I),
            _sender_name,
        ),
        RegexRule(
            "pangalan_label",
            re.compile(r"Pangalan ng Mag-aaral[ \t:]*\n?[ \t]*([^\n]+)", _I),
            _sender_name,
        ),
        LineAfterRule(
            "line_after_close",
            re.compile(r"Ang inyong|Kapatid sa"),
            _sender_name,
        ),
    )

    addressee_rules = (
        RegexRule("kapatid_na", re.compile(r"Kapatid na\s+([^\n,]+)", _I), _addressee),
        RegexRule("mahal_na", re.compile(r"Mahal na\s+([^\n,]+)", _I), _addressee),
    )

    date_rules = (
        RegexRule(
            "petsa_label",
            re.compile(r"\bPetsa[ \t]*:?[ \t]*\n?[ \t]*([^\n]+)", _I),
            parse_date,
        ),
        _LABELED_DATE,
        *_DATE_RULES,
    )

    section_rules = (
        RegexRule(
            "section_label",
            re.compile(r"Section\s+\(If included\)[ \t]*:?[ \t]*\n?[ \t]*([^\n]+)", _I),
            _label_value,
        ),
        RegexRule(
            "seksyon_label",
            re.compile(r"\bSeksyon[ \t]*:?[ \t]*\n?[ \t]*([^\n]+)", _I),
            _label_value,
        ),
    )

    course_rules = (
        *_LABELED_COURSE,
        RegexRule(
            "kurso_label",
            re.compile(r"\bKurso[ \t]*:?[ \t]*\n?[ \t]*([^\n]+)", _I),
            _label_value,
        ),
    )

    def _excuse_rules(self) -> tuple[FieldRule, ...]:
        summary, one = self._summary, self._one_sentence
        return (
            AnchoredBodyRule(
                "addressee_to_closing",
                _TAGALOG_ADDRESSEE_ANCHORS,
                _TAGALOG_CLOSING,
                summary,
            ),
            RegexRule(
                "content_of_salaysay",
                re.compile(r"Content of Salaysay[ \t]*:?\s*([^.]*\.)", _I),
                summary,
            ),
            RegexRule(
                "paumanhin",
                re.compile(
                    r"([^.!?\n]*\b(?:paumanhin|patawad)\b[^.;:!?]{10,150}[.!?])", _I
                ),
                one,
            ),
            RegexRule(
                "dahilan",
                re.compile(r"([^.!?\n]*\bdahilan\b[^.;:!?]{10,150}[.!?])", _I),
                one,
            ),
            RegexRule(
                "kapatid_na_to_closing",
                re.compile(r"Kapatid na[^\n]*\n+(.*?)\n+Ang inyong", _IS),
                summary,
            ),
            RegexRule(
                "position_to_closing",
                re.compile(r"Position\s*\n+(.*?)\n+(?:Ang inyong|Sender)", _IS),
                self._body_without_addressee,
            ),
        )

    def _body_without_addressee(self, value: str) -> str | None:
        lines = [
            line
            for line in value.splitlines()
            if not any(anchor in line for anchor in _TAGALOG_ADDRESSEE_ANCHORS)
        ]
        return self._summary("\n".join(lines))


def extractor_for(
    language: Language, max_sentences: int = 2, char_limit: int = 150
) -> FieldExtractor:
    """Return the field extractor strategy for a detected language."""
    if language == Language.TAGALOG:
        return TagalogFieldExtractor(max_sentences, char_limit)
    return EnglishFieldExtractor(max_sentences, char_limit)
