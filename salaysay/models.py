"""Domain records shared across the intake stages.

``DocumentInfo`` is the central record: the analyzer builds it once from
the fields recovered by the extractors, and nothing mutates it afterward.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

ALLOWED_MIME_TYPES: dict[str, str] = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
}

PDF_MIME_TYPE = "application/pdf"

DEFAULT_EXCUSE = "No nature of excuse could be extracted from this document."

PLACEHOLDER_STUDENT_ID = "XX-XXXXX-XXX"
PLACEHOLDER_SENDER = "Unknown Sender"
PLACEHOLDER_ADDRESSEE = "Unknown Addressee"
PLACEHOLDER_TEXT = "Error analyzing document"


class Language(StrEnum):
    """Languages the letter templates are written in."""

    ENGLISH = "English"
    TAGALOG = "Tagalog"


class ViolationType(StrEnum):
    """Closed set of categories a submission can be filed under."""

    OTHER = "Other"
    BEHAVIORAL_ISSUE = "Behavioral Issue"
    DRESS_CODE_VIOLATION = "Dress Code Violation"
    ACADEMIC_MISCONDUCT = "Academic Misconduct"
    PROPERTY_DAMAGE = "Property Damage"
    ATTENDANCE_ISSUE = "Attendance Issue"


_LEGACY_VIOLATION_TYPES: dict[str, ViolationType] = {
    "Academic": ViolationType.ACADEMIC_MISCONDUCT,
    "Attendance": ViolationType.ATTENDANCE_ISSUE,
}


def normalize_violation_type(value: str | None) -> ViolationType:
    """Map any category string onto the closed ``ViolationType`` set.

    Current category names map to themselves, the two legacy short names
    map to their renamed categories, and everything else is ``Other``.

    Args:
        value: Category string from any source, possibly ``None``.

    Returns:
        The matching violation type.
    """
    if not value:
        return ViolationType.OTHER
    try:
        return ViolationType(value)
    except ValueError:
        return _LEGACY_VIOLATION_TYPES.get(value, ViolationType.OTHER)


def format_date(value: date) -> str:
    """Render a date in the canonical ``Month D, YYYY`` form."""
    return f"{value:%B} {value.day}, {value.year}"


@dataclass(frozen=True)
class RawUpload:
    """An uploaded file as received from the caller."""

    filename: str
    content: bytes
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE


def is_supported_upload(upload: RawUpload) -> bool:
    """Check the MIME type and size preconditions for an upload."""
    return upload.mime_type in ALLOWED_MIME_TYPES and upload.size <= MAX_UPLOAD_BYTES


@dataclass(frozen=True)
class ExtractedText:
    """Text pulled out of a PDF, with the number of pages it came from."""

    text: str
    page_count: int


@dataclass(frozen=True)
class DocumentInfo:
    """Structured information recovered from one excuse letter."""

    extracted_text: str
    student_id: str | None = None
    student_name: str | None = None
    course_code: str | None = None
    section: str | None = None
    addressee: str | None = None
    submission_date: date = field(default_factory=date.today)
    nature_of_excuse: str | None = None
    violation_type: ViolationType = ViolationType.OTHER
    language: Language = Language.ENGLISH
    page_count: int = 0
    is_placeholder: bool = False


def placeholder_document(today: date | None = None) -> DocumentInfo:
    """Build the labeled default record used when analysis fails.

    Args:
        today: Processing date. Defaults to the current date.

    Returns:
        A ``DocumentInfo`` flagged with ``is_placeholder``.
    """
    return DocumentInfo(
        extracted_text=PLACEHOLDER_TEXT,
        student_id=PLACEHOLDER_STUDENT_ID,
        student_name=PLACEHOLDER_SENDER,
        addressee=PLACEHOLDER_ADDRESSEE,
        submission_date=today or date.today(),
        nature_of_excuse=DEFAULT_EXCUSE,
        violation_type=ViolationType.OTHER,
        language=Language.ENGLISH,
        is_placeholder=True,
    )
