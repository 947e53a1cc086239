"""Shape of a persisted submission and the sink that stores it."""

import json
from dataclasses import dataclass
from typing import Any, Protocol

from salaysay.models import (
    DEFAULT_EXCUSE,
    DocumentInfo,
    ViolationType,
    format_date,
    normalize_violation_type,
)

METADATA_KEYS: tuple[str, ...] = (
    "student_number",
    "sender_name",
    "incident_date",
    "excuse_description",
    "addressee",
)


@dataclass(frozen=True)
class SubmissionRecord:
    """Metadata and category stored alongside a submitted PDF."""

    metadata: dict[str, str | None]
    violation_type: ViolationType


class SubmissionSink(Protocol):
    """Stores a finished submission (storage and database are external)."""

    async def save(
        self, filename: str, pdf_bytes: bytes, record: SubmissionRecord
    ) -> None: ...


def to_submission_record(info: DocumentInfo) -> SubmissionRecord:
    """Project a ``DocumentInfo`` onto the persisted record shape.

    The category is normalized here, so legacy or foreign category strings
    never reach storage.
    """
    metadata = {
        "student_number": info.student_id,
        "sender_name": info.student_name,
        "incident_date": format_date(info.submission_date),
        "excuse_description": info.nature_of_excuse or DEFAULT_EXCUSE,
        "addressee": info.addressee,
    }
    return SubmissionRecord(
        metadata=metadata,
        violation_type=normalize_violation_type(info.violation_type),
    )


def metadata_contains_keyword(
    metadata: dict[str, Any] | str | None, keyword: str
) -> bool:
    """Case-insensitive keyword search over the stored metadata fields.

    Args:
        metadata: Metadata as a mapping or as its JSON encoding.
        keyword: Text to look for.

    Returns:
        True if any metadata field contains ``keyword``. Blank keywords,
        missing metadata and undecodable JSON never match.
    """
    if not metadata or not keyword.strip():
        return False

    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except json.JSONDecodeError:
            return False
        if not isinstance(metadata, dict):
            return False

    needle = keyword.lower()
    return any(
        needle in str(metadata[key]).lower()
        for key in METADATA_KEYS
        if metadata.get(key)
    )
