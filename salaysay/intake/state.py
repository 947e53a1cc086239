"""Per-file intake states and the transition table between them."""

from enum import StrEnum

from salaysay.exceptions import InvalidTransitionError


class UploadState(StrEnum):
    PENDING = "pending"
    CONVERTING = "converting"
    OCR_PROCESSING = "ocr-processing"
    ANALYZING = "analyzing"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


class PipelineEvent(StrEnum):
    CONVERT = "convert"
    RECOGNIZE = "recognize"
    ANALYZE = "analyze"
    UPLOAD = "upload"
    COMPLETE = "complete"
    FAIL = "fail"


TERMINAL_STATES = frozenset({UploadState.COMPLETED, UploadState.ERROR})

# A pipeline can be discarded until it starts analyzing; conversion work
# still in flight is ignored when it finishes.
DISCARDABLE_STATES = frozenset(
    {UploadState.PENDING, UploadState.CONVERTING, UploadState.OCR_PROCESSING}
)

_TRANSITIONS: dict[tuple[UploadState, PipelineEvent], UploadState] = {
    (UploadState.PENDING, PipelineEvent.CONVERT): UploadState.CONVERTING,
    (UploadState.CONVERTING, PipelineEvent.RECOGNIZE): UploadState.OCR_PROCESSING,
    (UploadState.OCR_PROCESSING, PipelineEvent.ANALYZE): UploadState.ANALYZING,
    (UploadState.PENDING, PipelineEvent.ANALYZE): UploadState.ANALYZING,
    (UploadState.ANALYZING, PipelineEvent.UPLOAD): UploadState.UPLOADING,
    (UploadState.UPLOADING, PipelineEvent.COMPLETE): UploadState.COMPLETED,
}


def transition(state: UploadState, event: PipelineEvent) -> UploadState:
    """Return the state reached from ``state`` on ``event``.

    Raises:
        InvalidTransitionError: If ``event`` is not allowed in ``state``.
    """
    if event == PipelineEvent.FAIL and state not in TERMINAL_STATES:
        return UploadState.ERROR

    try:
        return _TRANSITIONS[(state, event)]
    except KeyError as exc:
        raise InvalidTransitionError(
            f"Cannot apply {event.name} in state {state.value!r}"
        ) from exc
