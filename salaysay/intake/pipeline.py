"""Per-file intake pipeline.

Drives one upload from its raw bytes to a stored submission:

    pending -> converting -> ocr-processing -> analyzing -> uploading -> completed

PDF uploads skip the two conversion states. A failed analysis is replaced
by a placeholder document that is still stored, so the file is never lost.
Conversion and storage failures end the pipeline in ``error`` with the
placeholder and a notice for the user instead of propagating.
"""

import asyncio
from collections.abc import Callable
from datetime import date

from salaysay.exceptions import InvalidTransitionError
from salaysay.intake.analyzer import DocumentAnalyzer
from salaysay.intake.state import (
    DISCARDABLE_STATES,
    PipelineEvent,
    UploadState,
    transition,
)
from salaysay.models import DocumentInfo, RawUpload, placeholder_document
from salaysay.pdf.image_normalizer import ImageNormalizer, pdf_filename
from salaysay.records import SubmissionSink, to_submission_record
from salaysay.utils.logger import get_logger

logger = get_logger(__name__)


class IntakePipeline:
    """State machine for a single uploaded file.

    Args:
        upload: The uploaded file.
        normalizer: Converts image uploads into searchable PDFs.
        analyzer: Extracts document information from a PDF.
        sink: Stores the finished submission.
        clock: Source of the processing date.
    """

    def __init__(
        self,
        upload: RawUpload,
        normalizer: ImageNormalizer,
        analyzer: DocumentAnalyzer,
        sink: SubmissionSink,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.upload = upload
        self.normalizer = normalizer
        self.analyzer = analyzer
        self.sink = sink
        self.clock = clock

        self.state = UploadState.PENDING
        self.history: list[UploadState] = [UploadState.PENDING]
        self.document: DocumentInfo | None = None
        self.pdf_bytes: bytes | None = None
        self.pdf_name: str | None = None
        self.notice: str | None = None
        self.discarded = False

    def discard(self) -> None:
        """Drop the pipeline before it starts analyzing.

        Raises:
            InvalidTransitionError: If analysis has already started.
        """
        if self.state not in DISCARDABLE_STATES:
            raise InvalidTransitionError(
                f"Cannot discard {self.upload.filename} in state {self.state.value!r}"
            )
        self.discarded = True
        logger.info("Discarded %s in state %s", self.upload.filename, self.state)

    async def run(self) -> DocumentInfo | None:
        """Process the upload through every stage.

        Returns:
            The analyzed document, the placeholder document if a stage
            failed, or ``None`` if the pipeline was discarded.

        Raises:
            InvalidTransitionError: If the pipeline has already run.
        """
        if self.discarded:
            return None
        if self.state != UploadState.PENDING:
            raise InvalidTransitionError(
                f"Pipeline for {self.upload.filename} already ran ({self.state.value})"
            )

        try:
            if not await self._normalize():
                return None
        except Exception as exc:
            if self.discarded:
                logger.info("Ignoring failure of discarded %s", self.upload.filename)
                return None
            self._fail(exc)
            return self.document

        self._advance(PipelineEvent.ANALYZE)
        try:
            self.document = await self.analyzer.analyze(self.pdf_bytes)
        except Exception as exc:
            logger.error(
                "Analyzing %s failed, storing default values: %s",
                self.upload.filename,
                exc,
                exc_info=True,
            )
            self._use_placeholder()

        try:
            self._advance(PipelineEvent.UPLOAD)
            record = to_submission_record(self.document)
            await self.sink.save(self.pdf_name, self.pdf_bytes, record)
            self._advance(PipelineEvent.COMPLETE)
        except Exception as exc:
            self._fail(exc)

        return self.document

    async def _normalize(self) -> bool:
        """Produce the PDF bytes; False if discarded meanwhile."""
        upload = self.upload
        if upload.is_pdf:
            self.pdf_bytes = upload.content
            self.pdf_name = upload.filename
            return True

        self._advance(PipelineEvent.CONVERT)
        decoded = await asyncio.to_thread(self.normalizer.decode, upload.content)
        if self.discarded:
            return False

        self._advance(PipelineEvent.RECOGNIZE)
        text = await self.normalizer.recognize(decoded)
        if self.discarded:
            return False

        pdf_bytes = await asyncio.to_thread(self.normalizer.render, decoded, text)
        if self.discarded:
            return False

        self.pdf_bytes = pdf_bytes
        self.pdf_name = pdf_filename(upload.filename)
        return True

    def _advance(self, event: PipelineEvent) -> None:
        self.state = transition(self.state, event)
        self.history.append(self.state)
        logger.info("%s -> %s", self.upload.filename, self.state)

    def _fail(self, exc: Exception) -> None:
        logger.error(
            "Processing %s failed: %s", self.upload.filename, exc, exc_info=True
        )
        self.state = transition(self.state, PipelineEvent.FAIL)
        self.history.append(self.state)
        self._use_placeholder()

    def _use_placeholder(self) -> None:
        self.document = placeholder_document(self.clock())
        self.notice = (
            f"Error processing {self.upload.filename}. "
            "Default values were used for the document information."
        )
