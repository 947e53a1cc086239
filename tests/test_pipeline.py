"""Tests for the per-file intake pipeline."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from salaysay.exceptions import (
    ConversionError,
    ExtractionError,
    InvalidTransitionError,
)
from salaysay.intake.analyzer import DocumentAnalyzer
from salaysay.intake.pipeline import IntakePipeline
from salaysay.intake.state import UploadState
from salaysay.models import DEFAULT_EXCUSE, RawUpload, ViolationType
from salaysay.pdf.image_normalizer import ImageNormalizer

S = UploadState

OCR_LETTER = (
    "Dear Ma'am, I was absent on Monday because I had a fever. Sincerely, Ana Lim"
)


def _pdf(content: bytes, name: str = "letter.pdf") -> RawUpload:
    return RawUpload(name, content, "application/pdf")


def _png(content: bytes, name: str = "scan.png") -> RawUpload:
    return RawUpload(name, content, "image/png")


def _pipeline(upload, sink, recognizer, today=date(2025, 1, 15), analyzer=None):
    return IntakePipeline(
        upload,
        normalizer=ImageNormalizer(recognizer),
        analyzer=analyzer or DocumentAnalyzer(clock=lambda: today),
        sink=sink,
        clock=lambda: today,
    )


@pytest.fixture
def recognizer(make_recognizer):
    return make_recognizer(OCR_LETTER)


class TestIntakePipeline:
    """Happy paths through the state machine."""

    @pytest.mark.asyncio
    async def test_pdf_upload_skips_conversion(
        self, english_pdf, sink, recognizer
    ) -> None:
        pipeline = _pipeline(_pdf(english_pdf), sink, recognizer)

        document = await pipeline.run()

        assert pipeline.state == S.COMPLETED
        assert pipeline.history == [S.PENDING, S.ANALYZING, S.UPLOADING, S.COMPLETED]
        assert document is pipeline.document
        assert document.student_id == "21-12345-678"
        assert recognizer.calls == []

        filename, pdf_bytes, record = sink.saved[0]
        assert filename == "letter.pdf"
        assert pdf_bytes == english_pdf
        assert record.metadata["student_number"] == "21-12345-678"
        assert record.metadata["incident_date"] == "April 2, 2025"
        assert record.violation_type == ViolationType.PROPERTY_DAMAGE

    @pytest.mark.asyncio
    async def test_image_upload_runs_every_stage(
        self, png_bytes, sink, recognizer
    ) -> None:
        upload = RawUpload("scan.jpg", png_bytes, "image/jpeg")
        pipeline = _pipeline(upload, sink, recognizer)

        document = await pipeline.run()

        assert pipeline.history == [
            S.PENDING,
            S.CONVERTING,
            S.OCR_PROCESSING,
            S.ANALYZING,
            S.UPLOADING,
            S.COMPLETED,
        ]
        assert pipeline.pdf_name == "scan.pdf"
        assert pipeline.pdf_bytes.startswith(b"%PDF")
        assert document.violation_type == ViolationType.ATTENDANCE_ISSUE
        assert sink.saved[0][0] == "scan.pdf"

    @pytest.mark.asyncio
    async def test_empty_ocr_still_completes(
        self, png_bytes, sink, make_recognizer
    ) -> None:
        pipeline = _pipeline(_png(png_bytes), sink, make_recognizer(""))

        document = await pipeline.run()

        assert pipeline.state == S.COMPLETED
        assert document.violation_type == ViolationType.OTHER
        assert sink.saved[0][2].metadata["excuse_description"] == DEFAULT_EXCUSE


class TestPipelineFailures:
    """Failed stages fall back to the placeholder document."""

    @pytest.mark.asyncio
    async def test_conversion_failure(self, sink, recognizer) -> None:
        upload = _png(b"not an image", name="broken.png")
        pipeline = _pipeline(upload, sink, recognizer, today=date(2025, 3, 1))

        document = await pipeline.run()

        assert pipeline.state == S.ERROR
        assert pipeline.history == [S.PENDING, S.CONVERTING, S.ERROR]
        assert document.is_placeholder
        assert document.submission_date == date(2025, 3, 1)
        assert "broken.png" in pipeline.notice
        assert sink.saved == []

    @pytest.mark.asyncio
    async def test_analysis_failure_stores_placeholder(self, sink, recognizer) -> None:
        analyzer = AsyncMock()
        analyzer.analyze.side_effect = ExtractionError("bad pdf")
        pipeline = _pipeline(_pdf(b"%PDF"), sink, recognizer, analyzer=analyzer)

        document = await pipeline.run()

        assert pipeline.history == [
            S.PENDING,
            S.ANALYZING,
            S.UPLOADING,
            S.COMPLETED,
        ]
        assert document.is_placeholder
        assert "letter.pdf" in pipeline.notice

        [(filename, pdf_bytes, record)] = sink.saved
        assert filename == "letter.pdf"
        assert pdf_bytes == b"%PDF"
        assert record.metadata["student_number"] == "XX-XXXXX-XXX"
        assert record.metadata["excuse_description"] == DEFAULT_EXCUSE
        assert record.violation_type == ViolationType.OTHER

    @pytest.mark.asyncio
    async def test_analysis_and_sink_failure(self, make_sink, recognizer) -> None:
        sink = make_sink(error=RuntimeError("storage unavailable"))
        analyzer = AsyncMock()
        analyzer.analyze.side_effect = ExtractionError("bad pdf")
        pipeline = _pipeline(_pdf(b"%PDF"), sink, recognizer, analyzer=analyzer)

        document = await pipeline.run()

        assert pipeline.history[-2:] == [S.UPLOADING, S.ERROR]
        assert document.is_placeholder

    @pytest.mark.asyncio
    async def test_sink_failure(self, english_pdf, make_sink, recognizer) -> None:
        sink = make_sink(error=RuntimeError("storage unavailable"))
        pipeline = _pipeline(_pdf(english_pdf), sink, recognizer)

        document = await pipeline.run()

        assert pipeline.history[-2:] == [S.UPLOADING, S.ERROR]
        assert document.is_placeholder
        assert pipeline.notice is not None


class TestDiscard:
    @pytest.mark.asyncio
    async def test_discarded_before_run(self, english_pdf, sink, recognizer) -> None:
        pipeline = _pipeline(_pdf(english_pdf), sink, recognizer)
        pipeline.discard()

        assert await pipeline.run() is None
        assert pipeline.state == S.PENDING
        assert sink.saved == []

    @pytest.mark.asyncio
    async def test_discarded_during_ocr(self, png_bytes, sink, make_recognizer) -> None:
        holder: list[IntakePipeline] = []
        recognizer = make_recognizer(OCR_LETTER, on_call=lambda: holder[0].discard())
        pipeline = _pipeline(_png(png_bytes), sink, recognizer)
        holder.append(pipeline)

        assert await pipeline.run() is None
        assert pipeline.state == S.OCR_PROCESSING
        assert pipeline.pdf_bytes is None
        assert sink.saved == []

    @pytest.mark.asyncio
    async def test_failure_after_discard_ignored(self, png_bytes, sink) -> None:
        holder: list[IntakePipeline] = []

        def decode(content: bytes):
            holder[0].discard()
            raise ConversionError("truncated image")

        normalizer = MagicMock()
        normalizer.decode.side_effect = decode
        pipeline = IntakePipeline(
            _png(png_bytes), normalizer, AsyncMock(), sink, clock=date.today
        )
        holder.append(pipeline)

        assert await pipeline.run() is None
        assert pipeline.state == S.CONVERTING
        assert pipeline.document is None
        assert pipeline.notice is None
        assert sink.saved == []

    @pytest.mark.asyncio
    async def test_cannot_discard_finished(self, english_pdf, sink, recognizer) -> None:
        pipeline = _pipeline(_pdf(english_pdf), sink, recognizer)
        await pipeline.run()

        with pytest.raises(InvalidTransitionError):
            pipeline.discard()

    @pytest.mark.asyncio
    async def test_cannot_run_twice(self, english_pdf, sink, recognizer) -> None:
        pipeline = _pipeline(_pdf(english_pdf), sink, recognizer)
        await pipeline.run()

        with pytest.raises(InvalidTransitionError):
            await pipeline.run()
        assert len(sink.saved) == 1
