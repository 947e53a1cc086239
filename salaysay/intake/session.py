"""Registry of the intake pipelines for one batch of uploads."""

import asyncio
import uuid
from collections.abc import Callable, Iterable

from salaysay.exceptions import UnsupportedUploadError
from salaysay.intake.pipeline import IntakePipeline
from salaysay.intake.state import DISCARDABLE_STATES, TERMINAL_STATES, UploadState
from salaysay.models import (
    ALLOWED_MIME_TYPES,
    MAX_UPLOAD_BYTES,
    DocumentInfo,
    RawUpload,
    is_supported_upload,
)
from salaysay.utils.logger import get_logger

logger = get_logger(__name__)

PipelineFactory = Callable[[RawUpload], IntakePipeline]


class IntakeSession:
    """Maps file ids to their pipelines and runs them concurrently.

    Args:
        pipeline_factory: Builds the pipeline for an accepted upload.
    """

    def __init__(self, pipeline_factory: PipelineFactory) -> None:
        self.pipeline_factory = pipeline_factory
        self.pipelines: dict[str, IntakePipeline] = {}

    def add_files(self, uploads: Iterable[RawUpload]) -> list[str]:
        """Register uploads and return their new file ids.

        Every upload is validated before any is registered.

        Raises:
            UnsupportedUploadError: If an upload has a MIME type outside
                the accepted set or exceeds the size limit.
        """
        uploads = list(uploads)
        for upload in uploads:
            if not is_supported_upload(upload):
                raise UnsupportedUploadError(
                    f"{upload.filename}: expected one of "
                    f"{', '.join(ALLOWED_MIME_TYPES)} up to {MAX_UPLOAD_BYTES} bytes, "
                    f"got {upload.mime_type} ({upload.size} bytes)"
                )

        file_ids = []
        for upload in uploads:
            file_id = uuid.uuid4().hex
            self.pipelines[file_id] = self.pipeline_factory(upload)
            file_ids.append(file_id)
            logger.info("Queued %s as %s", upload.filename, file_id)
        return file_ids

    def remove_file(self, file_id: str) -> None:
        """Forget a pipeline, discarding it first if it is still converting.

        Finished pipelines (completed or error) are dropped as they are.

        Raises:
            KeyError: If ``file_id`` is unknown.
            InvalidTransitionError: If the pipeline is analyzing or uploading.
        """
        pipeline = self.pipelines[file_id]
        if pipeline.state not in TERMINAL_STATES:
            pipeline.discard()
        del self.pipelines[file_id]
        logger.info("Removed %s (%s)", pipeline.upload.filename, pipeline.state)

    def reset(self) -> None:
        """Forget every pipeline; in-flight results are ignored."""
        for pipeline in self.pipelines.values():
            if not pipeline.discarded and pipeline.state in DISCARDABLE_STATES:
                pipeline.discard()
        self.pipelines.clear()

    def statuses(self) -> dict[str, UploadState]:
        return {file_id: p.state for file_id, p in self.pipelines.items()}

    async def run_all(self) -> dict[str, DocumentInfo | None]:
        """Run every pending pipeline concurrently.

        Returns:
            The result of each pipeline that was run, keyed by file id.
        """
        pending = {
            file_id: pipeline
            for file_id, pipeline in self.pipelines.items()
            if pipeline.state == UploadState.PENDING and not pipeline.discarded
        }
        logger.info("Running %d pipelines", len(pending))
        results = await asyncio.gather(*(p.run() for p in pending.values()))
        return dict(zip(pending, results))
