"""
Upload request orchestration.

Sequences validation, asset materialization, metadata generation and
publishing for one request, and releases the ephemeral asset on every exit
path.
"""

import logging
from enum import Enum
from typing import Any, Mapping, Optional

import httpx

from vidpublish.config import DOWNLOAD_TIMEOUT_SECONDS, MAX_UPLOAD_BYTES
from vidpublish.core.errors import CollaboratorError, UploadError
from vidpublish.core.materializer import materialize
from vidpublish.core.models import MaterializedAsset, Metadata, PublishResult, UploadRequest
from vidpublish.core.security import validate_upload_form
from vidpublish.core.seo import MetadataGenerator
from vidpublish.core.storage import AssetScope, TempStorage
from vidpublish.core.youtube_client import VideoPublisher
from vidpublish.schemas import UploadSummary

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    VALIDATING = "validating"
    RESOLVING = "resolving"
    GENERATING_METADATA = "generating_metadata"
    PUBLISHING = "publishing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def build_summary(
    metadata: Metadata,
    result: PublishResult,
    schedule: Optional[str],
) -> UploadSummary:
    return UploadSummary(
        video_title=metadata.title,
        video_description=metadata.description,
        tags=list(metadata.tags),
        hashtags=list(metadata.hashtags),
        thumbnail_prompt=metadata.thumbnail_prompt,
        scheduled_at=schedule,
        video_id=result.video_id,
        video_url=result.url,
    )


class UploadWorkflow:
    """
    Runs the upload pipeline for a single request.

    Each collaborator is called exactly once. Failures are raised as
    ``UploadError`` subclasses; the asset is released before they propagate.
    """

    def __init__(
        self,
        storage: TempStorage,
        metadata_generator: MetadataGenerator,
        publisher: VideoPublisher,
        download_transport: Optional[httpx.AsyncBaseTransport] = None,
        download_timeout: Optional[float] = DOWNLOAD_TIMEOUT_SECONDS,
        max_upload_bytes: Optional[int] = MAX_UPLOAD_BYTES,
    ):
        self.storage = storage
        self.metadata_generator = metadata_generator
        self.publisher = publisher
        self.download_transport = download_transport
        self.download_timeout = download_timeout
        self.max_upload_bytes = max_upload_bytes
        self.state = WorkflowState.VALIDATING

    def _enter(self, state: WorkflowState) -> None:
        logger.debug("Upload workflow: %s -> %s", self.state.value, state.value)
        self.state = state

    async def run(self, fields: Mapping[str, Any]) -> UploadSummary:
        """Validate the raw form and run the pipeline."""
        self._enter(WorkflowState.VALIDATING)
        try:
            request = validate_upload_form(fields)
        except UploadError as e:
            self._enter(WorkflowState.FAILED)
            logger.warning(f"Upload rejected: {e.message}")
            raise
        return await self.execute(request)

    async def execute(self, request: UploadRequest) -> UploadSummary:
        """Run the pipeline for an already validated request."""
        try:
            async with AssetScope(self.storage) as scope:
                self._enter(WorkflowState.RESOLVING)
                asset = await materialize(
                    request.source,
                    scope,
                    transport=self.download_transport,
                    timeout=self.download_timeout,
                    max_bytes=self.max_upload_bytes,
                )

                self._enter(WorkflowState.GENERATING_METADATA)
                metadata = await self._generate_metadata(request, asset)

                self._enter(WorkflowState.PUBLISHING)
                result = await self._publish(request, asset, metadata)
        except UploadError as e:
            failed_in = self.state
            self._enter(WorkflowState.FAILED)
            logger.error(f"Upload failed while {failed_in.value}: {e.message}")
            raise
        except Exception:
            self._enter(WorkflowState.FAILED)
            raise

        self._enter(WorkflowState.SUCCEEDED)
        logger.info("Upload complete: video %s", result.video_id)
        return build_summary(metadata, result, request.schedule)

    async def _generate_metadata(
        self, request: UploadRequest, asset: MaterializedAsset
    ) -> Metadata:
        try:
            return await self.metadata_generator.generate(
                category=request.category,
                language=request.language,
                monetization=request.monetization,
                schedule=request.schedule,
                video_link=request.video_link,
                file_name=asset.derived_filename,
            )
        except UploadError:
            raise
        except Exception as e:
            raise CollaboratorError(str(e)) from e

    async def _publish(
        self,
        request: UploadRequest,
        asset: MaterializedAsset,
        metadata: Metadata,
    ) -> PublishResult:
        try:
            result = await self.publisher.publish(
                file_path=asset.file_path,
                metadata=metadata,
                category=request.category,
                language=request.language,
                monetization=request.monetization,
                schedule=request.schedule,
            )
        except UploadError:
            raise
        except Exception as e:
            raise CollaboratorError(str(e)) from e
        if not isinstance(result, PublishResult) or not result.video_id:
            raise CollaboratorError("Publishing returned no video.")
        return result
