from functools import lru_cache
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidpublish.config import logger
from vidpublish.core.errors import GENERIC_FAILURE_MESSAGE, UploadError
from vidpublish.core.seo import MetadataGenerator, get_metadata_generator
from vidpublish.core.storage import LocalTempStorage
from vidpublish.core.workflow import UploadWorkflow
from vidpublish.core.youtube_client import VideoPublisher, YouTubePublisher
from vidpublish.schemas import UploadErrorResponse, UploadSuccessResponse

router = APIRouter(tags=["Upload"])


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------

@lru_cache
def get_metadata_collaborator() -> MetadataGenerator:
    return get_metadata_generator()


@lru_cache
def get_publish_collaborator() -> VideoPublisher:
    return YouTubePublisher()


def get_upload_workflow(
    metadata_generator: MetadataGenerator = Depends(get_metadata_collaborator),
    publisher: VideoPublisher = Depends(get_publish_collaborator),
) -> UploadWorkflow:
    """A fresh workflow per request; collaborators are shared."""
    return UploadWorkflow(
        storage=LocalTempStorage(),
        metadata_generator=metadata_generator,
        publisher=publisher,
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    payload = UploadErrorResponse(error=message)
    return JSONResponse(status_code=status_code, content=payload.model_dump(by_alias=True))


_ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": UploadErrorResponse},
    413: {"model": UploadErrorResponse},
    500: {"model": UploadErrorResponse},
}


# -----------------------------------------------------------------------------
# Upload Endpoint
# -----------------------------------------------------------------------------

@router.post("/upload", response_model=UploadSuccessResponse, responses=_ERROR_RESPONSES)
@router.post("/api/upload", response_model=UploadSuccessResponse, include_in_schema=False)
async def upload_video(
    request: Request,
    workflow: UploadWorkflow = Depends(get_upload_workflow),
) -> JSONResponse:
    """
    Materialize a video (file or link), generate metadata and publish it.

    Multipart form fields: category, language, monetization, schedule,
    videoLink, videoFile.
    """
    try:
        form = await request.form()
    except StarletteHTTPException as e:
        return error_response(e.status_code, str(e.detail))

    try:
        summary = await workflow.run(form)
    except UploadError as e:
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.exception("Upload failed with unexpected error: %s", e)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or GENERIC_FAILURE_MESSAGE
        )
    finally:
        await form.close()

    payload = UploadSuccessResponse(summary=summary)
    return JSONResponse(content=payload.model_dump(mode="json", by_alias=True))
