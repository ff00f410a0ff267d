"""
Input Validation Module

Validates the upload form and sanitizes filenames before they touch disk.
"""

from typing import Any, Mapping, Optional

from starlette.datastructures import UploadFile

from vidpublish.core.errors import MissingFieldError, NoSourceError
from vidpublish.core.models import FileSource, LinkSource, UploadRequest, VideoSource
from vidpublish.core.security.constants import REQUIRED_FORM_FIELDS, SAFE_FILENAME_PATTERN


def sanitize_filename(name: str) -> str:
    """Replace every character outside ``[a-zA-Z0-9._-]`` with ``_``."""
    return SAFE_FILENAME_PATTERN.sub("_", name)


def clean_text(value: Any) -> Optional[str]:
    """Trim a text form value; blank and non-text values become None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def is_usable_file(value: Any) -> bool:
    return isinstance(value, UploadFile) and (value.size or 0) > 0


def resolve_source(video_file: Any, video_link: Optional[str]) -> VideoSource:
    """
    Pick the single video source for a request.

    A non-empty file always wins; the link is only used when no file is usable.

    Raises:
        NoSourceError: If neither source is usable.
    """
    if is_usable_file(video_file):
        return FileSource(upload=video_file, filename=video_file.filename or None)
    if video_link:
        return LinkSource(url=video_link)
    raise NoSourceError()


def validate_upload_form(fields: Mapping[str, Any]) -> UploadRequest:
    """
    Validate raw form fields and build a normalized UploadRequest.

    Raises:
        MissingFieldError: If category, language or monetization is blank.
        NoSourceError: If there is neither a video file nor a video link.
    """
    required = {name: clean_text(fields.get(name)) for name in REQUIRED_FORM_FIELDS}
    if not all(required.values()):
        raise MissingFieldError()

    video_link = clean_text(fields.get("videoLink"))
    source = resolve_source(fields.get("videoFile"), video_link)

    return UploadRequest(
        category=required["category"],
        language=required["language"],
        monetization=required["monetization"],
        source=source,
        schedule=clean_text(fields.get("schedule")),
        video_link=video_link,
    )
