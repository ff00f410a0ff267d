"""
Asset materialization.

Turns the request's video source (uploaded bytes or a remote link) into a file
in ephemeral storage. Paths are reserved through the caller's ``AssetScope``,
which owns cleanup; nothing here deletes files.
"""

import logging
import time
from email.message import Message
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from vidpublish.core.errors import AssetTooLargeError, DownloadError
from vidpublish.core.models import FileSource, LinkSource, MaterializedAsset, VideoSource
from vidpublish.core.security import sanitize_filename
from vidpublish.core.storage import AssetScope

logger = logging.getLogger(__name__)

REMOTE_FALLBACK_FILENAME = "remote-video.mp4"


def filename_from_content_disposition(header: Optional[str]) -> Optional[str]:
    """
    Extract the ``filename`` parameter of a Content-Disposition header.

    Handles quoted values and RFC 2231 ``filename*`` values. Returns None when
    the header is missing or carries no filename.
    """
    if not header:
        return None
    message = Message()
    message["content-disposition"] = header
    filename = message.get_filename()
    if filename:
        filename = filename.strip()
    return filename or None


def filename_from_url(url: str) -> Optional[str]:
    """Return the last path segment of a URL, or None if it has none."""
    segment = urlparse(url).path.split("/")[-1]
    segment = unquote(segment).strip()
    return segment or None


def derive_remote_filename(url: str, content_disposition: Optional[str] = None) -> str:
    """
    Pick a display name for a downloaded video.

    Priority: Content-Disposition filename, last URL path segment,
    then ``remote-video.mp4``.
    """
    return (
        filename_from_content_disposition(content_disposition)
        or filename_from_url(url)
        or REMOTE_FALLBACK_FILENAME
    )


def _check_size(size: int, max_bytes: Optional[int]) -> None:
    if max_bytes is not None and size > max_bytes:
        raise AssetTooLargeError(
            f"Video exceeds the maximum allowed size of {max_bytes} bytes."
        )


async def materialize_file(
    source: FileSource,
    scope: AssetScope,
    max_bytes: Optional[int] = None,
) -> MaterializedAsset:
    """Write an uploaded blob to ephemeral storage."""
    if source.upload.size is not None:
        _check_size(source.upload.size, max_bytes)
    data = await source.upload.read()
    _check_size(len(data), max_bytes)

    filename = source.filename or f"upload-{int(time.time() * 1000)}.mp4"
    path = scope.reserve(sanitize_filename(filename))
    await scope.write(path, data)

    logger.info("Stored uploaded video %r (%d bytes) at %s", filename, len(data), path)
    return MaterializedAsset(file_path=path, derived_filename=filename)


async def materialize_link(
    source: LinkSource,
    scope: AssetScope,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: Optional[float] = None,
    max_bytes: Optional[int] = None,
) -> MaterializedAsset:
    """
    Download a remote video into ephemeral storage.

    Raises:
        DownloadError: If the URL is malformed, the request fails or the
            response is not successful.
        AssetTooLargeError: If the body exceeds ``max_bytes``.
    """
    logger.info("Downloading video from %s", source.url)
    try:
        async with httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        ) as client:
            async with client.stream("GET", source.url) as response:
                if not response.is_success:
                    raise DownloadError(
                        f"Failed to download video from link ({response.status_code})",
                        status=response.status_code,
                    )

                filename = derive_remote_filename(
                    source.url, response.headers.get("content-disposition")
                )
                declared = response.headers.get("content-length")
                if declared and declared.isdigit():
                    _check_size(int(declared), max_bytes)

                chunks = []
                received = 0
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    _check_size(received, max_bytes)
                    chunks.append(chunk)
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        raise DownloadError(f"Failed to download video from link: {exc}") from exc

    path = scope.reserve(sanitize_filename(filename))
    await scope.write(path, b"".join(chunks))

    logger.info("Downloaded %r (%d bytes) to %s", filename, received, path)
    return MaterializedAsset(file_path=path, derived_filename=filename)


async def materialize(
    source: VideoSource,
    scope: AssetScope,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: Optional[float] = None,
    max_bytes: Optional[int] = None,
) -> MaterializedAsset:
    """Resolve exactly one video source into a MaterializedAsset."""
    if isinstance(source, FileSource):
        return await materialize_file(source, scope, max_bytes=max_bytes)
    return await materialize_link(
        source, scope, transport=transport, timeout=timeout, max_bytes=max_bytes
    )
