import asyncio
import logging
import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import httpx

from vidpublish.config import (
    YOUTUBE_ACCESS_TOKEN,
    YOUTUBE_API_BASE_URL,
    YOUTUBE_CLIENT_ID,
    YOUTUBE_CLIENT_SECRET,
    YOUTUBE_PRIVACY_STATUS,
    YOUTUBE_REFRESH_TOKEN,
    YOUTUBE_TOKEN_URL,
    YOUTUBE_UPLOAD_TIMEOUT_SECONDS,
)
from vidpublish.core.errors import PublishError
from vidpublish.core.models import Metadata, Monetization, PublishResult
from vidpublish.core.security import redact_token_payload

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

# YouTube Data API category ids
DEFAULT_CATEGORY_ID = "22"  # People & Blogs
CATEGORY_IDS = {
    "tech": "28",  # Science & Technology
    "vlog": "22",
    "shorts": "24",  # Entertainment
    "gaming": "20",
    "tutorial": "27",  # Education
}

LANGUAGE_CODES = {
    "english": "en",
    "hindi": "hi",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "portuguese": "pt",
    "italian": "it",
    "japanese": "ja",
    "korean": "ko",
    "chinese": "zh",
    "arabic": "ar",
    "russian": "ru",
    "bengali": "bn",
    "tamil": "ta",
    "telugu": "te",
    "marathi": "mr",
    "urdu": "ur",
    "indonesian": "id",
    "turkish": "tr",
}


class VideoPublisher(Protocol):
    async def publish(
        self,
        file_path: Path,
        metadata: Metadata,
        category: str,
        language: str,
        monetization: str,
        schedule: Optional[str],
    ) -> PublishResult: ...


def language_code(language: str) -> Optional[str]:
    """Map a language name (or code) to an ISO 639-1 code when known."""
    value = language.strip().lower()
    if value in LANGUAGE_CODES.values():
        return value
    return LANGUAGE_CODES.get(value)


def to_publish_at(schedule: str) -> str:
    """
    Convert a schedule value to the RFC 3339 UTC timestamp YouTube expects.

    Naive timestamps are treated as UTC.
    """
    try:
        moment = datetime.fromisoformat(schedule.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"Invalid schedule value: {schedule!r}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_video_body(
    metadata: Metadata,
    category: str,
    language: str,
    schedule: Optional[str],
    privacy_status: str,
) -> Dict[str, Any]:
    """Build the videos.insert request body (snippet + status)."""
    description = metadata.description
    if metadata.hashtags:
        description = f"{description}\n\n" + " ".join(f"#{h}" for h in metadata.hashtags)

    snippet: Dict[str, Any] = {
        "title": metadata.title,
        "description": description,
        "tags": metadata.tags,
        "categoryId": CATEGORY_IDS.get(category.lower(), DEFAULT_CATEGORY_ID),
    }
    code = language_code(language)
    if code:
        snippet["defaultLanguage"] = code
        snippet["defaultAudioLanguage"] = code

    status: Dict[str, Any] = {
        "privacyStatus": privacy_status,
        "selfDeclaredMadeForKids": False,
    }
    if schedule:
        # Scheduled videos must stay private until publishAt
        status["publishAt"] = to_publish_at(schedule)
        status["privacyStatus"] = "private"

    return {"snippet": snippet, "status": status}


class YouTubePublisher:
    """Uploads a local video file through the YouTube Data API v3."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        refresh_token: Optional[str] = None,
        api_base_url: Optional[str] = None,
        token_url: Optional[str] = None,
        privacy_status: Optional[str] = None,
        timeout: Optional[float] = YOUTUBE_UPLOAD_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token or YOUTUBE_ACCESS_TOKEN
        self.client_id = client_id or YOUTUBE_CLIENT_ID
        self.client_secret = client_secret or YOUTUBE_CLIENT_SECRET
        self.refresh_token = refresh_token or YOUTUBE_REFRESH_TOKEN
        self.api_base_url = (api_base_url or YOUTUBE_API_BASE_URL).rstrip("/")
        self.token_url = token_url or YOUTUBE_TOKEN_URL
        self.privacy_status = privacy_status or YOUTUBE_PRIVACY_STATUS
        self.timeout = timeout
        self.transport = transport

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        if self.access_token:
            return self.access_token
        if not (self.client_id and self.client_secret and self.refresh_token):
            raise RuntimeError("YouTube publishing is not configured")

        response = await client.post(
            self.token_url,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": self.refresh_token,
                "grant_type": "refresh_token",
            },
        )
        response.raise_for_status()
        payload = response.json()
        token = payload.get("access_token")
        if not token:
            logger.error("Token refresh returned no access token: %s", redact_token_payload(payload))
            raise PublishError("Failed to obtain a YouTube access token")
        return token

    async def publish(
        self,
        file_path: Path,
        metadata: Metadata,
        category: str,
        language: str,
        monetization: str,
        schedule: Optional[str],
    ) -> PublishResult:
        body = build_video_body(metadata, category, language, schedule, self.privacy_status)
        data = await asyncio.to_thread(Path(file_path).read_bytes)
        content_type = mimetypes.guess_type(str(file_path))[0] or "video/*"

        logger.info(
            "Publishing %s to YouTube (%d bytes, monetization=%s, publishAt=%s)",
            file_path,
            len(data),
            Monetization.parse(monetization).value,
            body["status"].get("publishAt"),
        )

        async with httpx.AsyncClient(
            transport=self.transport, timeout=httpx.Timeout(self.timeout)
        ) as client:
            token = await self._get_access_token(client)
            auth = {"Authorization": f"Bearer {token}"}

            session = await client.post(
                f"{self.api_base_url}/upload/youtube/v3/videos",
                params={"uploadType": "resumable", "part": "snippet,status"},
                headers={
                    **auth,
                    "X-Upload-Content-Type": content_type,
                    "X-Upload-Content-Length": str(len(data)),
                },
                json=body,
            )
            session.raise_for_status()
            upload_url = session.headers.get("location")
            if not upload_url:
                raise PublishError("YouTube did not return an upload session URL")

            response = await client.put(
                upload_url,
                content=data,
                headers={**auth, "Content-Type": content_type},
            )
            response.raise_for_status()
            video_id = response.json().get("id")

        if not video_id:
            raise PublishError("YouTube upload response did not include a video id")

        logger.info("Published video %s", video_id)
        return PublishResult(video_id=video_id, url=WATCH_URL.format(video_id=video_id))
