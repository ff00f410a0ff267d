"""Tests for the YouTube publishing client."""

import asyncio
import json
from unittest.mock import patch

import httpx
import pytest

from vidpublish.core.errors import PublishError
from vidpublish.core.models import Metadata
from vidpublish.core.security import redact_token_payload
from vidpublish.core.youtube_client import (
    YouTubePublisher,
    build_video_body,
    language_code,
    to_publish_at,
)

METADATA = Metadata(
    title="My Video",
    description="About my video",
    tags=["one", "two"],
    hashtags=["Tech", "Daily"],
    thumbnail_prompt=None,
)

SESSION_URL = "https://www.googleapis.com/upload/youtube/v3/videos?upload_id=session-1"


class RecordingApi:
    """Mock YouTube/OAuth endpoints that record every request."""

    def __init__(self, video_id="abc123", session_location=SESSION_URL):
        self.video_id = video_id
        self.session_location = session_location
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "oauth2.googleapis.com":
            return httpx.Response(200, json={"access_token": "fresh-token"})
        if request.method == "POST":
            headers = {"Location": self.session_location} if self.session_location else {}
            return httpx.Response(200, headers=headers)
        if request.method == "PUT":
            body = {"id": self.video_id} if self.video_id else {}
            return httpx.Response(200, json=body)
        return httpx.Response(404)


def publish(publisher, file_path, schedule=None):
    return asyncio.run(
        publisher.publish(
            file_path=file_path,
            metadata=METADATA,
            category="tech",
            language="English",
            monetization="monetized",
            schedule=schedule,
        )
    )


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"video-bytes")
    return path


class TestRequestBody:
    def test_snippet(self):
        body = build_video_body(METADATA, "gaming", "English", None, "public")
        snippet = body["snippet"]
        assert snippet["title"] == "My Video"
        assert snippet["tags"] == ["one", "two"]
        assert snippet["categoryId"] == "20"
        assert snippet["defaultLanguage"] == "en"
        assert snippet["description"].endswith("#Tech #Daily")

    def test_unknown_category_and_language(self):
        snippet = build_video_body(METADATA, "cooking", "Klingon", None, "public")["snippet"]
        assert snippet["categoryId"] == "22"
        assert "defaultLanguage" not in snippet

    def test_immediate_release(self):
        status = build_video_body(METADATA, "tech", "English", None, "public")["status"]
        assert status == {"privacyStatus": "public", "selfDeclaredMadeForKids": False}

    def test_scheduled_release_is_private(self):
        status = build_video_body(METADATA, "tech", "English", "2030-01-01T10:00", "public")["status"]
        assert status["privacyStatus"] == "private"
        assert status["publishAt"] == "2030-01-01T10:00:00Z"


class TestHelpers:
    @pytest.mark.parametrize(
        "value,expected",
        [("English", "en"), (" hindi ", "hi"), ("es", "es"), ("Klingon", None)],
    )
    def test_language_code(self, value, expected):
        assert language_code(value) == expected

    def test_publish_at_naive_is_utc(self):
        assert to_publish_at("2030-01-01T10:00") == "2030-01-01T10:00:00Z"

    def test_publish_at_with_offset(self):
        assert to_publish_at("2030-01-01T10:00:00+02:00") == "2030-01-01T08:00:00Z"

    def test_publish_at_zulu(self):
        assert to_publish_at("2030-01-01T10:00:00Z") == "2030-01-01T10:00:00Z"

    def test_publish_at_invalid(self):
        with pytest.raises(ValueError, match="Invalid schedule"):
            to_publish_at("next tuesday")


class TestYouTubePublisher:
    def test_publish_with_access_token(self, video_file):
        api = RecordingApi()
        publisher = YouTubePublisher(access_token="token", transport=httpx.MockTransport(api))

        result = publish(publisher, video_file)

        assert result.video_id == "abc123"
        assert result.url == "https://www.youtube.com/watch?v=abc123"

        session, upload = api.requests
        assert session.method == "POST"
        assert session.url.path == "/upload/youtube/v3/videos"
        assert session.url.params["uploadType"] == "resumable"
        assert session.url.params["part"] == "snippet,status"
        assert session.headers["Authorization"] == "Bearer token"
        assert session.headers["X-Upload-Content-Length"] == str(len(b"video-bytes"))
        assert json.loads(session.content)["snippet"]["title"] == "My Video"

        assert upload.method == "PUT"
        assert str(upload.url) == SESSION_URL
        assert upload.content == b"video-bytes"
        assert upload.headers["Content-Type"] == "video/mp4"

    def test_publish_with_refresh_token(self, video_file):
        api = RecordingApi()
        publisher = YouTubePublisher(
            client_id="id",
            client_secret="secret",
            refresh_token="refresh",
            transport=httpx.MockTransport(api),
        )
        publisher.access_token = ""

        publish(publisher, video_file)

        token_request = api.requests[0]
        assert token_request.url.host == "oauth2.googleapis.com"
        assert b"grant_type=refresh_token" in token_request.content
        assert api.requests[1].headers["Authorization"] == "Bearer fresh-token"

    def test_scheduled_publish(self, video_file):
        api = RecordingApi()
        publisher = YouTubePublisher(access_token="token", transport=httpx.MockTransport(api))

        publish(publisher, video_file, schedule="2030-01-01T10:00")

        status = json.loads(api.requests[0].content)["status"]
        assert status["publishAt"] == "2030-01-01T10:00:00Z"
        assert status["privacyStatus"] == "private"

    def test_not_configured(self, video_file):
        publisher = YouTubePublisher(transport=httpx.MockTransport(RecordingApi()))
        publisher.access_token = ""
        publisher.refresh_token = ""

        with pytest.raises(RuntimeError, match="not configured"):
            publish(publisher, video_file)

    def test_missing_session_url(self, video_file):
        api = RecordingApi(session_location=None)
        publisher = YouTubePublisher(access_token="token", transport=httpx.MockTransport(api))

        with pytest.raises(PublishError, match="upload session"):
            publish(publisher, video_file)

    def test_missing_video_id(self, video_file):
        api = RecordingApi(video_id=None)
        publisher = YouTubePublisher(access_token="token", transport=httpx.MockTransport(api))

        with pytest.raises(PublishError, match="video id"):
            publish(publisher, video_file)

    def test_api_error_status(self, video_file):
        def handler(request):
            return httpx.Response(403, json={"error": {"message": "quotaExceeded"}})

        publisher = YouTubePublisher(access_token="token", transport=httpx.MockTransport(handler))
        with pytest.raises(httpx.HTTPStatusError):
            publish(publisher, video_file)

    def test_refresh_without_token_logs_redacted_payload(self, video_file):
        def handler(request):
            return httpx.Response(
                200, json={"refresh_token": "rotated-secret", "error": "invalid_grant"}
            )

        publisher = YouTubePublisher(
            client_id="id",
            client_secret="secret",
            refresh_token="refresh",
            transport=httpx.MockTransport(handler),
        )
        publisher.access_token = ""

        with patch("vidpublish.core.youtube_client.logger") as mock_logger:
            with pytest.raises(PublishError, match="access token"):
                publish(publisher, video_file)

        logged_payload = mock_logger.error.call_args.args[1]
        assert logged_payload == {"refresh_token": "[REDACTED]", "error": "invalid_grant"}


class TestTokenPayloadRedaction:
    def test_credentials_redacted(self):
        payload = {
            "access_token": "a",
            "Refresh_Token": "r",
            "id_token": "i",
            "expires_in": 3599,
            "token_type": "Bearer",
        }
        assert redact_token_payload(payload) == {
            "access_token": "[REDACTED]",
            "Refresh_Token": "[REDACTED]",
            "id_token": "[REDACTED]",
            "expires_in": 3599,
            "token_type": "Bearer",
        }

    def test_error_fields_kept(self):
        payload = {"error": "invalid_client", "error_description": "Unauthorized"}
        assert redact_token_payload(payload) == payload
