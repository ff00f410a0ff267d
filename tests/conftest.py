"""Shared fixtures for the upload pipeline tests."""

import io
from pathlib import Path
from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile

from vidpublish.core.models import Metadata, PublishResult
from vidpublish.core.storage import LocalTempStorage
from vidpublish.core.workflow import UploadWorkflow
from vidpublish.main import app
from vidpublish.routers.upload import get_upload_workflow


class FakeMetadataGenerator:
    """Records calls and returns fixed metadata (or raises ``error``)."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[dict] = []

    async def generate(self, **kwargs) -> Metadata:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return Metadata(
            title="Sample Title",
            description="Sample description",
            tags=["tech", "sample"],
            hashtags=["Tech", "Sample"],
            thumbnail_prompt="A bright thumbnail",
        )


class FakePublisher:
    """Records calls, the file contents seen at publish time, and returns a fixed result."""

    def __init__(self, error: Optional[Exception] = None, result: Optional[PublishResult] = None):
        self.error = error
        self.result = result or PublishResult(video_id="vid123", url="https://youtu.be/vid123")
        self.calls: List[dict] = []
        self.seen_bytes: List[bytes] = []

    async def publish(self, **kwargs) -> PublishResult:
        self.calls.append(kwargs)
        self.seen_bytes.append(Path(kwargs["file_path"]).read_bytes())
        if self.error is not None:
            raise self.error
        return self.result


def make_upload(data: bytes, filename: Optional[str] = "clip.mp4") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), size=len(data), filename=filename)


def make_transport(
    status_code: int = 200,
    content: bytes = b"remote-bytes",
    headers: Optional[dict] = None,
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=content, headers=headers or {})

    return httpx.MockTransport(handler)


def failing_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected download of {request.url}")

    return httpx.MockTransport(handler)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def storage(upload_dir: Path) -> LocalTempStorage:
    return LocalTempStorage(upload_dir)


@pytest.fixture
def metadata_generator() -> FakeMetadataGenerator:
    return FakeMetadataGenerator()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def make_workflow(storage, metadata_generator, publisher) -> Callable[..., UploadWorkflow]:
    def factory(transport: Optional[httpx.AsyncBaseTransport] = None, **kwargs) -> UploadWorkflow:
        return UploadWorkflow(
            storage=storage,
            metadata_generator=kwargs.pop("metadata_generator", metadata_generator),
            publisher=kwargs.pop("publisher", publisher),
            download_transport=transport or make_transport(),
            download_timeout=None,
            max_upload_bytes=kwargs.pop("max_upload_bytes", None),
        )

    return factory


@pytest.fixture
def client_factory(make_workflow):
    """Build a TestClient whose upload workflow uses fakes and the given transport."""

    def factory(transport: Optional[httpx.AsyncBaseTransport] = None, **kwargs) -> TestClient:
        app.dependency_overrides[get_upload_workflow] = lambda: make_workflow(transport, **kwargs)
        return TestClient(app)

    yield factory
    app.dependency_overrides.clear()
