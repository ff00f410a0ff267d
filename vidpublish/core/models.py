"""
Data structures for the upload pipeline.

Contains the normalized request, the resolved video source, and the values
exchanged with the metadata and publishing collaborators.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from starlette.datastructures import UploadFile


class Monetization(str, Enum):
    MONETIZED = "monetized"
    NON_MONETIZED = "non-monetized"

    @classmethod
    def parse(cls, value: str) -> "Monetization":
        """Map a form value onto the enum; unknown values are not monetized."""
        normalized = value.strip().lower().replace("_", "-").replace(" ", "-")
        if normalized == cls.MONETIZED.value:
            return cls.MONETIZED
        return cls.NON_MONETIZED


@dataclass(frozen=True)
class FileSource:
    """An uploaded video blob."""

    upload: UploadFile
    filename: Optional[str]


@dataclass(frozen=True)
class LinkSource:
    """A remote video reachable over HTTP."""

    url: str


VideoSource = Union[FileSource, LinkSource]


@dataclass(frozen=True)
class UploadRequest:
    """Validated form input; lives for a single request."""

    category: str
    language: str
    monetization: str
    source: VideoSource
    schedule: Optional[str] = None
    video_link: Optional[str] = None

    @property
    def is_monetized(self) -> bool:
        return Monetization.parse(self.monetization) is Monetization.MONETIZED


@dataclass(frozen=True)
class MaterializedAsset:
    """A video written to ephemeral storage."""

    file_path: Path
    derived_filename: str


@dataclass(frozen=True)
class Metadata:
    title: str
    description: str
    tags: List[str] = field(default_factory=list)
    hashtags: List[str] = field(default_factory=list)
    thumbnail_prompt: Optional[str] = None


@dataclass(frozen=True)
class PublishResult:
    video_id: str
    url: str
