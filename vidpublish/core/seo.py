"""
SEO metadata generation.

Two generators share the ``MetadataGenerator`` interface:
- ``RuleBasedMetadataGenerator`` builds metadata from templates, no network.
- ``GeminiMetadataGenerator`` asks a Gemini model for the same fields.
"""

import asyncio
import json
import logging
import re
import textwrap
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import urlparse

import google.generativeai as genai

from vidpublish.config import GEMINI_API_KEY, GEMINI_MODEL, METADATA_PROVIDER
from vidpublish.core.models import Metadata, Monetization

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 5000
MAX_TAGS = 15

CATEGORY_LABELS = {
    "tech": "Technology",
    "vlog": "Vlog",
    "shorts": "Shorts",
    "gaming": "Gaming",
    "tutorial": "Tutorial",
}

CATEGORY_TAGS = {
    "tech": ["technology", "tech review", "gadgets", "innovation", "how it works"],
    "vlog": ["vlog", "daily vlog", "lifestyle", "behind the scenes", "day in the life"],
    "shorts": ["shorts", "short video", "trending", "viral", "quick clip"],
    "gaming": ["gaming", "gameplay", "gamer", "walkthrough", "lets play"],
    "tutorial": ["tutorial", "how to", "step by step", "guide", "learn"],
}


class MetadataGenerator(Protocol):
    async def generate(
        self,
        category: str,
        language: str,
        monetization: str,
        schedule: Optional[str],
        video_link: Optional[str],
        file_name: Optional[str],
    ) -> Metadata: ...


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category.lower(), category.strip().title())


def humanize_filename(file_name: Optional[str]) -> Optional[str]:
    """Turn ``my_demo-video.v2.mp4`` into ``My Demo Video V2``."""
    if not file_name:
        return None
    stem = PurePosixPath(file_name).stem
    words = [w for w in re.split(r"[\s._\-]+", stem) if w]
    if not words:
        return None
    return " ".join(w if w.isupper() else w.capitalize() for w in words)


def to_hashtag(text: str) -> str:
    """Collapse a phrase into a hashtag body (without the leading ``#``)."""
    return "".join(part.capitalize() for part in re.split(r"[^0-9A-Za-z]+", text) if part)


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        key = item.lower()
        if item and key not in seen:
            seen.add(key)
            unique.append(item)
    return unique


class RuleBasedMetadataGenerator:
    """Template-driven metadata; deterministic for a given input."""

    async def generate(
        self,
        category: str,
        language: str,
        monetization: str,
        schedule: Optional[str],
        video_link: Optional[str],
        file_name: Optional[str],
    ) -> Metadata:
        label = category_label(category)
        subject = humanize_filename(file_name) or self._subject_from_link(video_link) or label

        title = f"{subject} | {label}"
        if language.lower() not in ("en", "english"):
            title = f"{title} ({language})"
        title = title[:MAX_TITLE_LENGTH]

        lines = [
            f"{subject}: a new {label.lower()} video, presented in {language}.",
            "",
        ]
        if schedule:
            lines.append(f"Premiering {schedule}.")
        if Monetization.parse(monetization) is Monetization.MONETIZED:
            lines.append("Subscribe and turn on notifications so you never miss an upload.")
        else:
            lines.append("Thanks for watching. Share it with anyone who might enjoy it.")
        description = "\n".join(lines).strip()[:MAX_DESCRIPTION_LENGTH]

        tags = _dedupe(
            [subject.lower(), label.lower()]
            + CATEGORY_TAGS.get(category.lower(), [category.lower()])
            + [language.lower()]
        )[:MAX_TAGS]

        hashtags = _dedupe([to_hashtag(label), to_hashtag(subject), to_hashtag(language)])

        thumbnail_prompt = (
            f"Bold, high-contrast YouTube thumbnail for a {label.lower()} video titled "
            f"\"{subject}\", expressive focal subject, large readable {language} text, "
            "16:9 composition"
        )

        return Metadata(
            title=title,
            description=description,
            tags=tags,
            hashtags=[h for h in hashtags if h],
            thumbnail_prompt=thumbnail_prompt,
        )

    def _subject_from_link(self, video_link: Optional[str]) -> Optional[str]:
        if not video_link:
            return None
        return humanize_filename(urlparse(video_link).path.split("/")[-1])


class GeminiMetadataGenerator:
    """
    Wrapper around the Gemini API that returns upload metadata as JSON.

    A single model is called once per request. The client is configured on
    first use, so a missing key surfaces as a generation failure.
    """

    def __init__(self, api_key: str | None = None, model_name: str | None = None):
        self.api_key = api_key or GEMINI_API_KEY
        self.model_name = model_name or GEMINI_MODEL
        self._configured = False

    def _configure(self) -> None:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is not set in environment.")
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True

    def build_prompt(
        self,
        category: str,
        language: str,
        monetization: str,
        schedule: Optional[str],
        video_link: Optional[str],
        file_name: Optional[str],
    ) -> str:
        return textwrap.dedent(
            f"""
            You write YouTube SEO metadata.

            Video details:
            - Category: {category_label(category)}
            - Language: {language}
            - Monetization: {monetization}
            - Scheduled for: {schedule or "immediate release"}
            - Source link: {video_link or "n/a"}
            - File name: {file_name or "n/a"}

            Return ONLY a single JSON object with these keys:
            - "title": string, at most {MAX_TITLE_LENGTH} characters, written in {language}
            - "description": string, written in {language}
            - "tags": array of at most {MAX_TAGS} strings
            - "hashtags": array of strings without the leading "#"
            - "thumbnailPrompt": string describing a thumbnail image
            """
        ).strip()

    def parse_response(self, text: str) -> Metadata:
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.endswith("```"):
            text = text[:-3]
        data: Dict[str, Any] = json.loads(text.strip())

        title = str(data.get("title") or "").strip()
        if not title:
            raise ValueError("Gemini response did not include a title")

        return Metadata(
            title=title[:MAX_TITLE_LENGTH],
            description=str(data.get("description") or "").strip()[:MAX_DESCRIPTION_LENGTH],
            tags=[str(t).strip() for t in data.get("tags") or [] if str(t).strip()][:MAX_TAGS],
            hashtags=[str(h).strip().lstrip("#") for h in data.get("hashtags") or [] if str(h).strip("# ")],
            thumbnail_prompt=str(data.get("thumbnailPrompt") or "").strip() or None,
        )

    def _generate_sync(self, prompt: str) -> Metadata:
        self._configure()
        logger.info(f"Generating metadata with model: {self.model_name}")
        model = genai.GenerativeModel(self.model_name)
        response = model.generate_content(
            prompt, generation_config={"response_mime_type": "application/json"}
        )
        return self.parse_response(response.text)

    async def generate(
        self,
        category: str,
        language: str,
        monetization: str,
        schedule: Optional[str],
        video_link: Optional[str],
        file_name: Optional[str],
    ) -> Metadata:
        prompt = self.build_prompt(category, language, monetization, schedule, video_link, file_name)
        return await asyncio.to_thread(self._generate_sync, prompt)


def get_metadata_generator(provider: str | None = None) -> MetadataGenerator:
    """Build the generator selected by ``METADATA_PROVIDER``."""
    provider = (provider or METADATA_PROVIDER).lower()
    if provider == "gemini":
        return GeminiMetadataGenerator()
    if provider != "rules":
        logger.warning("Unknown METADATA_PROVIDER %r, using rule-based metadata", provider)
    return RuleBasedMetadataGenerator()
