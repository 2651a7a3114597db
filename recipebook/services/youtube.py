from __future__ import annotations

import html as html_lib
import json
import logging
import re
from functools import partial
from typing import Any, Callable, Sequence

import httpx
from fastapi.concurrency import run_in_threadpool
from youtube_transcript_api import YouTubeTranscriptApi

from .errors import ExtractionError
from .fetcher import DEFAULT_TIMEOUT_SECONDS, VIDEO_PAGE_HEADERS, fetch_page

logger = logging.getLogger(__name__)

# Everything below depends on YouTube's undocumented page layout; keep it in this module.
YOUTUBE_VIDEO_ID_PATTERN = re.compile(
    r"(?:^|[/.])(?:youtube\.com/watch\?(?:[^#\s]*&)?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)([A-Za-z0-9_-]{11})"
)
WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"
INITIAL_DATA_PATTERN = re.compile(r"(?:var\s+ytInitialData|window\[[\"']ytInitialData[\"']\])\s*=\s*")
DESCRIPTION_PATH = ("contents", "twoColumnWatchNextResults", "results", "results", "contents")
DEFAULT_TRANSCRIPT_LANGUAGES = ("en",)

TranscriptFetcher = Callable[[str], Sequence[Any]]


def extract_video_id(url: str) -> str | None:
    match = YOUTUBE_VIDEO_ID_PATTERN.search(url)
    return match.group(1) if match else None


def _meta_content(page: str, prop: str) -> str:
    pattern = re.compile(
        rf"<meta\s+property=[\"']{re.escape(prop)}[\"']\s+content=([\"'])(.*?)\1",
        re.IGNORECASE | re.DOTALL,
    )
    match = pattern.search(page)
    return html_lib.unescape(match.group(2)).strip() if match else ""


def _load_initial_data(page: str) -> dict | None:
    match = INITIAL_DATA_PATTERN.search(page)
    if not match:
        return None
    try:
        data, _ = json.JSONDecoder().raw_decode(page, match.end())
    except ValueError:
        logger.warning("Failed to parse ytInitialData")
        return None
    return data if isinstance(data, dict) else None


def _description_from_initial_data(data: dict | None) -> str:
    node: Any = data
    for key in DESCRIPTION_PATH:
        if not isinstance(node, dict):
            return ""
        node = node.get(key)

    if not isinstance(node, list):
        return ""

    for item in node:
        if not isinstance(item, dict):
            continue
        renderer = item.get("videoSecondaryInfoRenderer")
        if not isinstance(renderer, dict):
            continue
        description = renderer.get("attributedDescription")
        if isinstance(description, dict) and isinstance(description.get("content"), str):
            return description["content"].strip()
    return ""


def extract_description(page: str) -> str:
    return _description_from_initial_data(_load_initial_data(page)) or _meta_content(page, "og:description")


def extract_title(page: str) -> str:
    return _meta_content(page, "og:title")


def fetch_transcript_segments(
    video_id: str,
    languages: Sequence[str] = DEFAULT_TRANSCRIPT_LANGUAGES,
) -> list[dict]:
    try:
        fetched = YouTubeTranscriptApi().fetch(video_id, languages=list(languages))
    except AttributeError:
        # youtube-transcript-api < 1.0 only exposes the classmethod
        return YouTubeTranscriptApi.get_transcript(video_id, languages=list(languages))
    return fetched.to_raw_data() if hasattr(fetched, "to_raw_data") else list(fetched)


def _segment_text(segment: Any) -> str:
    if isinstance(segment, dict):
        text = segment.get("text")
    else:
        text = getattr(segment, "text", None)
    return text.strip() if isinstance(text, str) else ""


async def _get_transcript(video_id: str, fetcher: TranscriptFetcher) -> str:
    try:
        segments = await run_in_threadpool(fetcher, video_id)
    except Exception as error:
        # captions are optional; metadata alone is still usable
        logger.warning("youtube.transcript_unavailable video=%s error=%s", video_id, error)
        return ""

    parts = [_segment_text(segment) for segment in segments or []]
    return " ".join(part for part in parts if part).strip()


def compose_video_text(title: str, description: str, transcript: str) -> str:
    return f"Video Title: {title}\n\nDescription:\n{description}\n\nTranscript:\n{transcript}"


async def extract_video_content(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    client: httpx.AsyncClient | None = None,
    transcript_fetcher: TranscriptFetcher | None = None,
    languages: Sequence[str] = DEFAULT_TRANSCRIPT_LANGUAGES,
) -> str | None:
    """Return title, description and transcript of a YouTube video as one text blob.

    Returns ``None`` when ``url`` is not a recognised YouTube link so the
    caller can treat it as a regular web page.
    """
    video_id = extract_video_id(url)
    if not video_id:
        return None

    page = await fetch_page(
        WATCH_URL_TEMPLATE.format(video_id=video_id),
        headers=VIDEO_PAGE_HEADERS,
        timeout=timeout,
        client=client,
    )

    title = extract_title(page)
    description = extract_description(page)

    fetcher = transcript_fetcher or partial(fetch_transcript_segments, languages=languages)
    transcript = await _get_transcript(video_id, fetcher)

    if not description and not transcript:
        raise ExtractionError("No description or transcript found")

    logger.info(
        "youtube.extracted video=%s description_len=%d transcript_len=%d",
        video_id,
        len(description),
        len(transcript),
    )
    return compose_video_text(title, description, transcript)
