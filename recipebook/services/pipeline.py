from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx

from recipebook.services.fetcher import DEFAULT_TIMEOUT_SECONDS
from recipebook.services.normalizer import ModelGenerator, normalize
from recipebook.services.persist_models import RecipeRecord
from recipebook.services.telemetry import TelemetrySink
from recipebook.services.web_extractor import extract_web_content
from recipebook.services.youtube import DEFAULT_TRANSCRIPT_LANGUAGES, TranscriptFetcher, extract_video_content

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^(https?://[^\s]+)")


@dataclass
class ExtractedInput:
    content: str
    source_url: Optional[str] = None
    source_kind: str = "text"


def detect_url(user_input: str) -> Optional[str]:
    match = URL_PATTERN.match(user_input.strip())
    return match.group(1) if match else None


async def extract_content(
    user_input: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None,
    transcript_fetcher: Optional[TranscriptFetcher] = None,
    languages: Sequence[str] = DEFAULT_TRANSCRIPT_LANGUAGES,
) -> ExtractedInput:
    url = detect_url(user_input)
    if not url:
        return ExtractedInput(content=user_input.strip())

    video_text = await extract_video_content(
        url,
        timeout=timeout,
        client=client,
        transcript_fetcher=transcript_fetcher,
        languages=languages,
    )
    if video_text is not None:
        return ExtractedInput(content=video_text, source_url=url, source_kind="video")

    web_text = await extract_web_content(url, timeout=timeout, client=client)
    return ExtractedInput(content=web_text, source_url=url, source_kind="web")


async def parse_recipe(
    user_input: str,
    api_key: Optional[str],
    *,
    models: Optional[Sequence[str]] = None,
    generator: Optional[ModelGenerator] = None,
    telemetry: Optional[TelemetrySink] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None,
    transcript_fetcher: Optional[TranscriptFetcher] = None,
    languages: Sequence[str] = DEFAULT_TRANSCRIPT_LANGUAGES,
) -> RecipeRecord:
    extracted = await extract_content(
        user_input,
        timeout=timeout,
        client=client,
        transcript_fetcher=transcript_fetcher,
        languages=languages,
    )
    logger.info(
        "pipeline.extracted kind=%s source=%s length=%d",
        extracted.source_kind,
        extracted.source_url,
        len(extracted.content),
    )
    return await normalize(
        extracted.content,
        api_key,
        source_url=extracted.source_url,
        models=models,
        generator=generator,
        telemetry=telemetry,
    )
