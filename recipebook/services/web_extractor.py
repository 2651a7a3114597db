from __future__ import annotations

import logging
import re

import httpx

from .errors import NoContentError
from .fetcher import BROWSER_HEADERS, DEFAULT_TIMEOUT_SECONDS, fetch_page
from .structured_data import find_recipe_node, serialize_node

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 50
MAX_CONTENT_CHARS = 40_000

SCRIPT_BLOCK_PATTERN = re.compile(r"<script\b[^>]*>[\s\S]*?</script>", re.IGNORECASE)
STYLE_BLOCK_PATTERN = re.compile(r"<style\b[^>]*>[\s\S]*?</style>", re.IGNORECASE)
TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")


def clean_html(html: str) -> str:
    text = SCRIPT_BLOCK_PATTERN.sub("", html)
    text = STYLE_BLOCK_PATTERN.sub("", text)
    text = TAG_PATTERN.sub(" ", text)
    text = WHITESPACE_PATTERN.sub(" ", text).strip()
    return text[:MAX_CONTENT_CHARS]


def content_from_html(html: str) -> str:
    recipe = find_recipe_node(html)
    if recipe is not None:
        logger.info("web.json_ld_recipe_found")
        return serialize_node(recipe)

    logger.info("web.fallback_to_text")
    return clean_html(html)


async def extract_web_content(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    client: httpx.AsyncClient | None = None,
) -> str:
    html = await fetch_page(url, headers=BROWSER_HEADERS, timeout=timeout, client=client)
    content = content_from_html(html)

    if len(content) < MIN_CONTENT_CHARS:
        raise NoContentError("Could not extract meaningful content from the URL")

    return content
