from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from pydantic import ValidationError

from recipebook.services.errors import ModelError, NoRecipeFoundError, SchemaError
from recipebook.services.gemini_client import GeminiClient, is_rate_limited_error
from recipebook.services.persist_models import RecipeRecord
from recipebook.services.prompt import build_recipe_prompt
from recipebook.services.telemetry import LoggingTelemetrySink, TelemetrySink, emit_detached
from recipebook.services.types import ModelAttempt

logger = logging.getLogger(__name__)

DEFAULT_MODELS = ("gemini-2.5-flash", "gemini-2.0-flash", "gemini-flash-latest")
CODE_FENCE_PATTERN = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)
NULL_TOKENS = {"null", "none", "undefined", "n/a"}
SOURCE_TRAILER_PREFIX = "Source:"

ModelGenerator = Callable[[str, str], Awaitable[str]]


@dataclass(frozen=True)
class AttemptSucceeded:
    text: str


@dataclass(frozen=True)
class AttemptFailed:
    error: Exception


AttemptResult = Union[AttemptSucceeded, AttemptFailed]


async def _run_attempt(
    generate: ModelGenerator,
    prompt: str,
    model_name: str,
    index: int,
    telemetry: TelemetrySink,
) -> AttemptResult:
    started = time.perf_counter()
    try:
        text = await generate(prompt, model_name)
    except Exception as error:
        result: AttemptResult = AttemptFailed(error)
    else:
        result = AttemptSucceeded(text)
    latency_ms = (time.perf_counter() - started) * 1000

    failure = result.error if isinstance(result, AttemptFailed) else None
    emit_detached(
        telemetry,
        ModelAttempt(
            model=model_name,
            index=index,
            success=failure is None,
            latency_ms=latency_ms,
            error=str(failure) if failure is not None else None,
            rate_limited=failure is not None and is_rate_limited_error(failure),
        ),
    )
    return result


async def generate_with_fallback(
    prompt: str,
    models: Sequence[str],
    generate: ModelGenerator,
    telemetry: TelemetrySink,
) -> str:
    """Try each candidate model in order and return the first reply.

    Every failure moves on to the next candidate, whatever its cause. Rate
    limit errors (429/503) are only tagged as such in the attempt record.
    """
    if not models:
        raise ModelError("No candidate models configured")

    last_error: Optional[Exception] = None
    for index, model_name in enumerate(models):
        result = await _run_attempt(generate, prompt, model_name, index, telemetry)
        if isinstance(result, AttemptSucceeded):
            if index > 0:
                logger.info("model.fallback_ok model=%s index=%d", model_name, index)
            return result.text

        last_error = result.error
        logger.warning("model.attempt_fail model=%s index=%d error=%s", model_name, index, last_error)

    raise ModelError(f"All candidate models failed: {last_error}", last_error=last_error) from last_error


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_PATTERN.sub("", text).strip()


def parse_model_reply(text: str) -> dict[str, Any]:
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except ValueError as error:
        logger.error("model.reply_unparseable reply=%r", text[:500])
        raise SchemaError(f"Model reply is not valid JSON: {error}") from error

    if not isinstance(data, dict):
        raise SchemaError("Model reply is not a JSON object")
    return data


def _clean_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped or stripped.lower() in NULL_TOKENS:
            return None
        return stripped
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _to_minutes(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        return None
    return minutes if minutes >= 0 else None


def _text_block(value: Any) -> str:
    if isinstance(value, list):
        lines = [_clean_str(item) for item in value]
        return "\n".join(line for line in lines if line)
    return _clean_str(value) or ""


def _with_source_trailer(notes: Optional[str], source_url: Optional[str]) -> Optional[str]:
    if not source_url or (notes and SOURCE_TRAILER_PREFIX.lower() in notes.lower()):
        return notes
    trailer = f"{SOURCE_TRAILER_PREFIX} {source_url}"
    return f"{notes}\n{trailer}" if notes else trailer


def build_recipe_record(data: dict[str, Any], source_url: Optional[str] = None) -> RecipeRecord:
    title = _clean_str(data.get("title"))
    if not title:
        error_text = _clean_str(data.get("error"))
        if error_text:
            raise NoRecipeFoundError(error_text)
        raise SchemaError("Model reply has no recipe title")

    try:
        return RecipeRecord(
            title=title,
            category=data.get("category"),
            cuisine=_clean_str(data.get("cuisine")),
            servings=_clean_str(data.get("servings")),
            prep_time_minutes=_to_minutes(data.get("prep_time_minutes")),
            cook_time_minutes=_to_minutes(data.get("cook_time_minutes")),
            ingredients=_text_block(data.get("ingredients")),
            steps=_text_block(data.get("steps")),
            source_url=_clean_str(data.get("source_url")) or source_url,
            notes=_with_source_trailer(_clean_str(data.get("notes")), source_url),
        )
    except ValidationError as error:
        raise SchemaError(f"Model reply does not match the recipe schema: {error}") from error


async def normalize(
    content: str,
    api_key: Optional[str],
    *,
    source_url: Optional[str] = None,
    models: Optional[Sequence[str]] = None,
    generator: Optional[ModelGenerator] = None,
    telemetry: Optional[TelemetrySink] = None,
) -> RecipeRecord:
    generate = generator or GeminiClient(api_key or "").generate
    prompt = build_recipe_prompt(content, source_url)

    text = await generate_with_fallback(
        prompt,
        tuple(models) if models is not None else DEFAULT_MODELS,
        generate,
        telemetry or LoggingTelemetrySink(),
    )
    return build_recipe_record(parse_model_reply(text), source_url)
