# recipebook/app/routers/parse_recipe.py
from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from recipebook.app.config import Settings, get_settings
from recipebook.app.deps import get_telemetry_sink
from recipebook.app.schemas.recipes import ParseRecipeRequest, ParseRecipeResponse
from recipebook.services.errors import (
    ExtractionError,
    FetchError,
    ModelConfigurationError,
    ModelError,
    NoRecipeFoundError,
    SchemaError,
)
from recipebook.services.pipeline import parse_recipe as run_pipeline
from recipebook.services.telemetry import TelemetrySink

log = logging.getLogger("parse_recipe")
router = APIRouter(prefix="/api", tags=["parse"])

MANUAL_ENTRY_HINT = "Please paste the recipe text manually instead."


@router.post("/parse-recipe", response_model=ParseRecipeResponse)
async def parse_recipe(
    body: Any = Body(None),
    settings: Settings = Depends(get_settings),
    telemetry: TelemetrySink = Depends(get_telemetry_sink),
) -> ParseRecipeResponse:
    # any JSON value is accepted so a non-object body is a 400, not a 422
    user_input = ParseRecipeRequest.model_validate(body).input if isinstance(body, dict) else None
    if not isinstance(user_input, str) or not user_input.strip():
        raise HTTPException(
            status_code=400,
            detail="Invalid input. Please provide a URL or recipe text.",
        )

    api_key = settings.gemini_api_key
    if not api_key:
        log.error("parse.config_error missing GEMINI_API_KEY")
        raise HTTPException(status_code=500, detail="Server configuration error: model credential is missing.")

    t0 = time.time()
    log.info("parse.start input_len=%d", len(user_input))
    try:
        recipe = await run_pipeline(
            user_input,
            api_key,
            models=settings.GEMINI_MODELS,
            telemetry=telemetry,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            languages=settings.TRANSCRIPT_LANGUAGES,
        )
    except NoRecipeFoundError as exc:
        log.warning("parse.no_recipe reason=%s", exc)
        raise HTTPException(status_code=422, detail=f"No recipe found in the provided content: {exc}") from exc
    except (FetchError, ExtractionError) as exc:
        log.warning("parse.extract_fail error=%s dt=%.2fs", exc, time.time() - t0)
        raise HTTPException(status_code=422, detail=f"{exc}. {MANUAL_ENTRY_HINT}") from exc
    except ModelConfigurationError as exc:
        log.error("parse.config_error error=%s", exc)
        raise HTTPException(status_code=500, detail="Server configuration error: model credential is missing.") from exc
    except SchemaError as exc:
        log.error("parse.schema_fail error=%s", exc)
        raise HTTPException(
            status_code=500,
            detail="Failed to parse recipe. Please try again or enter recipe manually.",
        ) from exc
    except ModelError as exc:
        log.error("parse.model_fail error=%s dt=%.2fs", exc, time.time() - t0)
        raise HTTPException(status_code=500, detail="Failed to parse recipe. Please try again.") from exc
    except Exception as exc:
        log.exception("parse.fail dt=%.2fs", time.time() - t0)
        raise HTTPException(status_code=500, detail="Failed to parse recipe. Please try again.") from exc

    log.info("parse.ok title=%s dt=%.2fs", recipe.title, time.time() - t0)
    return ParseRecipeResponse(recipe=recipe)
