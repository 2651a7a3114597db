# recipebook/app/routers/recipes.py
from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from supabase import Client

from recipebook.app.deps import CurrentUser, get_current_user, get_optional_user, get_supabase
from recipebook.app.schemas.recipes import (
    IngredientRowOut,
    RecipeDetailResponse,
    RecipeDisplay,
    RecipeListResponse,
    RecipeSummary,
    RecipeWriteRequest,
    RecipeWriteResponse,
    StepRowOut,
)
from recipebook.services.display import parse_ingredients, parse_steps
from recipebook.services.errors import RecipeNotFoundError
from recipebook.services.persist_models import StoredRecipe
from recipebook.services.persist_supabase import (
    insert_recipe,
    list_published_recipes,
    list_user_recipes,
    select_recipe,
    update_recipe,
)

log = logging.getLogger("recipes")
router = APIRouter(prefix="/recipes", tags=["recipes"])


def build_display(recipe: StoredRecipe) -> RecipeDisplay:
    ingredient_rows = parse_ingredients(recipe.ingredients)
    step_rows = parse_steps(recipe.steps)
    return RecipeDisplay(
        ingredients=(
            [IngredientRowOut(**asdict(row)) for row in ingredient_rows]
            if ingredient_rows is not None
            else None
        ),
        steps=[StepRowOut(**asdict(row)) for row in step_rows] if step_rows is not None else None,
    )


def _summaries(rows: list[dict]) -> RecipeListResponse:
    items = [
        RecipeSummary(id=str(row.get("id")), title=row.get("title") or "Untitled", category=row.get("category"))
        for row in rows
    ]
    return RecipeListResponse(items=items)


@router.get("", response_model=RecipeListResponse)
async def list_recipes(supa: Client = Depends(get_supabase)) -> RecipeListResponse:
    rows = await run_in_threadpool(list_published_recipes, supa)
    return _summaries(rows)


@router.get("/mine", response_model=RecipeListResponse)
async def list_my_recipes(
    user: CurrentUser = Depends(get_current_user),
    supa: Client = Depends(get_supabase),
) -> RecipeListResponse:
    rows = await run_in_threadpool(list_user_recipes, supa, user.id)
    return _summaries(rows)


@router.get("/{recipe_id}", response_model=RecipeDetailResponse)
async def get_recipe(
    recipe_id: str,
    user: CurrentUser | None = Depends(get_optional_user),
    supa: Client = Depends(get_supabase),
) -> RecipeDetailResponse:
    recipe = await run_in_threadpool(select_recipe, supa, recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    if not recipe.is_published and (user is None or user.id != recipe.user_id):
        raise HTTPException(status_code=404, detail="Recipe not found")

    # rows are derived from the stored text on every read
    return RecipeDetailResponse(recipe=recipe, display=build_display(recipe))


@router.post("", response_model=RecipeWriteResponse, status_code=201)
async def create_recipe(
    body: RecipeWriteRequest,
    user: CurrentUser = Depends(get_current_user),
    supa: Client = Depends(get_supabase),
) -> RecipeWriteResponse:
    try:
        recipe_id = await run_in_threadpool(insert_recipe, supa, user.id, body.recipe, body.is_published)
    except Exception as exc:
        log.exception("recipes.insert_fail owner=%s", user.id)
        raise HTTPException(status_code=500, detail="Failed to save recipe") from exc
    log.info("recipes.insert_ok recipe=%s owner=%s", recipe_id, user.id)
    return RecipeWriteResponse(id=recipe_id)


@router.put("/{recipe_id}", response_model=RecipeWriteResponse)
async def replace_recipe(
    recipe_id: str,
    body: RecipeWriteRequest,
    user: CurrentUser = Depends(get_current_user),
    supa: Client = Depends(get_supabase),
) -> RecipeWriteResponse:
    try:
        stored = await run_in_threadpool(
            update_recipe,
            supa,
            recipe_id,
            user.id,
            body.recipe,
            body.is_published,
        )
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Recipe not found") from exc
    except Exception as exc:
        log.exception("recipes.update_fail recipe=%s owner=%s", recipe_id, user.id)
        raise HTTPException(status_code=500, detail="Failed to update recipe") from exc
    log.info("recipes.update_ok recipe=%s owner=%s", recipe_id, user.id)
    return RecipeWriteResponse(id=stored.id)
