from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from recipebook.services.persist_models import RecipeRecord, StoredRecipe


class ParseRecipeRequest(BaseModel):
    # validated by hand so a wrong type is a 400, not FastAPI's 422
    input: Any = None


class ParseRecipeResponse(BaseModel):
    recipe: RecipeRecord


class IngredientRowOut(BaseModel):
    ingredient: str
    quantity: str = ""
    is_header: bool = False


class StepRowOut(BaseModel):
    number: str = ""
    instruction: str
    is_header: bool = False


class RecipeDisplay(BaseModel):
    ingredients: Optional[list[IngredientRowOut]] = None
    steps: Optional[list[StepRowOut]] = None


class RecipeDetailResponse(BaseModel):
    recipe: StoredRecipe
    display: RecipeDisplay


class RecipeSummary(BaseModel):
    id: str
    title: str
    category: Optional[str] = None


class RecipeListResponse(BaseModel):
    items: list[RecipeSummary] = Field(default_factory=list)


class RecipeWriteRequest(BaseModel):
    recipe: RecipeRecord
    is_published: bool = True


class RecipeWriteResponse(BaseModel):
    id: str
