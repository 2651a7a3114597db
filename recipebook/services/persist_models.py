# recipebook/services/persist_models.py
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

RECIPE_CATEGORIES = (
    "Breakfast",
    "Lunch",
    "Dinner",
    "Dessert",
    "Snack",
    "Appetizer",
    "Main",
    "Side",
    "Cake",
    "Curry",
    "Pudding",
    "Other",
)
DEFAULT_CATEGORY = "Other"

_CATEGORY_LOOKUP = {name.lower(): name for name in RECIPE_CATEGORIES}


class RecipeRecord(BaseModel):
    title: str = Field(min_length=1)
    category: str = DEFAULT_CATEGORY
    cuisine: Optional[str] = None
    servings: Optional[str] = None
    prep_time_minutes: Optional[int] = Field(default=None, ge=0)
    cook_time_minutes: Optional[int] = Field(default=None, ge=0)
    total_time_minutes: Optional[int] = None
    ingredients: str = ""
    steps: str = ""
    source_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: object) -> str:
        if not isinstance(value, str):
            return DEFAULT_CATEGORY
        return _CATEGORY_LOOKUP.get(value.strip().lower(), DEFAULT_CATEGORY)

    @model_validator(mode="after")
    def _derive_total_time(self) -> "RecipeRecord":
        # total is always derived, never trusted from input
        if self.prep_time_minutes is not None and self.cook_time_minutes is not None:
            self.total_time_minutes = self.prep_time_minutes + self.cook_time_minutes
        else:
            self.total_time_minutes = None
        return self


class StoredRecipe(RecipeRecord):
    id: str
    user_id: Optional[str] = None
    is_published: bool = False
    created_at: Optional[str] = None
