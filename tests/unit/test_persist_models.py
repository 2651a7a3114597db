from __future__ import annotations

import pytest
from pydantic import ValidationError

from recipebook.services.persist_models import RECIPE_CATEGORIES, RecipeRecord, StoredRecipe


class TestRecipeRecord:
    def test_minimal_record(self) -> None:
        record = RecipeRecord(title="Toast")
        assert record.category == "Other"
        assert record.ingredients == ""
        assert record.steps == ""
        assert record.total_time_minutes is None

    def test_total_time_is_derived(self) -> None:
        record = RecipeRecord(title="Soup", prep_time_minutes=10, cook_time_minutes=30)
        assert record.total_time_minutes == 40

    def test_supplied_total_time_is_ignored(self) -> None:
        record = RecipeRecord(title="Soup", prep_time_minutes=10, total_time_minutes=500)
        assert record.total_time_minutes is None

    def test_negative_minutes_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RecipeRecord(title="Soup", prep_time_minutes=-1)

    def test_empty_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RecipeRecord(title="")

    @pytest.mark.parametrize("category", RECIPE_CATEGORIES)
    def test_known_categories_kept(self, category: str) -> None:
        assert RecipeRecord(title="x", category=category).category == category

    def test_non_string_category(self) -> None:
        assert RecipeRecord(title="x", category=None).category == "Other"


class TestStoredRecipe:
    def test_ignores_unknown_columns(self) -> None:
        stored = StoredRecipe.model_validate(
            {
                "id": "42",
                "title": "Curry",
                "category": "Curry",
                "prep_time_minutes": 15,
                "cook_time_minutes": 45,
                "is_published": True,
                "updated_at": "2024-01-01T00:00:00Z",
            }
        )
        assert stored.id == "42"
        assert stored.total_time_minutes == 60
        assert stored.is_published is True
