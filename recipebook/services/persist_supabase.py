from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from recipebook.services.errors import RecipeNotFoundError
from recipebook.services.persist_models import RecipeRecord, StoredRecipe

RECIPES_TABLE = "recipes"
LIST_COLUMNS = "id,title,category,created_at"


def _row_from_record(record: RecipeRecord) -> Dict[str, Any]:
    return record.model_dump()


def _stored_from_row(row: Dict[str, Any]) -> StoredRecipe:
    data = dict(row)
    data["id"] = str(data.get("id"))
    if data.get("user_id") is not None:
        data["user_id"] = str(data["user_id"])
    data["is_published"] = bool(data.get("is_published"))
    if data.get("created_at") is not None:
        data["created_at"] = str(data["created_at"])
    return StoredRecipe.model_validate(data)


def select_recipe(supa: Client, recipe_id: str) -> Optional[StoredRecipe]:
    response = (
        supa.table(RECIPES_TABLE)
        .select("*")
        .eq("id", recipe_id)
        .limit(1)
        .execute()
    )
    rows = response.data or []
    return _stored_from_row(rows[0]) if rows else None


def list_published_recipes(supa: Client) -> List[Dict[str, Any]]:
    response = (
        supa.table(RECIPES_TABLE)
        .select(LIST_COLUMNS)
        .eq("is_published", True)
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def list_user_recipes(supa: Client, owner_id: str) -> List[Dict[str, Any]]:
    response = (
        supa.table(RECIPES_TABLE)
        .select(LIST_COLUMNS)
        .eq("user_id", owner_id)
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def insert_recipe(
    supa: Client,
    owner_id: str,
    record: RecipeRecord,
    is_published: bool = True,
) -> str:
    row = _row_from_record(record)
    row.update(
        {
            "user_id": owner_id,
            "is_published": is_published,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
    )
    response = supa.table(RECIPES_TABLE).insert(row).execute()
    rows = response.data or []
    if not rows:
        raise RuntimeError("Insert returned no rows")
    return str(rows[0]["id"])


def update_recipe(
    supa: Client,
    recipe_id: str,
    owner_id: str,
    record: RecipeRecord,
    is_published: Optional[bool] = None,
) -> StoredRecipe:
    """Replace a recipe's fields. Only the owner's row can match."""
    row = _row_from_record(record)
    if is_published is not None:
        row["is_published"] = is_published

    response = (
        supa.table(RECIPES_TABLE)
        .update(row)
        .eq("id", recipe_id)
        .eq("user_id", owner_id)
        .execute()
    )
    rows = response.data or []
    if not rows:
        raise RecipeNotFoundError(recipe_id)
    return _stored_from_row(rows[0])
