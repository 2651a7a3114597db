from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from recipebook.app.deps import CurrentUser, get_current_user, get_optional_user, get_supabase
from recipebook.app.main import app
from recipebook.app.routers import recipes as recipes_module
from recipebook.services.errors import RecipeNotFoundError
from recipebook.services.persist_models import RecipeRecord, StoredRecipe

OWNER = CurrentUser(id="user-1", email="cook@example.com")
STRANGER = CurrentUser(id="user-2")

STORED = StoredRecipe(
    id="42",
    user_id=OWNER.id,
    is_published=True,
    title="Butter Chicken",
    category="Curry",
    ingredients="Chicken – 500 g\nMarination\nYogurt – 1 cup",
    steps="1. Marinate the chicken.\nTo make the sauce\n2. Melt butter.",
)


class StorageStub:
    def __init__(self) -> None:
        self.recipes: dict[str, StoredRecipe] = {STORED.id: STORED}
        self.inserted: list[tuple[str, RecipeRecord, bool]] = []
        self.updated: list[tuple[str, str, RecipeRecord]] = []

    def select_recipe(self, supa: Any, recipe_id: str) -> StoredRecipe | None:
        return self.recipes.get(recipe_id)

    def list_published_recipes(self, supa: Any) -> list[dict]:
        return [
            {"id": r.id, "title": r.title, "category": r.category}
            for r in self.recipes.values()
            if r.is_published
        ]

    def list_user_recipes(self, supa: Any, owner_id: str) -> list[dict]:
        return [
            {"id": r.id, "title": r.title, "category": r.category}
            for r in self.recipes.values()
            if r.user_id == owner_id
        ]

    def insert_recipe(self, supa: Any, owner_id: str, record: RecipeRecord, is_published: bool = True) -> str:
        self.inserted.append((owner_id, record, is_published))
        return "new-id"

    def update_recipe(
        self,
        supa: Any,
        recipe_id: str,
        owner_id: str,
        record: RecipeRecord,
        is_published: bool | None = None,
    ) -> StoredRecipe:
        existing = self.recipes.get(recipe_id)
        if existing is None or existing.user_id != owner_id:
            raise RecipeNotFoundError(recipe_id)
        self.updated.append((recipe_id, owner_id, record))
        return StoredRecipe(id=recipe_id, user_id=owner_id, **record.model_dump())


@pytest.fixture
def storage(monkeypatch: pytest.MonkeyPatch) -> StorageStub:
    stub = StorageStub()
    for name in (
        "select_recipe",
        "list_published_recipes",
        "list_user_recipes",
        "insert_recipe",
        "update_recipe",
    ):
        monkeypatch.setattr(recipes_module, name, getattr(stub, name))
    return stub


@pytest.fixture
def client(storage: StorageStub):
    app.dependency_overrides[get_supabase] = lambda: object()
    app.dependency_overrides[get_optional_user] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _sign_in(user: CurrentUser) -> None:
    app.dependency_overrides[get_optional_user] = lambda: user
    app.dependency_overrides[get_current_user] = lambda: user


class TestReadRecipes:
    def test_list_published(self, client: TestClient) -> None:
        response = client.get("/recipes")
        assert response.status_code == 200
        assert response.json()["items"] == [{"id": "42", "title": "Butter Chicken", "category": "Curry"}]

    def test_detail_includes_display_rows(self, client: TestClient) -> None:
        response = client.get("/recipes/42")

        assert response.status_code == 200
        display = response.json()["display"]
        assert display["ingredients"][0] == {"ingredient": "Chicken", "quantity": "500 g", "is_header": False}
        assert display["ingredients"][1] == {"ingredient": "Marination", "quantity": "", "is_header": True}
        assert [row["is_header"] for row in display["steps"]] == [False, True, False]
        assert display["steps"][2]["number"] == "2"

    def test_display_rows_are_stable_across_reads(self, client: TestClient) -> None:
        first = client.get("/recipes/42").json()["display"]
        second = client.get("/recipes/42").json()["display"]
        assert first == second

    def test_unknown_recipe(self, client: TestClient) -> None:
        assert client.get("/recipes/missing").status_code == 404

    def test_unpublished_recipe_hidden_from_others(self, client: TestClient, storage: StorageStub) -> None:
        storage.recipes["7"] = StoredRecipe(id="7", user_id=OWNER.id, is_published=False, title="Secret Stew")

        assert client.get("/recipes/7").status_code == 404
        _sign_in(OWNER)
        assert client.get("/recipes/7").status_code == 200

    def test_my_recipes_requires_user(self, client: TestClient) -> None:
        assert client.get("/recipes/mine").status_code == 401

    def test_my_recipes(self, client: TestClient) -> None:
        _sign_in(OWNER)
        response = client.get("/recipes/mine")
        assert [item["id"] for item in response.json()["items"]] == ["42"]


class TestWriteRecipes:
    def test_create_requires_user(self, client: TestClient) -> None:
        response = client.post("/recipes", json={"recipe": {"title": "Toast"}})
        assert response.status_code == 401

    def test_create(self, client: TestClient, storage: StorageStub) -> None:
        _sign_in(OWNER)
        response = client.post(
            "/recipes",
            json={"recipe": {"title": "Toast", "prep_time_minutes": 1, "cook_time_minutes": 3}, "is_published": False},
        )

        assert response.status_code == 201
        assert response.json() == {"id": "new-id"}
        owner_id, record, is_published = storage.inserted[0]
        assert owner_id == OWNER.id
        assert record.total_time_minutes == 4
        assert is_published is False

    def test_update_by_owner(self, client: TestClient, storage: StorageStub) -> None:
        _sign_in(OWNER)
        response = client.put("/recipes/42", json={"recipe": {"title": "Butter Chicken v2"}})

        assert response.status_code == 200
        assert storage.updated[0][2].title == "Butter Chicken v2"

    def test_update_by_stranger(self, client: TestClient, storage: StorageStub) -> None:
        _sign_in(STRANGER)
        response = client.put("/recipes/42", json={"recipe": {"title": "Hijacked"}})

        assert response.status_code == 404
        assert storage.updated == []
