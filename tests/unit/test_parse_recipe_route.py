from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from recipebook.app.config import Settings, get_settings
from recipebook.app.deps import get_telemetry_sink
from recipebook.app.main import app
from recipebook.app.routers import parse_recipe as parse_recipe_module
from recipebook.services.errors import (
    ExtractionError,
    FetchError,
    ModelError,
    NoContentError,
    NoRecipeFoundError,
    SchemaError,
)
from recipebook.services.persist_models import RecipeRecord
from recipebook.services.telemetry import LoggingTelemetrySink

RECIPE = RecipeRecord(
    title="Pancakes",
    category="Breakfast",
    prep_time_minutes=10,
    cook_time_minutes=15,
    ingredients="Flour – 2 cups\nSugar – 1 tbsp",
    steps="1. Mix.\n2. Fry.",
)


class PipelineStub:
    def __init__(self, result: Any) -> None:
        self.result = result
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, user_input: str, api_key: str, **kwargs: Any) -> RecipeRecord:
        self.calls.append((user_input, api_key))
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


@pytest.fixture
def client():
    app.dependency_overrides[get_settings] = lambda: Settings(GEMINI_API_KEY="test-key", GEMINI_MODELS=["m1", "m2"])
    app.dependency_overrides[get_telemetry_sink] = LoggingTelemetrySink
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _use_pipeline(monkeypatch: pytest.MonkeyPatch, result: Any) -> PipelineStub:
    stub = PipelineStub(result)
    monkeypatch.setattr(parse_recipe_module, "run_pipeline", stub)
    return stub


class TestParseRecipeValidation:
    def test_missing_input(self, client: TestClient) -> None:
        response = client.post("/api/parse-recipe", json={})
        assert response.status_code == 400

    def test_non_string_input(self, client: TestClient) -> None:
        response = client.post("/api/parse-recipe", json={"input": 123})
        assert response.status_code == 400

    def test_blank_input(self, client: TestClient) -> None:
        response = client.post("/api/parse-recipe", json={"input": "   "})
        assert response.status_code == 400

    @pytest.mark.parametrize("body", ["abc", [1, 2], 5])
    def test_non_object_body(self, client: TestClient, body: Any) -> None:
        response = client.post("/api/parse-recipe", json=body)
        assert response.status_code == 400

    def test_empty_body(self, client: TestClient) -> None:
        response = client.post("/api/parse-recipe")
        assert response.status_code == 400

    def test_missing_credential(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        stub = _use_pipeline(monkeypatch, RECIPE)
        app.dependency_overrides[get_settings] = lambda: Settings(GEMINI_API_KEY=None)

        response = client.post("/api/parse-recipe", json={"input": "some recipe text"})

        assert response.status_code == 500
        assert stub.calls == []


class TestParseRecipeSuccess:
    def test_returns_recipe(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        stub = _use_pipeline(monkeypatch, RECIPE)

        response = client.post("/api/parse-recipe", json={"input": "Pancakes: flour, sugar, mix, fry."})

        assert response.status_code == 200
        body = response.json()
        assert body["recipe"]["title"] == "Pancakes"
        assert body["recipe"]["total_time_minutes"] == 25
        assert stub.calls == [("Pancakes: flour, sugar, mix, fry.", "test-key")]


class TestParseRecipeErrors:
    @pytest.mark.parametrize(
        "error",
        [
            FetchError("Failed to access URL (403)", status_code=403),
            NoContentError("Could not extract meaningful content from the URL"),
            ExtractionError("No description or transcript found"),
        ],
    )
    def test_extraction_failures_are_422(
        self,
        client: TestClient,
        monkeypatch: pytest.MonkeyPatch,
        error: Exception,
    ) -> None:
        _use_pipeline(monkeypatch, error)

        response = client.post("/api/parse-recipe", json={"input": "https://example.com/recipe"})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert str(error) in detail
        assert "paste the recipe" in detail

    def test_no_recipe_is_422(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        _use_pipeline(monkeypatch, NoRecipeFoundError("The text is a poem"))

        response = client.post("/api/parse-recipe", json={"input": "Roses are red"})

        assert response.status_code == 422

    def test_model_failure_is_generic_500(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        _use_pipeline(monkeypatch, ModelError("All candidate models failed: secret upstream detail"))

        response = client.post("/api/parse-recipe", json={"input": "recipe text"})

        assert response.status_code == 500
        assert "secret upstream detail" not in response.json()["detail"]

    def test_schema_failure_is_500(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        _use_pipeline(monkeypatch, SchemaError("Model reply is not valid JSON"))

        response = client.post("/api/parse-recipe", json={"input": "recipe text"})

        assert response.status_code == 500
        assert "parse recipe" in response.json()["detail"]


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"ok": True}
