from __future__ import annotations

from google import genai

from recipebook.services.errors import ModelConfigurationError, ServiceError

RATE_LIMIT_STATUS_CODES = {429, 503}
RATE_LIMIT_MARKERS = ("RESOURCE_EXHAUSTED", "UNAVAILABLE", "429", "503")


class EmptyModelResponseError(ServiceError):
    pass


def is_rate_limited_error(exc: BaseException) -> bool:
    status_code = getattr(exc, "code", None) or getattr(exc, "status_code", None)
    if status_code in RATE_LIMIT_STATUS_CODES:
        return True
    message = str(exc)
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


class GeminiClient:
    def __init__(self, api_key: str) -> None:
        self.api_key = api_key
        self._client = self._configure_api()

    def _configure_api(self) -> genai.Client:
        if not self.api_key:
            raise ModelConfigurationError("Missing Gemini API key.")
        return genai.Client(api_key=self.api_key)

    async def generate(self, prompt: str, model_name: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=model_name,
            contents=prompt,
        )
        text = response.text
        if not text:
            raise EmptyModelResponseError(f"Model {model_name} returned no text content.")
        return text
