import logging

import httpx
from providers.base import BaseProvider

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(BaseProvider):
    """Provider for OpenRouter AI using standard httpx."""

    def __init__(self, api_key: str, model: str, referer: str = "", site_name: str = "",
                 timeout: float = 60.0, base_url: str = OPENROUTER_BASE_URL, transport=None):
        self.api_key = api_key
        self._model = model
        self.referer = referer
        self.site_name = site_name
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self._transport = transport  # httpx.MockTransport in tests

    @property
    def name(self) -> str:
        return "openrouter"

    @property
    def model(self) -> str:
        return self._model

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.referer,
            "X-Title": self.site_name,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _failed(self, error: str) -> dict:
        return {
            "text": None,
            "provider": self.name,
            "model": self._model,
            "status": "failed",
            "error": error,
        }

    async def chat(self, messages: list[dict], max_tokens: int = 1000, temperature: float = 0.7) -> dict:
        body = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        try:
            async with self._client() as client:
                response = await client.post(f"{self.base_url}/chat/completions", headers=self._headers(), json=body)
                data = response.json()

            error = data.get("error") if isinstance(data, dict) else None
            if response.status_code >= 400 or error:
                message = error.get("message") if isinstance(error, dict) else error
                return self._failed(f"OpenRouter API error: {message or response.status_code}")

            choices = (data.get("choices") if isinstance(data, dict) else None) or []
            text = choices[0].get("message", {}).get("content") if choices else None
            if not text:
                logger.error("OpenRouter API returned unexpected format: %s", data)
                return self._failed("Invalid response format from OpenRouter API")

            return {
                "text": text,
                "provider": self.name,
                "model": self._model,
                "status": "success",
                "error": None,
            }
        except httpx.TimeoutException:
            return self._failed("Timeout")
        except (httpx.HTTPError, ValueError) as e:
            return self._failed(str(e))

    async def list_models(self) -> list[str] | None:
        try:
            async with self._client() as client:
                response = await client.get(f"{self.base_url}/models", headers=self._headers())
                response.raise_for_status()
                data = response.json()
            return [m.get("id", "") for m in data.get("data", [])]
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("OpenRouter API test failed: %s", e)
            return None
