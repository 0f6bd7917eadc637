"""OpenAI-compatible chat-completion client."""

import logging
from typing import Any, Optional

import httpx

from foliolab.core.errors import MalformedResponseError, UpstreamUnavailableError
from foliolab.core.interfaces import LLMProvider

logger = logging.getLogger(__name__)


class ChatCompletionClient(LLMProvider):
    """Client for ``/chat/completions`` endpoints (OpenAI, Groq and compatibles).

    Requests a JSON-mode answer. There is no retry: a failed call is reported
    to the caller as an error.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        model: str,
        api_key: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 60.0,
        json_mode: bool = True,
    ) -> None:
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.json_mode = json_mode

    async def complete(self, system_prompt: str, user_content: str) -> Any:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if self.json_mode:
            payload["response_format"] = {"type": "json_object"}

        logger.debug("Calling %s model %s at %s", self.name, self.model, self.base_url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._get_headers(),
                    json=payload,
                )
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(
                self.name, f"{self.name} request timed out after {self.timeout:.0f}s"
            ) from e
        except httpx.RequestError as e:
            raise UpstreamUnavailableError(self.name, f"{self.name} request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamUnavailableError(
                self.name,
                f"{self.name} API error {response.status_code}: {self._error_message(response)}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(self.name, f"{self.name} returned a non-JSON body") from e

    def _error_message(self, response: httpx.Response) -> str:
        """Provider error message from an OpenAI-style error body."""
        try:
            data = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str):
                return error
        return str(data)[:200]

    def _get_headers(self) -> dict[str, str]:
        headers = {"content-type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers
