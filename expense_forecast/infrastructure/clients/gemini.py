"""Gemini generateContent client used as the forecast oracle"""

from typing import Optional

import httpx

from expense_forecast.config import settings
from expense_forecast.domain.exceptions import OracleUnavailableError


class GeminiOracle:
    """Sends one prompt per call and returns the first candidate's text"""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.gemini_api_key
        self.base_url = base_url or settings.gemini_api_base
        self.model = model or settings.gemini_model
        self.timeout = timeout or settings.oracle_timeout_seconds
        self.transport = transport

    def _request_body(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": settings.gemini_temperature,
                "topK": settings.gemini_top_k,
                "topP": settings.gemini_top_p,
                "maxOutputTokens": settings.gemini_max_output_tokens,
            },
        }

    async def complete(self, prompt: str) -> str:
        """
        Request a completion for `prompt`.

        Single attempt, no retry.

        Raises:
            OracleUnavailableError: Missing API key, timeout, HTTP error, or empty response
        """
        if not self.api_key:
            raise OracleUnavailableError("Gemini API key is not configured")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    json=self._request_body(prompt),
                    headers={"x-goog-api-key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()
                text = data["candidates"][0]["content"]["parts"][0]["text"]

            except httpx.TimeoutException as e:
                raise OracleUnavailableError(f"Gemini API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise OracleUnavailableError(f"Gemini API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise OracleUnavailableError(f"Gemini API unreachable: {e}") from e
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise OracleUnavailableError(f"No text in Gemini response: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise OracleUnavailableError("Empty response from Gemini")
        return text
