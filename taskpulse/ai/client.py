"""Client for an OpenAI-compatible chat-completions endpoint."""

import logging
from typing import Optional

import httpx

from ..domain.errors import RemoteServiceError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-3.5-turbo"


class ChatCompletionClient:
    """Sends a system+user message pair and returns the reply text."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            api_key: Bearer token for the endpoint
            model: Model name sent with every request
            base_url: API root, without the trailing /chat/completions
            http_client: Optional HTTP client for testing
        """
        self._api_key = api_key
        self._model = model
        self._url = f"{base_url.rstrip('/')}/chat/completions"
        self._http_client = http_client

    @property
    def model(self) -> str:
        return self._model

    def _build_payload(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> dict:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

    def _build_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Request a completion.

        Args:
            system_prompt: Instructions for the model
            user_prompt: The question
            max_tokens: Upper bound on reply length
            temperature: Sampling temperature

        Returns:
            Reply text from choices[0].message.content

        Raises:
            RemoteServiceError: On transport errors, a request that cannot be
                built (bad URL, unencodable key), non-2xx status or an
                unparseable body
        """
        payload = self._build_payload(system_prompt, user_prompt, max_tokens, temperature)

        client = self._http_client or httpx.AsyncClient()
        try:
            response = await client.post(
                self._url,
                json=payload,
                headers=self._build_headers(),
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise RemoteServiceError(f"Request to language model failed: {e}") from e
        finally:
            if not self._http_client:
                await client.aclose()

        if not 200 <= response.status_code < 300:
            raise RemoteServiceError(
                f"Language model API error {response.status_code}: {response.text}"
            )

        try:
            body = response.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise RemoteServiceError(f"Malformed language model response: {e}") from e

        if not isinstance(content, str):
            raise RemoteServiceError("Malformed language model response: content is not text")

        logger.debug(f"Received {len(content)} characters from {self._model}")
        return content
