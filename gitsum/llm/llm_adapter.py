"""Chat completion client and the summarization adapter built on top of it.

`ChatCompletionClient` talks to an OpenAI-compatible `/chat/completions`
endpoint and returns the text of the first choice. `Summarizer` turns a
granularity and a context into one completion request and parses the answer
into a `SummaryResult`.
"""

from typing import Optional, Protocol

import httpx
from pydantic import ValidationError

from ..errors import InvalidResponseError, TransportError
from ..utils import get_logger
from .models import ChatRequest, ChatResponse, SamplingConfig, SummaryKind, SummaryResult
from .prompts import summary_prompt

logger = get_logger(__name__)


class CompletionClient(Protocol):
    """Anything that can answer a chat request with the first choice's text."""
    api_key: str
    model: str

    async def request(self, chat_request: ChatRequest) -> str: ...


class ChatCompletionClient:
    """Client for the OpenAI chat completion API (or any compatible endpoint)."""

    def __init__(
        self,
        api_key: str,
        api_base: str = "https://api.openai.com/v1/chat/completions",
        model: str = "gpt-3.5-turbo",
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the completion client.

        Args:
            api_key: API key sent as a bearer token.
            api_base: Full URL of the chat completions endpoint.
            model: Model identifier (e.g., "gpt-3.5-turbo").
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to fake the service in tests.
        """
        self.api_key = api_key
        self.api_base = api_base
        self.model = model
        self.timeout = timeout
        self.transport = transport

    async def request(self, chat_request: ChatRequest) -> str:
        """
        Send one chat completion request.

        Returns:
            The content of the first choice's message, stripped.

        Raises:
            TransportError: If the request cannot be completed or returns a non-2xx status.
            InvalidResponseError: If the response body is not a completion with at least one choice.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.api_base,
                    json=chat_request.model_dump(),
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransportError(f"API request timed out after {self.timeout}s: {e}") from e
        except httpx.HTTPStatusError as e:
            error_detail = getattr(e.response, "text", "")
            raise TransportError(
                f"API returned status {e.response.status_code} for model '{chat_request.model}': {error_detail}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to reach API endpoint {self.api_base}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"API returned a non-JSON body: {e}") from e

        try:
            completion = ChatResponse.model_validate(data)
        except ValidationError as e:
            raise InvalidResponseError(response.text, f"unexpected completion response: {e}") from e

        self._log_token_usage(completion.usage or {})

        return completion.choices[0].message.content.strip()

    @staticmethod
    def _log_token_usage(usage: dict) -> None:
        """Log token usage statistics if available."""
        prompt_tokens = usage.get("prompt_tokens", 0)
        completion_tokens = usage.get("completion_tokens", 0)
        total_tokens = usage.get("total_tokens", 0)

        if prompt_tokens or completion_tokens:
            logger.info(f"Token usage - Input: {prompt_tokens}, Output: {completion_tokens}, Total: {total_tokens}")


class Summarizer:
    """Produces a SummaryResult for a file, folder or repository context."""

    def __init__(self, client: CompletionClient, sampling: Optional[SamplingConfig] = None):
        self.client = client
        self.sampling = sampling or SamplingConfig()

    @property
    def api_key(self) -> str:
        return self.client.api_key

    async def summarize(self, kind: SummaryKind, context: str) -> SummaryResult:
        """
        Summarize `context` at granularity `kind` with exactly one completion request.

        Raises:
            InvalidResponseError: If the answer is not JSON matching {"summary": str}.
            TransportError: If the request fails.
        """
        prompt = summary_prompt(kind, context)
        chat_request = ChatRequest.build(prompt, self.client.model, self.sampling)
        raw = await self.client.request(chat_request)
        return parse_summary(raw)


def parse_summary(raw: str) -> SummaryResult:
    """Parse a model answer as strict JSON `{"summary": str}`."""
    try:
        return SummaryResult.model_validate_json(raw)
    except ValidationError as e:
        logger.error(f"Failed to parse LLM response: {raw!r}")
        raise InvalidResponseError(raw, str(e)) from e


__all__ = [
    "ChatCompletionClient",
    "CompletionClient",
    "Summarizer",
    "parse_summary",
]
