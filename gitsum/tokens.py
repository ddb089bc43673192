"""Token counting and the size gate applied to file contents.

The counter is a plain object with a `count(text) -> int` method so tests can
swap the BPE table for something deterministic and cheap.
"""

from typing import Optional, Protocol

import tiktoken

from .errors import TokenBudgetExceeded

DEFAULT_TOKEN_LIMIT = 4096


class TokenCounter(Protocol):
    def count(self, text: str) -> int: ...


class TiktokenCounter:
    """Counts tokens with the BPE vocabulary of the configured model."""

    def __init__(self, model: str = "gpt-3.5-turbo"):
        self.model = model
        self._encoding = None

    @property
    def encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            try:
                self._encoding = tiktoken.encoding_for_model(self.model)
            except KeyError:
                self._encoding = tiktoken.get_encoding("cl100k_base")
        return self._encoding

    def count(self, text: str) -> int:
        return len(self.encoding.encode(text, disallowed_special=()))


class TokenGate:
    """Decides whether a piece of text fits the token budget."""

    def __init__(self, counter: Optional[TokenCounter] = None):
        self.counter = counter or TiktokenCounter()

    def count(self, content: str) -> int:
        return self.counter.count(content)

    def is_eligible(self, content: str, limit: int = DEFAULT_TOKEN_LIMIT) -> bool:
        """Return False when the token count strictly exceeds `limit`."""
        return self.count(content) <= limit

    def ensure_eligible(self, name: str, content: str, limit: int = DEFAULT_TOKEN_LIMIT) -> int:
        """Return the token count of `content` or raise TokenBudgetExceeded."""
        token_count = self.count(content)
        if token_count > limit:
            raise TokenBudgetExceeded(name, token_count, limit)
        return token_count


__all__ = [
    "DEFAULT_TOKEN_LIMIT",
    "TiktokenCounter",
    "TokenCounter",
    "TokenGate",
]
