"""Pydantic models for completion requests and structured LLM outputs."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SummaryKind(str, Enum):
    """Granularity at which a summary is produced."""
    FILE = "file"
    FOLDER = "folder"
    REPOSITORY = "repository"


class SamplingConfig(BaseModel):
    """Sampling parameters sent with every completion request."""
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, gt=0, description="Maximum tokens in the completion")
    top_p: float = Field(default=1.0, ge=0.0, le=1.0)
    frequency_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    presence_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)

    @classmethod
    def from_config(cls, config: dict) -> "SamplingConfig":
        """Build from a config dict as returned by `gitsum.utils.load_config`."""
        defaults = cls()
        return cls(
            temperature=config.get("temperature", defaults.temperature),
            max_tokens=config.get("max_completion_tokens", defaults.max_tokens),
            top_p=config.get("top_p", defaults.top_p),
            frequency_penalty=config.get("frequency_penalty", defaults.frequency_penalty),
            presence_penalty=config.get("presence_penalty", defaults.presence_penalty),
        )


class ChatMessage(BaseModel):
    role: str = "user"
    content: str


class ChatRequest(BaseModel):
    """Body of an OpenAI-compatible chat completion request."""
    model: str
    messages: list[ChatMessage]
    temperature: float
    max_tokens: int
    top_p: float
    frequency_penalty: float
    presence_penalty: float

    @classmethod
    def build(cls, prompt: str, model: str, sampling: Optional[SamplingConfig] = None) -> "ChatRequest":
        sampling = sampling or SamplingConfig()
        return cls(
            model=model,
            messages=[ChatMessage(content=prompt)],
            **sampling.model_dump(),
        )


class ChatChoice(BaseModel):
    message: ChatMessage


class ChatResponse(BaseModel):
    """The parts of a chat completion response the client reads."""
    choices: list[ChatChoice] = Field(..., min_length=1)
    usage: Optional[dict] = None


class SummaryResult(BaseModel):
    """Answer schema the model must return at every granularity."""
    summary: str = Field(..., description="Natural-language summary of the node")


__all__ = [
    "ChatChoice",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "SamplingConfig",
    "SummaryKind",
    "SummaryResult",
]
