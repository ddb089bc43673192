"""LLM client, prompts and models for hierarchical summarization."""

from .llm_adapter import ChatCompletionClient, Summarizer, parse_summary
from .models import ChatRequest, SamplingConfig, SummaryKind, SummaryResult
from .prompts import summary_prompt

__all__ = [
    "ChatCompletionClient",
    "ChatRequest",
    "SamplingConfig",
    "Summarizer",
    "SummaryKind",
    "SummaryResult",
    "parse_summary",
    "summary_prompt",
]
