"""Language-model backed insight generation."""

from .client import ChatCompletionClient
from .engine import (
    Generated,
    GenerationSource,
    InsightEngine,
    fallback_accountability_message,
    fallback_insights,
)

__all__ = [
    "ChatCompletionClient",
    "Generated",
    "GenerationSource",
    "InsightEngine",
    "fallback_accountability_message",
    "fallback_insights",
]
