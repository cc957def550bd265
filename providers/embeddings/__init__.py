"""Embedding providers package for RagSearch - concrete embedding implementations."""

from .openai_provider import OpenAIEmbeddingProvider

__all__ = [
    "OpenAIEmbeddingProvider",
]
