"""keypool LLM package - LiteLLM requests backed by the credential pool."""

from keypool.llm.client import RotatingLLMClient

__all__ = [
    "RotatingLLMClient",
]
