"""
LiteLLM client that sends every request with the pool's active API key.

The client is the request executor the rotation policy expects: it asks the
policy for a key before each call, reports failures back, and retries when a
quota or rate-limit failure has rotated the pool to a fresh key.
"""

from __future__ import annotations

import asyncio
from typing import Any

import litellm
from rich.markup import escape
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from keypool.core.exceptions import NoCredentialAvailableError
from keypool.core.policy import RotationPolicy
from keypool.models.config import LLMConfig
from keypool.utils.logger import get_logger

# Suppress LiteLLM's verbose logging
litellm.suppress_debug_info = True

logger = get_logger(__name__)


class RotatingLLMClient:
    """
    LLM client backed by a rotating credential pool.

    Policy hooks write the pool file, so they run in a worker thread
    rather than on the event loop.

    Example:
        >>> policy = RotationPolicy(CredentialStore(), ActiveCredential())
        >>> client = RotatingLLMClient(policy, LLMConfig(model="gemini/gemini-1.5-flash"))
        >>> response = await client.complete([{"role": "user", "content": "Hello!"}])
    """

    def __init__(
        self,
        policy: RotationPolicy,
        config: LLMConfig | None = None,
        wait: wait_base | None = None,
    ):
        """
        Initialize the client.

        Args:
            policy: Rotation policy that owns the active key
            config: Model and request settings
            wait: Backoff between attempts (exponential by default)
        """
        self.policy = policy
        self.config = config or LLMConfig()
        self.wait = wait or wait_exponential(multiplier=1, min=1, max=10)

        # Token and cost tracking
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0
        self.total_tokens = 0
        self.total_cost = 0.0

    def _track_usage(self, response: Any) -> None:
        """Track token usage and cost from response."""
        if hasattr(response, "usage") and response.usage:
            usage = response.usage
            prompt_tokens = getattr(usage, "prompt_tokens", 0) or 0
            completion_tokens = getattr(usage, "completion_tokens", 0) or 0

            self.total_prompt_tokens += prompt_tokens
            self.total_completion_tokens += completion_tokens
            self.total_tokens += prompt_tokens + completion_tokens

            try:
                self.total_cost += litellm.completion_cost(completion_response=response)
            except Exception:
                # Cost calculation not available for all models
                pass

    async def complete(
        self,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate a completion, rotating keys on quota failures.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Override default temperature
            max_tokens: Override default max tokens
            **kwargs: Additional arguments passed to LiteLLM

        Returns:
            The generated text response

        Raises:
            NoCredentialAvailableError: If the pool has no key
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=self.wait,
            retry=retry_if_exception(self.policy.is_rotation_error),
            reraise=True,
        )
        return await retrying(
            self._complete_once,
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

    async def _complete_once(
        self,
        messages: list[dict[str, str]],
        temperature: float | None,
        max_tokens: int | None,
        **kwargs: Any,
    ) -> str:
        api_key = await asyncio.to_thread(self.policy.on_request_start)
        if not api_key:
            raise NoCredentialAvailableError()

        try:
            response = await litellm.acompletion(
                model=self.config.model,
                messages=messages,
                temperature=temperature if temperature is not None else self.config.temperature,
                max_tokens=max_tokens or self.config.max_tokens,
                timeout=self.config.timeout,
                api_key=api_key,
                **kwargs,
            )
        except Exception as e:
            if await asyncio.to_thread(self.policy.on_request_error, e):
                logger.debug(f"Quota error from {escape(self.config.model)}, retrying with next key")
            raise

        await asyncio.to_thread(self.policy.on_request_success)
        self._track_usage(response)

        return response.choices[0].message.content or ""

    def get_usage_stats(self) -> dict[str, Any]:
        """
        Get current usage statistics.

        Returns:
            Dictionary with token counts and cost
        """
        return {
            "prompt_tokens": self.total_prompt_tokens,
            "completion_tokens": self.total_completion_tokens,
            "total_tokens": self.total_tokens,
            "total_cost_usd": round(self.total_cost, 6),
            "model": self.config.model,
            "requests": self.policy.request_count,
        }
