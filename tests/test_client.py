"""
Tests for the rotating LiteLLM client.
"""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from tenacity import wait_none

from keypool.core.context import ActiveCredential
from keypool.core.exceptions import NoCredentialAvailableError
from keypool.core.policy import RotationPolicy
from keypool.llm.client import RotatingLLMClient
from keypool.models.config import LLMConfig


KEY_A = "AIzaSyAAAAAAAA11111111"
KEY_B = "AIzaSyBBBBBBBB22222222"
MESSAGES = [{"role": "user", "content": "Hello"}]


class RateLimitError(Exception):
    status_code = 429


def make_response(content="Hi there", prompt_tokens=3, completion_tokens=2):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.usage.prompt_tokens = prompt_tokens
    response.usage.completion_tokens = completion_tokens
    return response


@pytest.fixture
def policy(store):
    store.add(KEY_A)
    store.add(KEY_B)
    return RotationPolicy(store, ActiveCredential())


@pytest.fixture
def client(policy):
    return RotatingLLMClient(policy, LLMConfig(model="gemini/test", max_attempts=3), wait=wait_none())


class TestRotatingLLMClient:
    """Tests for RotatingLLMClient."""

    def test_sends_active_key(self, client, policy):
        with patch("keypool.llm.client.litellm") as litellm:
            litellm.acompletion = AsyncMock(return_value=make_response())
            litellm.completion_cost.return_value = 0.001

            result = asyncio.run(client.complete(MESSAGES))

        assert result == "Hi there"
        assert litellm.acompletion.call_args.kwargs["api_key"] == KEY_A
        assert litellm.acompletion.call_args.kwargs["model"] == "gemini/test"
        assert policy.store.usage_of(KEY_A) == 1

    def test_tracks_tokens(self, client):
        with patch("keypool.llm.client.litellm") as litellm:
            litellm.acompletion = AsyncMock(return_value=make_response())
            litellm.completion_cost.side_effect = Exception("unknown model")

            asyncio.run(client.complete(MESSAGES))

        stats = client.get_usage_stats()
        assert stats["total_tokens"] == 5
        assert stats["total_cost_usd"] == 0.0
        assert stats["requests"] == 1

    def test_rate_limit_rotates_and_retries(self, client, policy):
        with patch("keypool.llm.client.litellm") as litellm:
            litellm.acompletion = AsyncMock(
                side_effect=[RateLimitError("Too Many Requests"), make_response("retried")]
            )
            litellm.completion_cost.return_value = 0.0

            result = asyncio.run(client.complete(MESSAGES))

        assert result == "retried"
        keys_used = [call.kwargs["api_key"] for call in litellm.acompletion.call_args_list]
        assert keys_used == [KEY_A, KEY_B]
        assert policy.active_credential() == KEY_B

    def test_gives_up_after_max_attempts(self, client):
        with patch("keypool.llm.client.litellm") as litellm:
            litellm.acompletion = AsyncMock(side_effect=RateLimitError("quota exceeded"))

            with pytest.raises(RateLimitError):
                asyncio.run(client.complete(MESSAGES))

        assert litellm.acompletion.await_count == 3

    def test_other_errors_not_retried(self, client, policy):
        with patch("keypool.llm.client.litellm") as litellm:
            litellm.acompletion = AsyncMock(side_effect=ValueError("bad request"))

            with pytest.raises(ValueError):
                asyncio.run(client.complete(MESSAGES))

        assert litellm.acompletion.await_count == 1
        assert policy.active_credential() == KEY_A

    def test_empty_pool_raises(self, store):
        client = RotatingLLMClient(RotationPolicy(store, ActiveCredential()), wait=wait_none())

        with patch("keypool.llm.client.litellm") as litellm:
            litellm.acompletion = AsyncMock()

            with pytest.raises(NoCredentialAvailableError):
                asyncio.run(client.complete(MESSAGES))

        litellm.acompletion.assert_not_called()

    def test_policy_hooks_run_off_event_loop_thread(self, client, policy):
        hook_threads = []
        start, success = policy.on_request_start, policy.on_request_success

        def recording_start():
            hook_threads.append(threading.get_ident())
            return start()

        def recording_success():
            hook_threads.append(threading.get_ident())
            success()

        policy.on_request_start = recording_start
        policy.on_request_success = recording_success

        with patch("keypool.llm.client.litellm") as litellm:
            litellm.acompletion = AsyncMock(return_value=make_response())
            litellm.completion_cost.return_value = 0.0
            asyncio.run(client.complete(MESSAGES))

        assert len(hook_threads) == 2
        assert threading.get_ident() not in hook_threads
