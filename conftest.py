"""Shared pytest fixtures.

ScriptedLLM stands in for the model backend: it replays queued replies in
order and counts calls, so flow tests never touch the network.
"""
import asyncio
import json

import pytest

from campuscare.services.llm_service import BaseLLM, LLMConfig, LLMProvider
from campuscare.shared.utils import configure_pii_salt

TEST_PII_SALT = "test_salt_that_is_at_least_32_characters_long"

# Reply that never completes; used to exercise timeouts
HANG = object()


class ScriptedLLM(BaseLLM):
    """Backend that replays scripted replies.

    Each reply is one of:
        - str: returned as the completion text
        - dict: JSON-encoded and returned
        - Exception instance: raised
        - HANG: sleeps until cancelled

    The last reply repeats once the script runs out.
    """

    def __init__(self, replies=()):
        super().__init__(LLMConfig(provider=LLMProvider.OPENAI, model_name="scripted"))
        self.replies = list(replies)
        self.prompts = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def _complete(self, prompt, system_prompt):
        self.prompts.append(prompt)
        if not self.replies:
            raise ConnectionError("no scripted reply")

        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if reply is HANG:
            await asyncio.sleep(3600)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        return reply, None


@pytest.fixture
def scripted_llm():
    """Factory for ScriptedLLM instances."""
    return ScriptedLLM


@pytest.fixture
def hang():
    return HANG


@pytest.fixture
def therapeutic_reply():
    """Well-formed therapeutic-response reply at a given risk level."""
    def _reply(level="low", flags=None, **overrides):
        reply = {
            "response": "That sounds like a lot to carry. What feels heaviest right now?",
            "emotionalTone": "supportive",
            "followUpQuestions": ["What has helped before?"],
            "riskIndicators": {"level": level, "flags": flags or []},
            "followUpRequired": False,
            "escalationNeeded": False,
        }
        reply.update(overrides)
        return reply
    return _reply


@pytest.fixture
def pii_salt():
    configure_pii_salt(TEST_PII_SALT)
    return TEST_PII_SALT
