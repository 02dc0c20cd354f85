"""Tests for single-style prompt synthesis."""

from unittest.mock import AsyncMock

import pytest

from huluhulu_ai.services.prompt_synthesizer import PromptSynthesizer
from tests.conftest import FakeCompletionClient


@pytest.mark.asyncio
async def test_synthesize_returns_stripped_text():
    client = AsyncMock()
    client.complete.return_value = "  Masterpiece, 复古港风, cinematic lighting \n"

    prompt = await PromptSynthesizer(client).synthesize("复古港风", ["港风穿搭"])

    assert prompt == "Masterpiece, 复古港风, cinematic lighting"
    kwargs = client.complete.await_args.kwargs
    assert "复古港风" in kwargs["system_prompt"]
    assert "港风穿搭" in kwargs["system_prompt"]
    assert kwargs.get("json_mode", False) is False


@pytest.mark.asyncio
async def test_failures_yield_none():
    failing = PromptSynthesizer(FakeCompletionClient(fail_titles=("国风",)))
    assert await failing.synthesize("国风") is None

    client = AsyncMock()
    client.complete.return_value = "   "
    assert await PromptSynthesizer(client).synthesize("国风") is None
