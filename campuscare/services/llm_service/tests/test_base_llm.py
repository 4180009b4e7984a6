"""Tests for the model backend layer."""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from campuscare.services.llm_service import (
    HuggingFaceLLM,
    LLMConfig,
    LLMProvider,
    OpenAILLM,
    create_llm,
)


def hf_config(**overrides):
    params = dict(
        provider=LLMProvider.HUGGINGFACE,
        model_name="test-model",
        endpoint="https://example.invalid/generate",
        api_key="hf_test",
    )
    params.update(overrides)
    return LLMConfig(**params)


def openai_config(**overrides):
    params = dict(provider=LLMProvider.OPENAI, model_name="gpt-test", api_key="sk-test")
    params.update(overrides)
    return LLMConfig(**params)


def fake_openai_client(create):
    """AsyncOpenAI stand-in usable as an async context manager."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    client.chat.completions.create = create
    return client


def fake_aiohttp_session(body):
    """aiohttp.ClientSession stand-in whose POST answers with ``body``."""
    response = MagicMock()
    response.json = AsyncMock(return_value=body)

    post = MagicMock()
    post.__aenter__ = AsyncMock(return_value=response)
    post.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.post = MagicMock(return_value=post)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


class TestFactory:
    def test_creates_huggingface(self):
        llm = create_llm(hf_config())

        assert isinstance(llm, HuggingFaceLLM)
        assert llm.headers["Authorization"] == "Bearer hf_test"

    def test_creates_openai(self):
        assert isinstance(create_llm(openai_config()), OpenAILLM)

    def test_huggingface_requires_endpoint(self):
        with pytest.raises(ValueError):
            create_llm(hf_config(endpoint=None))

    def test_openai_requires_key(self):
        with pytest.raises(ValueError):
            create_llm(openai_config(api_key=None))


class TestPromptValidation:
    def test_rejects_empty(self):
        assert create_llm(hf_config()).validate_prompt("   ") is False

    def test_rejects_oversized(self):
        llm = create_llm(hf_config(max_prompt_chars=10))

        assert llm.validate_prompt("x" * 11) is False
        assert llm.validate_prompt("x" * 10) is True

    @pytest.mark.asyncio
    async def test_generate_refuses_invalid_prompt(self):
        with pytest.raises(ValueError):
            await create_llm(hf_config()).generate("")


class TestOpenAIGenerate:
    @pytest.mark.asyncio
    async def test_generate_returns_text(self):
        llm = create_llm(openai_config())
        completion = MagicMock()
        completion.choices = [MagicMock()]
        completion.choices[0].message.content = '{"response": "hi"}'
        completion.usage.total_tokens = 42
        client = fake_openai_client(AsyncMock(return_value=completion))

        with patch("openai.AsyncOpenAI", return_value=client):
            response = await llm.generate("prompt text", system_prompt="be json")

        assert response.text == '{"response": "hi"}'
        assert response.tokens_used == 42
        assert response.provider == "openai"

        call_kwargs = client.chat.completions.create.call_args.kwargs
        assert call_kwargs["messages"][0] == {"role": "system", "content": "be json"}
        assert call_kwargs["messages"][1] == {"role": "user", "content": "prompt text"}
        assert call_kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_client_opened_and_closed_per_call(self):
        llm = create_llm(openai_config(endpoint="http://localhost:8000/v1"))
        completion = MagicMock()
        completion.choices = [MagicMock()]
        completion.choices[0].message.content = "{}"
        client = fake_openai_client(AsyncMock(return_value=completion))

        with patch("openai.AsyncOpenAI", return_value=client) as client_cls:
            await llm.generate("first")
            await llm.generate("second")

        assert client_cls.call_count == 2
        client_cls.assert_called_with(api_key="sk-test", base_url="http://localhost:8000/v1")
        assert client.__aexit__.await_count == 2

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        llm = create_llm(openai_config())
        client = fake_openai_client(AsyncMock(side_effect=ConnectionError("down")))

        with patch("openai.AsyncOpenAI", return_value=client):
            with pytest.raises(ConnectionError):
                await llm.generate("prompt text")

        client.__aexit__.assert_awaited_once()


class TestHuggingFaceGenerate:
    @pytest.mark.asyncio
    async def test_list_response(self):
        llm = create_llm(hf_config())
        session = fake_aiohttp_session([{"generated_text": '{"response": "hi"}'}])

        with patch("aiohttp.ClientSession", return_value=session):
            response = await llm.generate("prompt text", system_prompt="be json")

        assert response.text == '{"response": "hi"}'
        assert response.provider == "huggingface"

        url = session.post.call_args.args[0]
        call_kwargs = session.post.call_args.kwargs
        assert url == "https://example.invalid/generate"
        assert call_kwargs["headers"]["Authorization"] == "Bearer hf_test"
        assert call_kwargs["json"]["inputs"] == "be json\n\nprompt text"
        assert call_kwargs["json"]["parameters"]["return_full_text"] is False

    @pytest.mark.asyncio
    async def test_dict_response(self):
        llm = create_llm(hf_config())
        session = fake_aiohttp_session({"generated_text": "plain"})

        with patch("aiohttp.ClientSession", return_value=session):
            response = await llm.generate("prompt text")

        assert response.text == "plain"
        assert session.post.call_args.kwargs["json"]["inputs"] == "prompt text"

    @pytest.mark.asyncio
    async def test_empty_list_response(self):
        llm = create_llm(hf_config())
        session = fake_aiohttp_session([])

        with patch("aiohttp.ClientSession", return_value=session):
            response = await llm.generate("prompt text")

        assert response.text == ""

    @pytest.mark.asyncio
    async def test_http_error_propagates(self):
        llm = create_llm(hf_config())
        session = fake_aiohttp_session({})
        response = session.post.return_value.__aenter__.return_value
        response.raise_for_status.side_effect = ConnectionError("503")

        with patch("aiohttp.ClientSession", return_value=session):
            with pytest.raises(ConnectionError):
                await llm.generate("prompt text")
