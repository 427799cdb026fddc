"""Tests for classifier_client module."""

import json
import random
import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sentinel.analysis.classifier_client import ClassifierClient
from sentinel.configuration.ai_settings import AISettings
from sentinel.datatypes.analysis_datatypes import neutral_analysis


def offline_settings(**overrides) -> AISettings:
    data = {"offline_mode": True, "offline_latency_seconds": 0.0}
    data.update(overrides)
    return AISettings(data)


def mock_openai_client(content=None, exc=None) -> MagicMock:
    """Build an AsyncOpenAI stand-in whose chat completion returns `content` or raises `exc`."""
    client = MagicMock()
    if exc is not None:
        client.chat.completions.create = AsyncMock(side_effect=exc)
    else:
        response = MagicMock()
        response.choices = [MagicMock(message=MagicMock(content=content))]
        client.chat.completions.create = AsyncMock(return_value=response)
    return client


class TestClassifierModes:
    """Tests for offline/online mode selection."""

    def test_offline_mode_flag(self):
        classifier = ClassifierClient(offline_settings())
        assert classifier.offline is True

    def test_missing_api_key_falls_back_to_offline(self, monkeypatch):
        monkeypatch.delenv("SENTINEL_API_KEY", raising=False)

        classifier = ClassifierClient(AISettings({"offline_mode": False}))

        assert classifier.offline is True

    def test_api_key_builds_async_openai_client(self, monkeypatch):
        monkeypatch.setenv("SENTINEL_API_KEY", "test-key")

        with patch("sentinel.analysis.classifier_client.AsyncOpenAI") as mock_cls:
            classifier = ClassifierClient(AISettings({"base_url": "http://localhost:1234/v1"}))

        mock_cls.assert_called_once_with(api_key="test-key", base_url="http://localhost:1234/v1")
        assert classifier.offline is False

    def test_injected_client_is_online(self):
        classifier = ClassifierClient(AISettings({}), client=mock_openai_client("{}"))
        assert classifier.offline is False

    def test_offline_mode_wins_over_injected_client(self):
        client = mock_openai_client("{}")
        classifier = ClassifierClient(offline_settings(), client=client)
        assert classifier.offline is True


class TestOfflineClassification:
    """Tests for synthetic offline analysis."""

    @pytest.mark.asyncio
    async def test_offline_result_within_bounds(self):
        classifier = ClassifierClient(offline_settings(), rng=random.Random(7))

        for _ in range(50):
            result = await classifier.classify("hello world")
            assert -1.0 <= result.sentiment_score <= 1.0
            assert result.primary_topic in {"General", "Help", "Gaming", "Off-topic"}
            assert isinstance(result.is_toxic, bool)
            assert result.is_fallback is False

    @pytest.mark.asyncio
    async def test_offline_toxicity_rate_is_roughly_ten_percent(self):
        classifier = ClassifierClient(offline_settings(), rng=random.Random(1234))

        samples = 2000
        toxic = 0
        for _ in range(samples):
            result = await classifier.classify("sample")
            toxic += result.is_toxic

        assert 0.06 <= toxic / samples <= 0.14

    @pytest.mark.asyncio
    async def test_offline_emulates_latency(self):
        classifier = ClassifierClient(offline_settings(offline_latency_seconds=0.05))

        started = time.monotonic()
        await classifier.classify("hello world")
        elapsed = time.monotonic() - started

        assert 0.04 <= elapsed < 1.0

    @pytest.mark.asyncio
    async def test_offline_uses_configured_topics(self):
        classifier = ClassifierClient(offline_settings(offline_topics=["Memes"]))

        result = await classifier.classify("lol")

        assert result.primary_topic == "Memes"


class TestOnlineClassification:
    """Tests for classification through the OpenAI-compatible API."""

    @pytest.mark.asyncio
    async def test_successful_classification(self):
        content = json.dumps({"sentiment_score": 0.8, "primary_topic": "Community", "is_toxic": False})
        client = mock_openai_client(content)
        classifier = ClassifierClient(AISettings({"model_name": "test-model"}), client=client)

        result = await classifier.classify("I love this server")

        assert result.sentiment_score == pytest.approx(0.8)
        assert result.primary_topic == "Community"
        assert result.is_toxic is False
        client.chat.completions.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_request_contents(self):
        content = json.dumps({"sentiment_score": 0.0, "primary_topic": "General", "is_toxic": False})
        client = mock_openai_client(content)
        settings = AISettings({
            "model_name": "test-model",
            "system_prompt": "Be strict.",
            "user_prompt_template": "Analyze: <|MESSAGE_INJECT|>",
            "sampling_parameters": {"temperature": 0.0},
        })
        classifier = ClassifierClient(settings, client=client)

        await classifier.classify("hello world")

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be strict."},
            {"role": "user", "content": "Analyze: hello world"},
        ]
        assert kwargs["response_format"]["type"] == "json_schema"
        assert kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_request_failure_returns_neutral(self):
        client = mock_openai_client(exc=RuntimeError("quota exceeded"))
        classifier = ClassifierClient(AISettings({}), client=client)

        result = await classifier.classify("hello world")

        assert result == neutral_analysis()

    @pytest.mark.asyncio
    async def test_empty_response_returns_neutral(self):
        client = mock_openai_client(content=None)
        classifier = ClassifierClient(AISettings({}), client=client)

        result = await classifier.classify("hello world")

        assert result == neutral_analysis()

    @pytest.mark.asyncio
    async def test_no_choices_returns_neutral(self):
        client = mock_openai_client("{}")
        client.chat.completions.create.return_value.choices = []
        classifier = ClassifierClient(AISettings({}), client=client)

        result = await classifier.classify("hello world")

        assert result == neutral_analysis()

    @pytest.mark.asyncio
    async def test_malformed_response_returns_neutral(self):
        client = mock_openai_client('{"sentiment_score": 0.3}')
        classifier = ClassifierClient(AISettings({}), client=client)

        result = await classifier.classify("hello world")

        assert result == neutral_analysis()

    @pytest.mark.asyncio
    async def test_blank_text_never_reaches_service(self):
        client = mock_openai_client("{}")
        classifier = ClassifierClient(AISettings({}), client=client)

        result = await classifier.classify("   ")

        assert result == neutral_analysis()
        client.chat.completions.create.assert_not_called()
