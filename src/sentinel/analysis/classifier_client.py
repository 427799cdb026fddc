"""Classification client for chat messages.

Sends one message at a time to an OpenAI-compatible chat completions API
(Gemini's OpenAI endpoint by default) and asks for a structured judgment of
sentiment, topic and toxicity.

Key Features:
- Uses AsyncOpenAI with a strict JSON schema response format.
- Failure-absorbing: request errors, empty replies and malformed payloads all
  yield the neutral fallback result; ``classify`` never raises.
- Offline mode produces synthetic results after an emulated network delay, so
  the dashboard works without a service credential.
"""

from __future__ import annotations

import asyncio
import random

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam

from sentinel.analysis import analysis_parsing
from sentinel.analysis.analysis_schema import ANALYSIS_SCHEMA, build_response_format
from sentinel.configuration.ai_settings import AISettings
from sentinel.datatypes.analysis_datatypes import AnalysisResult, neutral_analysis
from sentinel.util.logger import get_logger

logger = get_logger("classifier_client")

MESSAGE_PLACEHOLDER = "<|MESSAGE_INJECT|>"


class ClassifierClient:
    """
    Classify chat messages for the moderation dashboard.

    The client runs in one of two modes, decided at construction:
    - online: one ``chat.completions.create`` request per message.
    - offline: synthetic results, used when ``offline_mode`` is set or no API
      key is configured.

    Attributes:
        settings (AISettings): Service configuration.
        offline (bool): True when no request is ever sent.
    """

    def __init__(
        self,
        settings: AISettings,
        client: AsyncOpenAI | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings
        self._rng = rng or random.Random()
        self._model_name = settings.model_name
        self._response_format = build_response_format(ANALYSIS_SCHEMA)
        self._client: AsyncOpenAI | None = None

        if client is not None:
            self._client = client
        elif not settings.offline_mode:
            api_key = settings.api_key
            if api_key:
                self._client = AsyncOpenAI(api_key=api_key, base_url=settings.base_url)
            else:
                logger.warning(
                    "[CLASSIFIER] No API key found (set %s). Returning mock analysis.",
                    settings.api_key_env,
                )

        if self.offline:
            logger.info("[CLASSIFIER] Running in offline mode")
        else:
            logger.info(
                "[CLASSIFIER] Initialized with base_url=%s, model=%s",
                settings.base_url,
                self._model_name,
            )

    @property
    def offline(self) -> bool:
        return self.settings.offline_mode or self._client is None

    @property
    def model_name(self) -> str:
        return self._model_name

    def build_messages(self, content: str) -> list[ChatCompletionMessageParam]:
        """Build the system instruction and user prompt for a single message."""
        template = self.settings.user_prompt_template
        if MESSAGE_PLACEHOLDER in template:
            prompt = template.replace(MESSAGE_PLACEHOLDER, content)
        else:
            prompt = f"{template}\n\n{content}"
        return [
            {"role": "system", "content": self.settings.system_prompt},
            {"role": "user", "content": prompt},
        ]

    async def classify(self, text: str) -> AnalysisResult:
        """
        Classify a single message.

        Args:
            text: Raw message text. Expected to be non-blank.

        Returns:
            AnalysisResult: The parsed judgment, or the neutral fallback on any failure.
        """
        if not text or not text.strip():
            logger.warning("[CLASSIFIER] Refusing to classify blank text")
            return neutral_analysis()

        if self.offline or self._client is None:
            return await self._classify_offline()

        return await self._classify_online(self._client, text)

    async def _classify_offline(self) -> AnalysisResult:
        await asyncio.sleep(self.settings.offline_latency_seconds)
        return AnalysisResult(
            sentiment_score=self._rng.uniform(-1.0, 1.0),
            primary_topic=self._rng.choice(self.settings.offline_topics),
            is_toxic=self._rng.random() < self.settings.offline_toxicity_rate,
        )

    async def _classify_online(self, client: AsyncOpenAI, text: str) -> AnalysisResult:
        try:
            response = await client.chat.completions.create(
                model=self._model_name,
                messages=self.build_messages(text),
                response_format=self._response_format,
                **self.settings.sampling_parameters,
            )
            response_text = response.choices[0].message.content if response.choices else None
        except Exception as exc:
            logger.error("[CLASSIFIER] Analysis request failed: %s", exc)
            return neutral_analysis()

        result = analysis_parsing.parse_analysis(response_text, ANALYSIS_SCHEMA)
        if result is None:
            logger.error("[CLASSIFIER] Unusable response from model, using neutral fallback")
            return neutral_analysis()

        logger.debug(
            "[RESULT] sentiment=%.2f topic=%s toxic=%s",
            result.sentiment_score,
            result.primary_topic,
            result.is_toxic,
        )
        return result
