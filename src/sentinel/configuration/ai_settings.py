import math
import os
from typing import Any, Dict, List

DEFAULT_API_KEY_ENV = "SENTINEL_API_KEY"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL_NAME = "gemini-2.5-flash"

DEFAULT_SYSTEM_PROMPT = (
    "You are Discord Sentinel, an automated moderation bot. Analyze messages strictly. "
    "Sentiment ranges from -1.0 to 1.0. Topics should be concise categories."
)
DEFAULT_USER_PROMPT_TEMPLATE = (
    'Analyze the following Discord message for community health monitoring: "<|MESSAGE_INJECT|>"'
)

DEFAULT_OFFLINE_TOPICS = ["General", "Help", "Gaming", "Off-topic"]
DEFAULT_OFFLINE_LATENCY_SECONDS = 0.8
DEFAULT_OFFLINE_TOXICITY_RATE = 0.1


class AISettings:
    """Helper exposing typed accessors for the classification service configuration.

    Wraps the ``ai_settings`` section of the application config. Only the
    explicit helpers (`get`, `as_dict` and the properties below) are provided.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        """Return the underlying mapping (shallow copy recommended by callers)."""
        return self.data

    def _float(self, key: str, default: float) -> float:
        """Return `key` as a float, or `default` when it is missing, blank or not numeric."""
        try:
            value = float(self.data.get(key, default))
        except (TypeError, ValueError):
            return default
        return default if math.isnan(value) else value

    @property
    def offline_mode(self) -> bool:
        return bool(self.data.get("offline_mode", False))

    @property
    def api_key_env(self) -> str:
        return str(self.data.get("api_key_env") or DEFAULT_API_KEY_ENV)

    @property
    def api_key(self) -> str | None:
        """Return the configured API key, falling back to the ``api_key_env`` variable."""
        val = self.data.get("api_key") or os.getenv(self.api_key_env)
        return str(val) if val else None

    @property
    def base_url(self) -> str:
        return str(self.data.get("base_url") or DEFAULT_BASE_URL)

    @property
    def model_name(self) -> str:
        return str(self.data.get("model_name") or DEFAULT_MODEL_NAME)

    @property
    def system_prompt(self) -> str:
        return str(self.data.get("system_prompt") or DEFAULT_SYSTEM_PROMPT)

    @property
    def user_prompt_template(self) -> str:
        return str(self.data.get("user_prompt_template") or DEFAULT_USER_PROMPT_TEMPLATE)

    @property
    def sampling_parameters(self) -> Dict[str, Any]:
        k = self.data.get("sampling_parameters", {})
        return k if isinstance(k, dict) else {}

    @property
    def offline_latency_seconds(self) -> float:
        return max(0.0, self._float("offline_latency_seconds", DEFAULT_OFFLINE_LATENCY_SECONDS))

    @property
    def offline_toxicity_rate(self) -> float:
        rate = self._float("offline_toxicity_rate", DEFAULT_OFFLINE_TOXICITY_RATE)
        return min(1.0, max(0.0, rate))

    @property
    def offline_topics(self) -> List[str]:
        topics = self.data.get("offline_topics")
        if isinstance(topics, list):
            cleaned = [str(t).strip() for t in topics if str(t).strip()]
            if cleaned:
                return cleaned
        return list(DEFAULT_OFFLINE_TOPICS)
