from typing import Any, Dict, List

DEFAULT_SIMULATION_SAMPLES = [
    "This server is absolutely amazing, I love the community here!",
    "Does anyone know how to fix the Python indentation error in line 45?",
    "You are all stupid and this game sucks.",
    "Just had lunch, thinking about streaming later.",
    "The mods here are useless, banning people for no reason.",
    "Can we get a dedicated channel for memes?",
]


class FeedSettings:
    """Typed accessors for the ``feed`` section of the application config.

    Covers message submission defaults, the simulated stream and the
    dashboard aggregate sizes.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    @property
    def default_author(self) -> str:
        return str(self.data.get("default_author") or "User_Sim")

    @property
    def simulation_stagger_seconds(self) -> float:
        return max(0.0, float(self.data.get("simulation_stagger_seconds", 0.5)))

    @property
    def sentiment_window(self) -> int:
        return int(self.data.get("sentiment_window", 20))

    @property
    def top_topics(self) -> int:
        return int(self.data.get("top_topics", 5))

    @property
    def simulation_samples(self) -> List[str]:
        samples = self.data.get("simulation_samples")
        if isinstance(samples, list) and samples:
            return [str(s) for s in samples]
        return list(DEFAULT_SIMULATION_SAMPLES)
