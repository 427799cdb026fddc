"""
Message and analysis types for the moderation feed.

This module defines the data flowing through the analysis pipeline:

- `AnalysisResult`: Sentiment, topic and toxicity judgment for one message.
- `AnalysisState`: Lifecycle of a message record (pending, analyzed, failed-safe).
- `MessageRecord`: Immutable snapshot of one ingested chat message.
- `TopicCount` / `AggregateSnapshot`: Derived dashboard statistics.

Records are frozen; a lifecycle transition produces a new record with the
same id (see `MessageRecord.resolved`), which the message store swaps in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping

SENTIMENT_MIN = -1.0
SENTIMENT_MAX = 1.0
UNKNOWN_TOPIC = "Unknown"


def clamp_sentiment(value: Any) -> float:
    """Coerce a sentiment value into [-1.0, 1.0]; non-numeric or NaN becomes 0.0."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(score):
        return 0.0
    return min(SENTIMENT_MAX, max(SENTIMENT_MIN, score))


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Classification of a single chat message.

    Values are normalized on construction: the sentiment score is clamped to
    [-1.0, 1.0] and a blank topic becomes ``"Unknown"``.

    Attributes:
        sentiment_score (float): -1.0 (negative) to 1.0 (positive).
        primary_topic (str): Short, free-form category label.
        is_toxic (bool): True for hate speech, harassment or excessive profanity.
        is_fallback (bool): True only for the neutral result substituted on failure.
    """

    sentiment_score: float
    primary_topic: str
    is_toxic: bool
    is_fallback: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "sentiment_score", clamp_sentiment(self.sentiment_score))
        topic = str(self.primary_topic or "").strip()
        object.__setattr__(self, "primary_topic", topic or UNKNOWN_TOPIC)
        object.__setattr__(self, "is_toxic", bool(self.is_toxic))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> AnalysisResult:
        """Build a result from the classification service's response fields."""
        return cls(
            sentiment_score=payload.get("sentiment_score", 0.0),
            primary_topic=payload.get("primary_topic", ""),
            is_toxic=payload.get("is_toxic", False),
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the wire representation (without the fallback marker)."""
        return {
            "sentiment_score": self.sentiment_score,
            "primary_topic": self.primary_topic,
            "is_toxic": self.is_toxic,
        }


def neutral_analysis() -> AnalysisResult:
    """Return the failed-safe fallback: neutral sentiment, unknown topic, not toxic."""
    return AnalysisResult(
        sentiment_score=0.0,
        primary_topic=UNKNOWN_TOPIC,
        is_toxic=False,
        is_fallback=True,
    )


class AnalysisState(Enum):
    """Lifecycle of a message record. PENDING moves exactly once to a resolved state."""

    PENDING = "pending"
    ANALYZED = "analyzed"
    FAILED_SAFE = "failed-safe"

    @property
    def is_resolved(self) -> bool:
        return self is not AnalysisState.PENDING


@dataclass(frozen=True, slots=True)
class MessageRecord:
    """A chat message tracked through its analysis lifecycle.

    Attributes:
        message_id (str): Opaque unique identifier.
        author (str): Display name of the sender.
        content (str): Raw message text.
        timestamp (datetime): UTC creation time.
        state (AnalysisState): Current lifecycle state.
        analysis (AnalysisResult | None): Present once the record is resolved.
    """

    message_id: str
    author: str
    content: str
    timestamp: datetime
    state: AnalysisState = AnalysisState.PENDING
    analysis: AnalysisResult | None = None

    def __post_init__(self) -> None:
        if self.state is AnalysisState.PENDING and self.analysis is not None:
            raise ValueError("a pending record cannot carry an analysis result")
        if self.state.is_resolved and self.analysis is None:
            raise ValueError(f"a {self.state.value} record requires an analysis result")

    @property
    def is_pending(self) -> bool:
        return self.state is AnalysisState.PENDING

    @property
    def is_resolved(self) -> bool:
        return self.state.is_resolved

    def resolved(self, result: AnalysisResult | None) -> MessageRecord:
        """Return a copy transitioned to ANALYZED, or FAILED_SAFE when `result` is None."""
        if result is None:
            return replace(self, state=AnalysisState.FAILED_SAFE, analysis=neutral_analysis())
        return replace(self, state=AnalysisState.ANALYZED, analysis=result)


@dataclass(frozen=True, slots=True)
class TopicCount:
    topic: str
    count: int


@dataclass(slots=True)
class AggregateSnapshot:
    """Dashboard statistics derived from one snapshot of the message store.

    Attributes:
        total_messages (int): All records, pending included.
        resolved_messages (int): Records with an analysis result.
        pending_messages (int): Records still awaiting classification.
        average_sentiment (float): Mean sentiment over resolved records (0.0 if none).
        toxic_count (int): Resolved records flagged toxic.
        toxicity_rate (float): toxic_count / resolved_messages (0.0 if none).
        topic_ranking (List[TopicCount]): Most frequent topics, descending.
        top_topic (str | None): Head of the ranking, if any.
        sentiment_series (List[float | None]): Trailing sentiment values; None for pending records.
    """

    total_messages: int = 0
    resolved_messages: int = 0
    pending_messages: int = 0
    average_sentiment: float = 0.0
    toxic_count: int = 0
    toxicity_rate: float = 0.0
    topic_ranking: List[TopicCount] = field(default_factory=list)
    top_topic: str | None = None
    sentiment_series: List[float | None] = field(default_factory=list)
