"""Dashboard statistics computed from a snapshot of message records.

Every function here is pure: it reads the given records, keeps no state and
is recomputed from scratch on each call.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Sequence

from sentinel.datatypes.analysis_datatypes import AggregateSnapshot, MessageRecord, TopicCount

DEFAULT_SENTIMENT_WINDOW = 20
DEFAULT_TOPIC_LIMIT = 5


def _with_result(records: Iterable[MessageRecord]) -> List[MessageRecord]:
    return [r for r in records if r.analysis is not None]


def average_sentiment(records: Iterable[MessageRecord]) -> float:
    """Arithmetic mean of sentiment over records with a result; 0.0 when there are none."""
    scores = [r.analysis.sentiment_score for r in _with_result(records)]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def toxic_count(records: Iterable[MessageRecord]) -> int:
    return sum(1 for r in _with_result(records) if r.analysis.is_toxic)


def topic_counts(records: Iterable[MessageRecord]) -> List[TopicCount]:
    """Count every topic, descending by count; equal counts keep first-seen order."""
    counter = Counter(r.analysis.primary_topic for r in _with_result(records))
    # most_common is stable for ties, and Counter remembers insertion order
    return [TopicCount(topic, count) for topic, count in counter.most_common()]


def topic_ranking(records: Iterable[MessageRecord], limit: int = DEFAULT_TOPIC_LIMIT) -> List[TopicCount]:
    """The `limit` most frequent topics."""
    if limit <= 0:
        return []
    return topic_counts(records)[:limit]


def recent_sentiment_series(
    records: Sequence[MessageRecord],
    window: int = DEFAULT_SENTIMENT_WINDOW,
) -> List[float | None]:
    """Sentiment of the last `window` records in order; pending records yield None, not 0."""
    if window <= 0:
        return []
    return [
        r.analysis.sentiment_score if r.analysis is not None else None
        for r in list(records)[-window:]
    ]


def build_snapshot(
    records: Sequence[MessageRecord],
    window: int = DEFAULT_SENTIMENT_WINDOW,
    limit: int = DEFAULT_TOPIC_LIMIT,
) -> AggregateSnapshot:
    """Compute every dashboard statistic for the given records."""
    records = list(records)
    resolved = _with_result(records)
    toxic = toxic_count(resolved)
    ranking = topic_ranking(resolved, limit)

    return AggregateSnapshot(
        total_messages=len(records),
        resolved_messages=len(resolved),
        pending_messages=len(records) - len(resolved),
        average_sentiment=average_sentiment(resolved),
        toxic_count=toxic,
        toxicity_rate=(toxic / len(resolved)) if resolved else 0.0,
        topic_ranking=ranking,
        top_topic=ranking[0].topic if ranking else None,
        sentiment_series=recent_sentiment_series(records, window),
    )
