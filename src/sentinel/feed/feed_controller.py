"""
FeedController: message submission and result merging for the moderation feed.

A submission appends a pending record right away so the dashboard can show
it as "analyzing", then schedules one task that classifies the text and
resolves that record by id. Submissions never wait on classification, and
results may land out of submission order.
"""

from __future__ import annotations

import asyncio
import random
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Sequence, Set

from sentinel.analysis.classifier_client import ClassifierClient
from sentinel.configuration.feed_settings import FeedSettings
from sentinel.datatypes.analysis_datatypes import MessageRecord
from sentinel.feed.message_store import MessageStore
from sentinel.util.logger import get_logger

logger = get_logger("feed_controller")


def new_message_id() -> str:
    return uuid.uuid4().hex


class FeedController:
    """
    Orchestrates submissions against the classifier and merges results into the store.

    This is the only component that performs the pending -> resolved write.

    Attributes:
        store (MessageStore): Owner of all message records.
        classifier (ClassifierClient): Failure-absorbing classification client.
        settings (FeedSettings): Default author, stagger delay and simulation samples.
    """

    def __init__(
        self,
        store: MessageStore,
        classifier: ClassifierClient,
        settings: FeedSettings | None = None,
        id_factory: Callable[[], str] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.classifier = classifier
        self.settings = settings or FeedSettings()
        self._id_factory = id_factory or new_message_id
        self._rng = rng or random.Random()
        self._tasks: Set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        """Number of classifications that have not resolved yet."""
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, author: str, text: str) -> MessageRecord | None:
        """
        Append a pending record and start its classification in the background.

        Must be called from within a running event loop; otherwise RuntimeError
        is raised and nothing is stored.

        Args:
            author: Display name of the sender; blank uses the configured default.
            text: Raw message text.

        Returns:
            MessageRecord | None: The pending record, or None if `text` is blank.
        """
        if not text or not text.strip():
            logger.debug("[FEED] Ignoring blank submission")
            return None

        loop = asyncio.get_running_loop()
        record = MessageRecord(
            message_id=self._id_factory(),
            author=(author or "").strip() or self.settings.default_author,
            content=text,
            timestamp=datetime.now(timezone.utc),
        )
        self.store.append(record)

        task = loop.create_task(
            self._classify_and_resolve(record),
            name=f"classify-{record.message_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.debug("[FEED] Submitted message %s from %s", record.message_id, record.author)
        return record

    async def _classify_and_resolve(self, record: MessageRecord) -> None:
        try:
            result = await self.classifier.classify(record.content)
        except Exception as exc:
            logger.exception("[FEED] Classifier raised for message %s: %s", record.message_id, exc)
            result = None

        if result is not None and result.is_fallback:
            result = None
        if result is not None:
            logger.debug("[FEED] Analysis for %s: %s", record.message_id, result.to_payload())
        self.store.resolve(record.message_id, result)

    async def run_batch(self, samples: Sequence[str] | None = None) -> List[MessageRecord]:
        """
        Submit a simulated stream of messages with a fixed stagger between them.

        Only the stagger delay is awaited; classifications keep running after
        this returns. Use `drain` to wait for them.

        Args:
            samples: Message texts to submit; defaults to the configured samples.

        Returns:
            List[MessageRecord]: The pending records, in submission order.
        """
        texts = list(samples) if samples is not None else self.settings.simulation_samples
        stagger = self.settings.simulation_stagger_seconds
        submitted: List[MessageRecord] = []

        logger.info("[FEED] Running simulation with %d messages", len(texts))
        for index, text in enumerate(texts):
            record = self.submit(f"SimUser_{self._rng.randint(0, 99)}", text)
            if record is not None:
                submitted.append(record)
            if index < len(texts) - 1:
                await asyncio.sleep(stagger)

        return submitted

    async def drain(self) -> None:
        """Wait until every in-flight classification has resolved its record."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
