"""
MessageStore: ordered, append-only collection of message records for one dashboard session.

Each record is appended once in the pending state and may be resolved exactly
once. Resolution swaps in a new frozen record under the same id, so snapshots
handed out earlier stay unchanged.

Usage:
    store = MessageStore()
    store.subscribe(on_change)
    store.append(record)
    store.resolve(record.message_id, result)
    records = store.snapshot()
"""

from __future__ import annotations

from typing import Callable, Dict, List

from sentinel.datatypes.analysis_datatypes import AnalysisResult, MessageRecord
from sentinel.util.logger import get_logger

logger = get_logger("message_store")

StoreListener = Callable[[MessageRecord], None]


class DuplicateIdError(ValueError):
    """Raised when a record is appended under an id that is already stored."""


class MessageStore:
    """
    Key-addressed store of MessageRecord objects in insertion order.

    All writes happen on the event loop thread and each id is written at most
    twice (append, resolve), so no locking is needed.
    """

    def __init__(self) -> None:
        self._records: Dict[str, MessageRecord] = {}
        self._listeners: List[StoreListener] = []

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._records

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> None:
        """Register a callback invoked with the changed record after every append and resolve."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, record: MessageRecord) -> None:
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception as exc:
                logger.exception("[STORE] Listener %r failed for message %s: %s", listener, record.message_id, exc)

    # ------------------------------------------------------------------
    # Record operations
    # ------------------------------------------------------------------

    def append(self, record: MessageRecord) -> MessageRecord:
        """
        Add a new pending record.

        Args:
            record: The record to store. Must be pending and carry a fresh id.

        Returns:
            MessageRecord: The stored record.

        Raises:
            DuplicateIdError: If a record with the same id already exists.
            ValueError: If the record is not in the pending state.
        """
        if record.message_id in self._records:
            raise DuplicateIdError(f"message id {record.message_id!r} already exists")
        if not record.is_pending:
            raise ValueError(f"only pending records can be appended, got {record.state.value}")

        self._records[record.message_id] = record
        logger.debug("[STORE] Appended message %s (total: %d)", record.message_id, len(self._records))
        self._notify(record)
        return record

    def resolve(self, message_id: str, result: AnalysisResult | None = None) -> MessageRecord | None:
        """
        Transition a pending record to its resolved state.

        Args:
            message_id: Id of the record to resolve.
            result: The analysis result, or None to resolve failed-safe with the
                neutral fallback.

        Returns:
            MessageRecord | None: The resolved record, or None when the id is
            unknown or the record was already resolved.
        """
        current = self._records.get(message_id)
        if current is None:
            logger.warning("[STORE] Ignoring resolution for unknown message %s", message_id)
            return None
        if current.is_resolved:
            logger.warning(
                "[STORE] Ignoring second resolution for message %s (already %s)",
                message_id,
                current.state.value,
            )
            return None

        updated = current.resolved(result)
        self._records[message_id] = updated
        logger.debug("[STORE] Resolved message %s as %s", message_id, updated.state.value)
        self._notify(updated)
        return updated

    def get(self, message_id: str) -> MessageRecord | None:
        return self._records.get(message_id)

    def snapshot(self) -> tuple[MessageRecord, ...]:
        """Return every record in insertion order, oldest first."""
        return tuple(self._records.values())
