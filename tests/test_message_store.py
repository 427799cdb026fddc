"""Tests for message_store module."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from sentinel.datatypes.analysis_datatypes import (
    AnalysisResult,
    AnalysisState,
    MessageRecord,
    neutral_analysis,
)
from sentinel.feed.message_store import DuplicateIdError, MessageStore


def make_record(message_id: str, content: str = "hello") -> MessageRecord:
    return MessageRecord(
        message_id=message_id,
        author="User_Sim",
        content=content,
        timestamp=datetime.now(timezone.utc),
    )


class TestAppend:
    """Tests for MessageStore.append."""

    def test_append_stores_pending_record(self):
        store = MessageStore()
        record = make_record("a")

        store.append(record)

        assert len(store) == 1
        assert "a" in store
        assert store.get("a") is record

    def test_append_duplicate_id_raises(self):
        store = MessageStore()
        store.append(make_record("a"))

        with pytest.raises(DuplicateIdError):
            store.append(make_record("a", content="other"))

        assert len(store) == 1

    def test_append_resolved_record_raises(self):
        store = MessageStore()
        resolved = make_record("a").resolved(AnalysisResult(0.1, "General", False))

        with pytest.raises(ValueError):
            store.append(resolved)


class TestResolve:
    """Tests for MessageStore.resolve."""

    def test_resolve_with_result_marks_analyzed(self):
        store = MessageStore()
        store.append(make_record("a"))
        result = AnalysisResult(0.4, "Gaming", False)

        updated = store.resolve("a", result)

        assert updated is not None
        assert updated.state is AnalysisState.ANALYZED
        assert store.get("a").analysis is result

    def test_resolve_without_result_marks_failed_safe(self):
        store = MessageStore()
        store.append(make_record("a"))

        updated = store.resolve("a")

        assert updated.state is AnalysisState.FAILED_SAFE
        assert updated.analysis == neutral_analysis()

    def test_resolve_unknown_id_is_noop(self):
        store = MessageStore()
        store.append(make_record("a"))

        assert store.resolve("missing", AnalysisResult(0.1, "General", False)) is None
        assert store.get("a").is_pending

    def test_second_resolve_is_ignored(self):
        store = MessageStore()
        store.append(make_record("a"))
        first = AnalysisResult(0.4, "Gaming", False)
        store.resolve("a", first)

        assert store.resolve("a", AnalysisResult(-0.9, "Spam", True)) is None
        assert store.get("a").analysis is first

    def test_resolve_keeps_position(self):
        store = MessageStore()
        for message_id in ("a", "b", "c"):
            store.append(make_record(message_id))

        store.resolve("b", AnalysisResult(0.2, "Help", False))

        assert [r.message_id for r in store.snapshot()] == ["a", "b", "c"]


class TestSnapshot:
    """Tests for MessageStore.snapshot."""

    def test_snapshot_preserves_insertion_order(self):
        store = MessageStore()
        for message_id in ("3", "1", "2"):
            store.append(make_record(message_id))

        assert [r.message_id for r in store.snapshot()] == ["3", "1", "2"]

    def test_snapshot_is_point_in_time(self):
        store = MessageStore()
        store.append(make_record("a"))
        before = store.snapshot()

        store.resolve("a", AnalysisResult(0.5, "General", False))

        assert before[0].is_pending
        assert store.snapshot()[0].is_resolved

    def test_empty_snapshot(self):
        assert MessageStore().snapshot() == ()


class TestListeners:
    """Tests for change notification."""

    def test_listener_called_on_append_and_resolve(self):
        store = MessageStore()
        listener = Mock()
        store.subscribe(listener)

        record = store.append(make_record("a"))
        resolved = store.resolve("a", AnalysisResult(0.1, "General", False))

        assert [c.args[0] for c in listener.call_args_list] == [record, resolved]

    def test_listener_not_called_for_ignored_resolution(self):
        store = MessageStore()
        listener = Mock()
        store.subscribe(listener)

        store.resolve("missing")

        listener.assert_not_called()

    def test_failing_listener_does_not_break_store(self):
        store = MessageStore()
        store.subscribe(Mock(side_effect=RuntimeError("boom")))
        healthy = Mock()
        store.subscribe(healthy)

        store.append(make_record("a"))

        assert "a" in store
        healthy.assert_called_once()

    def test_unsubscribe(self):
        store = MessageStore()
        listener = Mock()
        store.subscribe(listener)
        store.unsubscribe(listener)

        store.append(make_record("a"))

        listener.assert_not_called()
