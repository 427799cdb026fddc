"""
The moderation feed: record storage, submission and aggregate statistics.

- **message_store.py**: Ordered, append-only record store with one resolution per record.
- **feed_controller.py**: Optimistic append and background classification per submission.
- **aggregator.py**: Pure functions deriving dashboard statistics from a snapshot.
"""
