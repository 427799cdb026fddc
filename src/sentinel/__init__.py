"""
Sentinel - Real-time Chat Moderation Dashboard

Sentinel ingests chat messages, classifies each one with a hosted language
model and keeps live community health statistics.

Core Components:

- **Classifier Client**: Sends one structured-output request per message and
  absorbs every failure into a neutral result; runs synthetically offline
  when no service credential is configured.
- **Message Store**: Ordered, append-only records, each resolved exactly once
  from pending to analyzed or failed-safe.
- **Aggregator**: Average sentiment, toxicity alerts, topic ranking and a
  trailing sentiment series, recomputed from each snapshot.
- **Feed Controller**: Optimistic append plus background classification per
  submission, and a staggered simulated stream.
- **Interactive Console**: Live feed and dashboard statistics in the terminal.

Usage:
    from sentinel.main import main
    main()  # Starts the dashboard console
"""
