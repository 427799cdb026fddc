"""
Sentinel Moderation Dashboard
=============================

A console dashboard that ingests chat messages, classifies each one for
sentiment, topic and toxicity with a hosted language model, and shows a live
feed with aggregate community health statistics.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. SENTINEL_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("SENTINEL_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
from dotenv import load_dotenv

from sentinel.analysis.classifier_client import ClassifierClient
from sentinel.console.control_panel import ConsoleControl, console_session
from sentinel.feed.feed_controller import FeedController
from sentinel.feed.message_store import MessageStore
from sentinel.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> None:
    """Load ``.env`` from the base directory so the service API key can live there."""
    load_dotenv(dotenv_path=BASE_DIR / ".env")


def build_feed() -> FeedController:
    """Wire the classifier, message store and feed controller from the application config."""
    from sentinel.configuration.app_configuration import app_config

    classifier = ClassifierClient(app_config.ai_settings)
    return FeedController(MessageStore(), classifier, settings=app_config.feed_settings)


async def run_dashboard(feed: FeedController, control: ConsoleControl) -> None:
    """Run the console until shutdown, then let in-flight analyses finish."""
    async with console_session(control):
        await control.shutdown_event.wait()

    await control.wait_background()
    if feed.in_flight:
        logger.info("Waiting for %d in-flight analyses to finish…", feed.in_flight)
    await feed.drain()


async def async_main() -> int:
    """Bootstrap the feed and console, returning an exit code."""
    load_environment()

    try:
        feed = build_feed()
    except Exception as exc:
        logger.critical("Failed to initialize the moderation feed: %s", exc)
        return 1

    control = ConsoleControl(feed)
    await run_dashboard(feed, control)

    logger.info("Shutdown complete. %d messages processed this session.", len(feed.store))
    return 0


def main() -> int:
    """Entrypoint that runs the async dashboard and returns the process code."""
    logger.info("Starting Sentinel moderation dashboard…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the dashboard: %s", exc)
        return 1


if __name__ == "__main__":
    sys.excepthook = handle_exception
    sys.exit(main())
