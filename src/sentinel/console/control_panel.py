"""Interactive console dashboard for the live moderation feed."""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import PromptSession

from sentinel.datatypes.analysis_datatypes import AggregateSnapshot, AnalysisState, MessageRecord
from sentinel.feed import aggregator
from sentinel.feed.feed_controller import FeedController
from sentinel.util.logger import get_logger

# Box drawing helpers for aligned console output
BOX_WIDTH = 60

SPARK_CHARS = "▁▂▃▄▅▆▇█"
SPARK_GAP = "·"

DEFAULT_FEED_LINES = 10


def print_boxed_title(title: str, color: str = "") -> None:
    """
    Print a centered title inside a box drawn with Unicode box-drawing characters.

    Args:
        title (str): The text to display in the center of the box.
        color (str): Optional prompt_toolkit style applied to the entire box.
    """
    inner_width = BOX_WIDTH - 2
    pad_left = (inner_width - len(title)) // 2
    pad_right = inner_width - len(title) - pad_left
    top = f"╔{'═' * inner_width}╗"
    mid = f"║{' ' * pad_left}{title}{' ' * pad_right}║"
    bot = f"╚{'═' * inner_width}╝"
    for line in (top, mid, bot):
        console_print(line, color)

logger = get_logger("console")

# Type alias for console handler functions
CommandHandler = Callable[["ConsoleControl", list[str]], Awaitable[None]]


@dataclass
class Command:
    """
    Definition of a console command with handler and metadata.

    Attributes:
        name (str): Primary name of the command.
        handler (CommandHandler): Async function to execute when the command is invoked.
        aliases (list[str]): Alternative names that can trigger this command.
        description (str): Human-readable description shown in help text.
        usage (str): Optional usage string showing command syntax.
    """
    name: str
    handler: CommandHandler
    aliases: list[str]
    description: str
    usage: str = ""

    def matches(self, input_cmd: str) -> bool:
        """Check if input matches this command or any alias."""
        return input_cmd == self.name or input_cmd in self.aliases


def console_print(message: str, style: str = "") -> None:
    """
    Print text through prompt_toolkit without breaking the active prompt.

    Args:
        message (str): The text to print to the console.
        style (str): Optional prompt_toolkit style to apply to the message.
    """
    formatted: FormattedText | str
    if style:
        formatted = FormattedText([(style, message)])
    else:
        formatted = message
    print_formatted_text(formatted)


# ==================== Rendering ====================

def sparkline(series: list[float | None]) -> str:
    """Render sentiment values in [-1, 1] as block characters; None renders as a gap."""
    chars = []
    top = len(SPARK_CHARS) - 1
    for value in series:
        if value is None:
            chars.append(SPARK_GAP)
            continue
        level = round((value + 1.0) / 2.0 * top)
        chars.append(SPARK_CHARS[min(top, max(0, level))])
    return "".join(chars)


def format_record(record: MessageRecord) -> str:
    """One feed line: time, author, content and the analysis (or an analyzing marker)."""
    stamp = record.timestamp.strftime("%H:%M:%S")
    head = f"[{stamp}] {record.author}: {record.content}"
    if record.analysis is None:
        return f"{head}  (analyzing...)"

    analysis = record.analysis
    flags = " TOXIC" if analysis.is_toxic else ""
    suffix = " (fallback)" if record.state is AnalysisState.FAILED_SAFE else ""
    return f"{head}  [{analysis.sentiment_score:+.2f} | {analysis.primary_topic}{flags}]{suffix}"


def record_style(record: MessageRecord) -> str:
    if record.analysis is None:
        return "ansibrightblack"
    if record.analysis.is_toxic:
        return "ansibrightred"
    if record.state is AnalysisState.FAILED_SAFE:
        return "ansiyellow"
    return "ansigreen" if record.analysis.sentiment_score >= 0 else "ansired"


def render_stats(stats: AggregateSnapshot) -> list[str]:
    """Dashboard summary lines for an aggregate snapshot."""
    lines = [
        f"  Total Messages:   {stats.resolved_messages} analyzed, {stats.pending_messages} pending",
        f"  Avg Sentiment:    {stats.average_sentiment:+.2f}",
        f"  Toxicity Alerts:  {stats.toxic_count} ({stats.toxicity_rate:.0%})",
        f"  Trending Topic:   {stats.top_topic or 'N/A'}",
    ]
    if stats.topic_ranking:
        lines.append("  Topics:")
        for entry in stats.topic_ranking:
            lines.append(f"    • {entry.topic:<20} {entry.count}")
    lines.append(f"  Sentiment Trend:  {sparkline(stats.sentiment_series) or '-'}")
    return lines


# ==================== Control ====================

class ConsoleControl:
    """
    State shared by console commands: the feed controller and the shutdown event.

    Attributes:
        feed (FeedController): Controller that submits messages to the feed.
        shutdown_event (asyncio.Event): Event that signals shutdown request.
    """

    def __init__(self, feed: FeedController) -> None:
        self.feed = feed
        self.shutdown_event = asyncio.Event()
        self._background: set[asyncio.Task[object]] = set()

    def request_shutdown(self) -> None:
        self.shutdown_event.set()

    def is_shutdown_requested(self) -> bool:
        return self.shutdown_event.is_set()

    def spawn(self, coro: Awaitable[object], name: str) -> asyncio.Task[object]:
        """Run a command's long-running work in the background, logging any failure."""
        task = asyncio.ensure_future(coro)
        task.set_name(name)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task[object]) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("[CONSOLE] Background task %s failed: %s", task.get_name(), task.exception())

    async def wait_background(self) -> None:
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def snapshot_stats(self) -> AggregateSnapshot:
        settings = self.feed.settings
        return aggregator.build_snapshot(
            self.feed.store.snapshot(),
            window=settings.sentiment_window,
            limit=settings.top_topics,
        )


def print_resolved_record(record: MessageRecord) -> None:
    """Store listener printing each record as its analysis lands (the live feed)."""
    if record.is_resolved:
        console_print(format_record(record), record_style(record))


# ==================== Command Handlers ====================

async def cmd_help(control: ConsoleControl, args: list[str]) -> None:
    """Display available commands and their descriptions."""
    print_boxed_title("Console Commands Reference", "ansigreen")
    for cmd in COMMANDS:
        aliases_str = f" (aliases: {', '.join(cmd.aliases)})" if cmd.aliases else ""
        console_print(f"\n  {cmd.name}{aliases_str}", "ansicyan")
        console_print(f"    {cmd.description}")
        if cmd.usage:
            console_print(f"    Usage: {cmd.usage}", "ansibrightblack")
    console_print("")


async def cmd_status(control: ConsoleControl, args: list[str]) -> None:
    """Display analysis engine mode and feed activity."""
    print_boxed_title("Sentinel Status", "ansimagenta")

    classifier = control.feed.classifier
    if classifier.offline:
        console_print("  Engine:     🟡 Offline (synthetic analysis)")
    else:
        console_print(f"  Engine:     🟢 Online ({classifier.model_name})")
    console_print(f"  Messages:   {len(control.feed.store)}")
    console_print(f"  In flight:  {control.feed.in_flight}")
    console_print("")


async def cmd_send(control: ConsoleControl, args: list[str]) -> None:
    """Inject a message into the stream as the default author."""
    text = " ".join(args)
    record = control.feed.submit(control.feed.settings.default_author, text)
    if record is None:
        console_print("Nothing to send. Usage: send <text>", "ansiyellow")
        return
    console_print(format_record(record), record_style(record))


async def cmd_simulate(control: ConsoleControl, args: list[str]) -> None:
    """Start the simulated message stream without blocking the prompt."""
    samples = control.feed.settings.simulation_samples
    console_print(f"Simulating {len(samples)} messages...", "ansibrightcyan")
    control.spawn(control.feed.run_batch(samples), name="simulation")


async def cmd_stats(control: ConsoleControl, args: list[str]) -> None:
    """Display aggregate health statistics for the feed."""
    print_boxed_title("Community Health", "ansiblue")
    for line in render_stats(control.snapshot_stats()):
        console_print(line)
    console_print("")


async def cmd_feed(control: ConsoleControl, args: list[str]) -> None:
    """Display the most recent messages with their analysis."""
    try:
        count = int(args[0]) if args else DEFAULT_FEED_LINES
        if count < 1:
            raise ValueError(count)
    except ValueError:
        console_print(f"Invalid count '{args[0]}'. Usage: feed [n]", "ansibrightred")
        return

    records = control.feed.store.snapshot()
    if not records:
        console_print("No messages yet. Try 'send <text>' or 'simulate'.", "ansiyellow")
        return

    print_boxed_title(f"Live Ingestion Stream ({len(records)})", "ansiblue")
    for record in records[-count:]:
        console_print(f"  {format_record(record)}", record_style(record))
    console_print("")


async def cmd_clear(control: ConsoleControl, args: list[str]) -> None:
    """Clear the console screen."""
    os.system('cls' if os.name == 'nt' else 'clear')
    console_print("Console cleared.", "ansibrightcyan")


async def cmd_shutdown(control: ConsoleControl, args: list[str]) -> None:
    """Request graceful shutdown; in-flight analyses are drained first."""
    console_print("Shutdown requested.", "ansiyellow")
    control.request_shutdown()


# ==================== Command Registry ====================

COMMANDS: list[Command] = [
    Command(
        name="help",
        handler=cmd_help,
        aliases=["h", "?"],
        description="Show this help message with all available commands",
    ),
    Command(
        name="status",
        handler=cmd_status,
        aliases=["stat", "info"],
        description="Display analysis engine mode and feed activity",
    ),
    Command(
        name="send",
        handler=cmd_send,
        aliases=["say", "s"],
        description="Inject a message into the stream",
        usage="send <text>",
    ),
    Command(
        name="simulate",
        handler=cmd_simulate,
        aliases=["sim", "batch"],
        description="Run the simulated message stream",
    ),
    Command(
        name="stats",
        handler=cmd_stats,
        aliases=["dashboard", "d"],
        description="Show sentiment, toxicity and topic statistics",
    ),
    Command(
        name="feed",
        handler=cmd_feed,
        aliases=["f", "messages"],
        description="Show the most recent messages and their analysis",
        usage="feed [n]",
    ),
    Command(
        name="clear",
        handler=cmd_clear,
        aliases=["cls"],
        description="Clear the console screen",
    ),
    Command(
        name="shutdown",
        handler=cmd_shutdown,
        aliases=["stop", "quit", "exit"],
        description="Gracefully shut down the dashboard",
    ),
]


# ==================== Command Dispatcher ====================

async def handle_console_command(command: str, control: ConsoleControl) -> None:
    """
    Parse and execute a console command line.

    Args:
        command (str): The raw command line input from the user.
        control (ConsoleControl): The console control instance to pass to handlers.
    """
    if not command.strip():
        return

    parts = command.strip().split()
    cmd_name = parts[0].lower()
    args = parts[1:]

    for cmd in COMMANDS:
        if cmd.matches(cmd_name):
            try:
                await cmd.handler(control, args)
            except Exception as exc:
                logger.exception("Error executing command '%s': %s", cmd_name, exc)
                console_print(f"Error executing command: {exc}", "ansibrightred")
            return

    console_print(f"Unknown command '{cmd_name}'. Type 'help' for available commands.", "ansibrightred")


async def run_console(control: ConsoleControl) -> None:
    """
    Run the interactive dashboard console until shutdown is requested.

    Args:
        control (ConsoleControl): The console control instance managing lifecycle.
    """
    session = PromptSession("> ")

    print_boxed_title("Sentinel Moderation Dashboard", "ansicyan")
    console_print("Type 'help' for available commands or 'exit' to quit.\n", "ansibrightblack")

    with patch_stdout():
        while not control.is_shutdown_requested():
            try:
                line = await session.prompt_async()
                if line.strip():
                    await handle_console_command(line, control)
            except (EOFError, KeyboardInterrupt):
                console_print("\nShutdown requested by user.", "ansibrightyellow")
                control.request_shutdown()
                break
            except Exception as exc:  # pragma: no cover
                logger.exception("Error in console input loop: %s", exc)
                console_print(f"Error: {exc}", "ansibrightred")


@asynccontextmanager
async def console_session(control: ConsoleControl) -> AsyncIterator[ConsoleControl]:
    """
    Run the console in a background task and cancel it when the context exits.

    The live feed listener is subscribed to the store for the duration of the session.

    Example:
        async with console_session(control):
            await control.shutdown_event.wait()
    """
    store = control.feed.store
    store.subscribe(print_resolved_record)
    console_task = asyncio.create_task(run_console(control))
    try:
        yield control
    finally:
        control.request_shutdown()
        store.unsubscribe(print_resolved_record)
        console_task.cancel()
        try:
            await console_task
        except asyncio.CancelledError:
            pass
