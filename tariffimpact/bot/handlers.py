"""Chat-bot command handling.

``BotCommandHandler`` maps a command and the sender's user id to a reply
text. It holds no transport code, so it is exercised directly in tests
and driven by ``TelegramBotRunner`` in production.
"""

from __future__ import annotations

import time
from typing import Callable

from tariffimpact import __version__
from tariffimpact.analysis.formatting import (
    escape_markdown,
    format_alerts,
    format_history,
    format_message,
    format_sectors,
)
from tariffimpact.analysis.report import Report
from tariffimpact.analysis.thresholds import DEFAULT_THRESHOLDS, RiskThresholds
from tariffimpact.bot.subscriptions import SubscriptionStore, toggle_subscription
from tariffimpact.catalog import SectorCatalog, UnknownSectorError
from tariffimpact.logging_setup import get_logger
from tariffimpact.news.source import NewsSource
from tariffimpact.pipeline import run_analysis

logger = get_logger("bot.handlers")

COMMANDS = {
    "analyze": "Get latest sector analysis (optionally: /analyze <sector>)",
    "sectors": "List all tracked sectors",
    "history": "Historical tariff events",
    "alerts": "Current high-impact alerts",
    "watch": "Toggle auto-alerts",
    "stats": "Bot statistics",
    "settings": "Show current settings",
    "help": "Show this message",
}

ERROR_REPLY = "❌ An error occurred. Please try again."


def parse_command(text: str) -> tuple[str, list[str]] | None:
    """Split '/cmd@BotName arg1 arg2' into ('cmd', ['arg1', 'arg2'])."""
    text = text.strip()
    if not text.startswith("/"):
        return None
    parts = text[1:].split()
    if not parts:
        return None
    command = parts[0].split("@", 1)[0].lower()
    return command, parts[1:]


class BotCommandHandler:
    """Produce replies for bot commands.

    Args:
        catalog: Sector catalog.
        source: News source used for fresh analyses.
        store: Alert subscription store.
        history_limit: Historical events shown by /history and reports.
        thresholds: Shared threshold table.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        catalog: SectorCatalog,
        source: NewsSource,
        store: SubscriptionStore,
        history_limit: int = 5,
        thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.catalog = catalog
        self.source = source
        self.store = store
        self.history_limit = history_limit
        self.thresholds = thresholds
        self._clock = clock
        self._started = clock()

    def analyze(self, sectors: list[str] | None = None) -> Report:
        return run_analysis(
            self.catalog,
            self.source,
            sectors=sectors,
            history_limit=self.history_limit,
            thresholds=self.thresholds,
        )

    def help_text(self) -> str:
        lines = ["📊 *Tariff Impact Analyzer Commands*", ""]
        lines.extend(f"/{name} - {desc}" for name, desc in COMMANDS.items())
        return "\n".join(lines)

    def cmd_start(self, user_id: int, args: list[str]) -> str:
        return (
            "👋 *Welcome to Tariff Impact Analyzer!*\n\n"
            "I track how tariff news affects market sectors.\n\n" + self.help_text()
        )

    def cmd_help(self, user_id: int, args: list[str]) -> str:
        return self.help_text()

    def cmd_analyze(self, user_id: int, args: list[str]) -> str:
        sectors = [" ".join(args)] if args else None
        try:
            report = self.analyze(sectors)
        except UnknownSectorError as e:
            return f"❌ {escape_markdown(str(e))}"
        return format_message(report, self.thresholds)

    def cmd_sectors(self, user_id: int, args: list[str]) -> str:
        return format_sectors(self.catalog)

    def cmd_history(self, user_id: int, args: list[str]) -> str:
        return format_history(self.catalog.historical_events[: self.history_limit])

    def cmd_alerts(self, user_id: int, args: list[str]) -> str:
        return format_alerts(self.analyze(), self.thresholds)

    def cmd_watch(self, user_id: int, args: list[str]) -> str:
        if toggle_subscription(self.store, user_id):
            return (
                "🔔 Auto-alerts enabled! You will receive alerts when significant "
                "tariff impacts are detected."
            )
        return "🔕 Auto-alerts disabled"

    def cmd_stats(self, user_id: int, args: list[str]) -> str:
        uptime = self._clock() - self._started
        return (
            "📈 *Bot Statistics*\n\n"
            f"• Subscribers: {len(self.store.subscribers())}\n"
            f"• Uptime: {uptime:.0f}s\n"
            f"• Version: {__version__}"
        )

    def cmd_settings(self, user_id: int, args: list[str]) -> str:
        subscribed = "on" if self.store.is_subscribed(user_id) else "off"
        return (
            "⚙️ *Settings*\n\n"
            f"• Auto-alerts: {subscribed} (toggle with /watch)\n"
            f"• Alert threshold: {self.thresholds.alert_min:.1f}/10\n"
            f"• Sectors: {len(self.catalog)} tracked"
        )

    def handle(self, command: str, user_id: int, args: list[str] | None = None) -> str:
        """Dispatch a command; unknown commands get the help text."""
        handler = getattr(self, f"cmd_{command.lower()}", None)
        if handler is None:
            return f"Unknown command /{command}\n\n" + self.help_text()

        try:
            return handler(user_id, args or [])
        except Exception:
            logger.exception("Bot command /%s failed for user %s", command, user_id)
            return ERROR_REPLY

    def handle_text(self, text: str, user_id: int) -> str | None:
        """Handle a raw message text; returns None for non-command messages."""
        parsed = parse_command(text)
        if parsed is None:
            return None
        command, args = parsed
        return self.handle(command, user_id, args)
