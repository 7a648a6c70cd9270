"""Telegram long-polling loop for the bot command handler."""

from __future__ import annotations

import time
from typing import Any, Callable

from tariffimpact.analysis.formatting import format_message
from tariffimpact.analysis.report import Report
from tariffimpact.bot.handlers import BotCommandHandler
from tariffimpact.logging_setup import get_logger
from tariffimpact.notify.telegram import DeliveryError, TelegramNotifier

logger = get_logger("bot.runner")

ERROR_BACKOFF_SECONDS = 5.0


class TelegramBotRunner:
    """Poll Telegram for commands and reply through the notifier."""

    def __init__(
        self,
        handler: BotCommandHandler,
        notifier: TelegramNotifier,
        poll_timeout: int = 30,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.handler = handler
        self.notifier = notifier
        self.poll_timeout = poll_timeout
        self._sleep = sleep
        self._clock = clock
        self._offset: int | None = None

    def process_update(self, update: dict[str, Any]) -> str | None:
        """Handle one update and send the reply. Returns the reply text."""
        self._offset = int(update["update_id"]) + 1

        message = update.get("message") or {}
        text = message.get("text")
        chat_id = (message.get("chat") or {}).get("id")
        user_id = (message.get("from") or {}).get("id", chat_id)
        if not text or chat_id is None:
            return None

        reply = self.handler.handle_text(text, int(user_id))
        if reply is None:
            return None

        self.notifier.notify(chat_id, reply)
        return reply

    def poll_once(self) -> int:
        """Fetch and process one batch of updates. Returns how many were processed."""
        updates = self.notifier.get_updates(offset=self._offset, poll_timeout=self.poll_timeout)
        for update in updates:
            self.process_update(update)
        return len(updates)

    def broadcast(self, report: Report) -> int:
        """Send a report to every subscriber. Returns the number delivered."""
        text = format_message(report, self.handler.thresholds)
        delivered = 0
        for user_id in self.handler.store.subscribers():
            if self.notifier.notify(user_id, text):
                delivered += 1
        logger.info("Broadcast delivered to %d subscribers", delivered)
        return delivered

    def check_alerts(self) -> int:
        """Run a fresh analysis and broadcast it if any sector is alert-worthy.

        Returns the number of subscribers reached.
        """
        report = self.handler.analyze()
        thresholds = self.handler.thresholds
        if not any(thresholds.is_alert(r.impact_score) for r in report.sector_results):
            logger.debug("Alert check: nothing at or above %.1f", thresholds.alert_min)
            return 0
        return self.broadcast(report)

    def _check_alerts_logged(self) -> None:
        try:
            self.check_alerts()
        except Exception:
            logger.exception("Alert check failed, polling continues")

    def run_forever(self, max_polls: int | None = None, alert_interval: float | None = None) -> None:
        """Poll until interrupted (or ``max_polls`` batches).

        With ``alert_interval`` set, subscribers are sent the report
        whenever a check finds an alert, at most once per interval.
        """
        logger.info("Bot started, polling for updates")
        polls = 0
        last_check = self._clock()
        try:
            while max_polls is None or polls < max_polls:
                polls += 1
                try:
                    self.poll_once()
                    if alert_interval and self._clock() - last_check >= alert_interval:
                        last_check = self._clock()
                        self._check_alerts_logged()
                except DeliveryError as e:
                    logger.warning("Polling failed, retrying in %.0fs: %s", ERROR_BACKOFF_SECONDS, e)
                    self._sleep(ERROR_BACKOFF_SECONDS)
        except KeyboardInterrupt:
            logger.info("Bot stopped")
