"""Analysis pipeline: news -> scores -> report -> outputs.

``run_analysis`` is the single entry point used by the CLI, the bot and
the dashboard. ``AnalysisRunner`` adds the outputs of a CLI run (report
file, CSV table, chat delivery) and the fixed-interval watch loop.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Protocol, Sequence

from tariffimpact.analysis.formatting import format_message
from tariffimpact.analysis.report import Report, assemble_report, save_report, write_sector_csv
from tariffimpact.analysis.scorer import score_all
from tariffimpact.analysis.thresholds import DEFAULT_THRESHOLDS, RiskThresholds
from tariffimpact.catalog import SectorCatalog
from tariffimpact.logging_setup import get_logger
from tariffimpact.news.source import NewsSource, fetch_news_safely
from tariffimpact.notify.telegram import DeliveryError

logger = get_logger("pipeline")


class MessageSender(Protocol):
    def send_message(self, chat_id: str | int, text: str) -> None: ...


class DeliveryMode(str, Enum):
    NONE = "none"
    ALWAYS = "always"  # telegram mode
    ALERT = "alert"  # only when some sector crosses the alert threshold


@dataclass
class RunOutcome:
    report: Report
    report_path: Path | None = None
    csv_path: Path | None = None
    delivered: bool | None = None  # None when no delivery was attempted


def run_analysis(
    catalog: SectorCatalog,
    source: NewsSource,
    sectors: Sequence[str] | None = None,
    history_limit: int = 3,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    now: datetime | None = None,
) -> Report:
    """Fetch news, score sectors and assemble a report.

    Sector names are validated before news is fetched.

    Raises:
        UnknownSectorError: If a requested sector is not in the catalog.
    """
    for name in sectors or ():
        catalog.get(name)

    news = fetch_news_safely(source)
    results = score_all(news, catalog, sectors, thresholds)
    report = assemble_report(results, news, catalog, history_limit, now, thresholds)

    logger.info(
        "Analysis complete: %d news items, %d sectors, overall risk %s",
        report.summary.total_news,
        report.summary.sectors_analyzed,
        report.summary.overall_risk.value,
    )
    return report


class AnalysisRunner:
    """Runs the pipeline and handles its outputs.

    Runs are serialized: concurrent callers of ``run_once`` wait for the
    run in progress, so a slow run can never produce overlapping
    notifications.
    """

    def __init__(
        self,
        catalog: SectorCatalog,
        source: NewsSource,
        reports_dir: Path | None,
        sectors: Sequence[str] | None = None,
        history_limit: int = 3,
        sender: MessageSender | None = None,
        chat_id: str | int | None = None,
        delivery: DeliveryMode = DeliveryMode.NONE,
        write_csv: bool = False,
        thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        if delivery != DeliveryMode.NONE and (sender is None or not chat_id):
            raise ValueError("Chat delivery requires a sender and a chat id")

        self.catalog = catalog
        self.source = source
        self.reports_dir = reports_dir
        self.sectors = list(sectors) if sectors else None
        self.history_limit = history_limit
        self.sender = sender
        self.chat_id = chat_id
        self.delivery = delivery
        self.write_csv = write_csv
        self.thresholds = thresholds
        self._lock = threading.Lock()

    def should_deliver(self, report: Report) -> bool:
        if self.delivery == DeliveryMode.ALWAYS:
            return True
        if self.delivery == DeliveryMode.ALERT:
            return any(self.thresholds.is_alert(r.impact_score) for r in report.sector_results)
        return False

    def _deliver(self, report: Report) -> bool:
        assert self.sender is not None and self.chat_id
        try:
            self.sender.send_message(self.chat_id, format_message(report, self.thresholds))
            return True
        except DeliveryError as e:
            logger.warning("Notification not delivered, report kept: %s", e)
            return False

    def run_once(self) -> RunOutcome:
        """Run one analysis and write/deliver its outputs."""
        with self._lock:
            report = run_analysis(
                self.catalog,
                self.source,
                sectors=self.sectors,
                history_limit=self.history_limit,
                thresholds=self.thresholds,
            )
            outcome = RunOutcome(report=report)

            if self.reports_dir is not None:
                outcome.report_path = save_report(report, self.reports_dir)
                if self.write_csv:
                    outcome.csv_path = write_sector_csv(report, self.reports_dir)

            if self.should_deliver(report):
                outcome.delivered = self._deliver(report)
            elif self.delivery == DeliveryMode.ALERT:
                logger.info("No sector at or above alert threshold %.1f", self.thresholds.alert_min)

            return outcome

    def watch(
        self,
        interval_seconds: float,
        max_runs: int | None = None,
        on_run: Callable[[RunOutcome], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Re-run on a fixed interval until ``max_runs`` or KeyboardInterrupt.

        Each run is independent; nothing carries over between runs. The
        interval is measured from the end of one run to the start of the
        next.

        Returns:
            Number of runs attempted, failed ones included.
        """
        if interval_seconds <= 0:
            raise ValueError(f"Watch interval must be positive, got {interval_seconds}")

        runs = 0
        suffix = f" for {max_runs} runs" if max_runs else ""
        logger.info("Watch mode: every %.0fs%s", interval_seconds, suffix)
        try:
            while max_runs is None or runs < max_runs:
                try:
                    outcome = self.run_once()
                except OSError as e:
                    logger.error("Run %d failed writing outputs: %s", runs + 1, e)
                else:
                    if on_run is not None:
                        on_run(outcome)
                runs += 1

                if max_runs is not None and runs >= max_runs:
                    break
                sleep(interval_seconds)
        except KeyboardInterrupt:
            logger.info("Watch mode stopped after %d runs", runs)
        return runs
