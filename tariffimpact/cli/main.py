"""Top-level CLI (`tariff-impact`) for tariff impact analysis.

Subcommands:

- ``analyze``: score sectors, print the report, save it as JSON (and
  optionally CSV), optionally deliver it to Telegram, optionally repeat on
  an interval (watch mode)
- ``history``: list historical tariff events
- ``sectors``: list tracked sectors
- ``serve``: run the web dashboard
- ``bot``: run the Telegram bot

The CLI is routing only; all analysis lives in ``tariffimpact.pipeline``.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from tariffimpact import __version__
from tariffimpact.analysis.report import report_to_dict
from tariffimpact.catalog import (
    CatalogError,
    SectorCatalog,
    UnknownSectorError,
    get_catalog,
    load_catalog,
)
from tariffimpact.cli._console import _fmt, configure_windows_console, format_console
from tariffimpact.config import get_config
from tariffimpact.logging_setup import get_logger
from tariffimpact.news.source import build_news_source
from tariffimpact.pipeline import AnalysisRunner, DeliveryMode, RunOutcome

logger = get_logger("cli.main")

EXIT_CONFIG_ERROR = 1
EXIT_INVALID_INPUT = 2


def _non_negative_int(value: str) -> int:
    """argparse type for counts that must be >= 0."""
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'") from e
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _load_catalog_or_exit(path: str | None) -> SectorCatalog:
    try:
        return load_catalog(Path(path)) if path else get_catalog()
    except CatalogError as e:
        print(f"Invalid sector catalog: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)


def _delivery_mode(args: argparse.Namespace) -> DeliveryMode:
    if args.telegram:
        return DeliveryMode.ALWAYS
    if args.alert:
        return DeliveryMode.ALERT
    return DeliveryMode.NONE


def cmd_analyze(args: argparse.Namespace) -> None:
    """Run the analysis pipeline once or in watch mode."""
    cfg = get_config()
    catalog = _load_catalog_or_exit(args.catalog)

    # Fail on bad sector names before touching the network
    for name in args.sector or ():
        try:
            catalog.get(name)
        except UnknownSectorError as e:
            print(str(e), file=sys.stderr)
            sys.exit(EXIT_INVALID_INPUT)

    source = build_news_source(
        catalog,
        cfg.news,
        news_file=Path(args.news_file) if args.news_file else None,
        rss_sources=Path(args.rss_sources) if args.rss_sources else None,
    )

    delivery = _delivery_mode(args)
    sender = None
    chat_id = args.chat_id or cfg.telegram.chat_id
    if delivery != DeliveryMode.NONE:
        if not cfg.telegram.enabled or not chat_id:
            logger.warning(
                "Telegram delivery requested but TELEGRAM_BOT_TOKEN or chat id is not set; "
                "continuing without delivery"
            )
            delivery = DeliveryMode.NONE
        else:
            from tariffimpact.notify.telegram import TelegramNotifier

            sender = TelegramNotifier(cfg.telegram.bot_token, timeout=cfg.telegram.timeout_seconds)

    reports_dir = None if args.no_save else Path(args.out_dir or cfg.paths.reports_dir)
    history_limit = args.history if args.history is not None else cfg.report_history_limit

    runner = AnalysisRunner(
        catalog,
        source,
        reports_dir,
        sectors=args.sector,
        history_limit=history_limit,
        sender=sender,
        chat_id=chat_id if sender else None,
        delivery=delivery,
        write_csv=args.csv,
    )

    use_emoji = False if args.no_emoji else None

    def show(outcome: RunOutcome) -> None:
        if args.json:
            print(json.dumps(report_to_dict(outcome.report), indent=2, ensure_ascii=False))
            return
        print(format_console(outcome.report, use_emoji=use_emoji))
        if outcome.report_path:
            print()
            print(_fmt("✅", "[OK]", use_emoji), f"Report saved to {outcome.report_path}")
        if outcome.csv_path:
            print(_fmt("✅", "[OK]", use_emoji), f"Sector table saved to {outcome.csv_path}")
        if outcome.delivered is False:
            print(_fmt("⚠️", "[WARN]", use_emoji), "Telegram notification was not delivered")

    try:
        if args.watch:
            interval = args.interval if args.interval is not None else cfg.watch.interval_seconds
            runner.watch(interval, max_runs=args.max_runs, on_run=show)
        else:
            show(runner.run_once())
    finally:
        if sender is not None:
            sender.close()


def cmd_history(args: argparse.Namespace) -> None:
    """List historical tariff events."""
    catalog = _load_catalog_or_exit(args.catalog)
    events = catalog.historical_events
    if args.limit is not None:
        events = events[: args.limit]

    if args.json:
        print(json.dumps([e.to_dict() for e in events], indent=2, ensure_ascii=False))
        return

    for e in events:
        print(f"{e.date}  [{e.severity:>2}/10]  {e.event}")
        print(f"            {e.sector}: {e.impact}")


def cmd_sectors(args: argparse.Namespace) -> None:
    """List tracked sectors."""
    catalog = _load_catalog_or_exit(args.catalog)

    if args.json:
        payload = [
            {
                "name": s.name,
                "vulnerability": s.vulnerability.value,
                "stocks": list(s.stocks),
                "keywords": sorted(s.keywords),
            }
            for s in catalog
        ]
        print(json.dumps(payload, indent=2))
        return

    width = max(len(s.name) for s in catalog)
    for s in catalog:
        print(f"{s.name:<{width}}  {s.vulnerability.value:<6}  {', '.join(s.stocks)}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the web dashboard."""
    import uvicorn

    from tariffimpact.web.app import create_app

    cfg = get_config()
    catalog = _load_catalog_or_exit(args.catalog)
    source = build_news_source(catalog, cfg.news)
    app = create_app(catalog, source, history_limit=cfg.dashboard.history_limit)

    host = args.host or cfg.dashboard.host
    port = args.port or cfg.dashboard.port
    print(f"Dashboard running at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=cfg.logging.level.lower())


def cmd_bot(args: argparse.Namespace) -> None:
    """Run the Telegram bot."""
    from tariffimpact.bot.handlers import BotCommandHandler
    from tariffimpact.bot.runner import TelegramBotRunner
    from tariffimpact.bot.subscriptions import InMemorySubscriptionStore, JsonSubscriptionStore
    from tariffimpact.notify.telegram import TelegramNotifier

    cfg = get_config()
    if not cfg.telegram.enabled:
        print("TELEGRAM_BOT_TOKEN not set (get one from @BotFather)", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    catalog = _load_catalog_or_exit(args.catalog)
    source = build_news_source(catalog, cfg.news)

    subscriptions_path = args.subscriptions or cfg.telegram.subscriptions_path
    store = (
        JsonSubscriptionStore(Path(subscriptions_path))
        if subscriptions_path
        else InMemorySubscriptionStore()
    )

    handler = BotCommandHandler(catalog, source, store, history_limit=cfg.dashboard.history_limit)
    with TelegramNotifier(cfg.telegram.bot_token, timeout=cfg.telegram.timeout_seconds) as notifier:
        runner = TelegramBotRunner(handler, notifier, poll_timeout=cfg.telegram.poll_timeout_seconds)
        print("Bot started. Press Ctrl+C to stop.")
        runner.run_forever(alert_interval=cfg.watch.interval_seconds)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tariff-impact",
        description="Tariff impact analysis for market sectors",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--catalog",
        default=None,
        help="Sector catalog YAML (default: TARIFF_CATALOG_PATH or the built-in catalog)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # -------------------- analyze --------------------
    analyze_p = subparsers.add_parser("analyze", help="Run tariff impact analysis")
    analyze_p.add_argument(
        "--sector",
        action="append",
        default=None,
        help="Restrict analysis to a sector (repeatable)",
    )
    analyze_p.add_argument("--json", action="store_true", help="Print the report as JSON")
    analyze_p.add_argument(
        "--history",
        type=_non_negative_int,
        default=None,
        help="Number of historical events to include (default: REPORT_HISTORY_LIMIT or 3)",
    )
    analyze_p.add_argument("--out-dir", default=None, help="Report directory (default: REPORTS_DIR)")
    analyze_p.add_argument("--no-save", action="store_true", help="Do not write a report file")
    analyze_p.add_argument("--csv", action="store_true", help="Also write the sector table as CSV")

    news_group = analyze_p.add_mutually_exclusive_group()
    news_group.add_argument("--news-file", default=None, help="Read news from a JSONL file")
    news_group.add_argument("--rss-sources", default=None, help="Fetch news from RSS URLs in a file")

    delivery_group = analyze_p.add_mutually_exclusive_group()
    delivery_group.add_argument(
        "--telegram", action="store_true", help="Send the report to Telegram"
    )
    delivery_group.add_argument(
        "--alert",
        action="store_true",
        help="Send to Telegram only if a sector reaches the alert threshold",
    )
    analyze_p.add_argument("--chat-id", default=None, help="Telegram chat id (default: TELEGRAM_CHAT_ID)")

    analyze_p.add_argument("--watch", action="store_true", help="Re-run on a fixed interval")
    analyze_p.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Watch interval in seconds (default: WATCH_INTERVAL_SECONDS or 300)",
    )
    analyze_p.add_argument(
        "--max-runs", type=_non_negative_int, default=None, help="Stop watch mode after N runs"
    )
    analyze_p.add_argument("--no-emoji", action="store_true", help="ASCII-only console output")
    analyze_p.set_defaults(func=cmd_analyze)

    # -------------------- history --------------------
    history_p = subparsers.add_parser("history", help="List historical tariff events")
    history_p.add_argument("--limit", type=_non_negative_int, default=None, help="Number of events to show")
    history_p.add_argument("--json", action="store_true", help="Print as JSON")
    history_p.set_defaults(func=cmd_history)

    # -------------------- sectors --------------------
    sectors_p = subparsers.add_parser("sectors", help="List tracked sectors")
    sectors_p.add_argument("--json", action="store_true", help="Print as JSON")
    sectors_p.set_defaults(func=cmd_sectors)

    # -------------------- serve --------------------
    serve_p = subparsers.add_parser("serve", help="Run the web dashboard")
    serve_p.add_argument("--host", default=None, help="Bind host (default: DASHBOARD_HOST)")
    serve_p.add_argument("--port", type=int, default=None, help="Bind port (default: PORT or 3000)")
    serve_p.set_defaults(func=cmd_serve)

    # -------------------- bot --------------------
    bot_p = subparsers.add_parser("bot", help="Run the Telegram bot")
    bot_p.add_argument(
        "--subscriptions",
        default=None,
        help="JSON file for alert subscriptions (default: in memory)",
    )
    bot_p.set_defaults(func=cmd_bot)

    return parser


def main(argv: list[str] | None = None) -> None:
    configure_windows_console()
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
