"""Configuration management for the Tariff Impact Analyzer.

Loads configuration from environment variables with sane defaults.
Uses python-dotenv to load from .env file if present.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_CATALOG_PATH = PACKAGE_DIR / "data" / "catalog.yaml"


def _get_env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get int from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_env_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.getenv(key, default)


@dataclass(frozen=True)
class PathsConfig:
    """Filesystem locations."""

    catalog_path: Path
    reports_dir: Path

    @classmethod
    def from_env(cls) -> "PathsConfig":
        """Create PathsConfig from environment variables."""
        return cls(
            catalog_path=Path(_get_env_str("TARIFF_CATALOG_PATH", str(DEFAULT_CATALOG_PATH))),
            reports_dir=Path(_get_env_str("REPORTS_DIR", "./reports")),
        )


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str
    format: str

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create LoggingConfig from environment variables."""
        return cls(
            level=_get_env_str("LOG_LEVEL", "INFO"),
            format=_get_env_str("LOG_FORMAT", "simple"),
        )


@dataclass(frozen=True)
class TelegramConfig:
    """Telegram Bot API configuration."""

    bot_token: str
    chat_id: str
    timeout_seconds: float
    poll_timeout_seconds: int
    subscriptions_path: Path | None  # None keeps subscriptions in memory

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token)

    @classmethod
    def from_env(cls) -> "TelegramConfig":
        """Create TelegramConfig from environment variables."""
        subscriptions = _get_env_str("BOT_SUBSCRIPTIONS_PATH", "")
        return cls(
            bot_token=_get_env_str("TELEGRAM_BOT_TOKEN", ""),
            chat_id=_get_env_str("TELEGRAM_CHAT_ID", ""),
            timeout_seconds=_get_env_float("TELEGRAM_TIMEOUT_SECONDS", 10.0),
            poll_timeout_seconds=_get_env_int("TELEGRAM_POLL_TIMEOUT_SECONDS", 30),
            subscriptions_path=Path(subscriptions) if subscriptions else None,
        )


@dataclass(frozen=True)
class NewsConfig:
    """News source configuration."""

    source: str  # "static", "jsonl", "rss"
    news_file: Path
    rss_sources: Path
    request_timeout: int

    @classmethod
    def from_env(cls) -> "NewsConfig":
        """Create NewsConfig from environment variables."""
        return cls(
            source=_get_env_str("NEWS_SOURCE", "static").lower(),
            news_file=Path(_get_env_str("NEWS_FILE", "./data/news.jsonl")),
            rss_sources=Path(_get_env_str("NEWS_RSS_SOURCES", "./data/rss_sources.txt")),
            request_timeout=_get_env_int("NEWS_REQUEST_TIMEOUT", 15),
        )


@dataclass(frozen=True)
class WatchConfig:
    """Watch mode configuration."""

    interval_seconds: float

    @classmethod
    def from_env(cls) -> "WatchConfig":
        """Create WatchConfig from environment variables."""
        return cls(interval_seconds=_get_env_float("WATCH_INTERVAL_SECONDS", 300.0))


@dataclass(frozen=True)
class DashboardConfig:
    """Web dashboard configuration."""

    host: str
    port: int
    history_limit: int

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        """Create DashboardConfig from environment variables."""
        return cls(
            host=_get_env_str("DASHBOARD_HOST", "127.0.0.1"),
            port=_get_env_int("PORT", 3000),
            history_limit=_get_env_int("DASHBOARD_HISTORY_LIMIT", 5),
        )


@dataclass(frozen=True)
class Config:
    """Main configuration container."""

    paths: PathsConfig
    logging: LoggingConfig
    telegram: TelegramConfig
    news: NewsConfig
    watch: WatchConfig
    dashboard: DashboardConfig
    report_history_limit: int

    @classmethod
    def from_env(cls) -> "Config":
        """Create Config from environment variables."""
        return cls(
            paths=PathsConfig.from_env(),
            logging=LoggingConfig.from_env(),
            telegram=TelegramConfig.from_env(),
            news=NewsConfig.from_env(),
            watch=WatchConfig.from_env(),
            dashboard=DashboardConfig.from_env(),
            report_history_limit=_get_env_int("REPORT_HISTORY_LIMIT", 3),
        )


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
