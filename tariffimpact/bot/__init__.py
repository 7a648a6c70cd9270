"""Chat-bot front-end."""

from tariffimpact.bot.handlers import BotCommandHandler, parse_command
from tariffimpact.bot.runner import TelegramBotRunner
from tariffimpact.bot.subscriptions import (
    InMemorySubscriptionStore,
    JsonSubscriptionStore,
    SubscriptionStore,
    toggle_subscription,
)

__all__ = [
    "BotCommandHandler",
    "InMemorySubscriptionStore",
    "JsonSubscriptionStore",
    "SubscriptionStore",
    "TelegramBotRunner",
    "parse_command",
    "toggle_subscription",
]
