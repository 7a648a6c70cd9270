"""Outbound notifications."""

from tariffimpact.notify.telegram import DeliveryError, TelegramNotifier

__all__ = ["DeliveryError", "TelegramNotifier"]
