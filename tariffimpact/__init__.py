"""Tariff Impact Analyzer.

Keyword-based tariff impact scoring for market sectors, with a
command-line report generator, a Telegram bot and a small web dashboard.
"""

__version__ = "1.0.0"
