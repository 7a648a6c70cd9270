"""Web dashboard and JSON API."""

from tariffimpact.web.app import create_app

__all__ = ["create_app"]
