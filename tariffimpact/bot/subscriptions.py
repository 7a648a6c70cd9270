"""Alert subscription stores.

The bot handler receives a store instead of keeping a module-level set,
so tests can inspect it and several bot processes can share a file.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Protocol

from tariffimpact.logging_setup import get_logger

logger = get_logger("bot.subscriptions")


class SubscriptionStore(Protocol):
    """Mapping of user id to alert subscription state."""

    def is_subscribed(self, user_id: int) -> bool: ...

    def set_subscribed(self, user_id: int, subscribed: bool) -> None: ...

    def subscribers(self) -> list[int]: ...


def toggle_subscription(store: SubscriptionStore, user_id: int) -> bool:
    """Flip a user's subscription; returns the new state."""
    new_state = not store.is_subscribed(user_id)
    store.set_subscribed(user_id, new_state)
    return new_state


class InMemorySubscriptionStore:
    """Process-local subscription store."""

    def __init__(self) -> None:
        self._state: dict[int, bool] = {}
        self._lock = threading.Lock()

    def is_subscribed(self, user_id: int) -> bool:
        with self._lock:
            return self._state.get(user_id, False)

    def set_subscribed(self, user_id: int, subscribed: bool) -> None:
        with self._lock:
            self._state[user_id] = subscribed

    def subscribers(self) -> list[int]:
        with self._lock:
            return sorted(uid for uid, on in self._state.items() if on)


class JsonSubscriptionStore:
    """Subscription store persisted to a flat JSON file.

    The file holds ``{"<user_id>": true|false, ...}``. It is re-read on
    every call so that separate processes observe each other's changes.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> dict[int, bool]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning("Corrupt subscription file %s, starting empty", self.path)
            return {}
        return {int(k): bool(v) for k, v in raw.items()}

    def _save(self, state: dict[int, bool]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps({str(k): v for k, v in sorted(state.items())}, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def is_subscribed(self, user_id: int) -> bool:
        with self._lock:
            return self._load().get(user_id, False)

    def set_subscribed(self, user_id: int, subscribed: bool) -> None:
        with self._lock:
            state = self._load()
            state[user_id] = subscribed
            self._save(state)

    def subscribers(self) -> list[int]:
        with self._lock:
            return sorted(uid for uid, on in self._load().items() if on)
