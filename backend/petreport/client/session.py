"""
PetReport Client — Session State & Default Collaborators
==========================================================

What:  The session credential keys, sign-in/sign-out helpers and simple
       implementations of the collaborator interfaces.
Who:   MemorySessionStorage / HistoryNavigator / LoggingNotifier are the
       defaults for headless clients and tests; a UI shell supplies its own.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from petreport.client.base import Navigator, Notifier, SessionStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "key"
LOGIN_STATUS_KEY = "loginstatus"


@dataclass(frozen=True)
class SessionCredential:
    token: str
    logged_in: bool

    @classmethod
    def from_storage(cls, storage: Optional[SessionStorage]) -> "SessionCredential":
        """Read the credential; without storage the session is anonymous."""
        if storage is None:
            return cls(token="", logged_in=False)
        return cls(
            token=storage.get_item(TOKEN_KEY) or "",
            logged_in=storage.get_item(LOGIN_STATUS_KEY) == "true",
        )

    @property
    def is_authenticated(self) -> bool:
        return self.logged_in and bool(self.token)


def sign_in(storage: SessionStorage, token: str) -> None:
    """Persist the credential returned by a successful login."""
    storage.set_item(TOKEN_KEY, token)
    storage.set_item(LOGIN_STATUS_KEY, "true")


def sign_out(storage: SessionStorage) -> None:
    storage.clear()


class MemorySessionStorage(SessionStorage):
    """Dict-backed storage; lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class HistoryNavigator(Navigator):
    """Records navigations instead of rendering views."""

    def __init__(self, initial_path: str = "/"):
        self.current_path = initial_path
        self.history: List[str] = [initial_path]
        self.hard_navigations: List[str] = []

    def navigate(self, path: str) -> None:
        logger.debug("Navigating to %s", path)
        self.current_path = path
        self.history.append(path)

    def assign(self, path: str) -> None:
        logger.debug("Hard navigation to %s", path)
        self.current_path = path
        self.history.append(path)
        self.hard_navigations.append(path)


class LoggingNotifier(Notifier):
    """Writes notifications to the log instead of displaying them."""

    _LEVELS = {
        "success": logging.INFO,
        "info": logging.INFO,
        "error": logging.ERROR,
    }

    def clear(self) -> None:
        pass

    def show(self, level: str, message: str, title: str, timeout_ms: int) -> None:
        logger.log(self._LEVELS.get(level, logging.INFO), "[%s] %s", title, message)
