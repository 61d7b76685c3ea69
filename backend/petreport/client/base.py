"""
PetReport Client — Collaborator Interfaces
============================================

What:  Abstract base classes for what the request gateway needs from the
       surrounding client application: persisted session storage, navigation
       and user-facing notifications.
How:   RequestGateway depends only on these interfaces; concrete
       implementations live in petreport.client.session or in the embedding
       application (a browser shell, a desktop UI, a test double).
"""

from abc import ABC, abstractmethod
from typing import Optional


class SessionStorage(ABC):
    """
    Client-persisted key/value store holding the session credential.

    Keys used by the gateway:
        "key"          bearer token
        "loginstatus"  "true" while signed in
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored value."""
        ...


class Navigator(ABC):
    """Moves the client between views."""

    @abstractmethod
    def navigate(self, path: str) -> None:
        """In-app navigation to `path` (keeps client state)."""
        ...

    @abstractmethod
    def assign(self, path: str) -> None:
        """Hard navigation to `path` (full reload, drops in-memory client state)."""
        ...


class Notifier(ABC):
    """Displays transient user-facing notifications."""

    @abstractmethod
    def clear(self) -> None:
        """Dismiss every notification currently shown."""
        ...

    @abstractmethod
    def show(self, level: str, message: str, title: str, timeout_ms: int) -> None:
        """
        Show one notification.

        Args:
            level: "success", "error" or "info"
            message: Body text
            title: Heading text
            timeout_ms: How long the notification stays visible
        """
        ...
