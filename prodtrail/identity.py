"""Identity providers supplying the attribution string for change records.

The core never authenticates the actor; it only records the name it is given.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IdentityProvider(ABC):
    """Source of the current actor's display name."""

    @abstractmethod
    def current_actor_name(self) -> str:
        """Return the display name recorded as ``changed_by``."""


class StaticIdentityProvider(IdentityProvider):
    """Always reports the same actor name."""

    def __init__(self, name: str) -> None:
        if not name:
            raise ValueError("Actor name must not be empty")
        self._name = name

    def current_actor_name(self) -> str:
        return self._name
