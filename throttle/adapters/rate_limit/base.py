"""Window store interfaces.

The limiter should depend on this abstraction (not the concrete
implementation) so storage can be swapped later with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable
from dataclasses import dataclass


@dataclass
class Window:
    """Fixed counting window for one client.

    Attributes:
        count: Requests counted in this window so far.
        reset_at: UNIX epoch seconds at which the window dies.
    """

    count: int
    reset_at: float

    def is_expired(self, now: float) -> bool:
        return self.reset_at <= now


class AbstractWindowStore(ABC):
    """Mapping of client key to its current window."""

    @abstractmethod
    def get_or_create(self, key: Hashable, now: float, window_seconds: float) -> Window:
        """Return the live window for key, replacing it if absent or expired."""
        raise NotImplementedError

    @abstractmethod
    def increment(self, key: Hashable) -> int:
        """Add one to the window's count and return the new count."""
        raise NotImplementedError

    @abstractmethod
    def hit(self, key: Hashable, now: float, window_seconds: float) -> tuple[Window, int]:
        """Get-or-create and increment as one atomic step.

        Returns:
            The live window and the count observed by this caller.
        """
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: Hashable) -> None:
        """Delete the entry for key, if any."""
        raise NotImplementedError

    @abstractmethod
    def sweep_expired(self, now: float) -> int:
        """Delete every expired entry and return how many were removed."""
        raise NotImplementedError

    @abstractmethod
    def __len__(self) -> int:
        raise NotImplementedError
