from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable


class Ticker(ABC):
    """Repeating one-second clock signal.

    ``start`` replaces any callback armed earlier; implementations must never
    deliver signals for two callbacks at once.
    """

    @abstractmethod
    def start(self, callback: Callable[[], None]) -> None:
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        raise NotImplementedError

    @property
    @abstractmethod
    def active(self) -> bool:
        raise NotImplementedError


class ManualTicker(Ticker):
    """Ticker driven by hand, for tests and headless simulation."""

    def __init__(self) -> None:
        self._callback: Callable[[], None] | None = None
        self.start_count = 0
        self.stop_count = 0

    def start(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self.start_count += 1

    def stop(self) -> None:
        if self._callback is not None:
            self.stop_count += 1
        self._callback = None

    @property
    def active(self) -> bool:
        return self._callback is not None

    @property
    def callback(self) -> Callable[[], None] | None:
        return self._callback

    def fire(self, times: int = 1) -> int:
        fired = 0
        for _ in range(max(0, int(times))):
            callback = self._callback
            if callback is None:
                break
            callback()
            fired += 1
        return fired
