"""
One-shot cancellable timer for the delayed "cart is empty" redirect.

The scheduler is injectable: scheduler(delay, fn) must return an object
with cancel(). Default is a daemon threading.Timer.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]


def thread_scheduler(delay: float, fn: Callable[[], None]) -> threading.Timer:
    t = threading.Timer(delay, fn)
    t.daemon = True
    t.start()
    return t


class RedirectTimer:
    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.delay = delay
        self._callback = callback
        self._scheduler = scheduler or thread_scheduler
        self._handle: Any = None
        self._cancelled = False
        self._fired = False

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._cancelled and not self._fired

    def start(self) -> None:
        if self._handle is not None:
            return
        logger.debug("redirect timer armed: %ss", self.delay)
        self._handle = self._scheduler(self.delay, self._fire)

    def cancel(self) -> None:
        if self._cancelled or self._fired:
            return
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("redirect timer cancelled")

    def _fire(self) -> None:
        # a scheduler may still call us after cancel(); ignore it
        if self._cancelled or self._fired:
            return
        self._fired = True
        self._callback()
