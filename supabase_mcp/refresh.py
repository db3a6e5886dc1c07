"""Refresh listeners fired whenever the tool catalog is listed."""

from __future__ import annotations

from typing import Callable

import structlog

logger = structlog.get_logger()

RefreshCallback = Callable[[], None]


class RefreshNotifier:
    """An insertion-ordered set of callbacks."""

    def __init__(self) -> None:
        # dict keys keep registration order and drop duplicates
        self._listeners: dict[RefreshCallback, None] = {}

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, callback: RefreshCallback) -> bool:
        return callback in self._listeners

    def on_refresh(self, callback: RefreshCallback) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._listeners[callback] = None

        def unregister() -> None:
            self._listeners.pop(callback, None)

        return unregister

    def notify(self) -> None:
        """Call every listener in registration order; failures are logged and skipped."""
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.warning(
                    "refresh_listener_failed",
                    listener=getattr(callback, "__qualname__", repr(callback)),
                    exc_info=True,
                )
