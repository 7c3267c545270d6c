"""
Region change watcher — immediate "changed" plus debounced "confirmed".

Call :meth:`RegionChangeWatcher.check` on every layout/paint pass.  When the
visible region differs from the last one seen, ``region_changed`` fires at
once and a single-shot QTimer is (re)started.  Once the map stays still for
``delay_ms`` and no finger/mouse button is down, ``region_confirmed`` fires.

Rhythm
──────
    pan → changed → changed → changed … (timer restarted each time)
    release → quiet period → confirmed (once)

Two snapshots are tracked: one for "changed" and one for "confirmed".  The
confirmation compares against the last *confirmed* region, so a pan that
returns to where it started confirms nothing.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt5 import QtCore

from ..geo.region import EMPTY_REGION, CoordinateRegion

log = logging.getLogger(__name__)

# Ten frames at 60 Hz
REGION_CONFIRM_DELAY_MS = 1000 // 60 * 10


class RegionChangeWatcher(QtCore.QObject):
    """Detects viewport motion and reports when it settles.

    Signals
    -------
    region_changed(CoordinateRegion)
        Emitted on every pass where the region differs from the last one.
    region_confirmed(CoordinateRegion)
        Emitted once the region has been stable for ``delay_ms``.
    """

    region_changed = QtCore.pyqtSignal(object)
    region_confirmed = QtCore.pyqtSignal(object)

    def __init__(
        self,
        region_provider: Callable[[], CoordinateRegion],
        delay_ms: int = REGION_CONFIRM_DELAY_MS,
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        self._region_provider = region_provider
        self._previous = EMPTY_REGION
        self._previous_confirmed = EMPTY_REGION
        self._in_gesture = False
        self._shut_down = False

        self._confirm_timer = QtCore.QTimer(self)
        self._confirm_timer.setSingleShot(True)
        self._confirm_timer.setInterval(delay_ms)
        self._confirm_timer.timeout.connect(self._on_confirm_timeout)

    @property
    def delay_ms(self) -> int:
        return self._confirm_timer.interval()

    @delay_ms.setter
    def delay_ms(self, value: int) -> None:
        self._confirm_timer.setInterval(value)

    @property
    def in_gesture(self) -> bool:
        return self._in_gesture

    @property
    def is_pending(self) -> bool:
        """True while a confirmation is scheduled."""
        return self._confirm_timer.isActive()

    # ── Inputs ────────────────────────────────────────────────────────

    def check(self) -> bool:
        """Compare the current region with the last one seen."""
        if self._shut_down:
            return False
        region = self._region_provider()
        if region == self._previous:
            return False
        self._previous = region
        self.region_changed.emit(region)
        self._schedule_confirmation()
        return True

    def begin_gesture(self) -> None:
        self._in_gesture = True
        self._confirm_timer.stop()

    def end_gesture(self) -> None:
        self._in_gesture = False
        self._schedule_confirmation()

    def shutdown(self) -> None:
        """Cancel any pending confirmation; nothing fires afterwards."""
        self._shut_down = True
        self._confirm_timer.stop()

    # ── Internals ─────────────────────────────────────────────────────

    def _schedule_confirmation(self) -> None:
        if self._in_gesture or self._shut_down:
            return
        # start() on an active single-shot timer restarts it
        self._confirm_timer.start()

    def _on_confirm_timeout(self) -> None:
        if self._shut_down:
            return
        region = self._region_provider()
        if region == self._previous_confirmed:
            return
        self._previous_confirmed = region
        log.debug("Region confirmed: %s", region)
        self.region_confirmed.emit(region)
