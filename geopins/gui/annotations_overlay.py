"""
Annotations overlay — the layer showing annotations as tappable markers.

The overlay wraps a list of annotations that is fixed for its lifetime; a
new list means a new overlay, which always starts with nothing selected.

Selection state machine
───────────────────────
  Deselected  → Selected(i)   show(i)
  Selected(i) → Selected(j)   dismiss(i) then show(j)
  Selected(i) → Deselected    dismiss(i)
  Selected(i) → Selected(i)   nothing

Indices outside ``[0, size)`` are treated as ``INVALID_POSITION`` (deselect).
Dismissal always precedes the next show so at most one callout is visible.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from PyQt5 import QtGui

from ..geo.annotation import Annotation
from ..geo.viewport import Projection
from .layers import TouchEvent
from .markers import Marker, default_pin_marker

log = logging.getLogger(__name__)

INVALID_POSITION = -1

Pixel = Tuple[float, float]


class SelectionCallback(Protocol):
    def show_callout(self, position: int) -> None: ...
    def dismiss_callout(self, position: int) -> None: ...


class AnnotationsOverlay:
    """Interactive layer over a fixed list of annotations."""

    def __init__(
        self,
        callback: SelectionCallback,
        annotations: Sequence[Annotation],
        default_marker: Optional[Marker] = None,
    ):
        if callback is None:
            raise ValueError("AnnotationsOverlay requires a non-null selection callback")
        self._callback = callback
        self._annotations: List[Annotation] = list(annotations)
        self._default_marker = default_marker
        self._selected = INVALID_POSITION

    # ── Items ─────────────────────────────────────────────────────────

    def size(self) -> int:
        return len(self._annotations)

    def __len__(self) -> int:
        return len(self._annotations)

    @property
    def annotations(self) -> List[Annotation]:
        return list(self._annotations)

    def item_at(self, index: int) -> Optional[Annotation]:
        if index < 0 or index >= len(self._annotations):
            return None
        return self._annotations[index]

    @property
    def default_marker(self) -> Marker:
        if self._default_marker is None:
            self._default_marker = default_pin_marker()
        return self._default_marker

    def marker_for(self, annotation: Annotation) -> Any:
        return annotation.marker if annotation.marker is not None else self.default_marker

    def marker_height(self, index: int) -> int:
        """Pixel height of the glyph drawn for *index* (0 if out of range)."""
        annotation = self.item_at(index)
        if annotation is None:
            return 0
        return self.marker_for(annotation).bounds.height()

    # ── Selection ─────────────────────────────────────────────────────

    @property
    def selected_index(self) -> int:
        return self._selected

    @selected_index.setter
    def selected_index(self, position: int) -> None:
        self.set_selected_index(position)

    @property
    def selected_annotation(self) -> Optional[Annotation]:
        return self.item_at(self._selected)

    def set_selected_index(self, position: int) -> None:
        if position < 0 or position >= len(self._annotations):
            position = INVALID_POSITION

        if position == self._selected:
            return

        previous = self._selected
        if previous != INVALID_POSITION:
            self._callback.dismiss_callout(previous)
        self._selected = position
        if position != INVALID_POSITION:
            self._callback.show_callout(position)
        log.debug("Selection %d -> %d", previous, position)

    def handle_tap(self, index: int) -> bool:
        """Select the tapped index; True when the tap was on an item."""
        if 0 <= index < len(self._annotations):
            self.set_selected_index(index)
            return True
        return False

    # ── Layer capability ──────────────────────────────────────────────

    def draw(self, painter: QtGui.QPainter, viewport: Projection) -> None:
        # Selected marker last so it sits on top
        order = [i for i in range(len(self._annotations)) if i != self._selected]
        if self._selected != INVALID_POSITION:
            order.append(self._selected)
        for i in order:
            annotation = self._annotations[i]
            x, y = viewport.project(annotation.point)
            self.marker_for(annotation).draw(painter, x, y)

    def hit_test(self, pos: Pixel, viewport: Projection) -> int:
        """Index of the topmost marker under *pos*, or INVALID_POSITION."""
        px, py = pos
        if self._selected != INVALID_POSITION and self._hit(self._selected, px, py, viewport):
            return self._selected
        for i in range(len(self._annotations) - 1, -1, -1):
            if self._hit(i, px, py, viewport):
                return i
        return INVALID_POSITION

    def _hit(self, index: int, px: float, py: float, viewport: Projection) -> bool:
        annotation = self._annotations[index]
        x, y = viewport.project(annotation.point)
        bounds = self.marker_for(annotation).bounds
        return (
            x + bounds.left() <= px < x + bounds.left() + bounds.width()
            and y + bounds.top() <= py < y + bounds.top() + bounds.height()
        )

    def on_tap(self, pos: Pixel, viewport: Projection) -> bool:
        return self.handle_tap(self.hit_test(pos, viewport))

    def on_double_tap(self, pos: Pixel, viewport: Projection) -> bool:
        return False

    def on_long_press(self, pos: Pixel, viewport: Projection) -> bool:
        return False

    def on_touch(self, event: TouchEvent, viewport: Projection) -> bool:
        return False
