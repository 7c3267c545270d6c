"""
Overlay container — ordered stack of interactive layers.

The container exposes one virtual sequence over three kinds of layers:

    [user location layer?] [annotations layer?] [caller layers ...]

The two anchor slots are optional; when present the location layer is
always first and the annotations layer right after it.  Caller layers are
kept in a free list and indexed on their own (``add_layer(layer, 0)``
inserts before the other caller layers, never before the anchors).

Dispatch order
──────────────
  draw          bottom → top (later layers paint over earlier ones)
  tap           top → bottom, stops at the first layer that consumes it
  double tap    top → bottom, first consumer wins, else → callback
  long press    top → bottom, first consumer wins, else → callback
  touch         every layer, never short-circuits (panning must reach all)

A single tap nobody consumed is reported to ``callback.on_single_tap`` once
the tap is confirmed (i.e. it is not the first half of a double tap).
"""
from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Protocol, Tuple

from PyQt5 import QtGui

from ..geo.viewport import Projection
from .layers import Layer, TouchEvent

log = logging.getLogger(__name__)

Pixel = Tuple[float, float]


class ContainerCallback(Protocol):
    def on_single_tap(self, pos: Pixel) -> None: ...
    def on_double_tap(self, pos: Pixel) -> None: ...
    def on_long_press(self, pos: Pixel) -> None: ...


class OverlayContainer:
    """Composes layers and routes draw and gesture events between them."""

    def __init__(self, callback: ContainerCallback):
        if callback is None:
            raise ValueError("OverlayContainer requires a non-null callback")
        self._callback = callback
        self._location_layer: Optional[Layer] = None
        self._annotations_layer: Optional[Layer] = None
        self._layers: List[Layer] = []
        self._tap_consumed = False

    # ── Anchor slots ──────────────────────────────────────────────────

    @property
    def user_location_layer(self) -> Optional[Layer]:
        return self._location_layer

    def set_user_location_layer(self, layer: Optional[Layer]) -> None:
        self._location_layer = layer

    @property
    def annotations_layer(self) -> Optional[Layer]:
        return self._annotations_layer

    def set_annotations_layer(self, layer: Optional[Layer]) -> None:
        self._annotations_layer = layer
        log.debug("Annotations layer %s", "installed" if layer is not None else "removed")

    # ── Caller layers ─────────────────────────────────────────────────

    def add_layer(self, layer: Layer, index: Optional[int] = None) -> None:
        if index is None:
            self._layers.append(layer)
        else:
            self._layers.insert(index, layer)

    def remove_layer(self, layer: Layer) -> None:
        self._layers.remove(layer)

    def remove_layer_at(self, index: int) -> None:
        del self._layers[index]

    def remove_all_layers(self) -> None:
        self._layers.clear()

    def index_of_layer(self, layer: Layer) -> int:
        """Index among caller layers, or -1."""
        try:
            return self._layers.index(layer)
        except ValueError:
            return -1

    # ── Virtual sequence ──────────────────────────────────────────────

    def layers(self) -> List[Layer]:
        """Snapshot of every layer, bottom first."""
        anchors = [
            layer for layer in (self._location_layer, self._annotations_layer)
            if layer is not None
        ]
        return anchors + list(self._layers)

    def __len__(self) -> int:
        n = len(self._layers)
        if self._location_layer is not None:
            n += 1
        if self._annotations_layer is not None:
            n += 1
        return n

    def __getitem__(self, index: int) -> Layer:
        return self.layers()[index]

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.layers())

    # ── Draw ──────────────────────────────────────────────────────────

    def draw(self, painter: QtGui.QPainter, viewport: Projection) -> None:
        for layer in self.layers():
            layer.draw(painter, viewport)

    # ── Gestures ──────────────────────────────────────────────────────

    def dispatch_tap(self, pos: Pixel, viewport: Projection) -> bool:
        """Offer a tap to the layers, topmost first."""
        self._tap_consumed = False
        for layer in reversed(self.layers()):
            if layer.on_tap(pos, viewport):
                self._tap_consumed = True
                return True
        return False

    def confirm_single_tap(self, pos: Pixel) -> None:
        """The last tap turned out to be a single tap."""
        if not self._tap_consumed:
            self._callback.on_single_tap(pos)

    def dispatch_single_tap(self, pos: Pixel, viewport: Projection) -> bool:
        consumed = self.dispatch_tap(pos, viewport)
        self.confirm_single_tap(pos)
        return consumed

    def dispatch_double_tap(self, pos: Pixel, viewport: Projection) -> bool:
        for layer in reversed(self.layers()):
            if layer.on_double_tap(pos, viewport):
                return True
        self._callback.on_double_tap(pos)
        return False

    def dispatch_long_press(self, pos: Pixel, viewport: Projection) -> bool:
        for layer in reversed(self.layers()):
            if layer.on_long_press(pos, viewport):
                return True
        self._callback.on_long_press(pos)
        return False

    def dispatch_touch(self, event: TouchEvent, viewport: Projection) -> bool:
        result = False
        for layer in reversed(self.layers()):
            result |= bool(layer.on_touch(event, viewport))
        return result
