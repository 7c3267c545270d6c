"""
Callout bubble shown above the selected annotation's marker.

The bubble holds a title and a subtitle, optional left/right accessory
widgets and an optional disclosure chevron.  It is anchored so its bottom
edge sits ``marker_height`` pixels above the annotation's coordinate, i.e.
right on top of a center-bottom bound marker.
"""
from __future__ import annotations

from typing import Optional, Tuple

from PyQt5 import QtCore, QtWidgets

from ..geo.annotation import Annotation

_BUBBLE_SS = (
    "QFrame#callout { background: rgba(12,18,28,235); "
    "border: 1px solid rgba(0,204,255,160); border-radius: 6px; }"
)
_TITLE_SS = (
    "color: #e0ecf8; font-family: 'Helvetica Neue'; font-size: 12px; "
    "font-weight: bold; background: transparent;"
)
_SUBTITLE_SS = (
    "color: #8aa0b8; font-family: 'Helvetica Neue'; font-size: 10px; "
    "background: transparent;"
)

_ANCHOR_GAP_PX = 4
_MAX_WIDTH_PX = 260


class CalloutView(QtWidgets.QFrame):
    """Bubble with title/subtitle for one annotation.

    Signals
    -------
    clicked()
        Emitted when the bubble is clicked.
    double_clicked()
        Emitted on double click.
    """

    clicked = QtCore.pyqtSignal()
    double_clicked = QtCore.pyqtSignal()

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.setObjectName("callout")
        self.setStyleSheet(_BUBBLE_SS)
        self.setMaximumWidth(_MAX_WIDTH_PX)
        self.setCursor(QtCore.Qt.PointingHandCursor)

        self._annotation: Optional[Annotation] = None
        self._marker_height = 0
        self._left_accessory: Optional[QtWidgets.QWidget] = None
        self._right_accessory: Optional[QtWidgets.QWidget] = None
        self._in_double_click = False

        self._title = QtWidgets.QLabel("")
        self._title.setStyleSheet(_TITLE_SS)
        self._subtitle = QtWidgets.QLabel("")
        self._subtitle.setStyleSheet(_SUBTITLE_SS)
        self._subtitle.setWordWrap(True)
        self._disclosure = QtWidgets.QLabel("›")
        self._disclosure.setStyleSheet(_TITLE_SS)
        self._disclosure.hide()

        text_box = QtWidgets.QVBoxLayout()
        text_box.setContentsMargins(0, 0, 0, 0)
        text_box.setSpacing(1)
        text_box.addWidget(self._title)
        text_box.addWidget(self._subtitle)

        self._row = QtWidgets.QHBoxLayout(self)
        self._row.setContentsMargins(8, 5, 8, 5)
        self._row.setSpacing(6)
        self._row.addLayout(text_box, 1)
        self._row.addWidget(self._disclosure)

        self.hide()

    # ── Content ───────────────────────────────────────────────────────

    @property
    def annotation(self) -> Optional[Annotation]:
        return self._annotation

    def set_data(self, annotation: Annotation) -> None:
        self._annotation = annotation
        self.set_title(annotation.title)
        self.set_subtitle(annotation.snippet)

    def set_title(self, title: Optional[str]) -> None:
        self._title.setText(title or "")
        self._title.setVisible(bool(title))

    def set_subtitle(self, subtitle: Optional[str]) -> None:
        self._subtitle.setText(subtitle or "")
        self._subtitle.setVisible(bool(subtitle))

    def title(self) -> str:
        return self._title.text()

    def subtitle(self) -> str:
        return self._subtitle.text()

    def set_disclosure_enabled(self, enabled: bool) -> None:
        self._disclosure.setVisible(enabled)

    def is_disclosure_enabled(self) -> bool:
        return not self._disclosure.isHidden()

    def set_left_accessory(self, widget: Optional[QtWidgets.QWidget]) -> None:
        if self._left_accessory is not None:
            self._row.removeWidget(self._left_accessory)
            self._left_accessory.setParent(None)
        self._left_accessory = widget
        if widget is not None:
            self._row.insertWidget(0, widget)

    def set_right_accessory(self, widget: Optional[QtWidgets.QWidget]) -> None:
        if self._right_accessory is not None:
            self._row.removeWidget(self._right_accessory)
            self._right_accessory.setParent(None)
        self._right_accessory = widget
        if widget is not None:
            self._row.insertWidget(self._row.count() - 1, widget)

    def has_displayable_content(self) -> bool:
        return bool(
            self._title.text()
            or self._subtitle.text()
            or self._left_accessory is not None
            or self._right_accessory is not None
        )

    # ── Placement ─────────────────────────────────────────────────────

    @property
    def marker_height(self) -> int:
        return self._marker_height

    def set_marker_height(self, height: int) -> None:
        self._marker_height = max(0, int(height))

    def show_at(self, anchor: Tuple[float, float]) -> None:
        """Show the bubble centred above the anchor pixel."""
        self.adjustSize()
        x = int(anchor[0] - self.width() / 2)
        y = int(anchor[1] - self._marker_height - _ANCHOR_GAP_PX - self.height())
        self.move(x, y)
        self.show()
        self.raise_()

    def dismiss(self) -> None:
        self.hide()

    # ── Events ────────────────────────────────────────────────────────

    def mouseReleaseEvent(self, event):
        if self._in_double_click:
            # Second release of a double click
            self._in_double_click = False
        elif event.button() == QtCore.Qt.LeftButton and self.rect().contains(event.pos()):
            self.clicked.emit()
        event.accept()

    def mouseDoubleClickEvent(self, event):
        self._in_double_click = True
        self.double_clicked.emit()
        event.accept()

    def mousePressEvent(self, event):
        # Keep presses on the bubble away from the map underneath
        event.accept()
