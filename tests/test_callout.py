"""Tests for the callout bubble's content and click signals."""
from __future__ import annotations

import pytest
from PyQt5 import QtCore, QtGui, QtWidgets

from geopins.geo.annotation import Annotation, GeoPoint
from geopins.gui.callout import CalloutView


def mouse(kind, x=5, y=5):
    return QtGui.QMouseEvent(
        kind, QtCore.QPointF(x, y), QtCore.Qt.LeftButton, QtCore.Qt.LeftButton, QtCore.Qt.NoModifier
    )


@pytest.fixture
def callout(qapp):
    parent = QtWidgets.QWidget()
    view = CalloutView(parent)
    view.resize(120, 40)
    view.clicks = []
    view.clicked.connect(lambda: view.clicks.append("click"))
    view.double_clicked.connect(lambda: view.clicks.append("double"))
    yield view
    parent.deleteLater()


def test_single_click(callout):
    callout.mousePressEvent(mouse(QtCore.QEvent.MouseButtonPress))
    callout.mouseReleaseEvent(mouse(QtCore.QEvent.MouseButtonRelease))
    assert callout.clicks == ["click"]


def test_double_click_does_not_repeat_click(callout):
    callout.mousePressEvent(mouse(QtCore.QEvent.MouseButtonPress))
    callout.mouseReleaseEvent(mouse(QtCore.QEvent.MouseButtonRelease))
    callout.mouseDoubleClickEvent(mouse(QtCore.QEvent.MouseButtonDblClick))
    callout.mouseReleaseEvent(mouse(QtCore.QEvent.MouseButtonRelease))
    assert callout.clicks == ["click", "double"]

    callout.mousePressEvent(mouse(QtCore.QEvent.MouseButtonPress))
    callout.mouseReleaseEvent(mouse(QtCore.QEvent.MouseButtonRelease))
    assert callout.clicks == ["click", "double", "click"]


def test_content(callout):
    assert not callout.has_displayable_content()
    callout.set_data(Annotation(GeoPoint(0, 0), "Paris", "The city of love"))
    assert callout.has_displayable_content()
    assert callout.title() == "Paris"

    callout.set_data(Annotation(GeoPoint(0, 0)))
    assert not callout.has_displayable_content()
    callout.set_right_accessory(QtWidgets.QLabel("i"))
    assert callout.has_displayable_content()


def test_show_at_sits_above_marker(callout):
    callout.set_data(Annotation(GeoPoint(0, 0), "Paris"))
    callout.set_marker_height(34)
    callout.show_at((200.0, 300.0))
    assert not callout.isHidden()
    assert callout.geometry().bottom() < 300 - 34
