# src/app/schematic_view.py

from __future__ import annotations

import logging
from typing import List, Optional

from PySide6.QtWidgets import (
    QGraphicsView,
    QGraphicsScene,
    QGraphicsLineItem,
    QGraphicsEllipseItem,
    QGraphicsTextItem,
    QGraphicsPolygonItem,
    QGraphicsRectItem,
    QGraphicsItem,
)
from PySide6.QtGui import QPen, QPainter, QBrush, QColor, QPolygonF, QWheelEvent, QKeyEvent
from PySide6.QtCore import Qt, QPointF, Signal

from core.components import ComponentInstance
from core.document import InteractionMode, SchematicDocument
from core.geometry import Point
from core.line import Line
from core.pointer import CLICK, MOUSE_DOWN, MOUSE_MOVE, MOUSE_UP, MouseButton, PointerEvent
from core.settings import DEFAULT_SETTINGS, EditorSettings
from core.snapping import snap_to_grid
from core.symbol import ComponentSymbol

log = logging.getLogger(__name__)

_BUTTONS = {
    Qt.MouseButton.LeftButton: MouseButton.LEFT,
    Qt.MouseButton.MiddleButton: MouseButton.MIDDLE,
    Qt.MouseButton.RightButton: MouseButton.RIGHT,
}


class SnapCursorItem(QGraphicsEllipseItem):
    """Small circle showing where the next wire click will land."""

    RADIUS = 3.0

    def __init__(self):
        r = self.RADIUS
        super().__init__(-r, -r, 2 * r, 2 * r)
        self.setPen(QPen(QColor(0, 120, 215), 1.5))
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        self.setZValue(1000)
        self.setVisible(False)

    def set_visible(self, visible: bool) -> None:
        self.setVisible(visible)

    def move_to(self, point: Point) -> None:
        self.setPos(point.x, point.y)


class SchematicView(QGraphicsView):
    """
    Canvas for a SchematicDocument:
      - mouse input is mapped to scene coordinates and emitted on the
        document's pointer event hub, where the selection engine or the
        line router (whichever is active) picks it up
      - the scene is redrawn from the model after every change
      - place mode: clicks place the chosen symbol instead
    """

    # Emitted when the set of selected elements changes
    selectionChanged = Signal()
    # Emitted with "select", "wire" or "place"
    modeChanged = Signal(str)
    # Short user facing messages (rejected operations and such)
    statusMessage = Signal(str)

    def __init__(self, settings: EditorSettings = DEFAULT_SETTINGS, parent=None):
        super().__init__(parent)

        scene = QGraphicsScene(self)
        scene.setSceneRect(-2000, -2000, 4000, 4000)
        self.setScene(scene)

        self.setRenderHint(QPainter.Antialiasing)
        self.setMouseTracking(True)
        # the selection engine draws its own marquee
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        self.settings = settings

        self._pen = QPen(Qt.GlobalColor.black)
        self._pen.setWidthF(1.4)
        self._pin_pen = QPen(Qt.GlobalColor.blue, 1.0)
        self._pin_brush = QBrush(Qt.GlobalColor.blue)
        self._highlight_pen = QPen(QColor(0, 120, 215), 1.5, Qt.PenStyle.DashLine)
        self._preview_pen = QPen(Qt.GlobalColor.gray, 1.5, Qt.PenStyle.DashLine)
        self._grid_pen = QPen(QColor(220, 220, 220), 1.0)
        self._marquee_pen = QPen(QColor(0, 120, 215), 1.0, Qt.PenStyle.DashLine)
        self._marquee_brush = QBrush(QColor(0, 120, 215, 40))

        # items drawn from the model; removed and recreated on every redraw
        self._model_items: List[QGraphicsItem] = []

        self.snap_cursor = SnapCursorItem()
        scene.addItem(self.snap_cursor)

        self.document: Optional[SchematicDocument] = None
        self._placement_symbol: Optional[ComponentSymbol] = None

        self._draw_grid()

    # ------------------------------------------------------------------ #
    # Document / modes
    # ------------------------------------------------------------------ #

    def set_document(self, document: SchematicDocument) -> None:
        self.document = document
        document.add_change_listeners(after=self.redraw)
        document.selection.add_selection_listener(self.selectionChanged.emit)
        self.redraw()

    @property
    def mode(self) -> str:
        if self._placement_symbol is not None:
            return "place"
        if self.document is None or self.document.mode is None:
            return "select"
        return self.document.mode.value

    def set_mode(self, mode: str) -> None:
        """Set the interaction mode: 'select' or 'wire'."""
        self._placement_symbol = None
        if self.document is not None:
            self.document.set_mode(InteractionMode(mode))
            if self.document.mode is InteractionMode.SELECT:
                # placing switches marquee selection off
                self.document.selection.activate_selection()
        self.modeChanged.emit(self.mode)

    def set_placement_mode(self, symbol: ComponentSymbol) -> None:
        """Place `symbol` on every left click until the mode changes."""
        if self.document is not None:
            self.document.set_mode(InteractionMode.SELECT)
            self.document.selection.deactivate_selection()
        self._placement_symbol = symbol
        self.modeChanged.emit(self.mode)

    # ------------------------------------------------------------------ #
    # Drawing
    # ------------------------------------------------------------------ #

    def _draw_grid(self):
        """Draw grid background."""
        scene = self.scene()
        scene_rect = scene.sceneRect()
        grid = self.settings.grid_size
        if grid <= 0:
            return

        x = scene_rect.left()
        while x <= scene_rect.right():
            line = QGraphicsLineItem(x, scene_rect.top(), x, scene_rect.bottom())
            line.setPen(self._grid_pen)
            line.setZValue(-1000)
            scene.addItem(line)
            x += grid

        y = scene_rect.top()
        while y <= scene_rect.bottom():
            line = QGraphicsLineItem(scene_rect.left(), y, scene_rect.right(), y)
            line.setPen(self._grid_pen)
            line.setZValue(-1000)
            scene.addItem(line)
            y += grid

    def _add(self, item: QGraphicsItem) -> None:
        self.scene().addItem(item)
        self._model_items.append(item)

    def redraw(self) -> None:
        """Remove the model items and draw them again from the document."""
        scene = self.scene()
        for item in self._model_items:
            scene.removeItem(item)
        self._model_items.clear()

        if self.document is None:
            return

        for instance in self.document.instances:
            self._draw_component(instance)
        for line in self.document.lines:
            self._draw_line(line, self._pen)

        wire = self.document.line_router.current_line
        if wire is not None:
            self._draw_line(wire, self._preview_pen)

        selection = self.document.selection
        if selection.dragging:
            box = selection.selection_rectangle
            rect = QGraphicsRectItem(box.x, box.y, box.width, box.height)
            rect.setPen(self._marquee_pen)
            rect.setBrush(self._marquee_brush)
            rect.setZValue(500)
            self._add(rect)

    def _draw_component(self, instance: ComponentInstance):
        outline = instance.outline()
        if outline:
            body = QGraphicsPolygonItem(QPolygonF([QPointF(p.x, p.y) for p in outline]))
            body.setPen(self._pen)
            self._add(body)

        lead_points = instance.lead()
        if lead_points is not None:
            start, end = lead_points
            lead = QGraphicsLineItem(start.x, start.y, end.x, end.y)
            lead.setPen(self._pen)
            self._add(lead)

        r = 2.0
        for snap_point in instance.snapping_points:
            dot = QGraphicsEllipseItem(snap_point.x - r, snap_point.y - r, 2 * r, 2 * r)
            dot.setPen(self._pin_pen)
            dot.setBrush(self._pin_brush)
            self._add(dot)

        if instance.node_name:
            label = QGraphicsTextItem(instance.node_name)
            text_position = instance.text_position or instance.get_anchor_point()
            label.setPos(text_position.x, text_position.y)
            self._add(label)

        if instance.highlighted:
            self._draw_highlight(instance)

    def _draw_line(self, line: Line, pen: QPen):
        for start, end in line.segments():
            item = QGraphicsLineItem(start.x, start.y, end.x, end.y)
            item.setPen(pen)
            self._add(item)
        if line.highlighted:
            self._draw_highlight(line)

    def _draw_highlight(self, element):
        box = element.bbox()
        margin = 3.0
        rect = QGraphicsRectItem(box.x - margin, box.y - margin, box.width + 2 * margin, box.height + 2 * margin)
        rect.setPen(self._highlight_pen)
        rect.setZValue(400)
        self._add(rect)

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def rotate_selection(self, angle_deg: float = 90.0) -> None:
        if self.document is None:
            return
        try:
            self.document.selection.rotate_selection(angle_deg)
        except ValueError as exc:
            log.warning("Rotation rejected: %s", exc)
            self.statusMessage.emit(str(exc))

    def flip_selection(self, horizontal: bool) -> None:
        if self.document is not None:
            self.document.selection.flip_selection(horizontal)

    def delete_selection(self) -> None:
        if self.document is not None:
            self.document.selection.remove_selection()

    def select_all(self) -> None:
        if self.document is not None and self.document.mode is InteractionMode.SELECT:
            self.document.selection.select_all()
            self.redraw()

    def _place_symbol_at(self, point: Point) -> None:
        symbol = self._placement_symbol
        x, y = snap_to_grid(point.x, point.y, self.settings.grid_size)
        position = Point(x, y)
        if symbol.is_path:
            half = Point(symbol.length / 2 or self.settings.grid_size * 4, 0)
            instance = self.document.place_component(symbol, position - half, position + half)
        else:
            instance = self.document.place_component(symbol, position)
        log.info("Placed %s at (%s, %s)", instance.node_name, x, y)

    # ------------------------------------------------------------------ #
    # Qt events
    # ------------------------------------------------------------------ #

    def _pointer_event(self, event, button=None) -> PointerEvent:
        scene_pt = self.mapToScene(event.position().toPoint())
        modifiers = event.modifiers()
        return PointerEvent(
            point=Point(scene_pt.x(), scene_pt.y()),
            button=button if button is not None else _BUTTONS.get(event.button(), MouseButton.LEFT),
            shift=bool(modifiers & Qt.KeyboardModifier.ShiftModifier),
            ctrl=bool(modifiers & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier)),
        )

    def mousePressEvent(self, event):
        if self.document is None:
            return super().mousePressEvent(event)
        pointer = self._pointer_event(event)
        if self._placement_symbol is not None:
            if pointer.button is MouseButton.LEFT:
                self._place_symbol_at(pointer.point)
            return
        self.document.hub.emit(MOUSE_DOWN, pointer)

    def mouseMoveEvent(self, event):
        if self.document is None:
            return super().mouseMoveEvent(event)
        if self._placement_symbol is not None:
            return
        self.document.hub.emit(MOUSE_MOVE, self._pointer_event(event, MouseButton.LEFT))

    def mouseReleaseEvent(self, event):
        if self.document is None:
            return super().mouseReleaseEvent(event)
        if self._placement_symbol is not None:
            return
        pointer = self._pointer_event(event)
        self.document.hub.emit(MOUSE_UP, pointer)
        if pointer.button is MouseButton.LEFT:
            self.document.hub.emit(CLICK, pointer)

    def keyPressEvent(self, event: QKeyEvent):
        if self.document is None:
            return super().keyPressEvent(event)
        key = event.key()
        ctrl = bool(event.modifiers() & Qt.KeyboardModifier.ControlModifier)

        if key == Qt.Key.Key_Escape:
            if self._placement_symbol is not None or self.document.mode is InteractionMode.WIRE:
                if self.document.line_router.current_line is not None:
                    self.document.line_router.cancel()
                else:
                    self.set_mode("select")
            else:
                self.document.selection.deactivate_selection()
                self.document.selection.activate_selection()
                self.redraw()
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.document.line_router.confirm()
        elif key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.delete_selection()
        elif key == Qt.Key.Key_A and ctrl:
            self.select_all()
        elif key == Qt.Key.Key_R:
            self.rotate_selection(-90.0 if event.modifiers() & Qt.KeyboardModifier.ShiftModifier else 90.0)
        elif key == Qt.Key.Key_H:
            self.flip_selection(horizontal=True)
        elif key == Qt.Key.Key_V:
            self.flip_selection(horizontal=False)
        elif key == Qt.Key.Key_W:
            self.set_mode("wire")
        elif key == Qt.Key.Key_S:
            self.set_mode("select")
        else:
            super().keyPressEvent(event)

    def wheelEvent(self, event: QWheelEvent):
        """Zoom around the mouse position, within the configured limits."""
        zoom_factor = 1.15
        scale_factor = zoom_factor if event.angleDelta().y() > 0 else 1.0 / zoom_factor

        current_scale = self.transform().m11()
        new_scale = current_scale * scale_factor
        if new_scale < self.settings.min_zoom:
            scale_factor = self.settings.min_zoom / current_scale
        elif new_scale > self.settings.max_zoom:
            scale_factor = self.settings.max_zoom / current_scale

        scene_pos = self.mapToScene(event.position().toPoint())
        self.scale(scale_factor, scale_factor)
        new_scene_pos = self.mapToScene(event.position().toPoint())

        # keep the point under the mouse in place
        delta = new_scene_pos - scene_pos
        self.translate(delta.x(), delta.y())
        event.accept()
