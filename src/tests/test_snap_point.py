"""Tests for SnapPoint, the grid/anchor snapper and the pointer event hub."""

import pytest

from core.exceptions import UseAfterRemoveError
from core.geometry import Point
from core.pointer import CLICK, MOUSE_DOWN, PointerEventHub
from core.settings import EditorSettings
from core.snap_point import SnapPoint
from core.snapping import GridSnapController, NullSnapCursor, snap_to_grid

from conftest import pointer


class TestSnapPointPosition:
    def test_initial_position(self):
        sp = SnapPoint("a", "G", Point(10, 10), Point(2, -3))
        assert (sp.x, sp.y) == (12, 7)
        assert sp.point == Point(12, 7)

    def test_quarter_turn_is_exact(self):
        sp = SnapPoint("a", "G", Point(10, 10), Point(2, -3))
        sp.recalculate(angle=90)
        assert (sp.x, sp.y) == (7, 8)

    def test_full_turn_restores_position(self):
        sp = SnapPoint("a", "G", Point(10, 10), Point(2, -3))
        sp.recalculate(angle=360)
        assert (sp.x, sp.y) == (12, 7)

    def test_mirror_negates_local_y(self):
        sp = SnapPoint("a", "G", Point(10, 10), Point(2, -3), mirrored=True)
        assert (sp.x, sp.y) == (12, 13)

    def test_recalculate_keeps_unspecified_values(self):
        sp = SnapPoint("a", "G", Point(0, 0), Point(5, 0), angle=90)
        sp.recalculate(Point(1, 1))
        assert sp.angle == 90
        assert sp.mid == Point(1, 1)
        assert (sp.x, sp.y) == (1, -4)

    def test_recompute_depends_only_on_latest_values(self):
        sp = SnapPoint("a", "G", Point(0, 0), Point(3, 4))
        sp.recalculate(Point(50, -20), 30)
        sp.recalculate(Point(7, 8), 30)
        fresh = SnapPoint("b", "G", Point(7, 8), Point(3, 4), angle=30)
        assert sp.point.is_close(fresh.point)


class TestSnapPointListeners:
    def test_listener_receives_old_position(self):
        sp = SnapPoint("a", "G", Point(0, 0), Point(1, 0))
        calls = []
        sp.add_change_listener(lambda *args: calls.append(args))
        sp.recalculate(Point(10, 0))
        assert calls == [(sp, 1, 0, False)]

    def test_remove_listener(self):
        sp = SnapPoint("a", "G", Point(0, 0), Point(1, 0))
        calls = []

        def listener(*args):
            calls.append(args)

        sp.add_change_listener(listener)
        sp.remove_change_listener(listener)
        sp.remove_change_listener(listener)
        sp.recalculate(Point(10, 0))
        assert calls == []

    def test_remove_instance_notifies_once_and_clears(self):
        sp = SnapPoint("a", "G", Point(0, 0), Point(1, 0))
        calls = []
        sp.add_change_listener(lambda *args: calls.append(args))
        sp.remove_instance()
        sp.remove_instance()
        assert calls == [(sp, 1, 0, True)]
        assert sp.is_removed
        assert sp.owner_id is None
        assert sp.anchor_name is None
        assert sp.listener_count == 0
        # keeps its last coordinates
        assert sp.point == Point(1, 0)

    def test_recalculate_after_remove_raises(self):
        sp = SnapPoint("a", "G", Point(0, 0), Point(1, 0))
        sp.remove_instance()
        with pytest.raises(UseAfterRemoveError):
            sp.recalculate(Point(5, 5))


class TestSnapPointTikz:
    def test_named_anchor(self):
        sp = SnapPoint("id-1", "G", Point(0, 0), Point(1, 0))
        assert sp.to_tikz_string({"id-1": "Q1"}.get) == "(Q1.G)"

    def test_coordinate_without_resolver(self):
        sp = SnapPoint("id-1", "G", Point(0, 0), Point(0, 0))
        assert sp.to_tikz_string() == "(0, 0)"

    def test_coordinate_without_anchor_name(self):
        sp = SnapPoint("id-1", None, Point(0, 0), Point(0, 0))
        assert sp.to_tikz_string({"id-1": "R1"}.get) == "(0, 0)"

    def test_removed_point_exports_coordinate(self):
        sp = SnapPoint("id-1", "G", Point(0, 0), Point(0, 0))
        sp.remove_instance()
        assert sp.to_tikz_string({"id-1": "Q1"}.get) == "(0, 0)"


class TestGridSnapController:
    def test_snap_to_grid(self):
        assert snap_to_grid(9, 1, 8) == (8, 0)
        assert snap_to_grid(9, 1, 0) == (9, 1)

    def test_grid_point_without_targets(self):
        snapper = GridSnapController(EditorSettings(grid_size=8, snap_radius=10))
        assert snapper.snap_point(Point(9, 1)) == Point(8, 0)

    def test_nearby_anchor_wins_and_is_returned_as_is(self):
        target = SnapPoint("a", "G", Point(11, 1), Point(0, 0))
        snapper = GridSnapController(EditorSettings(grid_size=8, snap_radius=10), lambda: [target])
        assert snapper.snap_point(Point(10.5, 1)) is target

    def test_strictly_closer_grid_point_wins(self):
        target = SnapPoint("a", "G", Point(15, 0), Point(0, 0))
        snapper = GridSnapController(EditorSettings(grid_size=8, snap_radius=10), lambda: [target])
        assert snapper.snap_point(Point(8.5, 0)) == Point(8, 0)

    def test_nothing_in_range_returns_candidate(self):
        snapper = GridSnapController(EditorSettings(grid_size=100, snap_radius=10))
        assert snapper.snap_point(Point(40, 40)) == Point(40, 40)

    def test_extra_targets(self):
        snapper = GridSnapController(EditorSettings(grid_size=100, snap_radius=10))
        assert snapper.snap_point(Point(50, 4), [Point(53, 0)]) == Point(53, 0)

    def test_null_cursor(self):
        cursor = NullSnapCursor()
        cursor.set_visible(True)
        cursor.move_to(Point(1, 2))
        assert cursor.visible
        assert cursor.position == Point(1, 2)


class TestPointerEventHub:
    def test_unknown_event_type(self):
        with pytest.raises(ValueError):
            PointerEventHub().on("dblclick", lambda event: None)

    def test_emit_in_registration_order(self):
        hub = PointerEventHub()
        calls = []
        hub.on(CLICK, lambda event: calls.append(("a", event.point)))
        hub.on(CLICK, lambda event: calls.append(("b", event.point)))
        hub.emit(CLICK, pointer(1, 2))
        assert calls == [("a", Point(1, 2)), ("b", Point(1, 2))]

    def test_handler_registered_once(self):
        hub = PointerEventHub()

        def handler(event):
            pass

        hub.on(MOUSE_DOWN, handler)
        hub.on(MOUSE_DOWN, handler)
        assert hub.handler_count(MOUSE_DOWN) == 1
        hub.off(MOUSE_DOWN, handler)
        hub.off(MOUSE_DOWN, handler)
        assert hub.handler_count(MOUSE_DOWN) == 0

    def test_unsubscribe_during_emit(self):
        hub = PointerEventHub()
        calls = []

        def first(event):
            calls.append("first")
            hub.off(CLICK, second)

        def second(event):
            calls.append("second")

        hub.on(CLICK, first)
        hub.on(CLICK, second)
        hub.emit(CLICK, pointer(0, 0))
        hub.emit(CLICK, pointer(0, 0))
        assert calls == ["first", "second", "first"]
