"""Tests for marquee selection and group transforms."""

import pytest

from core.geometry import Box, Point
from core.line import Line
from core.pointer import MOUSE_DOWN, MOUSE_MOVE, MOUSE_UP, MouseButton
from core.selection import SelectionMode, _combine, selection_mode_for

from conftest import pointer


@pytest.fixture
def scene(document, make_node):
    """Two nodes side by side and a straight wire below them.

    c1 covers (40,40)-(60,60), c2 covers (140,40)-(160,60), the wire runs
    from (0,100) to (100,100).
    """
    c1 = make_node(50, 50)
    c2 = make_node(150, 50)
    document.add_instance(c1)
    document.add_instance(c2)
    line = Line(Point(0, 100))
    line.push_point(True, Point(100, 100))
    document.add_line(line)
    return document, c1, c2, line


def snapshot(document):
    return (
        [(c.get_anchor_point(), c.angle, c.mirrored) for c in document.instances],
        [line.vertices for line in document.lines],
    )


def assert_close(a, b):
    (components_a, lines_a), (components_b, lines_b) = a, b
    for (pa, angle_a, mirrored_a), (pb, angle_b, mirrored_b) in zip(components_a, components_b):
        assert pa.is_close(pb, 1e-9)
        assert angle_a == pytest.approx(angle_b)
        assert mirrored_a == mirrored_b
    for va, vb in zip(lines_a, lines_b):
        assert all(p.is_close(q, 1e-9) for p, q in zip(va, vb))


class TestSelectionModes:
    @pytest.mark.parametrize(
        "shift, ctrl, mode",
        [
            (False, False, SelectionMode.RESET),
            (True, False, SelectionMode.ADD),
            (False, True, SelectionMode.SUB),
            (True, True, SelectionMode.RESET),
        ],
    )
    def test_modifier_mapping(self, shift, ctrl, mode):
        assert selection_mode_for(shift, ctrl) is mode

    def test_combine(self):
        assert _combine(SelectionMode.RESET, True, False)
        assert not _combine(SelectionMode.RESET, False, True)
        assert _combine(SelectionMode.ADD, False, True)
        assert not _combine(SelectionMode.SUB, True, True)
        assert _combine(SelectionMode.SUB, False, True)


class TestMarquee:
    def test_rectangle_is_normalized(self, scene):
        document = scene[0]
        document.hub.emit(MOUSE_DOWN, pointer(0, 0))
        document.hub.emit(MOUSE_MOVE, pointer(-5, -5))
        assert document.selection.dragging
        assert document.selection.selection_rectangle == Box(-5, -5, 5, 5)

    def test_reset_selects_what_it_touches(self, scene, drag):
        document, c1, c2, line = scene
        drag(document, (30, 30), (70, 70))
        assert document.selection.currently_selected_components == [c1]
        assert document.selection.currently_selected_lines == []
        assert c1.highlighted and not c2.highlighted

    def test_reset_is_idempotent(self, scene, drag):
        document = scene[0]
        drag(document, (30, 30), (70, 70))
        first = list(document.selection.selected_elements)
        drag(document, (30, 30), (70, 70))
        assert document.selection.selected_elements == first

    def test_add_keeps_previous_selection(self, scene, drag):
        document, c1, c2, line = scene
        drag(document, (30, 30), (70, 70))
        drag(document, (130, 30), (170, 70), shift=True)
        assert set(document.selection.currently_selected_components) == {c1, c2}

    def test_sub_removes_touched_elements(self, scene, drag):
        document, c1, c2, line = scene
        document.selection.select_all()
        drag(document, (30, 30), (70, 70), ctrl=True)
        assert document.selection.currently_selected_components == [c2]
        assert document.selection.currently_selected_lines == [line]

    def test_shift_ctrl_resets(self, scene, drag):
        document, c1, c2, line = scene
        document.selection.select_all()
        drag(document, (30, 30), (70, 70), shift=True, ctrl=True)
        assert document.selection.selected_elements == [c1]

    def test_marquee_touching_wire(self, scene, drag):
        document, c1, c2, line = scene
        drag(document, (10, 90), (20, 110))
        assert document.selection.currently_selected_lines == [line]
        assert document.selection.currently_selected_components == []

    def test_preview_does_not_change_selection(self, scene):
        document, c1, c2, line = scene
        document.hub.emit(MOUSE_DOWN, pointer(30, 30))
        document.hub.emit(MOUSE_MOVE, pointer(70, 70))
        assert c1.highlighted
        assert not document.selection.has_selection()

    def test_right_click_cancels_drag(self, scene):
        document, c1, c2, line = scene
        document.hub.emit(MOUSE_DOWN, pointer(30, 30))
        document.hub.emit(MOUSE_MOVE, pointer(70, 70))
        document.hub.emit(MOUSE_DOWN, pointer(70, 70, button=MouseButton.RIGHT))
        assert not document.selection.dragging
        assert not c1.highlighted
        document.hub.emit(MOUSE_UP, pointer(70, 70))
        assert not document.selection.has_selection()

    def test_click_on_element_selects_it(self, scene, click):
        document, c1, c2, line = scene
        click(document, 150, 50)
        assert document.selection.selected_elements == [c2]

    def test_click_on_empty_canvas_clears(self, scene, click):
        document, c1, c2, line = scene
        document.selection.select_all()
        click(document, 300, 300, shift=True)
        assert not document.selection.has_selection()
        assert not any(c.highlighted for c in (c1, c2))
        assert document.selection.selection_enabled

    def test_listener_notified_on_release(self, scene, drag):
        document = scene[0]
        calls = []
        document.selection.add_selection_listener(lambda: calls.append(1))
        drag(document, (30, 30), (70, 70))
        assert calls

    def test_deactivated_selection_ignores_marquee(self, scene, drag):
        document = scene[0]
        document.selection.deactivate_selection()
        document.hub.emit(MOUSE_DOWN, pointer(30, 30))
        assert not document.selection.dragging

    def test_apply_marquee(self, scene):
        document, c1, c2, line = scene
        document.selection.apply_marquee(Box(0, 0, 200, 80), SelectionMode.RESET)
        assert set(document.selection.currently_selected_components) == {c1, c2}


class TestSelectionListeners:
    def test_deactivate_notifies_when_selection_is_cleared(self, scene):
        document = scene[0]
        document.selection.select_all()
        calls = []
        document.selection.add_selection_listener(lambda: calls.append(1))

        document.selection.deactivate_selection()
        assert calls == [1]

        # nothing left to clear
        document.selection.deactivate_selection()
        assert calls == [1]

    def test_click_on_empty_canvas_notifies_once(self, scene, click):
        document = scene[0]
        document.selection.select_all()
        calls = []
        document.selection.add_selection_listener(lambda: calls.append(1))
        click(document, 300, 300)
        assert calls == [1]
        assert not document.selection.has_selection()

    def test_release_without_press_is_ignored(self, scene, click):
        document = scene[0]
        click(document, 300, 300)
        document.selection.select_all()
        calls = []
        document.selection.add_selection_listener(lambda: calls.append(1))

        document.hub.emit(MOUSE_UP, pointer(300, 300))

        assert calls == []
        assert len(document.selection.selected_elements) == 3

    def test_remove_selection_notifies_once(self, scene):
        document = scene[0]
        document.selection.select_all()
        calls = []
        document.selection.add_selection_listener(lambda: calls.append(1))
        document.selection.remove_selection()
        assert calls == [1]

    def test_discard_unselected_element(self, scene):
        document, c1, c2, line = scene
        document.selection.select([c1], SelectionMode.RESET)
        calls = []
        document.selection.add_selection_listener(lambda: calls.append(1))
        document.selection.discard(c2)
        assert calls == []
        assert document.selection.selected_elements == [c1]


class TestProgrammaticSelection:
    def test_select_dispatches_on_kind(self, scene):
        document, c1, c2, line = scene
        document.selection.select([c1, line], SelectionMode.RESET)
        assert document.selection.currently_selected_components == [c1]
        assert document.selection.currently_selected_lines == [line]
        assert line.highlighted

    def test_select_add_and_sub(self, scene):
        document, c1, c2, line = scene
        document.selection.select_components([c1], SelectionMode.RESET)
        document.selection.select_components([c2], SelectionMode.ADD)
        assert document.selection.currently_selected_components == [c1, c2]
        document.selection.select_components([c1], SelectionMode.SUB)
        assert document.selection.currently_selected_components == [c2]
        assert not c1.highlighted

    def test_overall_bounding_box(self, scene):
        document, c1, c2, line = scene
        document.selection.select_all()
        assert document.selection.get_overall_bounding_box() == Box(0, 40, 160, 60)


class TestGroupTransforms:
    def test_rotate_single_component_in_place(self, scene):
        document, c1, c2, line = scene
        document.selection.select([c1], SelectionMode.RESET)
        document.selection.rotate_selection(90)
        assert c1.position == Point(50, 50)
        assert c1.angle == 90

    def test_rotate_group_around_common_center(self, scene):
        document, c1, c2, line = scene
        document.selection.select([c1, c2], SelectionMode.RESET)
        document.selection.rotate_selection(90)
        assert c1.position == Point(100, 100)
        assert c2.position == Point(100, 0)
        assert c1.snap_point("G").point == Point(100, 110)

    def test_four_quarter_turns_restore_everything(self, scene):
        document = scene[0]
        document.selection.select_all()
        before = snapshot(document)
        for _ in range(4):
            document.selection.rotate_selection(90)
        assert_close(snapshot(document), before)

    def test_rotation_with_wires_needs_quarter_turns(self, scene):
        document = scene[0]
        document.selection.select_all()
        before = snapshot(document)
        with pytest.raises(ValueError):
            document.selection.rotate_selection(45)
        assert snapshot(document) == before

    def test_components_rotate_by_any_angle(self, scene):
        document, c1, c2, line = scene
        document.selection.select([c1, c2], SelectionMode.RESET)
        document.selection.rotate_selection(45)
        document.selection.rotate_selection(-45)
        assert c1.position.is_close(Point(50, 50), 1e-9)
        assert c2.position.is_close(Point(150, 50), 1e-9)

    def test_rotation_is_one_redraw(self, scene):
        document = scene[0]
        calls = []
        document.add_change_listeners(before=lambda: calls.append("before"), after=lambda: calls.append("after"))
        document.selection.select_all()
        document.selection.rotate_selection(90)
        assert calls == ["before", "after"]

    def test_flip_horizontal(self, scene):
        document, c1, c2, line = scene
        document.selection.select([c1, c2], SelectionMode.RESET)
        document.selection.flip_selection(horizontal=True)
        assert c1.position == Point(150, 50)
        assert c2.position == Point(50, 50)
        assert c1.mirrored and c2.mirrored

    def test_flip_vertical_keeps_group_in_place(self, scene):
        document, c1, c2, line = scene
        document.selection.select_all()
        box = document.selection.get_overall_bounding_box()
        document.selection.flip_selection(horizontal=False)
        assert document.selection.get_overall_bounding_box() == box
        assert line.vertices == [Point(0, 40), Point(100, 40)]

    def test_move_rel(self, scene):
        document, c1, c2, line = scene
        document.selection.select([c1, line], SelectionMode.RESET)
        document.selection.move_selection_rel((10, 0))
        assert c1.position == Point(60, 50)
        assert line.vertices == [Point(10, 100), Point(110, 100)]
        assert c2.position == Point(150, 50)

    def test_move_to(self, scene):
        document, c1, c2, line = scene
        document.selection.select([c1, c2], SelectionMode.RESET)
        document.selection.move_selection_to((0, 0))
        assert document.selection.get_overall_bounding_box().center == Point(0, 0)

    def test_transforms_without_selection_do_nothing(self, scene):
        document = scene[0]
        before = snapshot(document)
        document.selection.rotate_selection(45)
        document.selection.flip_selection(True)
        document.selection.move_selection_rel((5, 5))
        document.selection.remove_selection()
        assert snapshot(document) == before

    def test_remove_selection(self, scene):
        document, c1, c2, line = scene
        wire = Line(c2.snap_point("G"))
        wire.push_point(True, Point(120, 0))
        document.add_line(wire)

        document.selection.select([c2, line], SelectionMode.RESET)
        document.selection.remove_selection()

        assert document.instances == [c1]
        assert document.lines == [wire]
        assert not document.selection.has_selection()
        assert not wire.is_vertex_bound(0)
        assert wire.first_point == Point(140, 50)
