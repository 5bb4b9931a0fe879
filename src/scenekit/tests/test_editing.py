"""Tests for scenekit.core.editing — scene and element operations."""

import pytest

from scenekit.core import editing
from scenekit.core.errors import InvalidOperation, NotFound, ValidationError
from scenekit.core.geometry import CanvasSize
from scenekit.core.scenes import Scene, ShapeElement, Template, TextElement


@pytest.fixture
def abc_template():
    return Template(scenes=[Scene(name="A"), Scene(name="B"), Scene(name="C")])


def _names(template):
    return [s.name for s in template.scenes]


def _in_bounds(el, size):
    return 0 <= el.x <= size.width - el.width and 0 <= el.y <= size.height - el.height


# ── Scene operations ────────────────────────────────────────────────────

class TestAddScene:
    def test_appends_and_focuses(self):
        t = Template()
        edit = editing.add_scene(t)
        assert len(edit.template.scenes) == 2
        assert edit.current_index == 1
        assert edit.template.scenes[1].name == "Scene 2"
        assert edit.template.scenes[1].duration == 3.0

    def test_input_untouched(self):
        t = Template()
        editing.add_scene(t)
        assert len(t.scenes) == 1

    def test_invalid_override(self):
        with pytest.raises(ValidationError):
            editing.add_scene(Template(), duration=-1)


class TestDuplicateScene:
    def test_inserted_after_source(self, abc_template):
        edit = editing.duplicate_scene(abc_template, 0)
        assert _names(edit.template) == ["A", "A Copy", "B", "C"]

    def test_new_ids(self):
        el = TextElement()
        t = Template(scenes=[Scene(elements=[el])])
        copy = editing.duplicate_scene(t, 0).template.scenes[1]
        assert copy.id != t.scenes[0].id
        assert copy.elements[0].id != el.id
        assert (copy.elements[0].x, copy.elements[0].y) == (el.x, el.y)

    def test_current_index_follows_scene(self, abc_template):
        edit = editing.duplicate_scene(abc_template, 0, current_index=2)
        assert edit.current_index == 3
        assert edit.template.scenes[3].name == "C"

    def test_out_of_range(self, abc_template):
        with pytest.raises(InvalidOperation):
            editing.duplicate_scene(abc_template, 5)


class TestDeleteScene:
    def test_only_scene_refused(self):
        t = Template()
        with pytest.raises(InvalidOperation):
            editing.delete_scene(t, 0)
        assert len(t.scenes) == 1

    def test_never_below_one(self, abc_template):
        t = abc_template
        for _ in range(2):
            t = editing.delete_scene(t, 0).template
        assert len(t.scenes) == 1
        with pytest.raises(InvalidOperation):
            editing.delete_scene(t, 0)

    def test_delete_current_moves_back(self, abc_template):
        edit = editing.delete_scene(abc_template, 2, current_index=2)
        assert edit.current_index == 1

    def test_delete_first_current(self, abc_template):
        edit = editing.delete_scene(abc_template, 0, current_index=0)
        assert edit.current_index == 0
        assert _names(edit.template) == ["B", "C"]

    def test_delete_before_current(self, abc_template):
        edit = editing.delete_scene(abc_template, 0, current_index=2)
        assert edit.current_index == 1
        assert edit.template.scenes[1].name == "C"


class TestReorderScenes:
    def test_move_first_to_last(self, abc_template):
        edit = editing.reorder_scenes(abc_template, 0, 2, current_index=0)
        assert _names(edit.template) == ["B", "C", "A"]
        assert edit.current_index == 2

    def test_current_follows_other_scene(self, abc_template):
        edit = editing.reorder_scenes(abc_template, 0, 2, current_index=1)
        assert edit.template.scenes[edit.current_index].name == "B"
        assert edit.current_index == 0

    def test_move_last_to_first(self, abc_template):
        edit = editing.reorder_scenes(abc_template, 2, 0)
        assert _names(edit.template) == ["C", "A", "B"]

    def test_out_of_range(self, abc_template):
        with pytest.raises(InvalidOperation):
            editing.reorder_scenes(abc_template, 0, 3)


class TestRenameAndUpdateScene:
    def test_rename(self, abc_template):
        t = editing.rename_scene(abc_template, 1, "  Middle ")
        assert t.scenes[1].name == "Middle"

    def test_blank_name_is_noop(self, abc_template):
        t = editing.rename_scene(abc_template, 1, "   ")
        assert t.scenes[1].name == "B"

    def test_rename_rejects_non_string(self, abc_template):
        with pytest.raises(ValidationError):
            editing.rename_scene(abc_template, 1, 42)
        assert abc_template.scenes[1].name == "B"

    def test_update_duration_and_transition(self, abc_template):
        t = editing.update_scene(abc_template, 0, duration=5, transition="Fade")
        assert t.scenes[0].duration == 5
        assert t.scenes[0].transition.value == "Fade"
        assert abc_template.scenes[0].duration == 3

    def test_update_rejects_unknown(self, abc_template):
        with pytest.raises(ValidationError):
            editing.update_scene(abc_template, 0, elements=[])

    def test_update_rejects_bad_duration(self, abc_template):
        with pytest.raises(ValidationError):
            editing.update_scene(abc_template, 0, duration=0)


# ── Canvas ──────────────────────────────────────────────────────────────

class TestCanvas:
    def test_set_canvas_size_reclamps(self):
        el = ShapeElement(x=900, y=1700)
        t = Template(scenes=[Scene(elements=[el])])
        t2 = editing.set_canvas_size(t, 800, 600)
        moved = t2.scenes[0].elements[0]
        assert (moved.x, moved.y) == (700, 500)

    def test_preset(self):
        t = editing.apply_canvas_preset(Template(), "Instagram Post")
        assert (t.canvas_size.width, t.canvas_size.height) == (1080, 1080)

    def test_custom_preset_keeps_size(self):
        t = editing.apply_canvas_preset(Template(), "Custom")
        assert t.canvas_size.height == 1920

    def test_unknown_preset(self):
        with pytest.raises(ValidationError):
            editing.apply_canvas_preset(Template(), "MySpace Banner")

    def test_invalid_size(self):
        with pytest.raises(ValidationError):
            editing.set_canvas_size(Template(), 0, 100)


# ── Element operations ──────────────────────────────────────────────────

class TestAddElement:
    def test_z_index_is_count(self):
        s = editing.add_element(Scene(), "text", CanvasSize())
        s = editing.add_element(s, "shape", CanvasSize())
        assert [el.z_index for el in s.elements] == [0, 1]

    def test_default_position(self):
        s = editing.add_element(Scene(), "shape", CanvasSize())
        el = s.elements[0]
        assert (el.x, el.y) == (490, 910)

    def test_overrides(self):
        s = editing.add_element(Scene(), "text", CanvasSize(), {"text": "Hello", "fontSize": 40})
        assert s.elements[0].text == "Hello"
        assert s.elements[0].font_size == 40

    def test_placed_on_template_canvas(self):
        t = Template(canvas_size=CanvasSize(width=1200, height=630))
        s = editing.add_element(t.scenes[0], "shape", t.canvas_size)
        el = s.elements[0]
        assert (el.x, el.y) == (550, 265)
        assert _in_bounds(el, t.canvas_size)

    def test_overrides_clamped(self):
        size = CanvasSize(width=500, height=500)
        s = editing.add_element(Scene(), "shape", size, {"x": 9000, "y": -40})
        assert _in_bounds(s.elements[0], size)

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            editing.add_element(Scene(), "hologram", CanvasSize())

    def test_foreign_field(self):
        with pytest.raises(ValidationError):
            editing.add_element(Scene(), "shape", CanvasSize(), {"fontSize": 12})


class TestUpdateElement:
    def test_shallow_merge(self):
        el = TextElement(text="A", color="#000000")
        s = editing.update_element(Scene(elements=[el]), el.id, {"color": "#ffffff"}, CanvasSize())
        assert s.elements[0].color == "#ffffff"
        assert s.elements[0].text == "A"

    def test_missing_id(self):
        with pytest.raises(NotFound):
            editing.update_element(Scene(), "nope", {"x": 1}, CanvasSize())

    def test_cannot_change_id(self):
        el = TextElement()
        with pytest.raises(ValidationError):
            editing.update_element(Scene(elements=[el]), el.id, {"id": "other"}, CanvasSize())

    def test_constraint_violation(self):
        el = TextElement()
        s = Scene(elements=[el])
        with pytest.raises(ValidationError):
            editing.update_element(s, el.id, {"opacity": 2}, CanvasSize())
        assert s.elements[0].opacity == 1.0

    def test_clamped_with_canvas(self):
        el = ShapeElement()
        size = CanvasSize(width=300, height=300)
        s = editing.update_element(Scene(elements=[el]), el.id, {"x": 1000}, size)
        assert s.elements[0].x == 200

    def test_out_of_canvas_position_clamped(self):
        el = TextElement(id="e1")
        size = CanvasSize(width=1200, height=630)
        s = editing.update_element(Scene(elements=[el]), "e1", {"x": -500, "y": 9999}, size)
        updated = s.elements[0]
        assert (updated.x, updated.y) == (0, 630 - updated.height)
        assert _in_bounds(updated, size)


class TestDeleteAndDuplicateElement:
    def test_delete(self):
        el = TextElement()
        s = editing.delete_element(Scene(elements=[el, ShapeElement()]), el.id)
        assert len(s.elements) == 1
        assert s.get_element(el.id) is None

    def test_delete_missing(self):
        with pytest.raises(NotFound):
            editing.delete_element(Scene(), "nope")

    def test_duplicate_offset_and_on_top(self):
        a = ShapeElement(x=10, y=10, z_index=0)
        b = ShapeElement(z_index=1)
        s, new_id = editing.duplicate_element(Scene(elements=[a, b]), a.id, CanvasSize())
        copy = s.get_element(new_id)
        assert new_id != a.id
        assert (copy.x, copy.y) == (30, 30)
        assert copy.z_index > max(a.z_index, b.z_index)

    def test_duplicate_clamped(self):
        size = CanvasSize(width=200, height=200)
        a = ShapeElement(x=100, y=100)
        s, new_id = editing.duplicate_element(Scene(elements=[a]), a.id, size)
        assert _in_bounds(s.get_element(new_id), size)


class TestPointerOperations:
    def test_move_clamped(self):
        size = CanvasSize()
        el = ShapeElement(x=50, y=50)
        s = editing.move_element(Scene(elements=[el]), el.id, -500, 5000, size)
        moved = s.elements[0]
        assert (moved.x, moved.y) == (0, size.height - el.height)

    def test_move_locked(self):
        el = ShapeElement(locked=True)
        with pytest.raises(InvalidOperation):
            editing.move_element(Scene(elements=[el]), el.id, 5, 5, CanvasSize())

    def test_resize(self):
        el = ShapeElement(x=1000, y=0)
        s = editing.resize_element(Scene(elements=[el]), el.id, 200, 80, CanvasSize())
        resized = s.elements[0]
        assert (resized.width, resized.height) == (200, 80)
        assert resized.x == 880

    def test_resize_rejects_zero(self):
        el = ShapeElement()
        with pytest.raises(ValidationError):
            editing.resize_element(Scene(elements=[el]), el.id, 0, 10, CanvasSize())

    def test_bring_to_front_and_back(self):
        a, b, c = ShapeElement(z_index=0), ShapeElement(z_index=1), ShapeElement(z_index=2)
        s = editing.bring_to_front(Scene(elements=[a, b, c]), a.id)
        assert s.get_element(a.id).z_index == 3
        s = editing.send_to_back(s, c.id)
        assert s.get_element(c.id).z_index == 0


# ── End to end ──────────────────────────────────────────────────────────

class TestScenario:
    def test_duplicate_then_delete_original(self):
        text = editing.new_element("text", CanvasSize())
        t = Template(scenes=[Scene(name="Scene 1", duration=3, elements=[text])])
        edit = editing.duplicate_scene(t, 0)
        edit = editing.delete_scene(edit.template, 0, edit.current_index)
        assert len(edit.template.scenes) == 1
        scene = edit.template.scenes[0]
        assert scene.name == "Scene 1 Copy"
        assert len(scene.elements) == 1
        assert scene.elements[0].id != text.id
        assert scene.elements[0].text == "Sample Text"
