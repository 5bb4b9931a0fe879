"""Tests for scenekit.core.export — canonical JSON and legacy layer import."""

import json

import pytest

from scenekit.core.errors import ValidationError
from scenekit.core.export import (
    export_template,
    export_template_json,
    import_legacy_config,
    import_template,
)
from scenekit.core.scenes import (
    GradientBackground,
    ImageElement,
    Scene,
    ShapeElement,
    StickerElement,
    Template,
    TextElement,
    Transition,
)


@pytest.fixture
def template():
    return Template(
        scenes=[
            Scene(name="Intro", duration=2.5, transition=Transition.FADE, elements=[
                TextElement(text="Hello", font_size=48, animation="fadeInUp", z_index=1),
                ShapeElement(shape_type="star", z_index=0),
            ]),
            Scene(name="Outro", background="#000000", elements=[
                ImageElement(src="https://cdn.example.com/a.png"),
            ]),
        ],
        created_at="2024-05-01T12:00:00+00:00",
    )


# ── Export ──────────────────────────────────────────────────────────────

class TestExport:
    def test_camel_case_keys(self, template):
        data = export_template(template)
        assert data["canvasSize"] == {"width": 1080, "height": 1920}
        el = data["scenes"][0]["elements"][0]
        assert el["fontSize"] == 48
        assert el["zIndex"] == 1
        assert "font_size" not in el

    def test_transition_value(self, template):
        assert export_template(template)["scenes"][0]["transition"] == "Fade"

    def test_exported_at(self, template):
        data = export_template(template, exported_at="2024-05-02T00:00:00+00:00")
        assert data["exportedAt"] == "2024-05-02T00:00:00+00:00"
        assert "exportedAt" not in export_template(template)

    def test_json_string(self, template):
        parsed = json.loads(export_template_json(template))
        assert parsed["version"] == "1.0"


# ── Import ──────────────────────────────────────────────────────────────

class TestImport:
    def test_round_trip(self, template):
        restored = import_template(export_template(template))
        assert restored == template

    def test_round_trip_preserves_ids(self, template):
        restored = import_template(export_template(template))
        assert [s.id for s in restored.scenes] == [s.id for s in template.scenes]
        assert restored.scenes[0].elements[1].id == template.scenes[0].elements[1].id

    def test_from_json_text(self, template):
        restored = import_template(export_template_json(template))
        assert len(restored.scenes) == 2
        assert [len(s.elements) for s in restored.scenes] == [2, 1]

    def test_json_layout_envelope(self, template):
        restored = import_template({"json_layout": export_template(template)})
        assert restored.scenes[1].name == "Outro"

    def test_ignores_unknown_element_fields(self):
        blob = {"scenes": [{"name": "S", "elements": [
            {"type": "shape", "id": "s1", "fontSize": 20, "fill": "#ff0000"},
        ]}]}
        el = import_template(blob).scenes[0].elements[0]
        assert el.fill_color == "#ff0000"

    def test_rejects_no_scenes(self):
        with pytest.raises(ValidationError):
            import_template({"scenes": []})

    def test_rejects_bad_json(self):
        with pytest.raises(ValidationError):
            import_template("{not json")

    def test_rejects_bad_element(self):
        blob = {"scenes": [{"elements": [{"type": "text", "width": -5}]}]}
        with pytest.raises(ValidationError):
            import_template(blob)

    def test_rejects_non_object(self):
        with pytest.raises(ValidationError):
            import_template("[1, 2]")


# ── Legacy layer format ─────────────────────────────────────────────────

class TestLegacyConfig:
    @pytest.fixture
    def config(self):
        return {
            "resolution": "1080x1920",
            "duration": 5,
            "background": {"type": "gradient", "colors": ["#FF6B6B", "#4ECDC4"]},
            "layers": [
                {"type": "text", "content": "Summer Sale", "fontSize": 40,
                 "color": "#FFFFFF", "position": [540, 400], "animation": "fadeIn"},
                {"type": "image", "placeholder": "product.png",
                 "size": [400, 400], "position": [540, 960], "animation": "scaleIn"},
                {"type": "lottie", "placeholder": "sparkles", "size": [200, 200],
                 "position": [540, 1500], "animation": "loop"},
            ],
        }

    def test_canvas_and_duration(self, config):
        t = import_legacy_config(config)
        assert (t.canvas_size.width, t.canvas_size.height) == (1080, 1920)
        assert t.scenes[0].duration == 5
        assert isinstance(t.scenes[0].background, GradientBackground)

    def test_positional_ids(self, config):
        ids = [el.id for el in import_legacy_config(config).scenes[0].elements]
        assert ids == ["text_0", "image_1", "lottie_2"]

    def test_text_centre_anchor(self, config):
        el = import_legacy_config(config).scenes[0].elements[0]
        assert el.text == "Summer Sale"
        assert el.width == pytest.approx(11 * 40 * 0.6)
        assert el.x + el.width / 2 == pytest.approx(540)
        assert el.y + el.height / 2 == pytest.approx(400)

    def test_image_and_lottie(self, config):
        _, image, lottie = import_legacy_config(config).scenes[0].elements
        assert isinstance(image, ImageElement)
        assert (image.x, image.y, image.width) == (340, 760, 400)
        assert image.src is None
        assert isinstance(lottie, StickerElement)
        assert lottie.animation == "loop"
        assert lottie.z_index == 2

    def test_routed_from_import_template(self, config):
        t = import_template({"json_layout": config})
        assert len(t.scenes[0].elements) == 3

    def test_bad_resolution_falls_back(self):
        t = import_legacy_config({"resolution": "hugexwide", "layers": []})
        assert t.canvas_size.width == 1080

    def test_unknown_layer_skipped(self):
        t = import_legacy_config({"layers": [{"type": "hologram"}, {"type": "text", "content": "x"}]})
        assert [el.id for el in t.scenes[0].elements] == ["text_1"]

    @pytest.mark.parametrize("layer", [
        {"type": "image", "size": [100]},
        {"type": "image", "position": ["a", "b"]},
        {"type": "lottie", "size": "200x200"},
        {"type": "text", "content": "Hi", "fontSize": None},
        {"type": "text", "content": "Hi", "fontSize": "large"},
    ])
    def test_malformed_layer_rejected(self, layer):
        with pytest.raises(ValidationError):
            import_template({"layers": [layer]})
