"""Tests for layers and compositions."""
import pytest

from stickervec.composition import Composition, Layer, VectorContent
from stickervec.timeline import Timeline
from stickervec.types import Keyframe, Transform


def square_layer(name, **kwargs):
    return Layer(content=VectorContent("M0,0 L10,0 L10,10 Z"), name=name, **kwargs)


class TestComposition:
    """Test composition construction and layer management."""

    def test_defaults(self):
        """Default composition is 3 seconds at 30 fps."""
        composition = Composition()

        assert composition.duration_ms == 3000
        assert composition.fps == 30
        assert composition.total_frames == 90

    def test_rejects_bad_timing(self):
        """Non-positive duration or fps is rejected."""
        with pytest.raises(ValueError):
            Composition(duration_ms=0)
        with pytest.raises(ValueError):
            Composition(fps=0)
        with pytest.raises(ValueError):
            Composition(fps=29.5)

    def test_layer_order_is_paint_order(self):
        """Layers keep insertion order, first at the bottom."""
        a, b, c = square_layer("a"), square_layer("b"), square_layer("c")
        composition = Composition(layers=[a, b, c])

        assert [layer.name for layer in composition.layers] == ["a", "b", "c"]

    def test_duplicate_id_rejected(self):
        layer = square_layer("a")
        composition = Composition(layers=[layer])
        with pytest.raises(ValueError):
            composition.add_layer(layer)

    def test_move_layer_keeps_layers_intact(self):
        """Reordering does not alter ids or keyframes."""
        a = square_layer("a", timeline=Timeline([Keyframe(time=0, x=1)]))
        b = square_layer("b")
        composition = Composition(layers=[a, b])
        composition.move_layer(0, 1)

        assert [layer.id for layer in composition.layers] == [b.id, a.id]
        assert composition.layers[1].keyframes[0].x == 1

    def test_get_and_remove_layer(self):
        a, b = square_layer("a"), square_layer("b")
        composition = Composition(layers=[a, b])

        assert composition.get_layer(b.id) is b
        composition.remove_layer(a.id)
        assert composition.layers == (b,)
        with pytest.raises(KeyError):
            composition.get_layer(a.id)

    def test_visible_layers(self):
        """Hidden layers are excluded from the visible list."""
        a = square_layer("a")
        b = square_layer("b", visible=False)
        composition = Composition(layers=[a, b])

        assert composition.visible_layers == [a]

    def test_seek_clamps(self):
        """The current time stays inside [0, duration]."""
        composition = Composition(duration_ms=2000)

        assert composition.seek(-10) == 0
        assert composition.seek(5000) == 2000
        assert composition.seek(750) == 750

    def test_transforms_at_current_time(self):
        """Transforms are reported per layer id at the current time."""
        moving = square_layer(
            "moving",
            timeline=Timeline([Keyframe(time=0, x=0), Keyframe(time=1000, x=100)]),
        )
        still = square_layer("still", transform=Transform(y=3.0))
        composition = Composition(layers=[moving, still], duration_ms=1000)
        composition.seek(250)

        transforms = composition.transforms_at()
        assert transforms[moving.id].x == pytest.approx(25)
        assert transforms[still.id].y == 3.0

    def test_default_layer_name(self):
        """Unnamed layers get a readable default name."""
        layer = Layer(content=VectorContent("M0,0 L1,1 Z"))

        assert layer.name.startswith("Layer ")
        assert not layer.is_raster
