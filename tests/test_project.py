"""Tests for project file loading and saving."""
import json

import numpy as np
import pytest

from stickervec.composition import Composition, Layer, RasterContent, VectorContent
from stickervec.project import composition_from_dict, load_project, save_project
from stickervec.timeline import Timeline
from stickervec.types import Keyframe, ProjectError, Transform


class TestProjectRoundTrip:
    """Test saving and reloading compositions."""

    def test_save_and_load(self, moving_layer, vector_layer, tmp_path):
        """Layers, keyframes and pixels survive a save/load cycle."""
        vector_layer.transform = Transform(x=5, opacity=0.5)
        vector_layer.visible = False
        composition = Composition(layers=[moving_layer, vector_layer], duration_ms=2000, fps=24)

        path = save_project(composition, tmp_path / "project.json")
        loaded = load_project(path)

        assert loaded.duration_ms == 2000
        assert loaded.fps == 24
        assert [layer.id for layer in loaded.layers] == [moving_layer.id, vector_layer.id]

        raster, vector = loaded.layers
        assert raster.is_raster
        assert np.array_equal(raster.content.pixels.data, moving_layer.content.pixels.data)
        assert [kf.x for kf in raster.keyframes] == [100, 200]

        assert vector.content.path_data == vector_layer.content.path_data
        assert vector.transform == vector_layer.transform
        assert not vector.visible

    def test_images_stored_relative(self, moving_layer, tmp_path):
        path = save_project(Composition(layers=[moving_layer]), tmp_path / "project.json")
        data = json.loads(path.read_text())

        assert data["layers"][0]["image"] == f"images/{moving_layer.id}.png"
        assert (tmp_path / "images" / f"{moving_layer.id}.png").exists()


class TestCompositionFromDict:
    """Test project validation."""

    def test_minimal_vector_project(self):
        composition = composition_from_dict({
            "duration_ms": 1000,
            "fps": 10,
            "layers": [{
                "name": "Tri",
                "path": "M0,0 L10,0 L10,10 Z",
                "fill": [1, 0, 0, 1],
                "keyframes": [{"time": 0, "x": 0}, {"time": 1000, "x": 50}],
            }],
        })
        layer = composition.layers[0]

        assert layer.name == "Tri"
        assert layer.content.fill_color == (1.0, 0.0, 0.0, 1.0)
        assert len(layer.keyframes) == 2

    def test_layer_needs_content(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"name": "empty"}]})

    def test_missing_image(self, tmp_path):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"image": "missing.png"}]}, tmp_path)

    def test_bad_fill(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "fill": [1, 0]}]})

    def test_unknown_transform_field(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "transform": {"skew": 1}}]})

    def test_negative_keyframe_time(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "keyframes": [{"time": -5}]}]})

    def test_bad_duration(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"duration_ms": 0, "layers": []})

    def test_layer_not_an_object(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [1]})

    def test_layers_not_a_list(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": 3})

    def test_numeric_fill(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "fill": 5}]})

    def test_non_numeric_fill_component(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "fill": [1, 0, None, 1]}]})

    def test_non_numeric_transform(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "transform": {"x": None}}]})

    def test_non_string_image(self):
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"image": 42}]})

    def test_bad_keyframe_entries(self):
        """Keyframe lists must hold objects with a real time."""
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "keyframes": [7]}]})
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "keyframes": [{"time": "soon"}]}]})
        with pytest.raises(ProjectError):
            composition_from_dict({"layers": [{"path": "M0,0 L1,1", "keyframes": {"time": 0}}]})

    def test_not_an_object(self):
        with pytest.raises(ProjectError):
            composition_from_dict([])


class TestLoadProject:
    """Test reading project files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_project(tmp_path / "nope.json")

    def test_numeric_fill_in_file(self, tmp_path):
        path = tmp_path / "odd.json"
        path.write_text(json.dumps({"layers": [{"path": "M0,0 L1,1", "fill": 5}]}))

        with pytest.raises(ProjectError):
            load_project(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ProjectError):
            load_project(path)

    def test_keyframes_from_timeline(self, tmp_path):
        layer = Layer(
            content=VectorContent("M0,0 L1,0 L1,1 Z"),
            timeline=Timeline([Keyframe(time=250, rotation=90)]),
        )
        path = save_project(Composition(layers=[layer]), tmp_path / "p.json")

        assert load_project(path).layers[0].keyframes[0].rotation == 90
