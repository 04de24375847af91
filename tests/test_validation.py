"""Tests for sticker limit validation."""
import gzip
import json
import os

from stickervec.encoder import encode_sticker
from stickervec.validation import inspect_sticker, validate_sticker_bytes


def gzip_json(document):
    return gzip.compress(json.dumps(document).encode("utf-8"))


def minimal_document(**overrides):
    document = {"tgs": 1, "fr": 30, "ip": 0, "op": 90, "w": 512, "h": 512, "layers": [{}]}
    document.update(overrides)
    return document


class TestValidateStickerBytes:
    """Test size and frame-rate checks on encoded bytes."""

    def test_small_payload_valid(self):
        report = validate_sticker_bytes(b"x" * 100, fps=30, duration_ms=3000)

        assert report.valid
        assert report.size == 100
        assert report.errors == []
        assert report.warnings == []

    def test_oversized_payload(self):
        """Over 64 KiB is an error that reports the true size."""
        data = os.urandom(70000)
        report = validate_sticker_bytes(data)

        assert not report.valid
        assert report.size == 70000
        assert report.max_size == 65536

    def test_exactly_at_limit_is_valid(self):
        assert validate_sticker_bytes(b"\0" * 65536).valid

    def test_fps_over_limit(self):
        report = validate_sticker_bytes(b"x", fps=90)

        assert not report.valid

    def test_capped_fps_is_warning(self):
        report = validate_sticker_bytes(b"x", fps=60, requested_fps=120)

        assert report.valid
        assert len(report.warnings) == 1

    def test_long_duration_is_warning(self):
        report = validate_sticker_bytes(b"x", fps=30, duration_ms=3001)

        assert report.valid
        assert "Duration" in report.warnings[0]


class TestInspectSticker:
    """Test checks on existing .tgs files."""

    def test_encoded_sticker_passes(self, red_composition):
        document, report = inspect_sticker(encode_sticker(red_composition).data)

        assert report.valid
        assert document["op"] == 10

    def test_not_gzip(self):
        document, report = inspect_sticker(b"not a sticker")

        assert document is None
        assert not report.valid

    def test_gzip_but_not_json(self):
        document, report = inspect_sticker(gzip.compress(b"\xff\xfe{"))

        assert document is None
        assert not report.valid

    def test_non_object_document(self):
        document, report = inspect_sticker(gzip_json([1, 2, 3]))

        assert document is None
        assert not report.valid

    def test_missing_marker(self):
        document = minimal_document()
        del document["tgs"]
        _, report = inspect_sticker(gzip_json(document))

        assert not report.valid

    def test_wrong_canvas(self):
        _, report = inspect_sticker(gzip_json(minimal_document(w=256)))

        assert not report.valid
        assert any("Canvas" in e for e in report.errors)

    def test_high_frame_rate(self):
        _, report = inspect_sticker(gzip_json(minimal_document(fr=90, op=90)))

        assert not report.valid

    def test_no_layers(self):
        _, report = inspect_sticker(gzip_json(minimal_document(layers=[])))

        assert not report.valid

    def test_duration_from_frames(self):
        """Duration is derived from op, ip and fr."""
        _, report = inspect_sticker(gzip_json(minimal_document(op=150)))

        assert report.valid
        assert any("5000ms" in w for w in report.warnings)

    def test_string_frame_rate(self):
        """A non-numeric fr makes the report invalid instead of raising."""
        document, report = inspect_sticker(gzip_json(minimal_document(fr="30")))

        assert document is not None
        assert not report.valid
        assert any("frame rate" in e for e in report.errors)

    def test_string_frame_range(self):
        """A non-numeric op makes the report invalid instead of raising."""
        _, report = inspect_sticker(gzip_json(minimal_document(op="90")))

        assert not report.valid
        assert any("frame range" in e for e in report.errors)

    def test_boolean_frame_rate(self):
        _, report = inspect_sticker(gzip_json(minimal_document(fr=True)))

        assert not report.valid
