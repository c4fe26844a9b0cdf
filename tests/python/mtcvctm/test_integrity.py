"""Tests for asset integrity hashes, data URIs and asset URLs."""

import base64
import hashlib

import pytest

from mtcvctm.integrity import (
    build_asset_url,
    calculate_integrity,
    data_uri,
    integrity_of,
    sniff_mime_type,
)


class TestIntegrity:
    def test_known_value(self):
        # SHA-256 of the empty string
        assert integrity_of(b"") == "sha256-47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU="

    def test_stable(self):
        data = b"credential asset bytes"
        expected = "sha256-" + base64.b64encode(hashlib.sha256(data).digest()).decode()
        assert integrity_of(data) == expected
        assert integrity_of(data) == integrity_of(data)

    def test_file(self, tmp_path):
        path = tmp_path / "asset.bin"
        path.write_bytes(b"abc")
        assert calculate_integrity(path) == integrity_of(b"abc")

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            calculate_integrity(tmp_path / "missing.png")


class TestDataUri:
    def test_png_sniffed_from_content(self, fixtures_dir, tmp_path):
        # extension deliberately wrong
        target = tmp_path / "logo.bin"
        target.write_bytes((fixtures_dir / "images" / "logo.png").read_bytes())
        assert data_uri(target).startswith("data:image/png;base64,")

    def test_svg_forced(self, fixtures_dir):
        uri = data_uri(fixtures_dir / "images" / "card.svg")
        assert uri.startswith("data:image/svg+xml;base64,")
        payload = base64.b64decode(uri.split(",", 1)[1])
        assert payload == (fixtures_dir / "images" / "card.svg").read_bytes()

    def test_svg_extension_case_insensitive(self):
        assert sniff_mime_type(b"<svg/>", "CARD.SVG") == "image/svg+xml"

    def test_extension_fallback(self):
        assert sniff_mime_type(b"plain text", "notes.txt") == "text/plain"

    def test_unknown_content(self):
        assert sniff_mime_type(b"\x00\x01", "blob") == "application/octet-stream"


class TestAssetUrl:
    @pytest.mark.parametrize(
        "base_url, path, expected",
        [
            ("https://r.example.com", "images/logo.png", "https://r.example.com/images/logo.png"),
            ("https://r.example.com/", "./logo.png", "https://r.example.com/logo.png"),
            ("https://r.example.com", "/abs/logo.png", "https://r.example.com/abs/logo.png"),
            ("https://r.example.com", "https://cdn.example.com/a.png", "https://cdn.example.com/a.png"),
        ],
    )
    def test_join(self, base_url, path, expected):
        assert build_asset_url(base_url, path) == expected
