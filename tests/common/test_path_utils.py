"""Tests for path utilities."""

from pathlib import Path

import pytest

from wsr_image.common.path_utils import is_safe_relative_name, is_within_directory, normalize_path


class TestNormalizePath:
    """Tests for normalize_path function."""

    def test_forward_slashes(self):
        assert normalize_path(r"C:\out\pic1.jpg") == "C:/out/pic1.jpg"

    def test_path_object(self):
        assert normalize_path(Path("out") / "pic1.jpg") == "out/pic1.jpg"

    def test_nfc_normalization(self):
        decomposed = "cafe\u0301.jpg"
        composed = "caf\u00e9.jpg"

        assert normalize_path(decomposed) == composed


class TestIsSafeRelativeName:
    """Tests for is_safe_relative_name function."""

    @pytest.mark.parametrize("name", [
        "pic1.jpg",
        "screenshot0001.JPEG",
        "images/pic1.jpg",
        "..pic.jpg",
        "pic..jpg",
    ])
    def test_safe_names(self, name):
        assert is_safe_relative_name(name) is True

    @pytest.mark.parametrize("name", [
        "",
        "..",
        "../pic.jpg",
        "a/../../pic.jpg",
        "a\\..\\pic.jpg",
        "/abs/pic.jpg",
        "\\abs\\pic.jpg",
        "C:\\pic.jpg",
        "c:pic.jpg",
        "//server/share/pic.jpg",
        "pic\x00.jpg",
    ])
    def test_unsafe_names(self, name):
        assert is_safe_relative_name(name) is False


class TestIsWithinDirectory:
    """Tests for is_within_directory function."""

    def test_child(self, tmp_path):
        assert is_within_directory(tmp_path, tmp_path / "a" / "b.jpg") is True

    def test_same_directory(self, tmp_path):
        assert is_within_directory(tmp_path, tmp_path) is True

    def test_sibling(self, tmp_path):
        base = tmp_path / "out"
        assert is_within_directory(base, tmp_path / "out-other" / "x.jpg") is False

    def test_parent_traversal(self, tmp_path):
        base = tmp_path / "out"
        assert is_within_directory(base, base / ".." / "x.jpg") is False
