"""Tests for the URL and filesystem helpers."""

import pytest

from gryffs_archiver.errors import WriteError
from gryffs_archiver.utils.paths import (
    get_query_param,
    get_url_extension,
    read_json,
    resolve_url,
    write_bytes,
    write_json,
)


@pytest.mark.parametrize("url,expected", [
    ("https://img.example/a.jpg", ".jpg"),
    ("https://img.example/a.GIF?v=2", ".GIF"),
    ("https://img.example/render?id=7", ".png"),
    ("https://img.example/dir.v2/", ".png"),
])
def test_get_url_extension(url, expected):
    assert get_url_extension(url) == expected


def test_get_query_param():
    assert get_query_param("https://gryffs.com/gryff.php?id=5193&tab=1", "id") == "5193"
    assert get_query_param("https://gryffs.com/gryff.php", "id") is None


@pytest.mark.parametrize("url,expected", [
    ("/uploads/a.png", "https://gryffs.com/uploads/a.png"),
    ("//cdn.example/a.png", "https://cdn.example/a.png"),
    ("https://other.example/a.png", "https://other.example/a.png"),
])
def test_resolve_url(url, expected):
    assert resolve_url(url, "https://gryffs.com/gryff.php?id=1") == expected


def test_write_json_keeps_unicode(tmp_path):
    path = str(tmp_path / "info.json")

    write_json(path, {'name': "Lüna"})

    assert "Lüna" in (tmp_path / "info.json").read_text(encoding="utf-8")
    assert read_json(path) == {'name': "Lüna"}


def test_write_into_missing_directory_raises(tmp_path):
    path = str(tmp_path / "missing" / "image.png")

    with pytest.raises(WriteError) as exc_info:
        write_bytes(path, b"x")

    assert exc_info.value.path == path
