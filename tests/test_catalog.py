"""Tests for the dress catalog listing."""

import pytest

from tryon.garment.catalog import humanize_filename, list_garments


@pytest.mark.parametrize("stem,title", [
    ("linen-blue", "Linen Blue"),
    ("red_velvet", "Red Velvet"),
    ("canaanite--robe__01", "Canaanite Robe 01"),
    ("already Spaced", "Already Spaced"),
    ("-edge-", "Edge"),
])
def test_humanize_filename(stem, title):
    assert humanize_filename(stem) == title


def test_lists_only_image_files(dresses_dir):
    (dresses_dir / ".hidden.png").write_bytes(b"x")
    (dresses_dir / "UPPER.JPEG").write_bytes(b"x")
    (dresses_dir / "folder.png").mkdir()

    ids = [entry.id for entry in list_garments(dresses_dir)]

    assert ids == ["UPPER", "broken", "empty", "linen-blue", "red_velvet"]


def test_entry_fields(dresses_dir):
    entry = next(e for e in list_garments(dresses_dir) if e.id == "linen-blue")
    assert entry.to_dict() == {
        "id": "linen-blue",
        "title": "Linen Blue",
        "description": "Reconstructed dress: Linen Blue",
        "src": "/assets/dresses/linen-blue.png",
    }


def test_custom_url_prefix(dresses_dir):
    entries = list_garments(dresses_dir, url_prefix="/static/")
    assert all(e.src.startswith("/static/") for e in entries)


def test_missing_directory(tmp_path):
    assert list_garments(tmp_path / "nowhere") == []
