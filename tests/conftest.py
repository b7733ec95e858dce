"""Shared fixtures for the Dress Try-On tests."""

from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.config import Settings
from app.main import create_app
from tests.helpers import FakeGenerator, make_image_bytes


@pytest.fixture
def person_jpeg() -> bytes:
    return make_image_bytes(size=(120, 160), format="JPEG")


@pytest.fixture
def person_png() -> bytes:
    return make_image_bytes(size=(120, 160), format="PNG")


@pytest.fixture
def dresses_dir(tmp_path) -> Path:
    """Garment directory with a few dresses and a secret file outside it."""
    root = tmp_path / "dresses"
    root.mkdir()

    rgba = np.zeros((80, 40, 4), dtype=np.uint8)
    rgba[:, :, 0] = 30
    rgba[:, :, 2] = 220
    rgba[10:70, 5:35, 3] = 255
    Image.fromarray(rgba, "RGBA").save(root / "linen-blue.png")

    (root / "red_velvet.jpg").write_bytes(make_image_bytes(size=(30, 60), color=(180, 20, 20)))
    (root / "empty.webp").write_bytes(b"")
    (root / "notes.txt").write_text("not a dress")
    (root / "broken.png").write_bytes(b"this is not a png")

    (tmp_path / "secret.png").write_bytes(make_image_bytes(format="PNG"))
    return root


@pytest.fixture
def settings(dresses_dir) -> Settings:
    return Settings(
        _env_file=None,
        OPENAI_API_KEY="",
        DRESSES_DIR=dresses_dir,
    )


@pytest.fixture
def client(settings) -> TestClient:
    """Client for an app without generation configured."""
    return TestClient(create_app(settings))


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def real_client(settings, generator) -> TestClient:
    """Client for an app with a (fake) generator configured."""
    return TestClient(create_app(settings, generator=generator))
