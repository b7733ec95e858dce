"""Helpers for building test images and fakes."""

import io

from PIL import Image


def make_image_bytes(size=(64, 48), color=(200, 180, 160), format="JPEG", mode="RGB") -> bytes:
    """Create an encoded solid-color image."""
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=format)
    return buf.getvalue()


class FakeGenerator:
    """Stands in for AITryOn in pipeline and API tests."""

    available = True

    def __init__(self, result=(b"\x89PNG generated", "image/png"), error=None):
        self.result = result
        self.error = error
        self.calls = []

    def run(self, user_image, garment, request_id=None):
        self.calls.append((user_image, garment))
        if self.error is not None:
            raise self.error
        return self.result
