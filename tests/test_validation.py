"""Tests for upload validation."""

import pytest

from tryon.errors import ErrorCode, UploadValidationError
from tryon.validation import MAX_UPLOAD_BYTES, has_heic_avif_signature, validate_upload

JPEG_HEADER = b"\xff\xd8\xff\xe0" + b"\x00" * 16
HEIC_HEADER = b"\x00\x00\x00\x18ftypheic" + b"\x00" * 16
AVIF_HEADER = b"\x00\x00\x00\x1cftypavif" + b"\x00" * 16


def _code(**kwargs):
    with pytest.raises(UploadValidationError) as exc_info:
        validate_upload(**kwargs)
    return exc_info.value.code


class TestAccepted:

    @pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp", "IMAGE/PNG"])
    def test_allowed_types(self, content_type):
        upload = validate_upload("me.img", content_type, JPEG_HEADER)
        assert upload.content_type == content_type.lower()
        assert upload.size == len(JPEG_HEADER)

    def test_jpg_alias_is_normalized(self):
        upload = validate_upload("me.jpg", "image/jpg", JPEG_HEADER)
        assert upload.content_type == "image/jpeg"

    def test_content_type_parameters_are_ignored(self):
        upload = validate_upload("me.png", "image/png; charset=binary", JPEG_HEADER)
        assert upload.content_type == "image/png"

    def test_exactly_at_limit(self):
        data = JPEG_HEADER + b"\x00" * (MAX_UPLOAD_BYTES - len(JPEG_HEADER))
        upload = validate_upload("me.jpg", "image/jpeg", data)
        assert upload.size == MAX_UPLOAD_BYTES


class TestRejected:

    def test_missing_file(self):
        assert _code(filename=None, content_type=None, data=None) == ErrorCode.MISSING_USER_IMAGE

    def test_empty_file(self):
        assert _code(filename="me.jpg", content_type="image/jpeg", data=b"") == ErrorCode.MISSING_USER_IMAGE

    @pytest.mark.parametrize("content_type", ["image/gif", "application/pdf", "text/plain", "", None])
    def test_unsupported_type(self, content_type):
        assert _code(filename="me", content_type=content_type, data=JPEG_HEADER) == \
            ErrorCode.UNSUPPORTED_INPUT_TYPE

    @pytest.mark.parametrize("content_type", ["image/heic", "image/heif", "image/avif", "image/heic-sequence"])
    def test_heic_avif_by_type(self, content_type):
        assert _code(filename="me", content_type=content_type, data=JPEG_HEADER) == \
            ErrorCode.UNSUPPORTED_INPUT_TYPE

    @pytest.mark.parametrize("filename", ["IMG_0001.HEIC", "photo.heif", "pic.avif"])
    def test_heic_avif_by_suffix_even_when_mislabeled(self, filename):
        assert _code(filename=filename, content_type="image/jpeg", data=JPEG_HEADER) == \
            ErrorCode.UNSUPPORTED_INPUT_TYPE

    @pytest.mark.parametrize("data", [HEIC_HEADER, AVIF_HEADER])
    def test_heic_avif_by_signature(self, data):
        assert _code(filename="photo.jpg", content_type="image/jpeg", data=data) == \
            ErrorCode.UNSUPPORTED_INPUT_TYPE

    def test_too_large(self):
        data = JPEG_HEADER + b"\x00" * MAX_UPLOAD_BYTES
        assert _code(filename="me.png", content_type="image/png", data=data) == ErrorCode.FILE_TOO_LARGE

    def test_unsupported_type_wins_over_size(self):
        data = HEIC_HEADER + b"\x00" * MAX_UPLOAD_BYTES
        assert _code(filename="me.heic", content_type="image/heic", data=data) == \
            ErrorCode.UNSUPPORTED_INPUT_TYPE

    def test_custom_limit(self):
        assert _code(filename="me.jpg", content_type="image/jpeg", data=JPEG_HEADER, max_bytes=4) == \
            ErrorCode.FILE_TOO_LARGE


def test_signature_needs_ftyp_box():
    assert not has_heic_avif_signature(JPEG_HEADER)
    assert not has_heic_avif_signature(b"short")
    assert has_heic_avif_signature(HEIC_HEADER)
