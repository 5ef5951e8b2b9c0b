"""Tests for base64 image payload decoding."""
import base64

import pytest

from pessbook.core.utils.image import MAX_IMAGE_BYTES, decode_base64_image

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


def test_decodes_plain_base64():
    assert decode_base64_image(base64.b64encode(JPEG_BYTES).decode()) == JPEG_BYTES


def test_strips_data_url_prefix():
    payload = "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode()

    assert decode_base64_image(payload) == JPEG_BYTES


@pytest.mark.parametrize("payload", ["", "data:image/png;base64,", "not base64!"])
def test_rejects_invalid_payloads(payload):
    with pytest.raises(ValueError):
        decode_base64_image(payload)


def test_rejects_oversized_images():
    payload = base64.b64encode(b"\x00" * (MAX_IMAGE_BYTES + 1)).decode()

    with pytest.raises(ValueError, match="maximum"):
        decode_base64_image(payload)
