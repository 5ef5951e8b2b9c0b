"""
Image payload utility functions.
"""
import base64
import binascii
import re

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")

# Rekognition rejects raw image bytes above 5MB
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def decode_base64_image(image: str) -> bytes:
    """Decode a base64 image, optionally prefixed with a data URL header.

    Args:
        image: Base64 encoded image, e.g. ``data:image/jpeg;base64,/9j/4AAQ...``

    Returns:
        bytes: Raw image bytes

    Raises:
        ValueError: If the payload is empty, not valid base64 or too large
    """
    payload = _DATA_URL_PREFIX.sub("", image.strip())
    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Failed to decode base64 image: {e}") from e

    if not image_bytes:
        raise ValueError("Image payload is empty")
    if len(image_bytes) > MAX_IMAGE_BYTES:
        raise ValueError(
            f"Image is {len(image_bytes)} bytes, maximum is {MAX_IMAGE_BYTES}")

    return image_bytes
