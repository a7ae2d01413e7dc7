"""
Input validation shared by the serializers of every app
"""
import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError
from rest_framework import serializers

# Upper bound for decoded image payloads (5 MB)
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def decode_image_data(value: str) -> bytes:
    """
    Decode a base64 image, optionally wrapped in a data URL.

    Accepts both ``data:image/png;base64,iVBOR...`` and the bare base64 body.
    """
    payload = value.strip()
    if payload.startswith('data:'):
        header, _, payload = payload.partition(',')
        if ';base64' not in header or not header[5:].startswith('image/'):
            raise serializers.ValidationError('Image must be a base64 encoded data:image URL.')
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise serializers.ValidationError('Image data is not valid base64.')


def validate_image_data(value):
    """Serializer validator: the value must decode to an image Pillow can read"""
    if value in (None, ''):
        return value

    raw = decode_image_data(value)
    if len(raw) > MAX_IMAGE_BYTES:
        raise serializers.ValidationError('Image is larger than 5 MB.')

    try:
        with Image.open(io.BytesIO(raw)) as image:
            image.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
        raise serializers.ValidationError('Image data could not be read as an image.')
    return value


def normalize_tags(tags):
    """Trim tags, drop empty ones and remove duplicates while keeping order"""
    seen = set()
    result = []
    for tag in tags or []:
        tag = str(tag).strip()
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        result.append(tag)
    return result
