"""Key encoding helpers.

Key material is handled as raw bytes everywhere except at the boundary with
humans, where it travels as a base64 string.
"""

import base64
import binascii
import re

from shh.exceptions import ValidationError

_BASE64_PATTERN = re.compile(r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?$")


def validate_key(encoded_key: str) -> bool | str:
    """Validate a base64 encoded key.

    Shaped for use as a questionary ``validate`` callback.

    Args:
        encoded_key: The encoded key.

    Returns:
        True if valid, or an error message string if invalid.

    """
    key = encoded_key.strip() if encoded_key else ""
    if not key:
        return "Key cannot be empty"
    if not _BASE64_PATTERN.match(key):
        return "Key must be a valid base64 string"
    return True


def decode_key(encoded_key: str) -> bytes:
    """Decode a base64 encoded key into raw key material.

    Args:
        encoded_key: The encoded key.

    Returns:
        The raw key bytes.

    Raises:
        ValidationError: If the key is not valid base64.

    """
    result = validate_key(encoded_key)
    if result is not True:
        raise ValidationError(str(result))

    try:
        return base64.b64decode(encoded_key.strip(), validate=True)
    except binascii.Error as err:
        raise ValidationError(f"Key must be a valid base64 string: {err}") from err


def encode_key(key: bytes) -> str:
    """Encode raw key material for display or transport."""
    return base64.b64encode(key).decode("ascii")
