"""
Shared encoding helpers for the vault security services

- Unpadded URL-safe base64 (cipher blobs, token segment checks)
- Constant-time comparison
"""

import binascii
import hmac
from base64 import urlsafe_b64decode, urlsafe_b64encode


_B64URL_ALPHABET = (
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
)


def b64url_encode(data: bytes) -> str:
    """
    Encode bytes as URL-safe base64 without padding.

    Args:
        data: Raw bytes

    Returns:
        ASCII text using only A-Z, a-z, 0-9, '-' and '_'
    """
    return urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(text: str) -> bytes:
    """
    Decode unpadded (or padded) URL-safe base64.

    Args:
        text: Encoded text

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the text is not valid URL-safe base64
    """
    try:
        raw = text.encode("ascii")
    except UnicodeEncodeError as e:
        raise ValueError(f"Non-ASCII base64 input: {e}")

    raw = raw.rstrip(b"=")
    # urlsafe_b64decode ignores characters outside the alphabet
    if raw.translate(None, _B64URL_ALPHABET):
        raise ValueError("Invalid URL-safe base64 alphabet")
    if len(raw) % 4 == 1:
        raise ValueError("Invalid URL-safe base64 length")

    try:
        return urlsafe_b64decode(raw + b"=" * (-len(raw) % 4))
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid URL-safe base64: {e}")


def constant_time_equals(a: str | bytes, b: str | bytes) -> bool:
    """
    Compare two values without leaking the position of the first mismatch.

    Text is compared as UTF-8 bytes so non-ASCII input never raises.
    """
    if isinstance(a, str):
        a = a.encode("utf-8")
    if isinstance(b, str):
        b = b.encode("utf-8")
    return hmac.compare_digest(a, b)
