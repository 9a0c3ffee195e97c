"""Base64 encoding of 128-bit session keys.

Keys are always 16 raw octets, written as 22 base64 letters followed
by ``==``.
"""

from __future__ import annotations

import base64

RAW_KEY_LEN = 16
ENCODED_KEY_LEN = 24

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_REVERSE = {char: value for value, char in enumerate(_ALPHABET)}


def encode_key(raw: bytes) -> str:
    """Encode a 16-octet key as 24 base64 characters ending in ``==``."""
    if len(raw) != RAW_KEY_LEN:
        raise ValueError(f"key must be {RAW_KEY_LEN} octets, got {len(raw)}")
    return base64.b64encode(bytes(raw)).decode("ascii")


def decode_key(b64: str) -> bytes:
    """Decode 24 base64 characters into a 16-octet key.

    The low four bits of the 22nd character are ignored, so several
    encodings map to the same key; callers that care re-encode and compare.
    Raises ValueError on a wrong length or a malformed encoding.
    """
    if isinstance(b64, (bytes, bytearray)):
        b64 = b64.decode("latin-1")
    if len(b64) != ENCODED_KEY_LEN:
        raise ValueError(
            f"encoded key must be {ENCODED_KEY_LEN} characters, got {len(b64)}"
        )

    value = 0
    for char in b64[:22]:
        sixbit = _REVERSE.get(char)
        if sixbit is None:
            raise ValueError(f"invalid base64 character {char!r}")
        value = (value << 6) | sixbit

    if b64[22:] != "==":
        raise ValueError("encoded key must end with '=='")

    return (value >> 4).to_bytes(RAW_KEY_LEN, "big")