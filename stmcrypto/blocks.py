"""128-bit block primitives: XOR, doubling in GF(2^128), and AES."""

from __future__ import annotations

import hmac
from collections.abc import Iterable

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import NotSupportedError

BLOCK_SIZE = 16
ZERO_BLOCK = bytes(BLOCK_SIZE)
AES_KEY_LENGTHS = (16, 24, 32)

_MASK128 = (1 << 128) - 1
_REDUCTION = 135


def _check_block(block: bytes) -> None:
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"block must be {BLOCK_SIZE} octets, got {len(block)}")


def xor_block(a: bytes, b: bytes) -> bytes:
    """Return the bytewise XOR of two 16-octet blocks."""
    _check_block(a)
    _check_block(b)
    value = int.from_bytes(a, "big") ^ int.from_bytes(b, "big")
    return value.to_bytes(BLOCK_SIZE, "big")


def double_block(block: bytes) -> bytes:
    """Multiply a big-endian block by x in GF(2^128) modulo x^128 + x^7 + x^2 + x + 1."""
    _check_block(block)
    value = int.from_bytes(block, "big")
    doubled = (value << 1) & _MASK128
    if value >> 127:
        doubled ^= _REDUCTION
    return doubled.to_bytes(BLOCK_SIZE, "big")


def ntz(x: int) -> int:
    """Return the number of trailing zero bits of a positive integer."""
    if x <= 0:
        raise ValueError("ntz is defined only for positive integers")
    return (x & -x).bit_length() - 1


def constant_time_equal(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in time independent of where they differ."""
    return hmac.compare_digest(bytes(a), bytes(b))


class BlockCipher:
    """AES in raw single-block (ECB) form, as used underneath OCB."""

    def __init__(self, key: bytes) -> None:
        key = bytes(key)
        if len(key) not in AES_KEY_LENGTHS:
            raise NotSupportedError(
                f"AES key must be 16, 24 or 32 octets, got {len(key)}"
            )
        cipher = Cipher(algorithms.AES(key), modes.ECB())
        self._encryptor = cipher.encryptor()
        self._decryptor = cipher.decryptor()

    def encrypt_block(self, block: bytes) -> bytes:
        """Encrypt one 16-octet block."""
        _check_block(block)
        return self._encryptor.update(bytes(block))

    def decrypt_block(self, block: bytes) -> bytes:
        """Decrypt one 16-octet block."""
        _check_block(block)
        return self._decryptor.update(bytes(block))

    def encrypt_blocks(self, blocks: Iterable[bytes]) -> list[bytes]:
        """Encrypt several blocks independently, preserving order."""
        return self._apply(self._encryptor, blocks)

    def decrypt_blocks(self, blocks: Iterable[bytes]) -> list[bytes]:
        """Decrypt several blocks independently, preserving order."""
        return self._apply(self._decryptor, blocks)

    @staticmethod
    def _apply(context, blocks: Iterable[bytes]) -> list[bytes]:
        items = [bytes(block) for block in blocks]
        for block in items:
            _check_block(block)
        if not items:
            return []
        output = context.update(b"".join(items))
        return [
            output[start:start + BLOCK_SIZE]
            for start in range(0, len(output), BLOCK_SIZE)
        ]