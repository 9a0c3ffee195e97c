"""Session keys, nonces and authenticated packet encryption."""

from __future__ import annotations

import re
import resource
from dataclasses import dataclass

from .errors import CryptoError
from .keycodec import decode_key, encode_key
from .ocb import OcbContext
from .prng import PRNG

KEY_LEN = 16
PRINTABLE_KEY_LEN = 22

_MASK64 = (1 << 64) - 1
_LONG_MIN = -(1 << 63)
_LONG_MAX = (1 << 63) - 1
_INTEGER = re.compile(r"[ \t\n\v\f\r]*[+-]?[0-9]+")

# Each key is shared by both directions, so each side stops at half
# of the 2^48 blocks that OCB allows under one key.
_BLOCK_LIMIT_SHIFT = 47


def parse_int(text: str) -> int:
    """Parse a whole decimal integer in the range of a signed 64-bit long.

    Leading whitespace and a sign are accepted; anything after the
    digits is an error.  An empty string parses as zero.
    """
    if text == "":
        return 0
    if not _INTEGER.fullmatch(text):
        raise CryptoError("Bad integer.")
    value = int(text.strip())
    if not _LONG_MIN <= value <= _LONG_MAX:
        raise CryptoError("Bad integer.")
    return value


class _Counter:
    def __init__(self) -> None:
        self.next = 0


_counter = _Counter()


def unique() -> int:
    """Return a number never returned before in this process."""
    value = _counter.next
    _counter.next = (_counter.next + 1) & _MASK64
    if _counter.next == 0:
        raise CryptoError("Counter wrapped", True)
    return value


class Base64Key:
    """A 128-bit session key, printable as 22 base64 letters."""

    def __init__(self, printable_key: str | None = None, prng: PRNG | None = None) -> None:
        if printable_key is None:
            if prng is None:
                with PRNG() as source:
                    self._key = source.fill(KEY_LEN)
            else:
                self._key = prng.fill(KEY_LEN)
            return

        if len(printable_key) != PRINTABLE_KEY_LEN:
            raise CryptoError("Key must be 22 letters long.")
        try:
            key = decode_key(printable_key + "==")
        except ValueError as exc:
            raise CryptoError("Key must be well-formed base64.") from exc
        if len(key) != KEY_LEN:
            raise CryptoError("Key must represent 16 octets.")
        self._key = key
        # Catches alterations in the bits beyond the first 128.
        if printable_key != self.printable_key():
            raise CryptoError("Base64 key was not encoded 128-bit key.")

    def printable_key(self) -> str:
        """Return the key as 22 base64 letters, without the trailing ``==``."""
        encoded = encode_key(self._key)
        if not encoded.endswith("=="):
            raise CryptoError(f"Unexpected output from base64_encode: {encoded}")
        return encoded[:PRINTABLE_KEY_LEN]

    def data(self) -> bytes:
        """Return the 16 raw key octets."""
        return self._key


class Nonce:
    """A 96-bit OCB nonce: four zero octets, then a big-endian 64-bit value."""

    NONCE_LEN = 12

    __slots__ = ("_bytes",)

    def __init__(self, value: int) -> None:
        if not 0 <= value <= _MASK64:
            raise ValueError("nonce value must fit in 64 unsigned bits")
        self._bytes = bytes(4) + value.to_bytes(8, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> Nonce:
        """Build a nonce from its 8-octet wire form."""
        if len(data) != 8:
            raise CryptoError("Nonce representation must be 8 octets long.")
        return cls(int.from_bytes(bytes(data), "big"))

    def cc_str(self) -> bytes:
        """Return the 8 octets sent on the wire."""
        return self._bytes[4:]

    def data(self) -> bytes:
        """Return the full 12-octet nonce."""
        return self._bytes

    def val(self) -> int:
        """Return the 64-bit value."""
        return int.from_bytes(self._bytes[4:], "big")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Nonce):
            return NotImplemented
        return self._bytes == other._bytes

    def __hash__(self) -> int:
        return hash(self._bytes)

    def __repr__(self) -> str:
        return f"Nonce({self.val()})"


@dataclass(frozen=True)
class Message:
    """A nonce with the text it protects."""

    nonce: Nonce
    text: bytes


class Session:
    """AES-128-OCB encryption of packets, each prefixed by its nonce."""

    RECEIVE_MTU = 2048
    ADDED_BYTES = 16

    def __init__(self, key: Base64Key) -> None:
        self.key = key
        try:
            self._ctx = OcbContext(key.data(), Nonce.NONCE_LEN, 16)
        except CryptoError as exc:
            raise CryptoError("Could not initialize AES-OCB context.") from exc
        self.blocks_encrypted = 0

    def encrypt(self, message: Message) -> bytes:
        """Return the wire nonce followed by ciphertext and tag."""
        text = bytes(message.text)
        if len(text) + self.ADDED_BYTES > self.RECEIVE_MTU:
            raise ValueError("plaintext too long for one packet")
        sealed = self._ctx.encrypt(
            text, nonce=message.nonce.data(), associated_data=b"", final=True
        )
        if len(sealed) != len(text) + self.ADDED_BYTES:
            raise CryptoError("ae_encrypt() returned error.")

        self.blocks_encrypted += -(-len(text) // 16)
        if self.blocks_encrypted >> _BLOCK_LIMIT_SHIFT:
            raise CryptoError("Encrypted 2^47 blocks.", True)

        return message.nonce.cc_str() + sealed

    def decrypt(self, ciphertext: bytes) -> Message:
        """Verify and decrypt a packet produced by encrypt()."""
        ciphertext = bytes(ciphertext)
        if len(ciphertext) < 24:
            raise CryptoError("Ciphertext must contain nonce and tag.")
        body = ciphertext[8:]
        if len(body) > self.RECEIVE_MTU:
            raise ValueError("ciphertext too long for one packet")
        nonce = Nonce.from_bytes(ciphertext[:8])
        text = self._ctx.decrypt(
            body, nonce=nonce.data(), associated_data=b"", tag=None, final=True
        )
        return Message(nonce, text)

    def close(self) -> None:
        """Erase the key schedule; the session can no longer be used."""
        self._ctx.clear()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class _SavedLimit:
    def __init__(self) -> None:
        self.soft: int | None = None


_saved_core_limit = _SavedLimit()


def disable_dumping_core() -> None:
    """Forbid core dumps so key material never reaches the disk.

    Raises OSError when the limit cannot be read or changed.
    """
    soft, hard = resource.getrlimit(resource.RLIMIT_CORE)
    _saved_core_limit.soft = soft
    resource.setrlimit(resource.RLIMIT_CORE, (0, hard))


def reenable_dumping_core() -> None:
    """Restore the core-dump limit saved by disable_dumping_core(); failures are ignored."""
    if _saved_core_limit.soft is None:
        return
    try:
        _, hard = resource.getrlimit(resource.RLIMIT_CORE)
        resource.setrlimit(resource.RLIMIT_CORE, (_saved_core_limit.soft, hard))
    except (OSError, ValueError):
        pass