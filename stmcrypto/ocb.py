"""OCB3 authenticated encryption over AES with a 96-bit nonce and a 128-bit tag."""

from __future__ import annotations

from functools import reduce

from .blocks import (
    BLOCK_SIZE,
    ZERO_BLOCK,
    BlockCipher,
    constant_time_equal,
    ntz,
    xor_block,
)
from .errors import AuthenticationError, CryptoError, NotSupportedError
from .offsets import (
    NONCE_LEN,
    AssociatedDataHasher,
    KeyValues,
    NonceOffsetGenerator,
)

TAG_LEN = 16


class OcbContext:
    """An OCB3 context bound to one key.

    A call that passes a nonce starts a new message; a call with
    ``final`` set ends it.  Calls in between (``nonce=None``) continue the
    message incrementally.  Passing ``associated_data=None`` together with
    a nonce reuses the associated data of the previous message.

    Plaintext returned by incremental decryption must be treated as
    possibly inauthentic until the final call has returned without
    raising AuthenticationError.
    """

    def __init__(self, key: bytes, nonce_len: int = NONCE_LEN, tag_len: int = TAG_LEN) -> None:
        if nonce_len != NONCE_LEN:
            raise NotSupportedError(f"nonce must be {NONCE_LEN} octets, got {nonce_len}")
        if tag_len != TAG_LEN:
            raise NotSupportedError(f"tag must be {TAG_LEN} octets, got {tag_len}")
        self._cipher: BlockCipher | None = BlockCipher(key)
        self._keys: KeyValues | None = KeyValues(self._cipher)
        self._nonces: NonceOffsetGenerator | None = NonceOffsetGenerator(self._cipher)
        self._ad: AssociatedDataHasher | None = AssociatedDataHasher(self._cipher, self._keys)
        self._ad_open = False
        self._active = False
        self._offset = ZERO_BLOCK
        self._checksum = ZERO_BLOCK
        self._blocks = 0
        self._pending = b""
        self._cleared = False

    def encrypt(
        self,
        plaintext: bytes,
        nonce: bytes | None = None,
        associated_data: bytes | None = None,
        final: bool = True,
    ) -> bytes:
        """Encrypt plaintext; a final call appends the 16-octet tag."""
        self._begin(nonce, associated_data, final)
        buffer = self._pending + bytes(plaintext)
        whole = len(buffer) - len(buffer) % BLOCK_SIZE
        output = self._process_blocks(buffer[:whole], encrypting=True)
        tail = buffer[whole:]
        if not final:
            self._pending = tail
            return output
        tail_output, tag = self._finish(tail, encrypting=True)
        return output + tail_output + tag

    def encrypt_detached(
        self,
        plaintext: bytes,
        nonce: bytes | None = None,
        associated_data: bytes | None = None,
    ) -> tuple[bytes, bytes]:
        """Encrypt and finish a message, returning ciphertext and tag separately."""
        sealed = self.encrypt(plaintext, nonce, associated_data, final=True)
        return sealed[:-TAG_LEN], sealed[-TAG_LEN:]

    def decrypt(
        self,
        ciphertext: bytes,
        nonce: bytes | None = None,
        associated_data: bytes | None = None,
        tag: bytes | None = None,
        final: bool = True,
    ) -> bytes:
        """Decrypt ciphertext.

        On the final call the tag is taken from ``tag`` or, when that is
        None, from the last 16 octets of the ciphertext.  Raises
        AuthenticationError when the tag does not match.
        """
        self._begin(nonce, associated_data, final)
        buffer = self._pending + bytes(ciphertext)
        if final and tag is None:
            if len(buffer) < TAG_LEN:
                self._active = False
                self._pending = b""
                raise ValueError("ciphertext is too short to hold a tag")
            buffer, tag = buffer[:-TAG_LEN], buffer[-TAG_LEN:]
        whole = len(buffer) - len(buffer) % BLOCK_SIZE
        output = self._process_blocks(buffer[:whole], encrypting=False)
        tail = buffer[whole:]
        if not final:
            self._pending = tail
            return output
        tail_output, expected = self._finish(tail, encrypting=False)
        if not constant_time_equal(expected, bytes(tag)):
            raise AuthenticationError("Packet failed integrity check.")
        return output + tail_output

    def clear(self) -> None:
        """Forget the key and all message state; the context becomes unusable."""
        self._cipher = None
        self._keys = None
        self._nonces = None
        self._ad = None
        self._ad_open = False
        self._active = False
        self._offset = ZERO_BLOCK
        self._checksum = ZERO_BLOCK
        self._blocks = 0
        self._pending = b""
        self._cleared = True

    def _begin(self, nonce: bytes | None, associated_data: bytes | None, final: bool) -> None:
        if self._cleared:
            raise CryptoError("context has been cleared")
        if nonce is not None:
            self._offset = self._nonces.offset(nonce)
            self._checksum = ZERO_BLOCK
            self._blocks = 0
            self._pending = b""
            self._active = True
            if associated_data is not None:
                self._ad.reset()
                self._ad_open = True
        elif not self._active:
            raise ValueError("no message in progress; a nonce is required")

        if associated_data is not None:
            if not self._ad_open:
                raise ValueError("associated data for this message is already complete")
            self._ad.update(associated_data, final)
            if final:
                self._ad_open = False
        elif final and self._ad_open:
            self._ad.update(b"", True)
            self._ad_open = False

    def _process_blocks(self, data: bytes, encrypting: bool) -> bytes:
        if not data:
            return b""
        offsets = []
        inputs = []
        for start in range(0, len(data), BLOCK_SIZE):
            self._blocks += 1
            self._offset = xor_block(self._offset, self._keys.l_value(ntz(self._blocks)))
            offsets.append(self._offset)
            inputs.append(xor_block(self._offset, data[start:start + BLOCK_SIZE]))
        if encrypting:
            transformed = self._cipher.encrypt_blocks(inputs)
        else:
            transformed = self._cipher.decrypt_blocks(inputs)
        results = [xor_block(block, offset) for block, offset in zip(transformed, offsets)]
        if encrypting:
            plain_blocks = [data[start:start + BLOCK_SIZE] for start in range(0, len(data), BLOCK_SIZE)]
        else:
            plain_blocks = results
        self._checksum = reduce(xor_block, plain_blocks, self._checksum)
        return b"".join(results)

    def _finish(self, tail: bytes, encrypting: bool) -> tuple[bytes, bytes]:
        output = b""
        offset = self._offset
        checksum = self._checksum
        if tail:
            offset = xor_block(offset, self._keys.lstar)
            pad = self._cipher.encrypt_block(offset)
            output = bytes(x ^ y for x, y in zip(tail, pad))
            plain_tail = tail if encrypting else output
            padded = plain_tail + b"\x80" + bytes(BLOCK_SIZE - len(plain_tail) - 1)
            checksum = xor_block(checksum, padded)
        offset = xor_block(offset, self._keys.ldollar)
        tag = xor_block(
            self._cipher.encrypt_block(xor_block(offset, checksum)),
            self._ad.digest(),
        )
        self._active = False
        self._pending = b""
        self._offset = ZERO_BLOCK
        self._checksum = ZERO_BLOCK
        self._blocks = 0
        return output, tag