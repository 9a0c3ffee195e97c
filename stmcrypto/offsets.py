"""Key-dependent values, nonce offsets and associated-data hashing for OCB."""

from __future__ import annotations

from functools import reduce

from .blocks import BLOCK_SIZE, ZERO_BLOCK, BlockCipher, double_block, ntz, xor_block

NONCE_LEN = 12
L_TABLE_SIZE = 16
MIN_L_TABLE_SIZE = 3

_MASK128 = (1 << 128) - 1
_MASK64 = (1 << 64) - 1
_BOTTOM_BITS = 0x3F


class KeyValues:
    """The L values derived from a key: L_*, L_$ and a table of L_i."""

    def __init__(self, cipher: BlockCipher, table_size: int = L_TABLE_SIZE) -> None:
        if table_size < MIN_L_TABLE_SIZE:
            raise ValueError(
                f"L table must hold at least {MIN_L_TABLE_SIZE} values, got {table_size}"
            )
        self.table_size = table_size
        self.lstar = cipher.encrypt_block(ZERO_BLOCK)
        self.ldollar = double_block(self.lstar)
        table = []
        value = self.ldollar
        for _ in range(table_size):
            value = double_block(value)
            table.append(value)
        self._table = tuple(table)

    def l_value(self, index: int) -> bytes:
        """Return L_index, doubling past the precomputed table when needed."""
        if index < 0:
            raise ValueError("L index must not be negative")
        if index < self.table_size:
            return self._table[index]
        value = self._table[-1]
        for _ in range(index - self.table_size + 1):
            value = double_block(value)
        return value


class NonceOffsetGenerator:
    """Derives the initial offset from a 12-octet nonce, caching the stretched top."""

    def __init__(self, cipher: BlockCipher) -> None:
        self._cipher = cipher
        self._cached_top: bytes | None = None
        self._stretch = 0

    def offset(self, nonce: bytes) -> bytes:
        """Return Offset_0 for the given nonce."""
        nonce = bytes(nonce)
        if len(nonce) != NONCE_LEN:
            raise ValueError(f"nonce must be {NONCE_LEN} octets, got {len(nonce)}")
        full = b"\x00\x00\x00\x01" + nonce
        bottom = full[-1] & _BOTTOM_BITS
        top = full[:-1] + bytes([full[-1] & ~_BOTTOM_BITS & 0xFF])
        if top != self._cached_top:
            self._cached_top = top
            ktop = int.from_bytes(self._cipher.encrypt_block(top), "big")
            high = ktop >> 64
            tail = high ^ ((high << 8) & _MASK64) ^ ((ktop >> 56) & 0xFF)
            self._stretch = (ktop << 64) | tail
        value = (self._stretch >> (64 - bottom)) & _MASK128
        return value.to_bytes(BLOCK_SIZE, "big")


class AssociatedDataHasher:
    """Incremental OCB hash of associated data.

    Non-final updates hash every complete block and hold back any tail;
    the final update also pads and hashes a trailing partial block.
    """

    def __init__(self, cipher: BlockCipher, key_values: KeyValues) -> None:
        self._cipher = cipher
        self._keys = key_values
        self.reset()

    def reset(self) -> None:
        """Forget all hashed data and start a new hash."""
        self.offset = ZERO_BLOCK
        self.checksum = ZERO_BLOCK
        self.blocks_processed = 0
        self._pending = b""
        self._finalized = False

    def update(self, data: bytes, final: bool = False) -> None:
        """Hash more associated data; ``final`` marks the end of it."""
        if self._finalized:
            raise ValueError("hash already finalized; call reset() first")
        buffer = self._pending + bytes(data)
        whole = len(buffer) - len(buffer) % BLOCK_SIZE
        inputs = []
        for start in range(0, whole, BLOCK_SIZE):
            self.blocks_processed += 1
            self.offset = xor_block(
                self.offset, self._keys.l_value(ntz(self.blocks_processed))
            )
            inputs.append(xor_block(self.offset, buffer[start:start + BLOCK_SIZE]))
        tail = buffer[whole:]
        if final:
            if tail:
                self.offset = xor_block(self.offset, self._keys.lstar)
                padded = tail + b"\x80" + bytes(BLOCK_SIZE - len(tail) - 1)
                inputs.append(xor_block(self.offset, padded))
            self._pending = b""
            self._finalized = True
        else:
            self._pending = tail
        if inputs:
            self.checksum = reduce(
                xor_block, self._cipher.encrypt_blocks(inputs), self.checksum
            )

    def digest(self) -> bytes:
        """Return the hash of the data processed so far."""
        return self.checksum