"""Random bytes read from the system's random device."""

from __future__ import annotations

import sys
from typing import BinaryIO

from .errors import CryptoError

RANDOM_DEVICE = "/dev/urandom"


class PRNG:
    """Reads random bytes from a device file, buffered through the file object."""

    def __init__(self, path: str = RANDOM_DEVICE) -> None:
        self.path = path
        self._file: BinaryIO | None
        try:
            self._file = open(path, "rb")
        except OSError:
            self._file = None

    def fill(self, size: int) -> bytes:
        """Return exactly ``size`` random bytes."""
        if size == 0:
            return b""
        if self._file is None:
            raise CryptoError(f"Could not read from {self.path}")
        try:
            data = self._file.read(size)
        except (OSError, ValueError) as exc:
            raise CryptoError(f"Could not read from {self.path}") from exc
        if len(data) != size:
            raise CryptoError(f"Could not read from {self.path}")
        return data

    def uint8(self) -> int:
        return self.fill(1)[0]

    def uint32(self) -> int:
        return int.from_bytes(self.fill(4), sys.byteorder)

    def uint64(self) -> int:
        return int.from_bytes(self.fill(8), sys.byteorder)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> PRNG:
        return self

    def __exit__(self, *args) -> None:
        self.close()