"""Command-line tools to encrypt and decrypt a single packet."""

from __future__ import annotations

import sys

from .errors import CryptoError
from .session import Base64Key, Message, Nonce, Session, parse_int

_MASK64 = (1 << 64) - 1


def _read_stdin() -> bytes:
    return sys.stdin.buffer.read()


def _write_stdout(data: bytes) -> None:
    sys.stdout.flush()
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


def encrypt_main(argv: list[str] | None = None) -> int:
    """Encrypt standard input under a fresh random key with the given nonce."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: encrypt NONCE", file=sys.stderr)
        return 1
    try:
        key = Base64Key()
        session = Session(key)
        nonce = Nonce(parse_int(args[0]) & _MASK64)
        ciphertext = session.encrypt(Message(nonce, _read_stdin()))
        print(f"Key: {key.printable_key()}", file=sys.stderr)
        _write_stdout(ciphertext)
    except (CryptoError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


def decrypt_main(argv: list[str] | None = None) -> int:
    """Decrypt standard input with the given printable key."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: decrypt KEY", file=sys.stderr)
        return 1
    try:
        session = Session(Base64Key(args[0]))
        message = session.decrypt(_read_stdin())
        value = message.nonce.val()
        if value >= 1 << 63:
            value -= 1 << 64
        print(f"Nonce = {value}", file=sys.stderr)
        _write_stdout(message.text)
    except (CryptoError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0