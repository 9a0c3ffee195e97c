"""Exceptions raised by the cryptographic layer."""

from __future__ import annotations


class CryptoError(Exception):
    """A cryptographic failure.

    ``fatal`` marks errors after which the session must not continue,
    such as an exhausted nonce counter or too much data under one key.
    """

    def __init__(self, text: str, fatal: bool = False) -> None:
        super().__init__(text)
        self.text = text
        self.fatal = fatal

    def __str__(self) -> str:
        return self.text


class NotSupportedError(CryptoError):
    """An unsupported option or length was requested."""


class AuthenticationError(CryptoError):
    """A ciphertext failed its integrity check."""