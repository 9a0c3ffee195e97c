"""AES-OCB authenticated encryption with printable keys and 64-bit nonces."""

__version__ = "0.1.0"