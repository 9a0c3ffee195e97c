# stmcrypto

Authenticated encryption of short messages with AES-128 in OCB3 mode.

Every message is sealed under a 128-bit key and a 64-bit nonce. A key is
exchanged as 22 printable base64 letters. A sealed message is the 8-byte
nonce followed by the ciphertext and a 16-byte authentication tag, so it
is 24 bytes longer than the plaintext it carries.

## Installation

```
pip install stmcrypto
```

The package needs Python 3.10 or later on a POSIX system and uses
`cryptography` for the AES block cipher. The OCB mode itself is part of
this package.

## Command line

Two commands are installed.

`stm-encrypt NONCE` makes a fresh random key, reads a plaintext from
standard input and writes the sealed message to standard output. The key
is printed on standard error as `Key: ...`. NONCE is a decimal integer;
a negative value is taken modulo 2^64. A plaintext longer than 2032 bytes
does not fit in one message and is refused.

```
echo "hello" | stm-encrypt 42 > message.bin
```

`stm-decrypt KEY` reads a sealed message from standard input, checks its
tag and writes the plaintext to standard output. The nonce is printed on
standard error as `Nonce = ...`. A message that is too short or fails the
integrity check, or a key that is not 22 well-formed base64 letters, ends
the command with an error message and exit status 1.

```
stm-decrypt "$KEY" < message.bin
```

Here `$KEY` holds the 22 letters that `stm-encrypt` printed. Called with
the wrong number of arguments, either command prints its usage and exits
with status 1.

## Library

```python
from stmcrypto.session import Base64Key, Message, Nonce, Session

key = Base64Key()                      # a fresh random key
printable = key.printable_key()        # 22 letters to hand to the peer

sender = Session(key)
sealed = sender.encrypt(Message(Nonce(1), b"hello"))

receiver = Session(Base64Key(printable))
message = receiver.decrypt(sealed)
assert message.text == b"hello"
assert message.nonce.val() == 1
```

`Session.decrypt` raises `stmcrypto.errors.CryptoError` when the message is
too short; a message that fails its integrity check raises
`stmcrypto.errors.AuthenticationError`, a subclass of `CryptoError`. A
session refuses to go on once it has encrypted 2^47 blocks under one key;
that error is marked `fatal`. `Session.close()` erases the key schedule,
and a session can be used as a context manager.

Nonces must never repeat under one key. `stmcrypto.session.unique()` hands
out a counter that never returns the same value twice in a process.

`stmcrypto.session.disable_dumping_core()` sets the core-dump limit to zero
so that key material is not written to disk; `reenable_dumping_core()`
restores the saved limit.

The mode can also be used directly through `stmcrypto.ocb.OcbContext`. It
takes an AES key of 16, 24 or 32 bytes and 12-byte nonces, supports
associated data and incremental calls (`final=False`), and either appends
the tag to the ciphertext (`encrypt`) or returns it separately
(`encrypt_detached`). A forged or altered ciphertext makes
`OcbContext.decrypt` raise `stmcrypto.errors.AuthenticationError`.

Lower-level pieces are available too: `stmcrypto.keycodec` encodes and
decodes 16-byte keys as base64, `stmcrypto.prng.PRNG` reads random bytes
from `/dev/urandom`, and `stmcrypto.blocks` holds the block primitives.

## What it does not do

The package seals and opens single messages. It does not send them: there
is no network transport, no key exchange and no handling of lost or
reordered packets. Keys must be handed to the peer by other means.

## Running the tests

```
pip install "stmcrypto[test]"
pytest
```