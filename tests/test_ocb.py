import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESOCB3

from stmcrypto.errors import AuthenticationError, CryptoError, NotSupportedError
from stmcrypto.ocb import OcbContext

RFC_KEY = bytes(range(16))


def _nonce(last: int) -> bytes:
    return bytes(11) + bytes([last])


def test_rfc_vector_empty():
    ctx = OcbContext(RFC_KEY, 12, 16)
    nonce = bytes.fromhex("BBAA99887766554433221100")
    assert ctx.encrypt(b"", nonce, b"").hex().upper() == "785407BFFFC8AD9EDCC5520AC9111EE6"


def test_rfc_vector_short_message():
    ctx = OcbContext(RFC_KEY, 12, 16)
    nonce = bytes.fromhex("BBAA99887766554433221101")
    data = bytes(range(8))
    result = ctx.encrypt(data, nonce, data)
    assert result.hex().upper() == "6820B3657B6F615A5725BDA0D3B4EB3A257C9AF1F8F03009"


@pytest.mark.parametrize("length", [0, 1, 15, 16, 17, 31, 32, 33, 63, 64, 65, 100, 255, 1024])
def test_matches_reference_implementation(length):
    key = bytes(range(100, 116))
    nonce = bytes(range(12))
    plaintext = bytes((i * 7) & 0xFF for i in range(length))
    ad = bytes((i * 3) & 0xFF for i in range(length // 2 + 5))
    ctx = OcbContext(key, 12, 16)
    assert ctx.encrypt(plaintext, nonce, ad) == AESOCB3(key).encrypt(nonce, plaintext, ad)


def test_source_validation_vector():
    ctx = OcbContext(bytes(16), 12, 16)
    pt = bytes(128)
    collected = []
    for i in range(128):
        first = ((i // 3) // 64) * 64
        second = first
        nonce = _nonce(i)

        parts = [
            ctx.encrypt(pt[:first], nonce, pt[:first], final=False),
            ctx.encrypt(pt[first:first + second], None, pt[first:first + second], final=False),
            ctx.encrypt(pt[first + second:i], None, pt[first + second:i], final=True),
        ]
        block = b"".join(parts)
        assert len(block) == i + 16
        collected.append(block)

        parts = [
            ctx.encrypt(pt[:first], nonce, b"", final=False),
            ctx.encrypt(pt[first:first + second], None, b"", final=False),
            ctx.encrypt(pt[first + second:i], None, b"", final=True),
        ]
        collected.append(b"".join(parts))

        parts = [
            ctx.encrypt(b"", nonce, pt[:first], final=False),
            ctx.encrypt(b"", None, pt[first:first + second], final=False),
            ctx.encrypt(b"", None, pt[first + second:i], final=True),
        ]
        block = b"".join(parts)
        assert len(block) == 16
        collected.append(block)

    val_buf = b"".join(collected)
    ciphertext, tag = ctx.encrypt_detached(b"", _nonce(0), val_buf)
    assert ciphertext == b""
    assert tag == bytes([0xB2, 0xB4, 0x1C, 0xBF, 0x9B, 0x05, 0x03, 0x7D,
                         0xA7, 0xF1, 0x6C, 0x24, 0xA3, 0x5C, 0x1C, 0x94])


def test_source_round_trip_with_sticky_associated_data():
    ctx = OcbContext(bytes(16), 12, 16)
    val_buf = bytes((i * 31 + 7) & 0xFF for i in range(256))
    for i in range(128):
        nonce = _nonce(i % 128)
        ctx.encrypt_detached(val_buf[:i], nonce, val_buf[:i])
        ciphertext, tag = ctx.encrypt_detached(val_buf[:i], nonce, None)
        assert len(ciphertext) == i
        assert ctx.decrypt(ciphertext, nonce, None, tag) == val_buf[:i]


def test_incremental_encrypt_matches_one_shot():
    key = bytes(range(16))
    nonce = _nonce(5)
    plaintext = bytes(range(200))
    ad = bytes(range(50, 120))
    expected = OcbContext(key).encrypt(plaintext, nonce, ad)

    ctx = OcbContext(key)
    chunks = [plaintext[start:start + 7] for start in range(0, len(plaintext), 7)]
    ad_chunks = [ad[start:start + 11] for start in range(0, len(ad), 11)]
    out = []
    for index, chunk in enumerate(chunks):
        ad_part = ad_chunks[index] if index < len(ad_chunks) else b""
        out.append(ctx.encrypt(
            chunk,
            nonce if index == 0 else None,
            ad_part,
            final=index == len(chunks) - 1,
        ))
    assert b"".join(out) == expected


def test_incremental_decrypt_matches_plaintext():
    key = bytes(range(16))
    nonce = _nonce(9)
    plaintext = bytes(range(90))
    sealed = OcbContext(key).encrypt(plaintext, nonce, b"header")

    ctx = OcbContext(key)
    out = [ctx.decrypt(sealed[:40], nonce, b"header", final=False)]
    out.append(ctx.decrypt(sealed[40:100], final=False))
    out.append(ctx.decrypt(sealed[100:], final=True))
    assert b"".join(out) == plaintext


def test_detached_matches_bundled():
    key = bytes(range(16))
    nonce = _nonce(1)
    bundled = OcbContext(key).encrypt(b"hello world", nonce, b"ad")
    ciphertext, tag = OcbContext(key).encrypt_detached(b"hello world", nonce, b"ad")
    assert ciphertext + tag == bundled


def test_tampered_ciphertext_rejected():
    ctx = OcbContext(bytes(range(16)))
    nonce = _nonce(2)
    sealed = bytearray(ctx.encrypt(b"attack at dawn", nonce, b""))
    sealed[3] ^= 1
    with pytest.raises(AuthenticationError):
        ctx.decrypt(bytes(sealed), nonce, b"")


def test_tampered_tag_rejected():
    ctx = OcbContext(bytes(range(16)))
    nonce = _nonce(3)
    ciphertext, tag = ctx.encrypt_detached(b"payload", nonce, b"")
    bad_tag = bytes([tag[0] ^ 0x80]) + tag[1:]
    with pytest.raises(AuthenticationError):
        ctx.decrypt(ciphertext, nonce, b"", bad_tag)


def test_wrong_associated_data_rejected():
    ctx = OcbContext(bytes(range(16)))
    nonce = _nonce(4)
    sealed = ctx.encrypt(b"payload", nonce, b"right")
    with pytest.raises(AuthenticationError):
        ctx.decrypt(sealed, nonce, b"wrong")


def test_wrong_nonce_rejected():
    ctx = OcbContext(bytes(range(16)))
    sealed = ctx.encrypt(b"payload", _nonce(4), b"")
    with pytest.raises(AuthenticationError):
        ctx.decrypt(sealed, _nonce(5), b"")


def test_short_bundled_ciphertext_rejected():
    ctx = OcbContext(bytes(range(16)))
    with pytest.raises(ValueError):
        ctx.decrypt(bytes(10), _nonce(0), b"")


def test_unsupported_nonce_length():
    with pytest.raises(NotSupportedError):
        OcbContext(bytes(16), 8, 16)


def test_unsupported_tag_length():
    with pytest.raises(NotSupportedError):
        OcbContext(bytes(16), 12, 8)


def test_continuation_without_message_rejected():
    ctx = OcbContext(bytes(16))
    with pytest.raises(ValueError):
        ctx.encrypt(b"data", None, b"")


def test_message_ends_after_final():
    ctx = OcbContext(bytes(16))
    ctx.encrypt(b"data", _nonce(0), b"")
    with pytest.raises(ValueError):
        ctx.encrypt(b"more", None, b"")


def test_cleared_context_unusable():
    ctx = OcbContext(bytes(16))
    ctx.clear()
    with pytest.raises(CryptoError):
        ctx.encrypt(b"data", _nonce(0), b"")


def test_ciphertext_length_is_plaintext_plus_tag():
    ctx = OcbContext(bytes(range(16)))
    for length in (0, 5, 16, 40):
        assert len(ctx.encrypt(bytes(length), _nonce(length), b"")) == length + 16