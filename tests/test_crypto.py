"""
Tests for mediahub/core/crypto.py

Covers:
- EVP_BytesToKey key/IV derivation
- "Salted__" envelope decryption and its failure modes
- Cyclic-key XOR
"""

import base64
import hashlib

import pytest

from mediahub.core.crypto import (
    ENVELOPE_MAGIC,
    decrypt_legacy_envelope,
    derive_key_iv,
    encrypt_legacy_envelope,
    xor_decrypt,
)
from mediahub.core.exceptions import CryptoError, EnvelopeFormatError, ErrorKind


SALT = b"\x01\x02\x03\x04\x05\x06\x07\x08"


class TestDeriveKeyIv:
    def test_lengths(self):
        key, iv = derive_key_iv("password", SALT)
        assert len(key) == 32
        assert len(iv) == 16

    def test_matches_md5_chain(self):
        d1 = hashlib.md5(b"password" + SALT).digest()
        d2 = hashlib.md5(d1 + b"password" + SALT).digest()
        d3 = hashlib.md5(d2 + b"password" + SALT).digest()

        key, iv = derive_key_iv("password", SALT)
        assert key == d1 + d2
        assert iv == d3

    def test_str_and_bytes_passwords_agree(self):
        assert derive_key_iv("pässword", SALT) == derive_key_iv("pässword".encode("utf-8"), SALT)

    def test_salt_changes_output(self):
        assert derive_key_iv("password", SALT) != derive_key_iv("password", b"87654321")


class TestLegacyEnvelope:
    def test_decrypts_what_encrypt_produces(self):
        plaintext = '[{"file":"https://cdn.example.com/master.m3u8","type":"hls"}]'
        blob = encrypt_legacy_envelope(plaintext, "secret", salt=SALT)
        assert decrypt_legacy_envelope(blob, "secret") == plaintext

    def test_envelope_layout(self):
        raw = base64.b64decode(encrypt_legacy_envelope("x", "secret", salt=SALT))
        assert raw[:8] == ENVELOPE_MAGIC
        assert raw[8:16] == SALT
        assert len(raw[16:]) % 16 == 0

    def test_missing_magic_is_format_error(self):
        blob = base64.b64encode(b"NotSalt_" + SALT + b"\x00" * 16).decode()
        with pytest.raises(EnvelopeFormatError) as exc_info:
            decrypt_legacy_envelope(blob, "secret")
        assert exc_info.value.kind == ErrorKind.FORMAT

    def test_truncated_blob_is_format_error(self):
        blob = base64.b64encode(b"Salted__").decode()
        with pytest.raises(EnvelopeFormatError):
            decrypt_legacy_envelope(blob, "secret")

    def test_ragged_ciphertext_is_crypto_error(self):
        blob = base64.b64encode(ENVELOPE_MAGIC + SALT + b"abc").decode()
        with pytest.raises(CryptoError) as exc_info:
            decrypt_legacy_envelope(blob, "secret")
        assert exc_info.value.kind == ErrorKind.CRYPTO

    def test_wrong_password_is_crypto_error(self):
        blob = encrypt_legacy_envelope("some plaintext that spans blocks", "right", salt=SALT)
        with pytest.raises(CryptoError):
            decrypt_legacy_envelope(blob, "wrong")

    def test_fixed_salt_must_be_eight_bytes(self):
        with pytest.raises(ValueError):
            encrypt_legacy_envelope("x", "secret", salt=b"short")


class TestXor:
    def test_single_byte_key(self):
        assert xor_decrypt(b"\x00\x01\x02", "ff") == b"\xff\xfe\xfd"

    def test_key_repeats_cyclically(self):
        data = bytes(range(5))
        key = "0102"
        expected = bytes([0 ^ 1, 1 ^ 2, 2 ^ 1, 3 ^ 2, 4 ^ 1])
        assert xor_decrypt(data, key) == expected

    def test_is_its_own_inverse(self):
        data = b"\xff\xd8\xff\xe0 fake jpeg body"
        key = "a1" * 64
        assert xor_decrypt(xor_decrypt(data, key), key) == data

    def test_preserves_length_and_leading_zeros(self):
        assert xor_decrypt(b"\x00\x00\x10", "00") == b"\x00\x00\x10"

    def test_empty_data(self):
        assert xor_decrypt(b"", "ff") == b""

    @pytest.mark.parametrize("key", ["", "zz", "abc"])
    def test_invalid_key(self, key):
        with pytest.raises(CryptoError):
            xor_decrypt(b"data", key)
