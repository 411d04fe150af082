"""
Crypto Primitives - Legacy OpenSSL envelopes and XOR page decryption.

The envelope format is the one ``openssl enc -aes-256-cbc -md md5`` emits:
``b"Salted__" + salt(8) + ciphertext``, with key and IV derived from the
password by EVP_BytesToKey over MD5. It is weak, but it is what the
video player's key distribution expects.
"""

import base64
import binascii
import hashlib
import logging
import os
from typing import Optional, Tuple, Union

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

from mediahub.core.exceptions import CryptoError, EnvelopeFormatError


logger = logging.getLogger(__name__)

ENVELOPE_MAGIC = b"Salted__"
SALT_LENGTH = 8


def derive_key_iv(password: Union[str, bytes], salt: bytes, key_len: int = 32, iv_len: int = 16) -> Tuple[bytes, bytes]:
    """
    Derive key and IV with OpenSSL's EVP_BytesToKey (MD5, one iteration).

    Args:
        password: Shared password
        salt: 8-byte salt from the envelope header
        key_len: Key length in bytes
        iv_len: IV length in bytes

    Returns:
        Tuple of (key, iv)
    """
    if isinstance(password, str):
        password = password.encode("utf-8")

    derived = b""
    block = b""
    while len(derived) < key_len + iv_len:
        block = hashlib.md5(block + password + salt).digest()
        derived += block

    return derived[:key_len], derived[key_len:key_len + iv_len]


def decrypt_legacy_envelope(blob: str, password: Union[str, bytes]) -> str:
    """
    Decrypt a base64 "Salted__" envelope into UTF-8 text.

    Args:
        blob: Base64-encoded envelope
        password: Password the envelope was produced with

    Returns:
        Decrypted plaintext

    Raises:
        EnvelopeFormatError: If the blob is not a salted envelope
        CryptoError: If decryption or unpadding fails
    """
    try:
        raw = base64.b64decode(blob, validate=False)
    except (binascii.Error, ValueError) as e:
        raise EnvelopeFormatError("Encrypted payload is not valid base64", details=str(e))

    if len(raw) < len(ENVELOPE_MAGIC) + SALT_LENGTH or raw[:len(ENVELOPE_MAGIC)] != ENVELOPE_MAGIC:
        raise EnvelopeFormatError("Encrypted payload is missing the Salted__ header")

    salt = raw[len(ENVELOPE_MAGIC):len(ENVELOPE_MAGIC) + SALT_LENGTH]
    ciphertext = raw[len(ENVELOPE_MAGIC) + SALT_LENGTH:]
    if not ciphertext or len(ciphertext) % AES.block_size:
        raise CryptoError(f"Ciphertext length {len(ciphertext)} is not a multiple of the AES block size")

    logger.debug(f"Decrypting {len(ciphertext)}-byte envelope")
    key, iv = derive_key_iv(password, salt)
    cipher = AES.new(key, AES.MODE_CBC, iv)

    try:
        plaintext = unpad(cipher.decrypt(ciphertext), AES.block_size)
        return plaintext.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        # Wrong password almost always surfaces as bad padding
        raise CryptoError("Failed to decrypt payload", details=str(e))


def encrypt_legacy_envelope(plaintext: str, password: Union[str, bytes], salt: Optional[bytes] = None) -> str:
    """
    Produce a base64 "Salted__" envelope, the inverse of decrypt_legacy_envelope.

    Args:
        plaintext: Text to encrypt
        password: Shared password
        salt: Optional fixed 8-byte salt, random when omitted

    Returns:
        Base64-encoded envelope
    """
    salt = salt if salt is not None else os.urandom(SALT_LENGTH)
    if len(salt) != SALT_LENGTH:
        raise ValueError(f"Salt must be {SALT_LENGTH} bytes")

    key, iv = derive_key_iv(password, salt)
    cipher = AES.new(key, AES.MODE_CBC, iv)
    ciphertext = cipher.encrypt(pad(plaintext.encode("utf-8"), AES.block_size))
    return base64.b64encode(ENVELOPE_MAGIC + salt + ciphertext).decode("ascii")


def xor_decrypt(data: bytes, hex_key: str) -> bytes:
    """
    XOR every byte with a cyclically repeated hex key.

    The operation is its own inverse, so it also encrypts.

    Args:
        data: Input bytes
        hex_key: Key as a hex string

    Returns:
        Transformed bytes of the same length

    Raises:
        CryptoError: If the key is empty or not valid hex
    """
    try:
        key = bytes.fromhex(hex_key)
    except ValueError as e:
        raise CryptoError("XOR key is not valid hex", details=str(e))
    if not key:
        raise CryptoError("XOR key must not be empty")
    if not data:
        return b""

    repeats, remainder = divmod(len(data), len(key))
    keystream = key * repeats + key[:remainder]
    result = int.from_bytes(data, "big") ^ int.from_bytes(keystream, "big")
    return result.to_bytes(len(data), "big")


# Export crypto helpers
__all__ = [
    "ENVELOPE_MAGIC",
    "derive_key_iv",
    "decrypt_legacy_envelope",
    "encrypt_legacy_envelope",
    "xor_decrypt",
]
