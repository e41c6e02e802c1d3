"""SSO payload decryption for HighLevel custom pages.

HighLevel encrypts the SSO session with CryptoJS passphrase mode, which is the
OpenSSL ``Salted__`` format: bytes 0-8 are the literal ``Salted__`` marker,
bytes 8-16 the salt, and the rest AES-256-CBC ciphertext. Key and IV come from
EVP_BytesToKey with a single round of MD5.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..errors import ConfigurationError, SSODecryptionError

BLOCK_SIZE = 16
KEY_SIZE = 32
IV_SIZE = 16
SALT_SIZE = 8


def derive_key_and_iv(secret: bytes, salt: bytes) -> tuple[bytes, bytes]:
    """EVP_BytesToKey(MD5): D_i = MD5(D_{i-1} || secret || salt) until key+iv bytes."""
    result = b""
    block = b""
    while len(result) < KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + secret + salt).digest()
        result += block
    return result[:KEY_SIZE], result[KEY_SIZE : KEY_SIZE + IV_SIZE]


def decrypt_sso(key: str, secret: str) -> Any:
    """Decrypt and JSON-parse an SSO payload.

    Args:
        key: Base64 payload posted by the HighLevel frontend
        secret: The app's shared SSO key (GHL_APP_SSO_KEY)

    Raises:
        ConfigurationError: If no shared secret is configured
        SSODecryptionError: On malformed input, wrong secret or invalid JSON
    """
    if not secret:
        raise ConfigurationError("GHL_APP_SSO_KEY is not configured")

    try:
        raw = base64.b64decode(key.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise SSODecryptionError("SSO payload is not valid base64") from e

    ciphertext = raw[BLOCK_SIZE:]
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise SSODecryptionError("SSO payload has an invalid length")

    salt = raw[SALT_SIZE:BLOCK_SIZE]
    aes_key, iv = derive_key_and_iv(secret.encode("utf-8"), salt)

    decryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        plaintext = unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise SSODecryptionError("SSO payload could not be decrypted") from e

    try:
        return json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SSODecryptionError("SSO payload is not valid JSON") from e
