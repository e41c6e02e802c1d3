"""Tests for SSO payload decryption."""

from __future__ import annotations

import base64
import json

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ghl_bridge.auth.sso import decrypt_sso, derive_key_and_iv
from ghl_bridge.errors import ConfigurationError, SSODecryptionError

SECRET = "test_sso_secret"
SESSION = {
    "userId": "user_abc",
    "companyId": "comp_test456",
    "activeLocation": "loc_test123",
    "role": "admin",
    "type": "agency",
}


def encrypt_like_cryptojs(payload, secret: str, salt: bytes = b"saltsalt") -> str:
    """Produce an OpenSSL ``Salted__`` payload the way CryptoJS.AES.encrypt does."""
    key, iv = derive_key_and_iv(secret.encode(), salt)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(json.dumps(payload).encode()) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(b"Salted__" + salt + ciphertext).decode()


class TestDeriveKeyAndIv:
    def test_sizes(self):
        key, iv = derive_key_and_iv(b"secret", b"12345678")

        assert len(key) == 32
        assert len(iv) == 16

    def test_first_block_is_md5_of_secret_and_salt(self):
        import hashlib

        key, _ = derive_key_and_iv(b"secret", b"12345678")

        assert key[:16] == hashlib.md5(b"secret12345678").digest()

    def test_salt_changes_output(self):
        assert derive_key_and_iv(b"secret", b"aaaaaaaa") != derive_key_and_iv(b"secret", b"bbbbbbbb")


class TestDecryptSso:
    def test_decrypts_session(self):
        key = encrypt_like_cryptojs(SESSION, SECRET)

        assert decrypt_sso(key, SECRET) == SESSION

    def test_surrounding_whitespace_is_ignored(self):
        key = encrypt_like_cryptojs(SESSION, SECRET)

        assert decrypt_sso(f"  {key}\n", SECRET) == SESSION

    def test_wrong_secret(self):
        key = encrypt_like_cryptojs(SESSION, SECRET)

        with pytest.raises(SSODecryptionError):
            decrypt_sso(key, "another_secret")

    def test_not_base64(self):
        with pytest.raises(SSODecryptionError):
            decrypt_sso("%%%not-base64%%%", SECRET)

    def test_too_short(self):
        key = base64.b64encode(b"Salted__saltsalt").decode()

        with pytest.raises(SSODecryptionError):
            decrypt_sso(key, SECRET)

    def test_truncated_ciphertext(self):
        raw = base64.b64decode(encrypt_like_cryptojs(SESSION, SECRET))
        key = base64.b64encode(raw[:-3]).decode()

        with pytest.raises(SSODecryptionError):
            decrypt_sso(key, SECRET)

    def test_plaintext_not_json(self):
        salt = b"12345678"
        aes_key, iv = derive_key_and_iv(SECRET.encode(), salt)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(b"not json at all") + padder.finalize()
        encryptor = Cipher(algorithms.AES(aes_key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        key = base64.b64encode(b"Salted__" + salt + ciphertext).decode()

        with pytest.raises(SSODecryptionError):
            decrypt_sso(key, SECRET)

    def test_missing_secret(self):
        with pytest.raises(ConfigurationError):
            decrypt_sso(encrypt_like_cryptojs(SESSION, SECRET), "")
