#!/usr/bin/env python3
"""
Tests for encrypted password resolution.
"""

import base64

import pytest

from jobgate.modules.credentials import (
    PasswordDecryptionError,
    decrypt_password,
    encrypt_password,
)


class TestDecryptPassword:
    """Test decrypt_password / encrypt_password."""

    def test_decrypts_value_encrypted_with_same_passphrase(self):
        """Test that an entry encrypted with a passphrase decrypts with it."""
        encrypted = encrypt_password("hunter2", "my passphrase")

        assert decrypt_password(encrypted, "my passphrase") == "hunter2"

    def test_encrypted_value_is_base64_of_whole_blocks(self):
        """Test ciphertext shape: Base64 of AES blocks."""
        encrypted = encrypt_password("hunter2", "pp")
        raw = base64.b64decode(encrypted)

        assert len(raw) % 16 == 0
        assert b"hunter2" not in raw

    def test_is_deterministic(self):
        """Test that the same inputs always give the same ciphertext."""
        assert encrypt_password("pw", "pp") == encrypt_password("pw", "pp")

    def test_unicode_password(self):
        """Test non-ASCII passwords survive encryption."""
        encrypted = encrypt_password("pässwörd-密码", "pp")
        assert decrypt_password(encrypted, "pp") == "pässwörd-密码"

    def test_invalid_base64_raises(self):
        """Test malformed Base64 input."""
        with pytest.raises(PasswordDecryptionError):
            decrypt_password("not base64 !!", "pp")

    def test_truncated_ciphertext_raises(self):
        """Test ciphertext that is not a whole number of blocks."""
        short = base64.b64encode(b"abc").decode("ascii")
        with pytest.raises(PasswordDecryptionError, match="invalid length"):
            decrypt_password(short, "pp")

    def test_empty_inputs_raise(self):
        """Test missing value or passphrase."""
        with pytest.raises(PasswordDecryptionError):
            decrypt_password("", "pp")
        with pytest.raises(PasswordDecryptionError):
            decrypt_password(encrypt_password("pw", "pp"), "")

    def test_wrong_passphrase_never_returns_original(self):
        """Test a wrong passphrase either fails or yields garbage."""
        encrypted = encrypt_password("hunter2", "right")
        try:
            result = decrypt_password(encrypted, "wrong")
        except PasswordDecryptionError:
            return
        assert result != "hunter2"

    def test_encrypt_requires_passphrase(self):
        """Test encryption refuses an empty passphrase."""
        with pytest.raises(ValueError):
            encrypt_password("pw", "")
