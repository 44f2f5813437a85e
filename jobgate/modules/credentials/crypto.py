"""
Password encryption compatible with Sqoop's CryptoFileLoader.

Sqoop derives an AES key from the passphrase with PBKDF2-HMAC-SHA1 and
encrypts with AES/ECB/PKCS5Padding. Entered passwords are the Base64
encoding of that ciphertext.
"""

import base64
import binascii

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

SALT = b"SALT"
ITERATIONS = 10000
KEY_LENGTH_BYTES = 16


class PasswordDecryptionError(Exception):
    """Raised when an encrypted password entry cannot be resolved."""


def _derive_key(passphrase: str) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA1(),
        length=KEY_LENGTH_BYTES,
        salt=SALT,
        iterations=ITERATIONS,
    )
    return kdf.derive(passphrase.encode("utf-8"))


def _cipher(passphrase: str) -> Cipher:
    return Cipher(algorithms.AES(_derive_key(passphrase)), modes.ECB())


def encrypt_password(password: str, passphrase: str) -> str:
    """
    Encrypt a clear-text password.

    Args:
        password: Clear-text password
        passphrase: Passphrase the key is derived from

    Returns:
        Base64 encoded ciphertext
    """
    if not passphrase:
        raise ValueError("Passphrase must not be empty")

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(password.encode("utf-8")) + padder.finalize()

    encryptor = _cipher(passphrase).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(ciphertext).decode("ascii")


def decrypt_password(encrypted: str, passphrase: str) -> str:
    """
    Decrypt a Base64 encoded encrypted password.

    Args:
        encrypted: Base64 encoded ciphertext
        passphrase: Passphrase used at encryption time

    Returns:
        Clear-text password

    Raises:
        PasswordDecryptionError: If the entry is malformed or the passphrase is wrong
    """
    if not encrypted:
        raise PasswordDecryptionError("No encrypted password provided")
    if not passphrase:
        raise PasswordDecryptionError("No passphrase provided")

    try:
        ciphertext = base64.b64decode(encrypted.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise PasswordDecryptionError(f"Encrypted password is not valid Base64: {e}") from e

    if not ciphertext or len(ciphertext) % (algorithms.AES.block_size // 8):
        raise PasswordDecryptionError("Encrypted password has an invalid length")

    try:
        decryptor = _cipher(passphrase).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plain = unpadder.update(padded) + unpadder.finalize()
        return plain.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        # Bad padding or garbage plaintext means the passphrase is wrong
        raise PasswordDecryptionError("Unable to decrypt password with given passphrase") from e
