"""
Credentials Module - Black Box Interface

Purpose: Resolve encrypted password entries into clear text
Interface: decrypt_password / encrypt_password (pure functions)
Hidden: key derivation, cipher mode, encoding

Compatible with the encrypted password files read by Sqoop's CryptoFileLoader.
"""

from .crypto import PasswordDecryptionError, decrypt_password, encrypt_password

__all__ = ["PasswordDecryptionError", "decrypt_password", "encrypt_password"]
