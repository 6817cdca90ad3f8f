"""Vault — Authenticated encryption for secret configuration values.

Security Note (Threat Model):
    Decrypted secrets live in process memory for as long as the caller
    keeps the loaded document. A memory dump of the process exposes them.
    The gcm scheme derives its key without salt or work factor and is
    kept for compatibility with existing files only.
"""

from .crypto import (
    SecretboxScheme,
    GCMScheme,
    get_scheme,
    stretch_key,
    encrypt_sbox,
    decrypt_sbox,
)
from .scrypt import ScryptParams, DEFAULT_SCRYPT_PARAMS

__all__ = [
    "SecretboxScheme",
    "GCMScheme",
    "get_scheme",
    "stretch_key",
    "encrypt_sbox",
    "decrypt_sbox",
    "ScryptParams",
    "DEFAULT_SCRYPT_PARAMS",
]
