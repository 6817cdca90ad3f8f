"""
Vault Crypto Core — Authenticated encryption of secret configuration values.

Two interchangeable schemes:
- secretbox: scrypt(password, salt) → XSalsa20-Poly1305
  blob = [scrypt params 24B][salt 32B][nonce 24B][MAC 16B + ciphertext]
- gcm: stretched password → AES-256-GCM
  blob = [nonce 12B][ciphertext + GCM tag 16B]

The gcm key stretch has no salt and no work factor. It exists to read and
write files produced by older deployments; new deployments should use
secretbox, which is the default.

Security Note:
    Never log plaintext, ciphertext, passwords or derived keys.
    A wrong password and a tampered blob raise the same AuthenticationFailed.
"""
import os
import logging
from typing import Optional

from nacl.secret import SecretBox
from nacl.exceptions import CryptoError
from nacl import utils as nacl_utils
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import AuthenticationFailed, MalformedBlob
from .scrypt import (
    DEFAULT_SCRYPT_PARAMS,
    PARAMS_SIZE,
    SALT_SIZE,
    ScryptParams,
    generate_salt,
)

logger = logging.getLogger("navigator.secretconf")

SBOX_KEY_SIZE = SecretBox.KEY_SIZE  # 32
SBOX_NONCE_SIZE = SecretBox.NONCE_SIZE  # 24
SBOX_MAC_SIZE = SecretBox.MACBYTES  # 16

GCM_KEY_SIZE = 32  # AES-256
GCM_NONCE_SIZE = 12  # 96-bit nonce
GCM_TAG_SIZE = 16


# ---------------------------------------------------------------------------
# Raw secretbox helpers
# ---------------------------------------------------------------------------

def encrypt_sbox(key: bytes, data: bytes) -> bytes:
    """Seal ``data`` with a 32-byte key and a fresh random nonce.

    Format: [nonce 24B][MAC 16B + ciphertext]

    Raises:
        ValueError: If the key is not exactly 32 bytes.
    """
    if len(key) != SBOX_KEY_SIZE:
        raise ValueError("wrong secretbox key length")
    box = SecretBox(key)
    nonce = nacl_utils.random(SBOX_NONCE_SIZE)
    return bytes(box.encrypt(data, nonce))


def decrypt_sbox(key: bytes, data: bytes) -> bytes:
    """Open the output of :func:`encrypt_sbox`.

    Raises:
        ValueError: If the key is not exactly 32 bytes.
        MalformedBlob: If data is shorter than nonce + MAC.
        AuthenticationFailed: If the MAC does not verify.
    """
    if len(key) != SBOX_KEY_SIZE:
        raise ValueError("wrong secretbox key length")
    _min = SBOX_NONCE_SIZE + SBOX_MAC_SIZE
    if len(data) < _min:
        raise MalformedBlob(
            f"secretbox data too short: {len(data)} bytes (minimum {_min})"
        )
    box = SecretBox(key)
    try:
        return box.decrypt(data[SBOX_NONCE_SIZE:], data[:SBOX_NONCE_SIZE])
    except CryptoError as err:
        raise AuthenticationFailed("decryption failed") from err


# ---------------------------------------------------------------------------
# GCM key stretch
# ---------------------------------------------------------------------------

def stretch_key(password: str) -> bytes:
    """Turn an arbitrary password into a 32-byte AES key.

    Short passwords are padded with the decimal representation of
    successive integers, starting at the current length
    ("k1" → "k12345678910111213141516171819"...), then the result is cut
    to 32 bytes. Deterministic and unsalted.
    """
    key = password.encode("utf-8")
    i = len(key)
    while len(key) < GCM_KEY_SIZE:
        key += str(i).encode("ascii")
        i += 1
    return key[:GCM_KEY_SIZE]


# ---------------------------------------------------------------------------
# Schemes
# ---------------------------------------------------------------------------

class SecretboxScheme:
    """scrypt-derived key + NaCl secretbox; self-describing blobs."""

    name = "secretbox"
    min_size = PARAMS_SIZE + SALT_SIZE + SBOX_NONCE_SIZE + SBOX_MAC_SIZE

    def __init__(self, params: Optional[ScryptParams] = None):
        self.params = params or DEFAULT_SCRYPT_PARAMS

    def __repr__(self) -> str:
        return (
            f"<SecretboxScheme n={self.params.n} r={self.params.r} "
            f"p={self.params.p}>"
        )

    def encrypt(
        self,
        password: str,
        plaintext: bytes,
        params: Optional[ScryptParams] = None,
    ) -> bytes:
        """Encrypt ``plaintext``; every call uses a fresh salt and nonce.

        Args:
            password: Secret used for key derivation.
            plaintext: Data to encrypt.
            params: scrypt cost for this blob; defaults to ``self.params``.

        Returns:
            Blob in format [params 24B][salt 32B][nonce 24B][MAC + ciphertext].
        """
        params = params or self.params
        salt = generate_salt()
        key = params.derive(salt, SBOX_KEY_SIZE, password)
        return params.encode() + salt + encrypt_sbox(key, plaintext)

    def decrypt(self, password: str, blob: bytes) -> bytes:
        plaintext, _ = self.decrypt_with_params(password, blob)
        return plaintext

    def decrypt_with_params(
        self, password: str, blob: bytes
    ) -> tuple[bytes, ScryptParams]:
        """Decrypt ``blob`` using the scrypt parameters embedded in it.

        Only the password is needed; ``self.params`` is ignored here.

        Returns:
            Tuple of (plaintext, params found in the blob).

        Raises:
            MalformedBlob: Blob shorter than header + MAC. Checked before
                any key derivation.
            InvalidKDFParams: Corrupt parameter header.
            AuthenticationFailed: Wrong password or tampered blob.
        """
        if len(blob) < self.min_size:
            raise MalformedBlob(
                f"blob too short: {len(blob)} bytes (minimum {self.min_size})"
            )
        params = ScryptParams.decode(blob[:PARAMS_SIZE])
        salt = blob[PARAMS_SIZE:PARAMS_SIZE + SALT_SIZE]
        key = params.derive(salt, SBOX_KEY_SIZE, password)
        return decrypt_sbox(key, blob[PARAMS_SIZE + SALT_SIZE:]), params


class GCMScheme:
    """Stretched password + AES-256-GCM.

    Legacy mode: the key stretch is not a KDF. See :func:`stretch_key`.
    """

    name = "gcm"
    min_size = GCM_NONCE_SIZE + GCM_TAG_SIZE

    def __repr__(self) -> str:
        return "<GCMScheme>"

    def encrypt(self, password: str, plaintext: bytes) -> bytes:
        """Format: [nonce 12B][ciphertext + GCM tag 16B]"""
        cipher = AESGCM(stretch_key(password))
        nonce = os.urandom(GCM_NONCE_SIZE)
        return nonce + cipher.encrypt(nonce, plaintext, None)

    def decrypt(self, password: str, blob: bytes) -> bytes:
        if len(blob) < self.min_size:
            raise MalformedBlob(
                f"blob too short: {len(blob)} bytes (minimum {self.min_size})"
            )
        cipher = AESGCM(stretch_key(password))
        nonce = blob[:GCM_NONCE_SIZE]
        ct = blob[GCM_NONCE_SIZE:]
        try:
            return cipher.decrypt(nonce, ct, None)
        except InvalidTag as err:
            raise AuthenticationFailed("decryption failed") from err


SCHEMES = {
    SecretboxScheme.name: SecretboxScheme,
    GCMScheme.name: GCMScheme,
}


def get_scheme(name: str = "secretbox", params: Optional[ScryptParams] = None):
    """Return a cipher scheme instance by name.

    Args:
        name: "secretbox" (default) or "gcm".
        params: scrypt parameters for new secretbox blobs.

    Raises:
        ValueError: Unknown scheme name.
    """
    name = (name or "secretbox").lower()
    if name not in SCHEMES:
        raise ValueError(f"Unsupported cipher scheme: {name}")
    if name == GCMScheme.name:
        logger.debug("Using legacy gcm cipher scheme")
        return GCMScheme()
    return SecretboxScheme(params)
