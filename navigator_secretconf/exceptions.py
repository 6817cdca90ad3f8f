"""Exceptions raised by Navigator SecretConf.

Every failing load/save call raises exactly one of these; the underlying
library error (OSError, orjson/yaml errors, pydantic ValidationError,
cryptography InvalidTag, nacl CryptoError) is chained as ``__cause__``.
"""


class SecretConfError(Exception):
    """Base class for all configuration store errors."""


class ReadFailed(SecretConfError):
    """The configuration file exists but could not be read."""


class PersistFailed(SecretConfError):
    """The configuration file could not be written."""


class SerializeFailed(SecretConfError):
    """The document could not be converted to its on-disk format."""


class DeserializeFailed(SecretConfError):
    """The file contents could not be parsed into the document model."""


class EncryptFailed(SecretConfError):
    """A plaintext secret field could not be encrypted."""


class DecryptFailed(SecretConfError):
    """A secret field could not be decrypted."""


class MalformedEncoding(DecryptFailed, ValueError):
    """Marker-wrapped text whose payload is not valid base64."""


class MalformedBlob(DecryptFailed, ValueError):
    """Cipher blob shorter than the scheme's header and tag."""


class InvalidKDFParams(DecryptFailed, ValueError):
    """Key-derivation parameters embedded in a blob are corrupt."""


class AuthenticationFailed(DecryptFailed):
    """Wrong secret or tampered ciphertext.

    Both causes raise this same error so callers cannot tell them apart.
    """
