"""Navigator SecretConf.

Configuration files whose secret fields are encrypted at rest and
decrypted on load.
"""

from .version import __version__
from .walker import Encrypted, walk, secret_fields, check_model
from .store import ConfigStore, load_file
from .conf import StoreConfig, generate_secret
from .exceptions import (
    SecretConfError,
    ReadFailed,
    PersistFailed,
    SerializeFailed,
    DeserializeFailed,
    EncryptFailed,
    DecryptFailed,
    MalformedEncoding,
    MalformedBlob,
    InvalidKDFParams,
    AuthenticationFailed,
)

__all__ = [
    "__version__",
    "Encrypted",
    "walk",
    "secret_fields",
    "check_model",
    "ConfigStore",
    "load_file",
    "StoreConfig",
    "generate_secret",
    "SecretConfError",
    "ReadFailed",
    "PersistFailed",
    "SerializeFailed",
    "DeserializeFailed",
    "EncryptFailed",
    "DecryptFailed",
    "MalformedEncoding",
    "MalformedBlob",
    "InvalidKDFParams",
    "AuthenticationFailed",
]
