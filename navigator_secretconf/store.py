"""
ConfigStore — Load and save configuration files with encrypted secret fields.

``load()`` runs four phases, in order, with no retries:

1. init-or-read: read the file; when missing, write the default document.
2. deserialize + encrypt: parse the file, encrypt every secret field that
   is still plaintext.
3. conditional persist: write the file back only if its bytes changed.
4. decrypt-for-use: decrypt every secret field of the returned document.

Reloading an already encrypted file with an unchanged model does not
rewrite it.

No file locking or atomic replace is done: concurrent loads of the same
path can race.

Security Note:
    Never log secret values, passwords or ciphertext. Only paths,
    formats, scheme names and field counts are logged.
"""
import os
import logging
from typing import Optional, TypeVar, Union

from pydantic import BaseModel

from .codec import deserialize, detect_format, serialize
from .conf import StoreConfig
from .exceptions import DecryptFailed, EncryptFailed, PersistFailed, ReadFailed
from .marker import is_wrapped, unwrap, wrap
from .vault.crypto import GCMScheme, SecretboxScheme, get_scheme
from .walker import check_model, walk

logger = logging.getLogger("navigator.secretconf")

ModelT = TypeVar("ModelT", bound=BaseModel)

FILE_MODE = 0o600


class ConfigStore:
    """Encrypted-at-rest configuration file.

    Args:
        path: Config file path. Defaults to ``<workdir>/<name>.<format>``
            from the store settings.
        scheme: Cipher scheme instance or name ("secretbox", "gcm").
            Defaults to the settings' cipher.
        fmt: "yaml" or "json". Inferred from the path extension when
            omitted.
        secret: Store-wide secret, used for fields declared with an empty
            ``Encrypted()`` parameter.
        config: Store settings. Read from the environment when omitted.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        scheme: Union[str, SecretboxScheme, GCMScheme, None] = None,
        fmt: Optional[str] = None,
        secret: str = "",
        config: Optional[StoreConfig] = None,
    ):
        self._config = config or StoreConfig.from_env()
        self.path = os.fspath(path) if path else self._config.default_path()
        self.fmt = fmt or detect_format(self.path, self._config.format)
        if scheme is None or isinstance(scheme, str):
            scheme = get_scheme(
                scheme or self._config.cipher, self._config.scrypt_params()
            )
        self._scheme = scheme
        self._secret = secret

    def __repr__(self) -> str:
        return (
            f"<ConfigStore path={self.path!r} format={self.fmt} "
            f"scheme={self._scheme.name}>"
        )

    @property
    def scheme(self):
        return self._scheme

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _read(self) -> Optional[bytes]:
        """Return file contents, or None if the file does not exist."""
        try:
            with open(self.path, "rb") as fp:
                return fp.read()
        except FileNotFoundError:
            return None
        except OSError as err:
            raise ReadFailed(f"cannot read {self.path}: {err}") from err

    def _write(self, data: bytes) -> None:
        """Overwrite the file, creating it with mode 0600."""
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with open(fd, "wb") as fp:
                fp.write(data)
        except OSError as err:
            raise PersistFailed(f"cannot write {self.path}: {err}") from err

    # ------------------------------------------------------------------
    # Field transforms
    # ------------------------------------------------------------------

    def _password(self, parameter: str) -> str:
        return parameter or self._secret

    def _encrypt_field(self, value: str, parameter: str) -> str:
        """Encrypt a plaintext value; wrapped values are returned unchanged."""
        if is_wrapped(value):
            return value
        try:
            blob = self._scheme.encrypt(
                self._password(parameter), value.encode("utf-8")
            )
        except Exception as err:
            raise EncryptFailed(
                f"cannot encrypt secret field with {self._scheme.name}"
            ) from err
        return wrap(blob)

    def _decrypt_field(self, value: str, parameter: str) -> str:
        """Decrypt a wrapped value; anything else is returned unchanged."""
        if not is_wrapped(value):
            return value
        blob = unwrap(value)
        try:
            plaintext = self._scheme.decrypt(self._password(parameter), blob)
        except DecryptFailed:
            raise
        except Exception as err:
            raise DecryptFailed(
                f"cannot decrypt secret field with {self._scheme.name}"
            ) from err
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as err:
            raise DecryptFailed("decrypted secret is not valid UTF-8") from err

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, document: ModelT) -> ModelT:
        """Load the config file into a new instance of ``type(document)``.

        ``document`` supplies the defaults: it is written as the initial
        file when none exists, and its values fill fields missing from an
        existing file. It is never modified.

        Args:
            document: Default configuration model instance.

        Returns:
            A new model instance with every secret field decrypted.

        Raises:
            ReadFailed, PersistFailed: I/O errors.
            SerializeFailed, DeserializeFailed: Format errors.
            TypeError: The model declares frozen or misplaced secret fields;
                raised before any file access.
            EncryptFailed: A plaintext secret could not be encrypted.
            DecryptFailed: Wrong secret, tampered or malformed value
                (AuthenticationFailed, MalformedEncoding, MalformedBlob,
                InvalidKDFParams).
        """
        check_model(type(document))

        # 1. read bytes, write the defaults when the file does not exist
        raw = self._read()
        if raw is None:
            raw = serialize(document, self.fmt)
            self._write(raw)
            logger.info("Created config file %s", self.path)

        # 2. parse and encrypt plaintext secrets
        config = deserialize(raw, type(document), self.fmt, base=document)
        count = walk(config, self._encrypt_field)

        # 3. persist only when something changed
        encoded = serialize(config, self.fmt)
        if encoded != raw:
            self._write(encoded)
            logger.info("Updated config file %s", self.path)

        # 4. decrypt for use
        walk(config, self._decrypt_field)
        logger.debug(
            "Loaded %s from %s (%d secret field(s), scheme=%s)",
            type(document).__name__, self.path, count, self._scheme.name,
        )
        return config

    def save(self, document: BaseModel) -> None:
        """Write ``document`` to the file, encrypting its secret fields.

        The document itself keeps its plaintext values. Each save encrypts
        with a fresh salt and nonce, so file bytes differ between saves.

        Raises:
            TypeError: The model declares frozen or misplaced secret fields.
        """
        check_model(type(document))
        config = document.model_copy(deep=True)
        walk(config, self._encrypt_field)
        self._write(serialize(config, self.fmt))
        logger.info("Saved config file %s", self.path)


def load_file(
    path: Optional[str],
    document: ModelT,
    secret: str = "",
    scheme: Union[str, SecretboxScheme, GCMScheme, None] = None,
) -> ModelT:
    """Shortcut for ``ConfigStore(path, scheme, secret=secret).load(document)``."""
    return ConfigStore(path, scheme=scheme, secret=secret).load(document)
