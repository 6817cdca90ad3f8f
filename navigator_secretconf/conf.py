"""
SecretConf Configuration — Store settings read from the environment.

Environment variables:
    SECRETCONF_NAME = <base name of the config file, default "config">
    SECRETCONF_WORKDIR = <directory holding the file, default cwd>
    SECRETCONF_CIPHER = secretbox | gcm
    SECRETCONF_FORMAT = yaml | json
    SECRETCONF_SCRYPT_LOGN = <log2 of the scrypt N parameter, 10..18>

Security Note:
    Secrets are never read from here. They are passed to each load call.
"""
import os
import base64
import secrets
import logging

from pydantic import BaseModel, Field, field_validator

from .codec import FORMATS
from .vault.crypto import SCHEMES
from .vault.scrypt import ScryptParams

logger = logging.getLogger("navigator.secretconf")


def generate_secret() -> str:
    """Generate a random 32-byte secret and return it as base64 string.

    This is a utility for operators provisioning a new deployment.
    """
    return base64.b64encode(secrets.token_bytes(32)).decode("ascii")


class StoreConfig(BaseModel):
    """Validated config store settings."""

    name: str = Field(default="config", min_length=1)
    workdir: str = Field(default_factory=os.getcwd)
    cipher: str = Field(default="secretbox")
    format: str = Field(default="yaml")
    scrypt_logn: int = Field(default=15, ge=10, le=18)

    @field_validator("cipher")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher scheme is supported."""
        v = v.lower()
        if v not in SCHEMES:
            raise ValueError(f"Unsupported cipher scheme: {v}")
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate file format is supported."""
        v = v.lower()
        if v not in FORMATS:
            raise ValueError(f"Unsupported config format: {v}")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if os.sep in v or (os.altsep and os.altsep in v):
            raise ValueError(f"Config name cannot contain a path separator: {v}")
        return v

    def default_path(self) -> str:
        """Return ``<workdir>/<name>.<format>``."""
        return os.path.join(self.workdir, f"{self.name}.{self.format}")

    def scrypt_params(self) -> ScryptParams:
        return ScryptParams(n=1 << self.scrypt_logn)

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Create StoreConfig by loading values from environment.

        Returns:
            Populated StoreConfig instance.
        """
        values = {}
        for field, env in (
            ("name", "SECRETCONF_NAME"),
            ("workdir", "SECRETCONF_WORKDIR"),
            ("cipher", "SECRETCONF_CIPHER"),
            ("format", "SECRETCONF_FORMAT"),
            ("scrypt_logn", "SECRETCONF_SCRYPT_LOGN"),
        ):
            raw = os.environ.get(env)
            if raw:
                values[field] = raw
        config = cls(**values)
        logger.debug(
            "Store settings: path=%s cipher=%s", config.default_path(), config.cipher
        )
        return config
