"""
Scrypt parameters — Self-describing key-derivation settings.

The parameters travel with every secretbox blob as 24 bytes
(three little-endian uint64: N, r, p) so a blob can be decrypted with
nothing but the password, even after the defaults change.

Security Note:
    Never log the password or the derived key.
"""
import os
import time
import struct
import logging

from pydantic import BaseModel, Field, ValidationError, model_validator
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..exceptions import InvalidKDFParams

logger = logging.getLogger("navigator.secretconf")

SALT_SIZE = 32
PARAMS_SIZE = 24  # 3 x uint64 little-endian

# Upper bound for the memory a decoded parameter set may claim; corrupt
# headers must not be able to exhaust the host.
MAX_MEMORY_MB = 256

_PARAMS_STRUCT = struct.Struct("<QQQ")


class ScryptParams(BaseModel):
    """Scrypt cost parameters.

    The defaults need about 32MB of RAM and run in well under a second
    on commodity hardware.
    """

    n: int = Field(default=1 << 15, description="CPU/memory cost")
    r: int = Field(default=8, ge=1, le=32, description="block size")
    p: int = Field(default=1, ge=1, le=16, description="parallelisation")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_cost(self) -> "ScryptParams":
        """Ensure N is a power of two and the memory cost is bounded."""
        if self.n < 2 or (self.n & (self.n - 1)) != 0:
            raise ValueError(f"n must be a power of 2 greater than 1, got {self.n}")
        if self.memory_required_mb() > MAX_MEMORY_MB:
            raise ValueError(
                f"scrypt parameters require {self.memory_required_mb()}MB "
                f"(maximum {MAX_MEMORY_MB}MB)"
            )
        return self

    @classmethod
    def decode(cls, data: bytes) -> "ScryptParams":
        """Parse the 24-byte header written by :meth:`encode`.

        Raises:
            InvalidKDFParams: wrong length or an unusable parameter set.
        """
        if len(data) != PARAMS_SIZE:
            raise InvalidKDFParams(
                f"wrong scrypt params length: {len(data)} (expected {PARAMS_SIZE})"
            )
        n, r, p = _PARAMS_STRUCT.unpack(data)
        try:
            return cls(n=n, r=r, p=p)
        except ValidationError as err:
            raise InvalidKDFParams("corrupt scrypt params") from err

    def encode(self) -> bytes:
        return _PARAMS_STRUCT.pack(self.n, self.r, self.p)

    def memory_required_mb(self) -> int:
        return (self.n * self.r * 128) // 1024 // 1024

    def derive(self, salt: bytes, key_len: int, password: str) -> bytes:
        """Derive ``key_len`` bytes from ``password`` and ``salt``.

        Deterministic for a given (password, salt, params).
        """
        kdf = Scrypt(salt=salt, length=key_len, n=self.n, r=self.r, p=self.p)
        key = kdf.derive(password.encode("utf-8"))
        if len(key) != key_len:
            raise ValueError("derived key has wrong length")
        return key

    def time_required_ms(self) -> int:
        """Measure one derivation with these parameters on this host."""
        start = time.perf_counter()
        self.derive(generate_salt(), 32, "selftest")
        elapsed = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "scrypt n=%d r=%d p=%d took %dms", self.n, self.r, self.p, elapsed
        )
        return elapsed


DEFAULT_SCRYPT_PARAMS = ScryptParams()


def generate_salt() -> bytes:
    """Return a fresh random 32-byte salt."""
    return os.urandom(SALT_SIZE)
