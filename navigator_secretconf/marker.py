"""
Marker Codec — Textual envelope for encrypted field values.

An encrypted field is stored as ``$(<base64 blob>)``. The envelope is what
makes the encrypt pass idempotent: wrapped values are left alone, anything
else is plaintext waiting to be encrypted.

Known limitation:
    A plaintext value that happens to start with ``$(`` and end with ``)``
    is taken for an encrypted one and stored unencrypted. Changing the
    framing would break every file already on disk.
"""
import base64
import binascii

from .exceptions import MalformedEncoding

PREFIX = "$("
SUFFIX = ")"


def wrap(blob: bytes) -> str:
    """Return ``blob`` base64-encoded inside the sentinels."""
    return PREFIX + base64.b64encode(blob).decode("ascii") + SUFFIX


def is_wrapped(text: str) -> bool:
    """True if ``text`` has exactly the sentinel prefix and suffix.

    The payload is not inspected.
    """
    return (
        len(text) >= len(PREFIX) + len(SUFFIX)
        and text.startswith(PREFIX)
        and text.endswith(SUFFIX)
    )


def unwrap(text: str) -> bytes:
    """Strip the sentinels and decode the base64 payload.

    Raises:
        MalformedEncoding: If text is not wrapped or the payload is not
            valid base64.
    """
    if not is_wrapped(text):
        raise MalformedEncoding("value is not marker-wrapped")
    payload = text[len(PREFIX):len(text) - len(SUFFIX)]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as err:
        raise MalformedEncoding("invalid base64 in marker-wrapped value") from err
