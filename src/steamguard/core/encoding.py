"""
Base64 helpers shared by the code generator, signer and token checks.
"""

from __future__ import annotations

import base64
import binascii

from .errors import InvalidSecretError


def decode_secret(secret: bytes | str | None, *, name: str = "secret") -> bytes:
    """Return raw key bytes for a secret.

    ``str`` values are the base64 form stored in maFiles (JSON-escaped
    slashes are tolerated); ``bytes`` are taken as already-decoded key
    material. ``None`` and empty values decode to ``b""``.
    """
    if not secret:
        return b""
    if isinstance(secret, (bytes, bytearray, memoryview)):
        return bytes(secret)
    text = secret.strip().replace("\\/", "/")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSecretError(f"{name} is not valid base64", cause=exc) from exc


def b64url_decode(s: str) -> bytes:
    """Decode RFC 4648 base64url without requiring padding."""
    padding = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + padding)

