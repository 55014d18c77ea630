"""
Confirmation signatures for the mobile confirmation endpoints.

Each request for the confirmation list, or to accept or deny a confirmation,
carries ``k = base64(HMAC-SHA1(identity_secret, time_be64 || tag[:32]))``.
The tag differs per purpose and must match the request being made.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import struct
from enum import Enum
from urllib.parse import quote

from .encoding import decode_secret
from .errors import InvalidSecretError

MAX_TAG_BYTES = 32


class ConfirmationTag(str, Enum):
    LIST = "conf"
    ACCEPT = "accept"
    REJECT = "reject"


class ConfirmationOp(str, Enum):
    ALLOW = "allow"
    CANCEL = "cancel"

    @property
    def tag(self) -> ConfirmationTag:
        return ConfirmationTag.ACCEPT if self is ConfirmationOp.ALLOW else ConfirmationTag.REJECT


def _tag_value(tag: ConfirmationTag | str | None) -> str | None:
    if isinstance(tag, ConfirmationTag):
        return tag.value
    return tag


def build_signing_buffer(aligned_time: int, tag: ConfirmationTag | str | None) -> bytes:
    buffer = struct.pack(">q", int(aligned_time))
    value = _tag_value(tag)
    if value:
        buffer += value.encode("utf-8")[:MAX_TAG_BYTES]
    return buffer


def generate_confirmation_hash(
    identity_secret: bytes | str | None,
    aligned_time: int,
    tag: ConfirmationTag | str | None,
) -> str:
    """Return the standard base64 HMAC for ``(aligned_time, tag)``.

    Raises ``InvalidSecretError`` when the identity secret is missing; unlike
    code generation there is no meaningful empty result here.
    """
    key = decode_secret(identity_secret, name="identity_secret")
    if not key:
        raise InvalidSecretError("identity_secret is required to sign confirmations")
    digest = hmac.new(key, build_signing_buffer(aligned_time, tag), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def sign(
    identity_secret: bytes | str | None,
    aligned_time: int,
    tag: ConfirmationTag | str | None,
) -> str:
    """URL-safe (percent-encoded) confirmation signature."""
    return quote(generate_confirmation_hash(identity_secret, aligned_time, tag), safe="")


def build_query_parameters(
    device_id: str | None,
    steam_id: int | str | None,
    identity_secret: bytes | str | None,
    aligned_time: int,
    tag: ConfirmationTag | str,
) -> dict[str, str]:
    """Parameter set ``p, a, k, t, m, tag`` for the mobileconf endpoints.

    ``k`` holds the raw base64 hash; the HTTP layer percent-encodes it once
    when building the query string.
    """
    if not device_id:
        raise InvalidSecretError("device_id is required to sign confirmations")
    tag_value = _tag_value(tag) or ""
    return {
        "p": device_id,
        "a": "" if steam_id is None else str(steam_id),
        "k": generate_confirmation_hash(identity_secret, aligned_time, tag_value),
        "t": str(int(aligned_time)),
        "m": "react",
        "tag": tag_value,
    }
