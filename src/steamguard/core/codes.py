"""
Steam Guard code generation.

A Steam Guard code is an RFC 6238 style TOTP value rendered in a custom
26-symbol alphabet instead of decimal digits:

    step    = floor(time / 30) as 8 big-endian bytes
    digest  = HMAC-SHA1(shared_secret, step)
    offset  = digest[19] & 0x0F
    value   = 31-bit big-endian int at digest[offset:offset + 4]
    code[i] = ALPHABET[value % 26]; value //= 26   (5 times, in order)

Generation is pure and synchronous; callers supply aligned time.
"""

from __future__ import annotations

import hashlib
import hmac
import struct

from .encoding import decode_secret

CODE_ALPHABET = "23456789BCDFGHJKMNPQRTVWXY"
CODE_LENGTH = 5
TIME_STEP_SECONDS = 30


def time_step(aligned_time: int) -> int:
    return int(aligned_time) // TIME_STEP_SECONDS


def generate_code(shared_secret: bytes | str | None, aligned_time: int) -> str:
    """Return the 5-character code for ``aligned_time``.

    An empty or missing secret yields ``""`` so callers can probe whether an
    account is linked without handling an error.
    """
    key = decode_secret(shared_secret, name="shared_secret")
    if not key:
        return ""

    message = struct.pack(">Q", time_step(aligned_time))
    digest = hmac.new(key, message, hashlib.sha1).digest()

    offset = digest[19] & 0x0F
    value = struct.unpack(">I", digest[offset : offset + 4])[0] & 0x7FFFFFFF

    chars = []
    for _ in range(CODE_LENGTH):
        value, index = divmod(value, len(CODE_ALPHABET))
        chars.append(CODE_ALPHABET[index])
    return "".join(chars)


def seconds_until_next_code(aligned_time: int) -> int:
    """Seconds remaining in the current 30 second window."""
    return TIME_STEP_SECONDS - (int(aligned_time) % TIME_STEP_SECONDS)
