"""Identifier generation for games, players, and rounds."""

import secrets
import string
import time

_ID_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LENGTH = 9


def generate_id() -> str:
    """Return a locally-unique id: millisecond timestamp plus a random base-36 suffix.

    Unique enough for entities scoped to a single device store; no global
    uniqueness guarantee.
    """
    suffix = "".join(secrets.choice(_ID_SUFFIX_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"{time.time_ns() // 1_000_000}-{suffix}"
