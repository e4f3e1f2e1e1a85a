from __future__ import annotations
import binascii
import functools
import hashlib
from typing import Optional

from .settings import settings


class HashEngine:
    """Fixed-length digests of byte content and of ordered digest pairs.

    Stateless apart from the algorithm name; safe to share across threads.
    """

    def __init__(self, name: str = "sha256"):
        name = name.lower()
        if name.startswith("shake"):
            raise ValueError(f"variable-length hash not supported: {name}")
        try:
            probe = hashlib.new(name)
        except (ValueError, TypeError) as e:
            raise ValueError(f"unknown hash algorithm: {name}") from e
        self.name = name
        self.digest_size = probe.digest_size

    def __repr__(self) -> str:
        return f"HashEngine({self.name!r})"

    def digest_of(self, data: bytes) -> bytes:
        return hashlib.new(self.name, data).digest()

    def digest_of_pair(self, left: bytes, right: bytes) -> bytes:
        """Digest of ``left || right``. Swapping the operands is a different pair."""
        return self.digest_of(left + right)


@functools.lru_cache(maxsize=None)
def _engine(name: str) -> HashEngine:
    return HashEngine(name)


def get_engine(name: Optional[str] = None) -> HashEngine:
    """Return the engine for ``name``, defaulting to the configured algorithm."""
    return _engine((name or settings.hash_algorithm).lower())


def digest_of(data: bytes) -> bytes:
    return get_engine().digest_of(data)


def digest_of_pair(left: bytes, right: bytes) -> bytes:
    return get_engine().digest_of_pair(left, right)


def to_hex(digest: bytes) -> str:
    """Lowercase hex text for logging and proof documents."""
    return bytes(digest).hex()


def from_hex(text: str, digest_size: Optional[int] = None) -> bytes:
    """Parse hex text back to digest bytes with strict validation."""
    try:
        raw = binascii.unhexlify(text.strip().encode("ascii"))
    except Exception as e:
        raise ValueError("invalid hex digest") from e
    if digest_size is not None and len(raw) != digest_size:
        raise ValueError(
            f"invalid hex digest: expected {digest_size} bytes, got {len(raw)}"
        )
    return raw
