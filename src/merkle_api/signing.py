from __future__ import annotations
import base64
import datetime
from typing import Tuple

import nacl.exceptions
import nacl.signing
import rfc8785

from .hashing import to_hex
from .merkle import Tree
from .models import RootHead


def B64(b: bytes) -> str:
    """Base64-encode bytes to ASCII string."""
    return base64.b64encode(b).decode("ascii")


def B64D(s: str) -> bytes:
    """Decode base64 ASCII string to bytes with strict validation."""
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except Exception as e:
        raise ValueError("invalid base64") from e


def jcs_dumps(obj) -> bytes:
    """Deterministic canonical JSON bytes per RFC8785."""
    return rfc8785.dumps(obj)


def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = nacl.signing.SigningKey.generate()
    pk = sk.verify_key
    return (sk.encode(), pk.encode())


def ed25519_sign(sk_bytes: bytes, data: bytes) -> bytes:
    sk = nacl.signing.SigningKey(sk_bytes)
    return sk.sign(data).signature


def ed25519_verify(pk_bytes: bytes, data: bytes, signature: bytes) -> bool:
    try:
        vk = nacl.signing.VerifyKey(pk_bytes)
        vk.verify(data, signature)
        return True
    except (nacl.exceptions.BadSignatureError, nacl.exceptions.ValueError, TypeError):
        return False


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def make_root_head(tree: Tree, sk_bytes: bytes, pk_bytes: bytes) -> RootHead:
    """Sign the tree's root digest, size and algorithm.

    The signature covers the RFC 8785 form of every field except
    ``signature_b64``.
    """
    if tree.root_digest is None:
        raise ValueError("cannot sign an empty tree")
    body = {
        "algorithm": tree.algorithm,
        "leaf_count": tree.leaf_count,
        "root_hex": to_hex(tree.root_digest),
        "ts": _now_iso(),
        "signer_pubkey_b64": B64(pk_bytes),
    }
    sig = ed25519_sign(sk_bytes, jcs_dumps(body))
    return RootHead(**{**body, "signature_b64": B64(sig)})
