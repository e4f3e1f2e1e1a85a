from __future__ import annotations
import hmac
import logging
from typing import List, Optional, Sequence, Tuple

from .hashing import HashEngine, get_engine

logger = logging.getLogger(__name__)

# Side flags as they appear in proofs; Side enum members compare equal to these.
LEFT = "L"
RIGHT = "R"

# No tree with fewer than 2**64 leaves has a longer path.
MAX_PROOF_STEPS = 64


def path_sides(leaf_index: int, leaf_count: int) -> List[str]:
    """Side flags a proof for ``leaf_index`` in a tree of ``leaf_count`` leaves must carry.

    Mirrors the build rule: at a level with an odd number of nodes the last
    node is promoted and contributes no step.
    """
    if isinstance(leaf_index, bool) or isinstance(leaf_count, bool):
        raise ValueError("index and count must be ints")
    if not 0 <= leaf_index < leaf_count:
        raise ValueError(f"leaf index {leaf_index} out of range for {leaf_count}")
    sides = []
    idx, width = leaf_index, leaf_count
    while width > 1:
        if not (idx == width - 1 and width % 2 == 1):
            sides.append(LEFT if idx % 2 == 1 else RIGHT)
        idx //= 2
        width = (width + 1) // 2
    return sides


def _steps(proof, digest_size: int) -> Optional[List[Tuple[bytes, str]]]:
    out = []
    for entry in proof:
        if not isinstance(entry, (tuple, list)) or len(entry) != 2:
            return None
        sibling, side = entry
        if not isinstance(sibling, (bytes, bytearray)) or len(sibling) != digest_size:
            return None
        if not isinstance(side, str) or side not in (LEFT, RIGHT):
            return None
        out.append((bytes(sibling), LEFT if side == LEFT else RIGHT))
    return out


def verify(
    data: bytes,
    proof: Sequence[Tuple[bytes, str]],
    claimed_root: Optional[bytes],
    *,
    leaf_index: Optional[int] = None,
    leaf_count: Optional[int] = None,
    engine: Optional[HashEngine] = None,
) -> bool:
    """Replay ``proof`` from ``data`` and compare against ``claimed_root``.

    Needs only the hash engine, never the tree. Any structural problem with
    the inputs yields ``False`` rather than an exception. When both
    ``leaf_index`` and ``leaf_count`` are given, the proof must also have the
    exact shape of that leaf's path.
    """
    try:
        engine = engine or get_engine()
        if not isinstance(claimed_root, (bytes, bytearray)):
            return False
        if len(claimed_root) != engine.digest_size:
            return False
        if not isinstance(data, (bytes, bytearray, memoryview)):
            return False
        proof = list(proof)
        if len(proof) > MAX_PROOF_STEPS:
            return False
        steps = _steps(proof, engine.digest_size)
        if steps is None:
            return False
        if leaf_index is not None or leaf_count is not None:
            if leaf_index is None or leaf_count is None:
                return False
            if [side for _, side in steps] != path_sides(leaf_index, leaf_count):
                return False

        current = engine.digest_of(bytes(data))
        for sibling, side in steps:
            if side == RIGHT:
                current = engine.digest_of_pair(current, sibling)
            else:
                current = engine.digest_of_pair(sibling, current)
        return hmac.compare_digest(current, bytes(claimed_root))
    except Exception:  # noqa: BLE001 - malformed input is a failed verification
        logger.debug("proof rejected as malformed", exc_info=True)
        return False
