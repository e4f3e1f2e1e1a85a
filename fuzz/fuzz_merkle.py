"""Fuzz harness for tree construction & inclusion proof round trips."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from merkle_api.merkle import build, prove
    from merkle_api.verify import verify


def TestOneInput(data: bytes):  # noqa: N802
    if not data:
        return
    # Split data deterministically into blocks (bounded count).
    # Zero-length trailing chunks are kept: empty blocks are valid leaves.
    size = max(1, min(32, data[0]))
    blocks = [data[i : i + size] for i in range(1, min(len(data), 1 + size * 64), size)]
    tree = build(blocks)
    if not blocks:
        if tree.root is not None:
            raise RuntimeError("empty input produced a root")
        return
    if tree.height and len(blocks) == 1:
        raise RuntimeError("single block produced internal nodes")
    idx = data[-1] % len(blocks)
    proof = prove(tree, idx)
    if len(proof) > tree.height:
        raise RuntimeError("proof longer than tree height")
    ok = verify(blocks[idx], proof, tree.root_digest, leaf_index=idx, leaf_count=len(blocks))
    if not ok:
        raise RuntimeError("valid inclusion proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
