"""Inclusion proof fuzzing with mutated proofs and arbitrary proof shapes."""
from __future__ import annotations
import atheris
import sys
import random

with atheris.instrument_imports():
    from merkle_api.merkle import Side, build, prove
    from merkle_api.verify import verify


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    # Derive variable chunk size & mutation seed
    seed = int.from_bytes(data[:4], "little")
    rng = random.Random(seed)
    chunk_len = 1 + (data[4] % 32)
    body = data[5:]
    blocks = [body[i:i + chunk_len] for i in range(0, min(len(body), chunk_len * 16), chunk_len)]
    if len(blocks) < 3:
        return
    tree = build(blocks)
    idx = seed % len(blocks)
    proof = list(prove(tree, idx))
    choice = rng.random()
    if choice < 0.2 and proof:
        # tampered sibling
        i = rng.randrange(len(proof))
        sib, side = proof[i]
        proof[i] = (bytes([sib[0] ^ 0x01]) + sib[1:], side)
        if verify(blocks[idx], proof, tree.root_digest):
            raise RuntimeError("tampered proof unexpectedly verified")
    elif choice < 0.4 and proof and len(set(blocks)) == len(blocks):
        # flipped side; equal operands would hash the same either way
        i = rng.randrange(len(proof))
        sib, side = proof[i]
        proof[i] = (sib, Side.LEFT if side == Side.RIGHT else Side.RIGHT)
        if verify(blocks[idx], proof, tree.root_digest):
            raise RuntimeError("flipped side unexpectedly verified")
    elif choice < 0.6:
        # garbage proof shapes must never raise
        fdp = atheris.FuzzedDataProvider(body)
        junk = [
            (fdp.ConsumeBytes(fdp.ConsumeIntInRange(0, 40)), fdp.ConsumeUnicode(1))
            for _ in range(fdp.ConsumeIntInRange(0, 70))
        ]
        verify(blocks[idx], junk, tree.root_digest)
    else:
        if not verify(blocks[idx], proof, tree.root_digest):
            raise RuntimeError("valid proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
