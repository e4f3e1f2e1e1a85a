import pytest

from merkle_api.hashing import digest_of
from merkle_api.merkle import Side, build, prove, root_digest
from merkle_api.verify import MAX_PROOF_STEPS, path_sides, verify


BLOCKS = [f"tx-{i}".encode() for i in range(7)]


@pytest.fixture
def tree():
    return build(BLOCKS)


def _flip(b: bytes, pos: int = 0) -> bytes:
    return b[:pos] + bytes([b[pos] ^ 0x01]) + b[pos + 1 :]


def test_verify_does_not_import_tree_module():
    import merkle_api.verify as mod

    assert not hasattr(mod, "build")
    assert not hasattr(mod, "Tree")


def test_rejects_mutated_data(tree):
    proof = prove(tree, 3)
    root = root_digest(tree)
    assert verify(BLOCKS[3], proof, root)
    assert not verify(_flip(BLOCKS[3], 2), proof, root)


def test_rejects_mutated_sibling(tree):
    root = root_digest(tree)
    proof = prove(tree, 2)
    for i in range(len(proof)):
        tampered = list(proof)
        sib, side = tampered[i]
        tampered[i] = (_flip(sib, 5), side)
        assert not verify(BLOCKS[2], tampered, root)


def test_rejects_flipped_side(tree):
    root = root_digest(tree)
    proof = prove(tree, 5)
    for i in range(len(proof)):
        tampered = list(proof)
        sib, side = tampered[i]
        other = Side.LEFT if side == Side.RIGHT else Side.RIGHT
        tampered[i] = (sib, other)
        assert not verify(BLOCKS[5], tampered, root)


def test_rejects_wrong_root(tree):
    assert not verify(BLOCKS[0], prove(tree, 0), digest_of(b"other"))


def test_no_root_is_always_false():
    assert root_digest(build([])) is None
    assert not verify(b"a", [], None)


def test_plain_string_sides_accepted(tree):
    proof = [(sib, side.value) for sib, side in prove(tree, 1)]
    assert verify(BLOCKS[1], proof, root_digest(tree))


@pytest.mark.parametrize(
    "bad_proof",
    [
        [("not-bytes", "L")],
        [(b"\x00" * 31, "L")],
        [(b"\x00" * 32, "X")],
        [(b"\x00" * 32,)],
        [b"\x00" * 32],
        None,
    ],
)
def test_malformed_proof_returns_false(tree, bad_proof):
    assert verify(BLOCKS[0], bad_proof, root_digest(tree)) is False


def test_malformed_root_returns_false(tree):
    proof = prove(tree, 0)
    assert not verify(BLOCKS[0], proof, b"short")
    assert not verify(BLOCKS[0], proof, "ab" * 32)


def test_overlong_proof_returns_false():
    proof = [(b"\x00" * 32, "R")] * (MAX_PROOF_STEPS + 1)
    assert not verify(b"a", proof, b"\x00" * 32)


def test_truncated_proof_rejected(tree):
    proof = prove(tree, 0)
    assert not verify(BLOCKS[0], proof[:-1], root_digest(tree))


def test_positional_check(tree):
    root = root_digest(tree)
    proof = prove(tree, 4)
    assert verify(BLOCKS[4], proof, root, leaf_index=4, leaf_count=7)
    # wrong claimed position
    assert not verify(BLOCKS[4], proof, root, leaf_index=5, leaf_count=7)
    assert not verify(BLOCKS[4], proof, root, leaf_index=4, leaf_count=5)
    # partial position information is not accepted
    assert not verify(BLOCKS[4], proof, root, leaf_index=4)
    assert not verify(BLOCKS[4], proof, root, leaf_index=9, leaf_count=7)


@pytest.mark.parametrize("n", range(1, 34))
def test_path_sides_matches_prove(n):
    t = build([bytes([i]) for i in range(n)])
    for i in range(n):
        assert [side for _, side in prove(t, i)] == path_sides(i, n)


def test_path_sides_for_promoted_leaf():
    assert path_sides(2, 3) == ["L"]
    assert path_sides(0, 1) == []
    with pytest.raises(ValueError):
        path_sides(3, 3)
