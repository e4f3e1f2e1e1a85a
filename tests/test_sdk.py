from merkle_api.merkle import build, prove
from merkle_api.models import InclusionProofModel
from merkle_api.signing import ed25519_generate, make_root_head
from merkle_sdk.verify import verify_inclusion, verify_proof_document, verify_root_head


BLOCKS = [b"alpha", b"beta", b"gamma"]


def _doc(index: int, blocks=BLOCKS) -> dict:
    tree = build(blocks)
    return InclusionProofModel.from_proof(
        prove(tree, index),
        root=tree.root_digest,
        leaf_index=index,
        leaf_count=tree.leaf_count,
    ).model_dump()


def test_proof_document_verifies():
    for i, block in enumerate(BLOCKS):
        assert verify_proof_document(block, _doc(i))


def test_proof_document_rejects_garbage():
    assert not verify_proof_document(b"alpha", {"root_hex": "00"})
    assert not verify_proof_document(b"alpha", {})
    doc = _doc(0)
    doc["steps"][0]["side"] = "X"
    assert not verify_proof_document(b"alpha", doc)


def test_proof_document_position_enforced():
    doc = _doc(0)
    doc["leaf_index"] = 1
    assert not verify_proof_document(b"alpha", doc)


def test_root_head_round_trip():
    sk, pk = ed25519_generate()
    head = make_root_head(build(BLOCKS), sk, pk).model_dump()
    assert verify_root_head(head)
    assert head["leaf_count"] == 3
    head["root_hex"] = "00" * 32
    assert not verify_root_head(head)


def test_verify_inclusion_against_signed_head():
    sk, pk = ed25519_generate()
    head = make_root_head(build(BLOCKS), sk, pk).model_dump()
    assert verify_inclusion(b"gamma", _doc(2), head)
    assert not verify_inclusion(b"delta", _doc(2), head)
    # a self-consistent proof for a different tree is not accepted
    other = _doc(0, [b"alpha", b"x", b"y"])
    assert not verify_inclusion(b"alpha", other, head)


def test_verify_root_head_rejects_bad_shape():
    assert not verify_root_head({})
    assert not verify_root_head({"signature_b64": "!!", "signer_pubkey_b64": "!!"})


def test_root_head_requires_exact_types():
    sk, pk = ed25519_generate()
    head = make_root_head(build(BLOCKS), sk, pk).model_dump()
    head["leaf_count"] = 3.0
    assert not verify_root_head(head)
