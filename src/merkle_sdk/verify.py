from typing import Dict, Any, Optional

from pydantic import ValidationError

from merkle_api.hashing import from_hex, get_engine
from merkle_api.models import InclusionProofModel, RootHead
from merkle_api.signing import ed25519_verify, jcs_dumps, B64D
from merkle_api.verify import verify


def verify_proof_document(
    data: bytes, proof_json: Dict[str, Any], root_hex: Optional[str] = None
) -> bool:
    """Return True if ``proof_json`` authenticates ``data``.

    The proof document carries its own ``root_hex``; pass ``root_hex`` to check
    against a root obtained from a trusted source instead. The leaf position
    recorded in the document is enforced.
    """
    try:
        doc = InclusionProofModel.model_validate(proof_json)
        engine = get_engine(doc.algorithm)
        steps = doc.to_proof()
        root = doc.root() if root_hex is None else from_hex(root_hex, engine.digest_size)
    except (ValidationError, ValueError, TypeError):
        return False
    return verify(
        data,
        steps,
        root,
        leaf_index=doc.leaf_index,
        leaf_count=doc.leaf_count,
        engine=engine,
    )


def verify_root_head(head_json: Dict[str, Any]) -> bool:
    """Return True if the root head's Ed25519 signature is valid.

    Canonicalizes the body (all fields except signature_b64) using RFC 8785 JSON.
    """
    try:
        head = RootHead.model_validate(head_json)
    except ValidationError:
        return False
    body = head.model_dump(exclude={"signature_b64"})
    canon = jcs_dumps(body)
    try:
        return ed25519_verify(
            B64D(head.signer_pubkey_b64), canon, B64D(head.signature_b64)
        )
    except ValueError:
        return False


def verify_inclusion(
    data: bytes, proof_json: Dict[str, Any], head_json: Dict[str, Any]
) -> bool:
    """Verify ``data`` against a signed root head.

    The head signature must be valid and its algorithm and tree size must
    agree with the proof document; the proof is replayed against the head's
    root, never the root embedded in the proof.
    """
    if not isinstance(proof_json, dict) or not verify_root_head(head_json):
        return False
    proof_alg = str(proof_json.get("algorithm", "sha256")).lower()
    if head_json.get("algorithm") != proof_alg:
        return False
    if head_json.get("leaf_count") != proof_json.get("leaf_count"):
        return False
    return verify_proof_document(data, proof_json, root_hex=head_json["root_hex"])
