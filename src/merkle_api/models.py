from __future__ import annotations
from typing import List, Literal, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ConfigDict

from .hashing import from_hex, get_engine, to_hex


def _check_hex(v: str) -> str:
    from_hex(v)
    return v.lower()


class ProofStepModel(BaseModel):
    sibling_hex: str
    side: Literal["L", "R"]

    @field_validator("sibling_hex")
    @classmethod
    def _sibling_is_hex(cls, v):
        return _check_hex(v)


class InclusionProofModel(BaseModel):
    """Portable inclusion proof: hex digests plus the leaf's position.

    ``steps`` run from the leaf level upward. The verifier needs only this
    document, the leaf's data and a trusted root.
    """

    algorithm: str = "sha256"
    leaf_index: int = Field(ge=0, strict=True)
    leaf_count: int = Field(ge=1, strict=True)
    root_hex: str
    steps: List[ProofStepModel] = Field(default_factory=list)

    @field_validator("root_hex")
    @classmethod
    def _root_is_hex(cls, v):
        return _check_hex(v)

    @field_validator("algorithm")
    @classmethod
    def _known_algorithm(cls, v):
        return get_engine(v).name

    @model_validator(mode="after")
    def _index_in_range(self):
        if self.leaf_index >= self.leaf_count:
            raise ValueError("leaf_index must be < leaf_count")
        return self

    def to_proof(self) -> List[Tuple[bytes, str]]:
        size = get_engine(self.algorithm).digest_size
        return [(from_hex(s.sibling_hex, size), s.side) for s in self.steps]

    def root(self) -> bytes:
        return from_hex(self.root_hex, get_engine(self.algorithm).digest_size)

    @classmethod
    def from_proof(
        cls,
        proof,
        *,
        root: bytes,
        leaf_index: int,
        leaf_count: int,
        algorithm: str = "sha256",
    ) -> "InclusionProofModel":
        return cls(
            algorithm=algorithm,
            leaf_index=leaf_index,
            leaf_count=leaf_count,
            root_hex=to_hex(root),
            steps=[
                ProofStepModel(sibling_hex=to_hex(sib), side=str(getattr(side, "value", side)))
                for sib, side in proof
            ],
        )


class BlocksPayload(BaseModel):
    """Ordered blocks, given either as hex strings or as UTF-8 text."""

    blocks_hex: Optional[List[str]] = None
    blocks_text: Optional[List[str]] = None
    algorithm: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if (self.blocks_hex is None) == (self.blocks_text is None):
            raise ValueError("provide exactly one of blocks_hex or blocks_text")
        if self.blocks_hex is not None:
            for b in self.blocks_hex:
                from_hex(b)
        return self

    def blocks(self) -> List[bytes]:
        if self.blocks_hex is not None:
            return [from_hex(b) for b in self.blocks_hex]
        return [t.encode("utf-8") for t in self.blocks_text or []]

    def count(self) -> int:
        return len(self.blocks_hex if self.blocks_hex is not None else self.blocks_text or [])


class BuildResponse(BaseModel):
    algorithm: str
    leaf_count: int
    height: int
    root_hex: Optional[str] = None


class ProveRequest(BlocksPayload):
    leaf_index: int = Field(strict=True)


class VerifyRequest(BaseModel):
    data_hex: Optional[str] = None
    data_text: Optional[str] = None
    proof: InclusionProofModel
    # Trusted root; when omitted the proof's own root_hex is used
    root_hex: Optional[str] = None

    @model_validator(mode="after")
    def _one_data(self):
        if (self.data_hex is None) == (self.data_text is None):
            raise ValueError("provide exactly one of data_hex or data_text")
        if self.data_hex is not None:
            from_hex(self.data_hex)
        if self.root_hex is not None:
            from_hex(self.root_hex)
        return self

    def data(self) -> bytes:
        if self.data_hex is not None:
            return from_hex(self.data_hex)
        return (self.data_text or "").encode("utf-8")


class VerifyResponse(BaseModel):
    valid: bool


class RootHead(BaseModel):
    """Signed attestation of a tree root."""

    # only the exact signed types verify; no coercion of e.g. 3.0 -> 3
    model_config = ConfigDict(strict=True)

    algorithm: str
    leaf_count: int
    root_hex: str
    ts: str
    signer_pubkey_b64: str
    signature_b64: str
