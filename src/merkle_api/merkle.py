from __future__ import annotations
import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from .hashing import HashEngine, get_engine, to_hex

logger = logging.getLogger(__name__)


class Side(str, enum.Enum):
    """Position of a proof sibling relative to the hash carried upward."""

    LEFT = "L"
    RIGHT = "R"


ProofStep = Tuple[bytes, Side]
Proof = List[ProofStep]


class InvalidIndexError(IndexError):
    """Leaf index outside ``[0, leaf_count)``."""


@dataclass(frozen=True)
class Leaf:
    digest: bytes


@dataclass(frozen=True)
class Internal:
    digest: bytes
    left: "Node"
    right: "Node"


Node = Union[Leaf, Internal]


@dataclass(frozen=True)
class Tree:
    root: Optional[Node]
    levels: List[List[Node]] = field(default_factory=list)  # level 0 = leaves
    algorithm: str = "sha256"

    @property
    def leaf_count(self) -> int:
        return len(self.levels[0]) if self.levels else 0

    @property
    def height(self) -> int:
        return max(len(self.levels) - 1, 0)

    @property
    def root_digest(self) -> Optional[bytes]:
        return self.root.digest if self.root is not None else None


def build(blocks: Iterable[bytes], engine: Optional[HashEngine] = None) -> Tree:
    """Build a tree over ``blocks`` in input order.

    Pairs are formed strictly left to right. A trailing unpaired node is
    promoted to the next level as-is (no duplication, no re-hashing).
    """
    engine = engine or get_engine()
    lvl: List[Node] = [Leaf(engine.digest_of(b)) for b in blocks]
    if not lvl:
        return Tree(None, [], engine.name)
    levels = [lvl]
    while len(lvl) > 1:
        nxt: List[Node] = []
        for i in range(0, len(lvl) - 1, 2):
            left, right = lvl[i], lvl[i + 1]
            nxt.append(
                Internal(engine.digest_of_pair(left.digest, right.digest), left, right)
            )
        if len(lvl) % 2 == 1:
            nxt.append(lvl[-1])  # promote
        levels.append(nxt)
        lvl = nxt
    logger.debug(
        "built tree leaves=%d height=%d root=%s",
        len(levels[0]),
        len(levels) - 1,
        to_hex(lvl[0].digest),
    )
    return Tree(lvl[0], levels, engine.name)


def root_digest(tree: Tree) -> Optional[bytes]:
    return tree.root_digest


def prove(tree: Tree, leaf_index: int) -> Proof:
    """Return (sibling_digest, side) steps from leaf to root.

    Levels at which the path node was promoted contribute no step, so
    proofs for such leaves are shorter than the tree height.
    """
    if isinstance(leaf_index, bool) or not isinstance(leaf_index, int):
        raise InvalidIndexError(f"leaf index must be an int, got {leaf_index!r}")
    if not 0 <= leaf_index < tree.leaf_count:
        raise InvalidIndexError(
            f"leaf index {leaf_index} out of range for {tree.leaf_count} leaves"
        )
    proof: Proof = []
    idx = leaf_index
    for level in tree.levels[:-1]:
        is_right = idx % 2 == 1
        sibling_idx = idx - 1 if is_right else idx + 1
        if sibling_idx < len(level):
            proof.append(
                (level[sibling_idx].digest, Side.LEFT if is_right else Side.RIGHT)
            )
        idx //= 2
    return proof


class MerkleTree:
    """Object wrapper over :func:`build` / :func:`prove`."""

    def __init__(self, tree: Tree):
        self.tree = tree

    @classmethod
    def from_blocks(
        cls, blocks: Iterable[bytes], algorithm: Optional[str] = None
    ) -> "MerkleTree":
        return cls(build(blocks, get_engine(algorithm)))

    @property
    def root(self) -> Optional[bytes]:
        return self.tree.root_digest

    @property
    def root_hex(self) -> Optional[str]:
        root = self.tree.root_digest
        return to_hex(root) if root is not None else None

    def __len__(self) -> int:
        return self.tree.leaf_count

    def inclusion_proof(self, index: int) -> Proof:
        return prove(self.tree, index)
