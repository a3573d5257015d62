"""
Proof Size Estimation

Bit-size estimates for the pieces an argument string is made of. These
are for display and comparison only; no proof is ever serialized.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .field import Field


DEFAULT_DIGEST_SIZE_BITS = 256


def ceil_log2(n: int) -> int:
    """ceil(log2(n)) for a positive integer."""
    return (n - 1).bit_length()


@dataclass(frozen=True)
class FieldElements:
    """A list of base or extension field elements."""
    field: Field
    num_elements: int
    is_extension: bool

    @property
    def element_size_bits(self) -> int:
        if self.is_extension:
            return self.field.extension_bit_size
        return self.field.base_bit_size

    def size_bits(self) -> int:
        return self.num_elements * self.element_size_bits


@dataclass(frozen=True)
class MerkleTree:
    """
    A Merkle tree with 2^tree_depth leaves.

    Each leaf holds `leaf.num_elements` field elements, typically the coset
    that gets folded together.
    """
    leaf: FieldElements
    tree_depth: int
    digest_size: int = DEFAULT_DIGEST_SIZE_BITS

    @classmethod
    def new(
        cls,
        tree_depth: int,
        field: Field,
        leaf_size: int,
        is_extension: bool,
        digest_size: int = DEFAULT_DIGEST_SIZE_BITS,
    ) -> 'MerkleTree':
        return cls(
            leaf=FieldElements(field=field, num_elements=leaf_size, is_extension=is_extension),
            tree_depth=tree_depth,
            digest_size=digest_size,
        )


@dataclass(frozen=True)
class MerkleQueries:
    """Openings of `num_openings` leaves of a tree together with authentication paths."""
    merkle_tree: MerkleTree
    num_openings: int

    def copath_elements(self) -> int:
        """
        Digests in the authentication paths after pruning.

        The top ceil(log2(num_openings)) levels are assumed to be shared
        between paths. This approximates deduplication, it is not exact.
        """
        if self.num_openings <= 0:
            return 0
        depth = max(0, self.merkle_tree.tree_depth - ceil_log2(self.num_openings))
        return self.num_openings * depth

    def copath_size(self) -> int:
        # The sibling leaf is sent in the clear or as a digest, whichever is shorter
        tree = self.merkle_tree
        sibling_size = min(tree.leaf.size_bits(), tree.digest_size)
        return self.num_openings * sibling_size + self.copath_elements() * tree.digest_size

    def opening_size(self) -> int:
        return self.num_openings * self.merkle_tree.leaf.size_bits()

    def estimate_size_bits(self) -> int:
        return self.opening_size() + self.copath_size()


class ProofElementKind(Enum):
    """Tag of a proof element."""
    MERKLE_ROOT = "MerkleRoot"
    MERKLE_QUERIES = "MerkleQueries"
    FIELD_ELEMENTS = "FieldElements"


@dataclass(frozen=True)
class ProofElement:
    """
    A token of the argument string.

    Exactly one of three shapes, selected by `kind`:
        MERKLE_ROOT     value is a MerkleTree
        MERKLE_QUERIES  value is a MerkleQueries
        FIELD_ELEMENTS  value is a FieldElements
    """
    kind: ProofElementKind
    value: Union[MerkleTree, MerkleQueries, FieldElements]

    def __post_init__(self):
        expected = _KIND_TYPES[self.kind]
        if not isinstance(self.value, expected):
            raise TypeError(
                f"{self.kind.value} element must wrap {expected.__name__}, "
                f"got {type(self.value).__name__}"
            )

    @classmethod
    def merkle_root(cls, tree: MerkleTree) -> 'ProofElement':
        return cls(ProofElementKind.MERKLE_ROOT, tree)

    @classmethod
    def merkle_queries(cls, queries: MerkleQueries) -> 'ProofElement':
        return cls(ProofElementKind.MERKLE_QUERIES, queries)

    @classmethod
    def field_elements(cls, elements: FieldElements) -> 'ProofElement':
        return cls(ProofElementKind.FIELD_ELEMENTS, elements)

    @property
    def element_type(self) -> str:
        return self.kind.value

    @property
    def digest_size(self) -> Optional[int]:
        """Digest size of the tree this element refers to, if any."""
        if self.kind is ProofElementKind.MERKLE_ROOT:
            return self.value.digest_size
        if self.kind is ProofElementKind.MERKLE_QUERIES:
            return self.value.merkle_tree.digest_size
        return None

    def size_bits(self) -> int:
        if self.kind is ProofElementKind.MERKLE_ROOT:
            return self.value.digest_size
        if self.kind is ProofElementKind.MERKLE_QUERIES:
            return self.value.estimate_size_bits()
        return self.value.size_bits()

    def describe(self) -> str:
        """One-line description used in transcript renderings."""
        if self.kind is ProofElementKind.MERKLE_ROOT:
            tree = self.value
            return f"MerkleRoot(depth={tree.tree_depth}, leaf={tree.leaf.num_elements})"
        if self.kind is ProofElementKind.MERKLE_QUERIES:
            queries = self.value
            return (
                f"MerkleQueries(openings={queries.num_openings}, "
                f"depth={queries.merkle_tree.tree_depth}, leaf={queries.merkle_tree.leaf.num_elements})"
            )
        elements = self.value
        kind = "ext" if elements.is_extension else "base"
        return f"FieldElements({elements.num_elements} {kind})"


_KIND_TYPES = {
    ProofElementKind.MERKLE_ROOT: MerkleTree,
    ProofElementKind.MERKLE_QUERIES: MerkleQueries,
    ProofElementKind.FIELD_ELEMENTS: FieldElements,
}
