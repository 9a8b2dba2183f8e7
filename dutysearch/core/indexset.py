"""Immutable index sets backed by an integer bit pattern."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True)
class IndexSet:
    """Set of non-negative indices; bit ``i`` of ``bits`` marks index ``i``.

    Candidate action sets are enumerated in descending order of ``bits``.
    """
    bits: int = 0

    def __post_init__(self) -> None:
        if self.bits < 0:
            raise ValueError(f"IndexSet bits must be non-negative, got {self.bits}")

    @classmethod
    def of(cls, *indexes: int) -> "IndexSet":
        return cls.from_iterable(indexes)

    @classmethod
    def from_iterable(cls, indexes: Iterable[int]) -> "IndexSet":
        if isinstance(indexes, IndexSet):
            return indexes
        bits = 0
        for i in indexes:
            if i < 0:
                raise ValueError(f"index must be non-negative, got {i}")
            bits |= 1 << i
        return cls(bits)

    @classmethod
    def full(cls, n: int) -> "IndexSet":
        """Every index in ``range(n)``."""
        return cls((1 << n) - 1)

    def is_empty(self) -> bool:
        return self.bits == 0

    def issubset(self, other: "IndexSet") -> bool:
        return self.bits & ~other.bits == 0

    def issuperset(self, other: "IndexSet") -> bool:
        return other.issubset(self)

    def isdisjoint(self, other: "IndexSet") -> bool:
        return self.bits & other.bits == 0

    def with_index(self, index: int) -> "IndexSet":
        return IndexSet(self.bits | (1 << index))

    def decreased_in_powerset_order(self) -> "IndexSet":
        """The subset with the next smaller bit pattern (empty stays empty)."""
        if self.bits == 0:
            return self
        return IndexSet(self.bits - 1)

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and index >= 0 and bool(self.bits >> index & 1)

    def __iter__(self) -> Iterator[int]:
        bits = self.bits
        i = 0
        while bits:
            if bits & 1:
                yield i
            bits >>= 1
            i += 1

    def __len__(self) -> int:
        return bin(self.bits).count("1")

    def __bool__(self) -> bool:
        return self.bits != 0

    def __repr__(self) -> str:
        return f"IndexSet({{{', '.join(str(i) for i in self)}}})"
