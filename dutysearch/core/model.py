from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Tuple

from .indexset import IndexSet

Var = int
Val = int


class Universe(str, Enum):
    """Index space a rule ranges over."""
    ACTIONS = "actions"
    DUTIES = "duties"


@dataclass(frozen=True)
class PartialState:
    """Immutable partial mapping from variable to value.

    A missing variable is unknown, not false.
    """
    assignments: Mapping[Var, Val] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for var, val in self.assignments.items():
            if var < 0 or val < 0:
                raise ValueError(f"variables and values must be non-negative, got {var}: {val}")
        object.__setattr__(self, "assignments", MappingProxyType(dict(self.assignments)))

    def __hash__(self) -> int:
        # sort by var to get stable hash
        return hash(tuple(sorted(self.assignments.items())))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PartialState):
            return dict(self.assignments) == dict(other.assignments)
        return NotImplemented

    def get(self, var: Var) -> Val | None:
        return self.assignments.get(var)

    def items(self) -> Iterable[Tuple[Var, Val]]:
        return self.assignments.items()

    def with_assignment(self, var: Var, val: Val) -> "PartialState":
        return self.update({var: val})

    def update(self, other: Mapping[Var, Val] | "PartialState") -> "PartialState":
        """Fresh copy with ``other``'s assignments taking precedence."""
        if isinstance(other, PartialState):
            other = other.assignments
        merged = dict(self.assignments)
        merged.update(other)
        return PartialState(merged)

    def __contains__(self, var: object) -> bool:
        return var in self.assignments

    def __iter__(self) -> Iterator[Var]:
        return iter(self.assignments)

    def __len__(self) -> int:
        return len(self.assignments)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}: {v}" for k, v in sorted(self.assignments.items()))
        return f"PartialState({{{inner}}})"


@dataclass(frozen=True)
class Duty:
    """Named pattern a state may satisfy."""
    name: str
    partial_state: PartialState = field(default_factory=PartialState)


@dataclass(frozen=True)
class Action:
    """Named transition: ``src_pstate`` must hold now, ``dst_pstate`` holds next."""
    name: str
    src_pstate: PartialState = field(default_factory=PartialState)
    dst_pstate: PartialState = field(default_factory=PartialState)


@dataclass(frozen=True)
class Rule:
    """Implication over one universe of indices.

    Whenever every index of ``if_all`` is present, every index of
    ``then_all`` must be present and none of ``then_none``.
    """
    name: str
    if_all: IndexSet = field(default_factory=IndexSet)
    then_all: IndexSet = field(default_factory=IndexSet)
    then_none: IndexSet = field(default_factory=IndexSet)

    def __post_init__(self) -> None:
        for attr in ("if_all", "then_all", "then_none"):
            object.__setattr__(self, attr, IndexSet.from_iterable(getattr(self, attr)))

    def satisfied_by(self, indexes: IndexSet | Iterable[int]) -> bool:
        indexes = IndexSet.from_iterable(indexes)
        if not self.if_all.issubset(indexes):
            return True
        return self.then_all.issubset(indexes) and self.then_none.isdisjoint(indexes)
