"""Shared, immutable history of concurrently applied action sets.

A path never stores a materialized state. Each ``Next`` node records only the
action indices applied at that step plus a reference to its predecessor, so
sibling branches share their common prefix. Variable lookup walks backwards
until some step (or the start state) assigns the variable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List

from .errors import PatternMismatch
from .indexset import IndexSet
from .model import PartialState, Val, Var
from .spec import Specification


class PathNode:
    """Base for ``Start`` and ``Next``. Equality is identity."""

    __slots__ = ()

    def iter_back(self) -> Iterator["PathNode"]:
        """This node, then each predecessor down to the ``Start`` node."""
        node: PathNode | None = self
        while node is not None:
            yield node
            node = node.prev if isinstance(node, Next) else None

    def root(self) -> "Start":
        for node in self.iter_back():
            if isinstance(node, Start):
                return node
        raise AssertionError("path without a start node")  # pragma: no cover

    @property
    def depth(self) -> int:
        return sum(1 for node in self.iter_back() if isinstance(node, Next))

    def assignment(self, spec: Specification, var: Var) -> Val | None:
        """Current value of ``var``; the most recent step that writes it wins.

        Within one step the lowest action index takes precedence.
        """
        for node in self.iter_back():
            if isinstance(node, Start):
                return node.start_state.get(var)
            for act_index in node.acts_indexes:
                val = spec.actions[act_index].dst_pstate.get(var)
                if val is not None:
                    return val
        return None  # pragma: no cover

    def state_assigns_superset(self, spec: Specification, other: PartialState) -> None:
        """Raise PatternMismatch at the first var of ``other`` this state does not match."""
        for var, val in other.items():
            if self.assignment(spec, var) != val:
                raise PatternMismatch(var)

    def satisfies(self, spec: Specification, pattern: PartialState) -> bool:
        try:
            self.state_assigns_superset(spec, pattern)
        except PatternMismatch:
            return False
        return True

    def satisfied_duties(self, spec: Specification) -> IndexSet:
        bits = 0
        for i, duty in enumerate(spec.duties):
            if self.satisfies(spec, duty.partial_state):
                bits |= 1 << i
        return IndexSet(bits)

    def steps(self) -> List[IndexSet]:
        """Action sets applied along the path, first step first."""
        acts = [node.acts_indexes for node in self.iter_back() if isinstance(node, Next)]
        acts.reverse()
        return acts

    def action_names(self, spec: Specification) -> List[List[str]]:
        return [[spec.actions[i].name for i in step] for step in self.steps()]

    def to_partial_state(self, spec: Specification) -> PartialState:
        """Materialize the effective state at this node."""
        state = self.root().start_state
        for step in self.steps():
            delta: Dict[Var, Val] = {}
            for act_index in step:
                for var, val in spec.actions[act_index].dst_pstate.items():
                    delta.setdefault(var, val)
            state = state.update(delta)
        return state


@dataclass(frozen=True, eq=False, slots=True)
class Start(PathNode):
    start_state: PartialState

    def __repr__(self) -> str:
        return f"Start({self.start_state!r})"


@dataclass(frozen=True, eq=False, slots=True)
class Next(PathNode):
    prev: PathNode
    acts_indexes: IndexSet

    def __post_init__(self) -> None:
        if self.acts_indexes.is_empty():
            raise ValueError("a step must apply at least one action")

    def __repr__(self) -> str:
        return f"Next(depth={self.depth}, acts={self.acts_indexes!r})"
