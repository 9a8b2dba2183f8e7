"""Lazy enumeration of the legal successors of a path node."""

from __future__ import annotations

import logging
from typing import Iterator

from .errors import (
    PatternMismatch,
    StepRejected,
    ViolatesActionPrecondition,
    ViolatesActionRule,
    ViolatesDutyRule,
)
from .indexset import IndexSet
from .path import Next, PathNode
from .spec import Specification

logger = logging.getLogger(__name__)


def try_create_next_step(prev: PathNode, acts_indexes: IndexSet, spec: Specification) -> Next:
    """Build ``Next(prev, acts_indexes)`` or raise the first StepRejected found.

    Checks run in order: action rules, preconditions against ``prev``,
    postcondition consistency, then duty rules on the tentative successor.
    """
    for i, arule in enumerate(spec.arules):
        if not arule.satisfied_by(acts_indexes):
            raise ViolatesActionRule(i)

    for act_index in acts_indexes:
        try:
            prev.state_assigns_superset(spec, spec.actions[act_index].src_pstate)
        except PatternMismatch as exc:
            raise ViolatesActionPrecondition(act_index, exc.var) from exc

    spec.check_postconditions_consistent(acts_indexes)

    node = Next(prev, acts_indexes)
    if spec.drules:
        duties = node.satisfied_duties(spec)
        for i, drule in enumerate(spec.drules):
            if not drule.satisfied_by(duties):
                raise ViolatesDutyRule(i)
    return node


class NextStateStepIter:
    """Iterate the validated successors of ``prev``.

    Candidates are every non-empty subset of the action indices, visited in
    strictly decreasing bit-pattern order starting from the full set, so
    steps where more actions fire are tried first.
    """

    def __init__(self, prev: PathNode, spec: Specification):
        self.prev = prev
        self.spec = spec
        self.next_subset_to_consider = IndexSet.full(len(spec.actions))

    def __iter__(self) -> Iterator[Next]:
        return self

    def __next__(self) -> Next:
        while not self.next_subset_to_consider.is_empty():
            candidate = self.next_subset_to_consider
            self.next_subset_to_consider = candidate.decreased_in_powerset_order()
            try:
                return try_create_next_step(self.prev, candidate, self.spec)
            except StepRejected as exc:
                logger.debug("rejected %r: %s", candidate, exc)
        raise StopIteration
