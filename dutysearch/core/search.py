"""Depth-first search for every path that reaches a duty."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List

from .model import PartialState
from .path import PathNode, Start
from .spec import Specification
from .steps import NextStateStepIter

logger = logging.getLogger(__name__)


@dataclass
class SearchStats:
    """Counters collected during one search."""
    expanded: int = 0
    completed: int = 0
    pruned_by_depth: int = 0


def iter_paths_to_duty(
    spec: Specification,
    start_state: PartialState,
    duty_index: int,
    *,
    max_depth: int | None = None,
    stats: SearchStats | None = None,
) -> Iterator[PathNode]:
    """Yield each path whose final state satisfies ``spec.duties[duty_index]``.

    A path is complete as soon as the duty holds and is not extended further.
    The search uses an explicit stack, so it is depth-first but path length
    does not grow the call stack. Without ``max_depth`` it may never finish
    when the actions allow endless steps that never satisfy the duty.
    """
    duty = spec.duties[duty_index]
    if stats is None:
        stats = SearchStats()
    incomplete: List[PathNode] = [Start(start_state)]
    while incomplete:
        path = incomplete.pop()
        if path.satisfies(spec, duty.partial_state):
            stats.completed += 1
            yield path
            continue
        if max_depth is not None and path.depth >= max_depth:
            stats.pruned_by_depth += 1
            continue
        stats.expanded += 1
        before = len(incomplete)
        incomplete.extend(NextStateStepIter(path, spec))
        logger.debug("expanded %r into %d successors", path, len(incomplete) - before)


def paths_to_duty(
    spec: Specification,
    start_state: PartialState,
    duty_index: int,
    *,
    max_depth: int | None = None,
    stats: SearchStats | None = None,
) -> List[PathNode]:
    if stats is None:
        stats = SearchStats()
    complete = list(
        iter_paths_to_duty(spec, start_state, duty_index, max_depth=max_depth, stats=stats)
    )
    logger.info(
        "duty %r: %d path(s), %d node(s) expanded, %d cut at depth bound",
        spec.duties[duty_index].name,
        stats.completed,
        stats.expanded,
        stats.pruned_by_depth,
    )
    return complete
