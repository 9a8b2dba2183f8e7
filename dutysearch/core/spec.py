from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Tuple

from .errors import ConflictingAssignments
from .model import Action, Duty, PartialState, Rule, Val, Var

if TYPE_CHECKING:  # pragma: no cover
    from .path import PathNode
    from .search import SearchStats


@dataclass(frozen=True)
class Specification:
    """Duties, actions and the rules constraining them.

    ``drules`` range over duty indices, ``arules`` over action indices.
    """
    duties: Tuple[Duty, ...] = ()
    drules: Tuple[Rule, ...] = ()
    actions: Tuple[Action, ...] = ()
    arules: Tuple[Rule, ...] = ()

    def __post_init__(self) -> None:
        for attr in ("duties", "drules", "actions", "arules"):
            object.__setattr__(self, attr, tuple(getattr(self, attr)))

    def compose(self, other: "Specification") -> "Specification":
        """Untagged union of both specifications' lists.

        Nothing is deduplicated; overlapping names simply appear twice.
        """
        return Specification(
            duties=self.duties + other.duties,
            drules=self.drules + other.drules,
            actions=self.actions + other.actions,
            arules=self.arules + other.arules,
        )

    def duty_index(self, name: str) -> int:
        """Index of the first duty called ``name``."""
        for i, duty in enumerate(self.duties):
            if duty.name == name:
                return i
        raise KeyError(name)

    def check_postconditions_consistent(self, action_indexes: Iterable[int]) -> None:
        """Raise ConflictingAssignments if two actions write different values to a var."""
        delta: Dict[Var, Val] = {}
        for action_index in action_indexes:
            for var, val in self.actions[action_index].dst_pstate.items():
                prior = delta.setdefault(var, val)
                if prior != val:
                    raise ConflictingAssignments(var)

    def postconditions_consistent(self, action_indexes: Iterable[int]) -> bool:
        try:
            self.check_postconditions_consistent(action_indexes)
        except ConflictingAssignments:
            return False
        return True

    def paths_to_duty(
        self,
        start_state: PartialState,
        duty_index: int,
        *,
        max_depth: int | None = None,
        stats: "SearchStats | None" = None,
    ) -> list["PathNode"]:
        from .search import paths_to_duty

        return paths_to_duty(self, start_state, duty_index, max_depth=max_depth, stats=stats)
