"""Exceptions raised while validating steps and loading specifications."""

from __future__ import annotations


class PatternMismatch(Exception):
    """A state does not assign ``var`` the value a pattern requires."""

    def __init__(self, var: int):
        super().__init__(f"var {var} does not match")
        self.var = var


class StepRejected(Exception):
    """A candidate action set cannot be taken from the current state.

    Rejections are local to step enumeration and never abort a search.
    """


class ViolatesActionRule(StepRejected):
    def __init__(self, action_rule_index: int):
        super().__init__(f"violates action rule {action_rule_index}")
        self.action_rule_index = action_rule_index


class ViolatesActionPrecondition(StepRejected):
    def __init__(self, action_index: int, var: int):
        super().__init__(f"action {action_index} precondition fails at var {var}")
        self.action_index = action_index
        self.var = var


class ConflictingAssignments(StepRejected):
    def __init__(self, var: int):
        super().__init__(f"conflicting assignments to var {var}")
        self.var = var


class ViolatesDutyRule(StepRejected):
    def __init__(self, duty_rule_index: int):
        super().__init__(f"violates duty rule {duty_rule_index}")
        self.duty_rule_index = duty_rule_index


class SpecificationError(ValueError):
    """Raised when a problem description is malformed."""
    pass
