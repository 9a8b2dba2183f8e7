from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import yaml

from dutysearch.core.errors import SpecificationError
from dutysearch.core.model import Action, Duty, PartialState, Rule, Universe
from dutysearch.core.spec import Specification

OPTION_KEYS = {"duty", "max_depth", "limit", "log_level"}
LOG_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Problem:
    spec: Specification
    start_state: PartialState = field(default_factory=PartialState)
    duty_index: int | None = None
    options: Dict[str, Any] = field(default_factory=dict)


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _parse_state(raw: Any, where: str) -> PartialState:
    if raw is None:
        return PartialState()
    if not isinstance(raw, Mapping):
        raise SpecificationError(f"{where}: expected a mapping of var: value, got {raw!r}")
    for var, val in raw.items():
        if not (_is_index(var) and _is_index(val)):
            raise SpecificationError(
                f"{where}: vars and values must be non-negative integers, got {var!r}: {val!r}"
            )
    return PartialState(dict(raw))


def _entries(data: Mapping[str, Any], key: str, source: str) -> List[Mapping[str, Any]]:
    entries = data.get(key)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise SpecificationError(f"{source}: '{key}' must be a list")
    for i, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise SpecificationError(f"{source}: {key}[{i}] must be a mapping")
    return entries


def _names(entries: List[Mapping[str, Any]], key: str, source: str) -> Dict[str, int]:
    index: Dict[str, int] = {}
    for i, entry in enumerate(entries):
        name = str(entry.get("name", f"{key}{i}"))
        if name in index:
            raise SpecificationError(f"{source}: duplicate name {name!r} in '{key}'")
        index[name] = i
    return index


def _resolve_members(
    refs: Any, names: Dict[str, int], size: int, where: str, offset: int = 0
) -> List[int]:
    if refs is None:
        return []
    if not isinstance(refs, list):
        raise SpecificationError(f"{where}: expected a list, got {refs!r}")
    indexes = []
    for ref in refs:
        if _is_index(ref):
            if ref >= size:
                raise SpecificationError(f"{where}: index {ref} out of range")
            indexes.append(ref + offset)
        elif isinstance(ref, str) and ref in names:
            indexes.append(names[ref] + offset)
        else:
            raise SpecificationError(f"{where}: unknown member {ref!r}")
    return indexes


def _parse_rules(
    entries: List[Mapping[str, Any]],
    universe: Universe,
    names: Dict[str, int],
    source: str,
    offset: int = 0,
) -> List[Rule]:
    key = "arules" if universe is Universe.ACTIONS else "drules"
    rules = []
    for i, entry in enumerate(entries):
        name = str(entry.get("name", f"{key}{i}"))
        members = {
            part: _resolve_members(
                entry.get(part), names, len(names), f"{source}: {key}[{name}].{part}", offset
            )
            for part in ("if_all", "then_all", "then_none")
        }
        rules.append(Rule(name=name, **members))
    return rules


def parse_specification(
    data: Mapping[str, Any],
    source: str = "<data>",
    action_offset: int = 0,
    duty_offset: int = 0,
) -> Specification:
    """Build a Specification from already-decoded YAML data.

    Rule members name duties or actions of the same document, or give their
    integer index. The offsets shift resolved indices so a document can be
    appended to a specification that already holds that many actions or
    duties.
    """
    duty_entries = _entries(data, "duties", source)
    action_entries = _entries(data, "actions", source)
    duty_names = _names(duty_entries, "duties", source)
    action_names = _names(action_entries, "actions", source)

    duties = [
        Duty(name=name, partial_state=_parse_state(entry.get("state"), f"{source}: duties[{name}]"))
        for name, entry in zip(duty_names, duty_entries)
    ]
    actions = [
        Action(
            name=name,
            src_pstate=_parse_state(entry.get("pre"), f"{source}: actions[{name}].pre"),
            dst_pstate=_parse_state(entry.get("post"), f"{source}: actions[{name}].post"),
        )
        for name, entry in zip(action_names, action_entries)
    ]
    return Specification(
        duties=duties,
        drules=_parse_rules(
            _entries(data, "drules", source), Universe.DUTIES, duty_names, source, duty_offset
        ),
        actions=actions,
        arules=_parse_rules(
            _entries(data, "arules", source), Universe.ACTIONS, action_names, source, action_offset
        ),
    )


def _read_yaml(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise SpecificationError(f"{path}: invalid YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SpecificationError(f"{path}: top level must be a mapping")
    return data


def load_specification(path: str | Path) -> Specification:
    """Load the duties, actions and rules of a YAML problem file."""
    return parse_specification(_read_yaml(path), str(path))


def resolve_duty(spec: Specification, ref: Any) -> int:
    """Turn a duty name or index into a checked duty index.

    A string is looked up as a name first; digits only count as an index
    when no duty carries that name.
    """
    if isinstance(ref, str):
        try:
            return spec.duty_index(ref)
        except KeyError:
            if not ref.isdigit():
                raise SpecificationError(f"unknown duty {ref!r}") from None
        ref = int(ref)
    if _is_index(ref):
        if ref >= len(spec.duties):
            raise SpecificationError(f"duty index {ref} out of range ({len(spec.duties)} duties)")
        return ref
    raise SpecificationError(f"invalid duty reference {ref!r}")


def _log_level(value: Any, path: str | Path) -> str:
    """Normalize a log level given by name or number."""
    if isinstance(value, str) and value.upper() in LOG_LEVEL_NAMES:
        return value.upper()
    if isinstance(value, int) and not isinstance(value, bool):
        name = logging.getLevelName(value)
        if name in LOG_LEVEL_NAMES:
            return name
    raise SpecificationError(
        f"{path}: option 'log_level' must be one of {', '.join(LOG_LEVEL_NAMES)}, got {value!r}"
    )


def load_problems(paths: Iterable[str | Path], duty: Any = None) -> Problem:
    """Load and compose several problem files in order.

    Specifications are composed without deduplication. Rule members keep
    referring to entries of their own file. Start states and options are
    merged with later files winning.
    """
    spec = Specification()
    start_state = PartialState()
    options: Dict[str, Any] = {}
    for path in paths:
        data = _read_yaml(path)
        spec = spec.compose(
            parse_specification(data, str(path), len(spec.actions), len(spec.duties))
        )
        start_state = start_state.update(_parse_state(data.get("start"), f"{path}: start"))
        file_options = data.get("options") or {}
        if not isinstance(file_options, Mapping):
            raise SpecificationError(f"{path}: 'options' must be a mapping")
        unknown = set(file_options) - OPTION_KEYS
        if unknown:
            raise SpecificationError(f"{path}: unknown options {sorted(unknown)}")
        if "log_level" in file_options:
            level = _log_level(file_options["log_level"], path)
            file_options = dict(file_options, log_level=level)
        options.update(file_options)

    if duty is None:
        duty = options.get("duty")
    if duty is None and len(spec.duties) == 1:
        duty = 0
    duty_index = resolve_duty(spec, duty) if duty is not None else None
    return Problem(spec=spec, start_state=start_state, duty_index=duty_index, options=options)


def load_problem(path: str | Path, duty: Any = None) -> Problem:
    return load_problems([path], duty)
