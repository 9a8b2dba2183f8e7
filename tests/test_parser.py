from pathlib import Path

import pytest

from dutysearch.core.errors import SpecificationError
from dutysearch.core.indexset import IndexSet
from dutysearch.core.model import PartialState
from dutysearch.io.parser import load_problem, load_problems, load_specification

PROBLEMS = Path(__file__).resolve().parent.parent / "problems"


def write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_load_assign_problem():
    problem = load_problem(PROBLEMS / "assign.yaml")
    assert problem.duty_index == 0
    assert problem.start_state == PartialState({0: 0, 1: 1})
    assert problem.spec.actions[0].dst_pstate == PartialState({0: 3})


def test_load_crossing_rules_resolve_names():
    spec = load_specification(PROBLEMS / "crossing.yaml")
    assert [a.name for a in spec.actions] == ["north go", "east go", "east stop"]
    assert spec.arules[0].if_all == IndexSet.of(0)
    assert spec.arules[0].then_none == IndexSet.of(1)
    assert spec.drules[0].then_none == IndexSet.of(1)
    assert spec.drules[0].if_all.is_empty()


def test_rules_accept_indices(tmp_path):
    path = write(
        tmp_path,
        "p.yaml",
        "actions: [{name: a}, {name: b}]\narules: [{name: r, if_all: [1], then_all: [a]}]\n",
    )
    rule = load_specification(path).arules[0]
    assert rule.if_all == IndexSet.of(1)
    assert rule.then_all == IndexSet.of(0)


def test_unknown_rule_member(tmp_path):
    path = write(tmp_path, "p.yaml", "actions: [{name: a}]\narules: [{if_all: [nope]}]\n")
    with pytest.raises(SpecificationError, match="unknown member 'nope'"):
        load_specification(path)


def test_duplicate_names(tmp_path):
    path = write(tmp_path, "p.yaml", "duties: [{name: d}, {name: d}]\n")
    with pytest.raises(SpecificationError, match="duplicate name"):
        load_specification(path)


def test_bad_state_values(tmp_path):
    path = write(tmp_path, "p.yaml", "actions: [{name: a, post: {x: 1}}]\n")
    with pytest.raises(SpecificationError, match="non-negative integers"):
        load_specification(path)


def test_duty_out_of_range(tmp_path):
    path = write(tmp_path, "p.yaml", "duties: [{name: d}]\n")
    with pytest.raises(SpecificationError, match="out of range"):
        load_problem(path, duty=3)


def test_duty_required_when_ambiguous(tmp_path):
    path = write(tmp_path, "p.yaml", "duties: [{name: a}, {name: b}]\n")
    assert load_problem(path).duty_index is None
    assert load_problem(path, duty="b").duty_index == 1
    assert load_problem(path, duty="1").duty_index == 1


def test_compose_files_in_order(tmp_path):
    first = write(
        tmp_path,
        "a.yaml",
        "duties: [{name: done, state: {0: 1}}]\nactions: [{name: go, post: {0: 1}}]\n"
        "start: {0: 0, 1: 0}\noptions: {duty: done, max_depth: 2}\n",
    )
    second = write(
        tmp_path,
        "b.yaml",
        "actions: [{name: go, post: {1: 1}}]\narules: [{if_all: [go], then_none: [0]}]\n"
        "start: {1: 4}\noptions: {max_depth: 5}\n",
    )
    problem = load_problems([first, second])
    spec = problem.spec
    assert [a.name for a in spec.actions] == ["go", "go"]
    # rule members keep pointing at their own file's actions
    assert spec.arules[0].if_all == IndexSet.of(1)
    assert spec.arules[0].then_none == IndexSet.of(1)
    assert problem.start_state == PartialState({0: 0, 1: 4})
    assert problem.options == {"duty": "done", "max_depth": 5}
    assert problem.duty_index == 0


def test_unknown_option(tmp_path):
    path = write(tmp_path, "p.yaml", "options: {depth: 3}\n")
    with pytest.raises(SpecificationError, match="unknown options"):
        load_problem(path)


def test_invalid_yaml(tmp_path):
    path = write(tmp_path, "p.yaml", "duties: [\n")
    with pytest.raises(SpecificationError, match="invalid YAML"):
        load_problem(path)


def test_log_level_normalized(tmp_path):
    path = write(tmp_path, "p.yaml", "options: {log_level: debug}\n")
    assert load_problem(path).options["log_level"] == "DEBUG"
    path = write(tmp_path, "q.yaml", "options: {log_level: 20}\n")
    assert load_problem(path).options["log_level"] == "INFO"


def test_log_level_rejects_unknown_values(tmp_path):
    for value in ("basic_format", "root", "verbose", "5"):
        path = write(tmp_path, "p.yaml", f"options: {{log_level: {value}}}\n")
        with pytest.raises(SpecificationError, match="log_level"):
            load_problem(path)


def test_digit_duty_names_win_over_indices(tmp_path):
    path = write(tmp_path, "p.yaml", "duties: [{name: '1'}, {name: '0'}, {name: other}]\n")
    problem = load_problem(path, duty="0")
    assert problem.spec.duties[problem.duty_index].name == "0"
    assert load_problem(path, duty="2").duty_index == 2
    assert load_problem(path, duty=0).duty_index == 0


def test_entries_must_be_lists(tmp_path):
    for text in ("duties: {}\n", "actions: 0\n"):
        path = write(tmp_path, "p.yaml", text)
        with pytest.raises(SpecificationError, match="must be a list"):
            load_specification(path)
