"""Command-line interface."""

from __future__ import annotations

import argparse
import itertools
import logging
import sys
from pathlib import Path

from dutysearch.core.errors import SpecificationError
from dutysearch.core.path import PathNode
from dutysearch.core.search import SearchStats, iter_paths_to_duty
from dutysearch.core.spec import Specification

from . import parser

logger = logging.getLogger(__name__)

LOG_LEVELS = ["WARNING", "INFO", "DEBUG"]


def format_path(spec: Specification, path: PathNode) -> str:
    lines = []
    for step, names in enumerate(path.action_names(spec), start=1):
        lines.append(f"  {step}. {', '.join(names)}")
    if not lines:
        lines.append("  (start state already satisfies the duty)")
    state = path.to_partial_state(spec)
    lines.append("  => " + ", ".join(f"{var}={val}" for var, val in sorted(state.items())))
    return "\n".join(lines)


def _setup_logging(verbose: int, configured: str | None) -> None:
    if verbose:
        level = LOG_LEVELS[min(verbose, len(LOG_LEVELS) - 1)]
    else:
        level = configured or "WARNING"
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _non_negative(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {text}")
    return value


def _option_int(options: dict, key: str) -> int | None:
    value = options.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SpecificationError(f"option {key!r} must be a non-negative integer, got {value!r}")
    return value


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="dutysearch",
        description="Find every sequence of concurrent action steps that reaches a duty.",
    )
    ap.add_argument("problems", nargs="+", type=Path, help="YAML problem file(s), composed in order")
    ap.add_argument("--duty", help="target duty name or index (overrides options.duty)")
    ap.add_argument("--max-depth", type=_non_negative, help="do not extend paths beyond this many steps")
    ap.add_argument("--limit", type=_non_negative, help="stop after reporting this many paths")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="more logging (repeatable)")
    args = ap.parse_args(argv)

    try:
        problem = parser.load_problems(args.problems, args.duty)
        _setup_logging(args.verbose, problem.options.get("log_level"))
        if problem.duty_index is None:
            raise SpecificationError("no target duty: pass --duty or set options.duty")
        max_depth = args.max_depth if args.max_depth is not None else _option_int(problem.options, "max_depth")
        limit = args.limit if args.limit is not None else _option_int(problem.options, "limit")
    except (SpecificationError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    spec = problem.spec
    duty = spec.duties[problem.duty_index]
    print(
        f"Loaded {len(spec.actions)} actions, {len(spec.duties)} duties; "
        f"searching for {duty.name!r}."
    )
    stats = SearchStats()
    paths = iter_paths_to_duty(
        spec, problem.start_state, problem.duty_index, max_depth=max_depth, stats=stats
    )
    found = 0
    for found, path in enumerate(itertools.islice(paths, limit), start=1):
        print(f"path {found}:")
        print(format_path(spec, path))
    logger.info("expanded %d node(s), %d cut at depth bound", stats.expanded, stats.pruned_by_depth)
    print(f"found {found} path(s)")
    return 0 if found else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
