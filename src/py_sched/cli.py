"""Command-line entry point: ``py-sched``.

Generates a workload, runs it under the chosen policies, and prints a
summary table (plus per-process tables with ``--detailed`` and the
event trace with ``--trace``).

The argument parsing and output building are plain functions returning
values, so they are testable; ``main()`` is the thin I/O wrapper.
"""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Any

from py_sched.config import (
    DEFAULT_IO_REPETITIONS,
    DEFAULT_JOB_DURATION,
    DEFAULT_MAX_ARRIVAL,
    DEFAULT_MLFQ_SLICES,
    DEFAULT_QUANTUM,
    WorkloadConfig,
)
from py_sched.engine import SimulationError
from py_sched.harness import compare
from py_sched.report import format_records, format_summaries
from py_sched.scheduler import available_schedulers
from py_sched.workload import generate_workload

if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``py-sched``."""
    parser = argparse.ArgumentParser(
        prog="py-sched",
        description="Compare CPU scheduling policies on a synthetic workload.",
    )
    parser.add_argument("--cpu-bound", type=int, default=2, help="Number of CPU-bound processes.")
    parser.add_argument("--io-bound", type=int, default=2, help="Number of I/O-bound processes.")
    parser.add_argument("--duration", type=int, default=DEFAULT_JOB_DURATION, help="Ticks per job.")
    parser.add_argument(
        "--ios", type=int, default=DEFAULT_IO_REPETITIONS, help="CPU/I-O rounds per I/O-bound job."
    )
    parser.add_argument(
        "--max-arrival", type=int, default=DEFAULT_MAX_ARRIVAL, help="Latest arrival tick."
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for arrivals.")
    parser.add_argument(
        "--policy",
        action="append",
        choices=available_schedulers(),
        help="Policy to run (repeatable; default: all).",
    )
    parser.add_argument("--quantum", type=int, default=DEFAULT_QUANTUM, help="Round Robin quantum.")
    parser.add_argument(
        "--mlfq-slices",
        type=int,
        nargs=2,
        default=list(DEFAULT_MLFQ_SLICES),
        metavar=("Q0", "Q1"),
        help="MLFQ time slices for levels 0 and 1.",
    )
    parser.add_argument("--detailed", action="store_true", help="Print per-process tables.")
    parser.add_argument("--trace", action="store_true", help="Print the event trace.")
    parser.add_argument("--threads", type=int, default=1, help="Worker threads for the runs.")
    parser.add_argument("--max-ticks", type=int, default=None, help="Abort runs after N ticks.")
    return parser


def run_cli(args: argparse.Namespace) -> str:
    """Run the simulations described by *args* and return the report text.

    Raises:
        ValueError: For invalid workload or policy parameters.
        SimulationError: If a run exceeds ``--max-ticks``.

    """
    config = WorkloadConfig(
        cpu_bound=args.cpu_bound,
        io_bound=args.io_bound,
        duration=args.duration,
        io_repetitions=args.ios,
        max_arrival=args.max_arrival,
        seed=args.seed,
    )
    workload = generate_workload(config)
    params: dict[str, Any] = {"quantum": args.quantum, "time_slices": tuple(args.mlfq_slices)}
    results = compare(
        workload,
        args.policy,
        params=params,
        threads=args.threads,
        trace=args.trace,
        max_ticks=args.max_ticks,
    )

    sections = [format_summaries([r.summary for r in results])]
    for result in results:
        if args.detailed:
            sections.append(f"{result.summary.policy}\n{format_records(result.records)}")
        if args.trace:
            sections.append("\n".join(str(entry) for entry in result.log))
    return "\n\n".join(sections)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse *argv*, run, and print the report.

    Returns:
        Process exit code: 0 on success, 2 on invalid input, 1 when a
        run exceeds its tick budget.

    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        output = run_cli(args)
    except ValueError as e:
        parser.error(str(e))
    except SimulationError as e:
        print(f"py-sched: {e}")  # noqa: T201
        return 1
    print(output)  # noqa: T201
    return 0
