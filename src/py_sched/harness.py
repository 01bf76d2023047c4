"""Comparison harness — run one workload under many policies.

Each run gets its own ``Os``, its own freshly spawned process table,
and its own scheduler built from a name inside the worker.  Nothing
mutable crosses between runs, so they can safely execute on a thread
pool; results always come back in the order the policies were given.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from py_sched.engine import Os
from py_sched.logging import Logger, LogLevel
from py_sched.scheduler import available_schedulers, create_scheduler
from py_sched.stats import ProcessRecord, RunSummary, collect_records, summarize

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_sched.logging import LogEntry
    from py_sched.workload import Workload


@dataclass(frozen=True)
class RunResult:
    """Everything one simulation run produced."""

    scheduler: str
    summary: RunSummary
    records: list[ProcessRecord]
    log: list[LogEntry] = field(default_factory=list)

    def to_dict(self, *, detailed: bool = False) -> dict[str, Any]:
        """Return a JSON-friendly dict (records only when *detailed*)."""
        data: dict[str, Any] = {"scheduler": self.scheduler, "summary": self.summary.to_dict()}
        if detailed:
            data["records"] = [r.to_dict() for r in self.records]
        return data


def run_simulation(
    workload: Workload,
    scheduler: str,
    *,
    params: dict[str, Any] | None = None,
    trace: bool = False,
    max_ticks: int | None = None,
) -> RunResult:
    """Simulate *workload* under the policy named *scheduler*.

    Args:
        workload: The workload to spawn processes from.
        scheduler: Registered policy name (see ``available_schedulers``).
        params: Policy parameters such as ``quantum`` or ``time_slices``.
        trace: Keep the full TRACE log instead of just INFO entries.
        max_ticks: Optional tick budget passed to the engine.

    Returns:
        The summary, per-process records, and the captured log.

    """
    policy = create_scheduler(scheduler, **(params or {}))
    logger = Logger(min_level=LogLevel.TRACE if trace else LogLevel.INFO)
    os = Os.from_workload(workload, policy, logger=logger, max_ticks=max_ticks)
    os.run()
    return RunResult(
        scheduler=scheduler,
        summary=summarize(os, workload=workload.label),
        records=collect_records(os),
        log=logger.entries,
    )


def compare(
    workload: Workload,
    schedulers: Sequence[str] | None = None,
    *,
    params: dict[str, Any] | None = None,
    threads: int = 1,
    trace: bool = False,
    max_ticks: int | None = None,
) -> list[RunResult]:
    """Run *workload* under each policy and return results in order.

    Args:
        workload: The workload shared (read-only) by every run.
        schedulers: Policy names; defaults to every registered policy.
        params: Policy parameters, shared; each policy takes what it uses.
        threads: Worker threads; 1 runs sequentially in the caller.
        trace: Keep TRACE entries in every run's log.
        max_ticks: Optional tick budget per run.

    Raises:
        ValueError: If *threads* is less than 1 or a name is unknown.

    """
    if threads < 1:
        msg = f"threads must be at least 1, got {threads}"
        raise ValueError(msg)
    names = list(schedulers) if schedulers is not None else available_schedulers()
    # Fail on a bad name before any worker starts.
    for name in names:
        create_scheduler(name, **(params or {}))

    def _run(name: str) -> RunResult:
        return run_simulation(workload, name, params=params, trace=trace, max_ticks=max_ticks)

    if threads == 1:
        return [_run(name) for name in names]
    with ThreadPoolExecutor(max_workers=threads) as pool:
        return list(pool.map(_run, names))
