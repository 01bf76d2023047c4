"""Plain-text tables for simulation results.

Pure formatting: every function takes records or summaries and returns
a string, so the CLI and tests can use them without capturing stdout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_sched.stats import ProcessRecord, RunSummary

_RECORD_COLUMNS = (
    ("ID", "pid"),
    ("Type", "job_type"),
    ("Total", "total_duration"),
    ("IO", "total_io_duration"),
    ("Arrival", "arrival_time"),
    ("Completion", "completion_time"),
    ("Burst", "burst_time"),
    ("Waiting", "waiting_time"),
    ("Turnaround", "turnaround_time"),
    ("Weighted", "weighted_turnaround_time"),
)

_SUMMARY_COLUMNS = (
    ("Policy", "policy"),
    ("Workload", "workload"),
    ("Avg Waiting", "average_waiting_time"),
    ("Avg Turnaround", "average_turnaround_time"),
    ("Avg Weighted", "average_weighted_turnaround_time"),
    ("CPU %", "cpu_usage"),
    ("Switches", "context_switches"),
)


def format_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> str:
    """Render *rows* under *headers* as a column-aligned table.

    Text columns are left-aligned, numeric columns right-aligned.
    """
    cells = [[str(v) for v in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in cells:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    numeric = [
        bool(rows) and all(isinstance(row[i], int) for row in rows) for i in range(len(headers))
    ]

    def _line(values: Sequence[str]) -> str:
        parts = [
            v.rjust(widths[i]) if numeric[i] else v.ljust(widths[i]) for i, v in enumerate(values)
        ]
        return " │ ".join(parts).rstrip()

    lines = [_line(list(headers)), "─┼─".join("─" * w for w in widths)]
    lines.extend(_line(row) for row in cells)
    return "\n".join(lines)


def format_records(records: Sequence[ProcessRecord]) -> str:
    """Render per-process statistics."""
    headers = [h for h, _ in _RECORD_COLUMNS]
    rows = [[getattr(r, attr) for _, attr in _RECORD_COLUMNS] for r in records]
    return format_table(headers, rows)


def format_summaries(summaries: Sequence[RunSummary]) -> str:
    """Render one summary row per run."""
    headers = [h for h, _ in _SUMMARY_COLUMNS]
    rows = [[getattr(s, attr) for _, attr in _SUMMARY_COLUMNS] for s in summaries]
    return format_table(headers, rows)
