"""Tests for the plain-text report tables."""

from py_sched.report import format_records, format_summaries, format_table
from py_sched.stats import ProcessRecord, RunSummary


def _record(pid: int) -> ProcessRecord:
    """Create a finished CPU-job record."""
    return ProcessRecord(
        pid=pid,
        job_type="CPU",
        total_duration=1000,
        total_io_duration=0,
        arrival_time=0,
        completion_time=1000,
        burst_time=1000,
        waiting_time=0,
        turnaround_time=1000,
        weighted_turnaround_time=1,
    )


class TestFormatTable:
    """Verify the table renderer."""

    def test_header_rule_and_rows(self) -> None:
        """A table has a header line, a rule, then one line per row."""
        text = format_table(["Name", "N"], [["a", 1], ["bb", 22]])
        lines = text.splitlines()
        assert lines == [
            "Name │  N",
            "─────┼───",
            "a    │  1",
            "bb   │ 22",
        ]

    def test_empty_rows(self) -> None:
        """With no rows only the header and rule are printed."""
        lines = format_table(["A", "B"], []).splitlines()
        assert lines == ["A │ B", "──┼──"]


class TestFormatRecords:
    """Verify the per-process table."""

    def test_headers(self) -> None:
        """The header row names every metric."""
        header = format_records([_record(1)]).splitlines()[0]
        for name in ("ID", "Type", "Arrival", "Completion", "Waiting", "Weighted"):
            assert name in header

    def test_one_line_per_record(self) -> None:
        """Each record gets its own row."""
        text = format_records([_record(1), _record(2)])
        assert len(text.splitlines()) == 4  # noqa: PLR2004


class TestFormatSummaries:
    """Verify the comparison table."""

    def test_row_values(self) -> None:
        """Summary rows show the policy label and metrics."""
        summary = RunSummary(
            policy="Round Robin; Preemptive; for Job or Process",
            workload="2 CPU + 2 IO",
            processes=4,
            clock=4000,
            average_waiting_time=1500,
            average_turnaround_time=2500,
            average_weighted_turnaround_time=4,
            cpu_usage=75,
            context_switches=120,
        )
        lines = format_summaries([summary]).splitlines()
        assert lines[0].startswith("Policy")
        assert "CPU %" in lines[0]
        assert lines[2].startswith("Round Robin; Preemptive; for Job or Process")
        assert "2 CPU + 2 IO" in lines[2]
        assert lines[2].endswith("120")
