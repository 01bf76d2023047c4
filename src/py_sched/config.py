"""Simulation defaults and validated workload parameters.

The constants mirror the classic classroom setup: jobs of 1000 ticks,
I/O-bound jobs split into four CPU/I-O rounds, and arrivals spread over
the first couple of thousand ticks in steps of ten.

``WorkloadConfig`` bundles the knobs the workload generator needs and
checks them once, at construction, so a bad value fails loudly before a
simulation starts instead of producing an empty or endless run.
"""

from dataclasses import dataclass

DEFAULT_JOB_DURATION = 1000
DEFAULT_IO_REPETITIONS = 4
DEFAULT_MAX_ARRIVAL = 2550
ARRIVAL_STEP = 10

DEFAULT_QUANTUM = 20
DEFAULT_MLFQ_SLICES: tuple[int, int] = (20, 40)
MLFQ_LEVELS = 3

TIMER_WHEEL_SLOTS = 256

# Share of an I/O-bound job spent on the CPU, as a fraction of ten.
IO_JOB_CPU_TENTHS = 2


@dataclass(frozen=True)
class WorkloadConfig:
    """Parameters for a generated workload.

    Attributes:
        cpu_bound: Number of CPU-bound processes.
        io_bound: Number of I/O-bound processes.
        duration: Total duration of every job, in ticks.
        io_repetitions: CPU/I-O rounds in each I/O-bound job.
        max_arrival: Latest possible arrival tick.
        seed: Seed for arrival times and shuffling (None = nondeterministic).
        shuffle: Shuffle the process table order after assigning ids.

    """

    cpu_bound: int = 2
    io_bound: int = 2
    duration: int = DEFAULT_JOB_DURATION
    io_repetitions: int = DEFAULT_IO_REPETITIONS
    max_arrival: int = DEFAULT_MAX_ARRIVAL
    seed: int | None = None
    shuffle: bool = True

    def __post_init__(self) -> None:
        """Reject configurations that cannot produce a valid workload."""
        if self.cpu_bound < 0 or self.io_bound < 0:
            msg = "Process counts must not be negative"
            raise ValueError(msg)
        if self.cpu_bound + self.io_bound == 0:
            msg = "Workload must contain at least one process"
            raise ValueError(msg)
        if self.duration < 0:
            msg = f"Job duration must not be negative, got {self.duration}"
            raise ValueError(msg)
        if self.io_bound and self.io_repetitions <= 0:
            msg = f"I/O repetitions must be positive, got {self.io_repetitions}"
            raise ValueError(msg)
        if self.max_arrival < 0:
            msg = f"Maximum arrival must not be negative, got {self.max_arrival}"
            raise ValueError(msg)

    @property
    def label(self) -> str:
        """Return a short human label such as ``2 CPU + 2 IO``."""
        return f"{self.cpu_bound} CPU + {self.io_bound} IO"
