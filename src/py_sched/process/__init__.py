"""Process subsystem — statements, jobs, and the process control block.

Re-exports public symbols so callers can write::

    from py_sched.process import Job, Process, Statement
"""

from py_sched.process.job import Job, Statement, StatementKind
from py_sched.process.pcb import Process, ProcessState, RunningStatement

__all__ = [
    "Job",
    "Process",
    "ProcessState",
    "RunningStatement",
    "Statement",
    "StatementKind",
]
