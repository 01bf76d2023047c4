"""PySched — a tick-driven CPU scheduling simulator.

A workload of jobs (sequences of CPU-bound and I/O-bound statements) is
loaded into a simulated OS.  The OS advances a virtual clock one tick at
a time, wakes processes from a timer wheel, and lets a pluggable
scheduling policy decide who owns the CPU.  When every process has
completed, the statistics module turns the process table into waiting,
turnaround, and CPU-usage figures so policies can be compared.
"""
