"""Run sysbench fileio disk benchmarks end to end."""

__version__ = "1.0.0"
