"""fitpix benchmark suite.

Pushes synthetic photos, screenshots and graphics through every preset in
aggressive mode and reports size, quality reached and encode passes.

Run all benchmarks:
    python -m benchmarks.run

Run with filters:
    python -m benchmarks.run --preset avatar
    python -m benchmarks.run --content photo --json
"""

from benchmarks.cases import BenchmarkCase, build_all_cases
from benchmarks.runner import BenchmarkResult, BenchmarkSuite, run_suite

__all__ = [
    "BenchmarkCase",
    "BenchmarkResult",
    "BenchmarkSuite",
    "build_all_cases",
    "run_suite",
]
