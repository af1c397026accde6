"""Benchmark runner.

Runs aggressive-mode optimization for each (case, preset) pair and
collects size, quality, pass count and timing.
"""

import sys
import time
from dataclasses import dataclass, field

from benchmarks.cases import BenchmarkCase, build_all_cases
from pipeline.facade import ImageOptimizer
from pipeline.presets import TARGET_SIZES
from schemas import PresetName


@dataclass
class BenchmarkResult:
    case: BenchmarkCase
    preset_name: str = ""
    target_size: int = 0
    optimized_size: int = 0
    reduction_pct: int = 0
    quality: float = 0.0
    passes: int = 0
    dimensions: str = ""
    target_met: bool = False
    opt_time_ms: float = 0.0
    opt_error: str = ""


@dataclass
class BenchmarkSuite:
    results: list[BenchmarkResult] = field(default_factory=list)
    total_time_s: float = 0.0
    cases_run: int = 0
    cases_failed: int = 0
    presets_used: list[str] = field(default_factory=list)


async def run_single(
    optimizer: ImageOptimizer,
    case: BenchmarkCase,
    preset: PresetName,
) -> BenchmarkResult:
    """Run aggressive optimization of one case under one preset."""
    target = TARGET_SIZES[preset]
    result = BenchmarkResult(case=case, preset_name=preset.value, target_size=target)
    try:
        t0 = time.perf_counter()
        opt = await optimizer.optimize_aggressive(case.data, preset, target)
        result.opt_time_ms = (time.perf_counter() - t0) * 1000
        result.optimized_size = opt.optimized_size_bytes
        result.reduction_pct = opt.compression_ratio_percent
        result.quality = opt.quality_used
        result.passes = opt.encode_passes
        result.dimensions = f"{opt.width}x{opt.height}"
        result.target_met = opt.target_met
    except Exception as e:
        result.opt_error = str(e)
    return result


async def run_suite(
    cases: list[BenchmarkCase] | None = None,
    presets: list[PresetName] | None = None,
    content_filter: str | None = None,
    progress: bool = True,
) -> BenchmarkSuite:
    """Run the benchmark suite sequentially (timings stay comparable).

    Args:
        cases: Specific cases to run, or None for all.
        presets: Presets to run. Defaults to every preset with a byte budget.
        content_filter: Only run cases of this content type (e.g. "photo").
        progress: Print progress to stderr.
    """
    if cases is None:
        cases = build_all_cases()
    if content_filter:
        cases = [c for c in cases if c.content == content_filter]
    if presets is None:
        presets = list(TARGET_SIZES)

    optimizer = ImageOptimizer()
    suite = BenchmarkSuite(presets_used=[p.value for p in presets])
    total = len(cases) * len(presets)
    t_start = time.perf_counter()

    for preset in presets:
        for case in cases:
            result = await run_single(optimizer, case, preset)
            suite.results.append(result)
            suite.cases_run += 1
            if result.opt_error:
                suite.cases_failed += 1
            if progress:
                print(f"\r  [{suite.cases_run}/{total}]", end="", flush=True, file=sys.stderr)

    suite.total_time_s = time.perf_counter() - t_start
    if progress:
        print(
            f"\r  Done: {suite.cases_run} cases in {suite.total_time_s:.1f}s" + " " * 20,
            file=sys.stderr,
        )
    return suite
