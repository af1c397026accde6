"""Benchmark CLI entry point.

Usage:
    python -m benchmarks.run                      # All presets, table to stdout
    python -m benchmarks.run --preset avatar      # One preset
    python -m benchmarks.run --content photo      # One content type
    python -m benchmarks.run --json               # JSON to stdout
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict

from benchmarks.runner import BenchmarkSuite, run_suite
from pipeline.facade import format_size
from pipeline.presets import TARGET_SIZES, resolve_preset_name


def print_report(suite: BenchmarkSuite) -> None:
    header = (
        f"{'case':<28} {'preset':<11} {'original':>10} {'optimized':>10} "
        f"{'target':>8} {'red%':>5} {'q':>5} {'passes':>6} {'dims':>10} {'ms':>8}"
    )
    print(header)
    print("-" * len(header))
    for r in suite.results:
        if r.opt_error:
            print(f"{r.case.name:<28} {r.preset_name:<11} ERROR: {r.opt_error}")
            continue
        marker = "" if r.target_met else " *"
        print(
            f"{r.case.name:<28} {r.preset_name:<11} {format_size(len(r.case.data)):>10} "
            f"{format_size(r.optimized_size):>10} {format_size(r.target_size):>8} "
            f"{r.reduction_pct:>5} {r.quality:>5.2f} {r.passes:>6} {r.dimensions:>10} "
            f"{r.opt_time_ms:>8.0f}{marker}"
        )
    print(f"\n{suite.cases_run} runs, {suite.cases_failed} failed, {suite.total_time_s:.1f}s")
    print("* target not met (quality floor reached)")


def export_json(suite: BenchmarkSuite) -> str:
    rows = []
    for r in suite.results:
        row = asdict(r)
        row["case"] = {"name": r.case.name, "size": len(r.case.data), "content": r.case.content}
        rows.append(row)
    return json.dumps(
        {"total_time_s": suite.total_time_s, "presets": suite.presets_used, "results": rows},
        indent=2,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="fitpix preset benchmark")
    parser.add_argument("--preset", action="append", help="Preset name (repeatable)")
    parser.add_argument("--content", help="Content type filter (photo, screenshot, ...)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    args = parser.parse_args(argv)

    presets = None
    if args.preset:
        try:
            presets = [resolve_preset_name(p) for p in args.preset]
        except ValueError as e:
            parser.error(str(e))
        missing = [p.value for p in presets if p not in TARGET_SIZES]
        if missing:
            parser.error(f"Presets without a byte budget: {', '.join(missing)}")

    suite = asyncio.run(
        run_suite(presets=presets, content_filter=args.content, progress=not args.json)
    )

    if args.json:
        print(export_json(suite))
    else:
        print_report(suite)
    return 1 if suite.cases_failed else 0


if __name__ == "__main__":
    sys.exit(main())
