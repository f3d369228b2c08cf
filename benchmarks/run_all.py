#!/usr/bin/env python3
"""Run all Pulse SRE performance benchmarks.

Usage:
    python -m benchmarks.run_all [--iterations N]
"""

from __future__ import annotations

import argparse

from benchmarks.bench_slo import run_all as engine_benchmarks

HEADER = (
    f"{'Benchmark':30s}  {'Throughput':>14s}  {'p50':>10s}  {'p99':>10s}"
)
SEP = "-" * len(HEADER)


def main() -> None:
    parser = argparse.ArgumentParser(description="Pulse SRE performance benchmarks")
    parser.add_argument(
        "--iterations", "-n", type=int, default=10_000, help="Iterations per benchmark"
    )
    args = parser.parse_args()
    n = args.iterations

    print()
    print("Pulse SRE: Performance Benchmarks")
    print(f"Iterations per benchmark: {n:,}")
    print()
    print(HEADER)
    print(SEP)

    for r in engine_benchmarks(n):
        throughput = f"{r.throughput:,.0f} ops/sec"
        p50 = f"{r.p50_us:.2f}µs"
        p99 = f"{r.p99_us:.2f}µs"
        print(f"  {r.name:28s}  {throughput:>14s}  {p50:>10s}  {p99:>10s}")

    print()
    print("Done.")


if __name__ == "__main__":
    main()
