#!/usr/bin/env python3
"""
Benchmarks for implicit B-tree bulk loading.

This script measures:
 1. Height computation for growing input sizes
 2. Full build times for several sizes and branching factors
 3. Tree statistics of one build per branching factor
 4. In-order walk cost over a built tree

Usage:
    python benchmarks.py [--sizes 1000 10000 100000] [--branching 2 8 64] [--trials T] [--seed S]
"""
import argparse
import gc
import time
import timeit
from dataclasses import asdict
from pprint import pprint
from statistics import mean, variance

import numpy as np
from tqdm import tqdm

from implicit_btree.factory import make_implicit_btree_classes
from implicit_btree.implicit_tree_base import tree_stats_, level_histogram
from implicit_btree.profiling import PerformanceTracker


def sorted_keys(n: int, rng: np.random.Generator) -> list:
    """Draw n distinct integer keys and return them sorted."""
    space = max(4 * n, 1)
    return np.sort(rng.choice(space, size=n, replace=False)).tolist()


def bench_height(branching: list[int], max_n: int, runs: int = 3) -> None:
    """Benchmark height() over every size up to max_n."""
    for B in branching:
        _, _, Indexer, _ = make_implicit_btree_classes(B)
        def _inner():
            for n in range(max_n):
                Indexer.height(n)
        t = timeit.timeit(_inner, number=runs) / runs
        print(f"[bench] height() B={B:<4}        {t:.4f}s for {max_n} calls")


def measure_build(n: int, B: int, trials: int, rng: np.random.Generator) -> tuple[float, float]:
    """
    Build `trials` trees of n keys with branching factor B.
    Returns (mean_time_s, variance_time_s).
    """
    TreeClass, _, _, _ = make_implicit_btree_classes(B)
    inputs = [sorted_keys(n, rng) for _ in range(trials)]

    gc.collect()
    gc.disable()
    try:
        times = []
        for keys in inputs:
            t0 = time.perf_counter()
            TreeClass.from_sorted(keys)
            times.append(time.perf_counter() - t0)
    finally:
        gc.enable()

    var = variance(times) if len(times) > 1 else 0.0
    return mean(times), var


def bench_build(sizes: list[int], branching: list[int], trials: int, rng: np.random.Generator) -> None:
    """Run measure_build for each size and branching factor and print results."""
    grid = [(n, B) for n in sizes for B in branching]
    for n, B in tqdm(grid, desc="builds", leave=False):
        avg, var = measure_build(n, B, trials, rng)
        tqdm.write(
            f"[bench] Build n={n:<8} B={B:<4} → avg {avg*1e3:9.3f} ms   σ²={var*1e6:9.3f} ms²"
        )


def bench_tree_stats(n: int, branching: list[int], rng: np.random.Generator) -> None:
    """Build one tree per branching factor and print its stats."""
    keys = sorted_keys(n, rng)
    for B in branching:
        TreeClass, _, _, _ = make_implicit_btree_classes(B)
        tree = TreeClass.from_sorted(keys)
        print(f"[bench] tree_stats_(n={n}, B={B}):")
        pprint(asdict(tree_stats_(tree)))
        print(f"[bench] keys per level: {level_histogram(tree)}")


def bench_walk(n: int, branching: list[int], rng: np.random.Generator, runs: int = 3) -> None:
    """Time a full in-order walk of a tree of n keys."""
    keys = sorted_keys(n, rng)
    for B in branching:
        TreeClass, _, _, _ = make_implicit_btree_classes(B)
        tree = TreeClass.from_sorted(keys)
        t = timeit.timeit(lambda: sum(1 for _ in tree.iter_keys()), number=runs) / runs
        print(f"[bench] iter_keys() n={n} B={B:<4} {t:.4f}s")


def main():
    parser = argparse.ArgumentParser(description="Implicit B-tree benchmarks")
    parser.add_argument("--sizes", nargs='+', type=int, default=[1000, 10_000, 100_000],
                        help="Input sizes for build benchmarks")
    parser.add_argument("--branching", nargs='+', type=int, default=[2, 8, 64],
                        help="Branching factors (max keys per node)")
    parser.add_argument("--trials", type=int, default=10,
                        help="Number of builds per size and branching factor")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for key generation")
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)

    print("\n=== height() Benchmark ===")
    bench_height(args.branching, max(args.sizes))

    print("\n=== Bulk Load ===")
    bench_build(args.sizes, args.branching, args.trials, rng)

    print("\n=== Tree Stats ===")
    bench_tree_stats(max(args.sizes), args.branching, rng)

    print("\n=== In-order Walk ===")
    bench_walk(max(args.sizes), args.branching, rng)

    print("\n=== Method-Level Performance Breakdown ===")
    tracker = PerformanceTracker.get_instance()
    print(tracker.report())
    tracker.reset()

if __name__ == "__main__":
    main()
