#!/usr/bin/env python3
"""
storex Performance Benchmarks

Times the hot paths of the store engine and prints a rich summary table:
root set, deep scope set, produce and history navigation.

Usage:
    python scripts/benchmark.py             # Run all benchmarks
    python scripts/benchmark.py --n 5000    # Operations per benchmark
    python scripts/benchmark.py --depth 8   # Depth of the scoped path

Requires the ``bench`` extra (``pip install -e .[bench]``).
"""

import argparse
import time
from dataclasses import dataclass
from typing import Callable, List

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from storex import create_store, historize, produce

DEFAULT_N = 10000
DEFAULT_DEPTH = 5


@dataclass
class BenchmarkResult:
    name: str
    operations: int
    elapsed: float

    @property
    def operations_per_second(self) -> float:
        return self.operations / self.elapsed if self.elapsed > 0 else float("inf")

    @property
    def latency_us(self) -> float:
        return self.elapsed / self.operations * 1e6 if self.operations else 0.0


def _time(name: str, n: int, operation: Callable[[int], None]) -> BenchmarkResult:
    start = time.perf_counter()
    for i in range(n):
        operation(i)
    return BenchmarkResult(name, n, time.perf_counter() - start)


def _nested_state(depth: int) -> dict:
    state: dict = {"value": 0}
    for level in range(depth):
        state = {f"level{level}": state, f"sibling{level}": {"data": list(range(10))}}
    return state


def _deep_path(depth: int) -> str:
    return ".".join([f"level{level}" for level in reversed(range(depth))] + ["value"])


def bench_root_set(n: int) -> BenchmarkResult:
    store = create_store({"count": 0})
    store.subscribe(lambda new, old: None)
    return _time("Root set", n, lambda i: store.set({"count": i + 1}))


def bench_scope_set(n: int, depth: int) -> BenchmarkResult:
    store = create_store(_nested_state(depth))
    scope = store.get_scope_store(_deep_path(depth))
    scope.subscribe(lambda new, old: None)
    return _time(f"Scope set (depth {depth})", n, lambda i: scope.set(i + 1))


def bench_produce(n: int, depth: int) -> BenchmarkResult:
    store = create_store(_nested_state(depth))
    keys = _deep_path(depth).split(".")

    def recipe(i):
        def edit(draft):
            for key in keys[:-1]:
                draft = draft[key]
            draft[keys[-1]] = i

        return edit

    return _time(
        f"Produce (depth {depth})", n, lambda i: produce(store.get(), recipe(i))
    )


def bench_history(n: int) -> BenchmarkResult:
    store = create_store({"count": 0})
    history = historize(store, max_size=n + 1)
    for i in range(n):
        store.set({"count": i + 1})

    def navigate(i):
        if i % 2:
            history.forward()
        else:
            history.back()

    return _time("History back/forward", n, navigate)


class StorexBenchmark:
    """Rich-formatted display for storex benchmarks."""

    def __init__(self, n: int, depth: int):
        self.console = Console()
        self.n = n
        self.depth = depth
        self.results: List[BenchmarkResult] = []

    def run(self) -> None:
        self.console.print(
            Panel(
                Align.center("storex Performance Benchmark Suite"),
                title="storex Benchmarks",
                border_style="blue",
            )
        )
        for bench in (
            lambda: bench_root_set(self.n),
            lambda: bench_scope_set(self.n, self.depth),
            lambda: bench_produce(self.n, self.depth),
            lambda: bench_history(self.n),
        ):
            result = bench()
            self.results.append(result)
            self.console.print(
                f"[green]✓[/green] {result.name}: "
                f"{result.operations_per_second:,.0f} ops/sec"
            )
        self._display_results()

    def _display_results(self) -> None:
        table = Table(title="Benchmark Results")
        table.add_column("Benchmark", style="cyan", no_wrap=True)
        table.add_column("Operations", style="magenta", justify="right")
        table.add_column("ops/sec", style="green", justify="right")
        table.add_column("Latency", style="yellow", justify="right")
        for result in self.results:
            table.add_row(
                result.name,
                f"{result.operations:,}",
                f"{result.operations_per_second:,.0f}",
                f"{result.latency_us:.1f}μs",
            )
        self.console.print()
        self.console.print(table)


def main() -> None:
    parser = argparse.ArgumentParser(description="storex performance benchmarks")
    parser.add_argument("--n", type=int, default=DEFAULT_N, help="operations per benchmark")
    parser.add_argument("--depth", type=int, default=DEFAULT_DEPTH, help="scope path depth")
    args = parser.parse_args()
    StorexBenchmark(args.n, args.depth).run()


if __name__ == "__main__":
    main()
