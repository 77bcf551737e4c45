"""
Benchmarking and instrumentation for the routing algorithms.

Timings come from uncached runs through GraphService. The scalability and
memory probes are coarse: they describe relative cost on this machine and
nothing more.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence
import random
import time
import tracemalloc

import numpy as np
import pandas as pd

from algorithms import AlgorithmType
from graph_service import SPANNING_TREE_TYPES, GraphService, build_registry
from routing import AlgorithmResult
from simulation import simulate_war_damage


@dataclass(frozen=True)
class AlgorithmStats:
    algorithm: AlgorithmType
    avg_time: float
    min_time: float
    max_time: float
    std_dev: float
    avg_distance: float
    success_count: int
    total_runs: int

    @property
    def success_rate(self) -> float:
        if self.total_runs == 0:
            return 0.0
        return self.success_count / self.total_runs * 100.0


@dataclass(frozen=True)
class BenchmarkSummary:
    stats: Dict[AlgorithmType, AlgorithmStats]
    iterations: int
    start_id: str
    end_id: str

    def fastest(self) -> Optional[AlgorithmStats]:
        return min(self.stats.values(), key=lambda s: s.avg_time, default=None)

    def shortest_path(self) -> Optional[AlgorithmStats]:
        candidates = [
            s for s in self.stats.values()
            if s.avg_distance > 0 and s.algorithm not in SPANNING_TREE_TYPES
        ]
        return min(candidates, key=lambda s: s.avg_distance, default=None)

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "algorithm": s.algorithm.name,
                "avg_ms": s.avg_time,
                "min_ms": s.min_time,
                "max_ms": s.max_time,
                "std_ms": s.std_dev,
                "avg_distance_km": s.avg_distance,
                "success_pct": s.success_rate,
            }
            for s in self.stats.values()
        ]
        return pd.DataFrame(rows)

    def detailed_report(self) -> str:
        lines = [f"Route: {self.start_id} -> {self.end_id} | iterations: {self.iterations}", ""]
        if self.stats:
            lines.append(self.to_frame().to_string(index=False, float_format="%.3f"))
        fastest = self.fastest()
        if fastest is not None:
            lines.append(f"Fastest: {fastest.algorithm.name} ({fastest.avg_time:.3f} ms)")
        shortest = self.shortest_path()
        if shortest is not None:
            lines.append(f"Shortest path: {shortest.algorithm.name} ({shortest.avg_distance:.1f} km)")
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class BenchmarkRecord:
    summary: BenchmarkSummary
    timestamp: float


@dataclass(frozen=True)
class ScalabilityReport:
    # requested size -> algorithm -> wall time in ms
    results: Dict[int, Dict[AlgorithmType, float]]
    # requested size -> oblasts actually in the subgraph
    node_counts: Dict[int, int]

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame(
            {size: {a.name: ms for a, ms in row.items()} for size, row in self.results.items()}
        ).T
        frame.insert(0, "nodes", pd.Series(self.node_counts))
        frame.index.name = "size"
        return frame


@dataclass(frozen=True)
class DestructionImpactReport:
    results: Dict[float, Dict[AlgorithmType, AlgorithmResult]]

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for level, per_algorithm in self.results.items():
            for algorithm, result in per_algorithm.items():
                rows.append(
                    {
                        "destruction_pct": level,
                        "algorithm": algorithm.name,
                        "success": result.success,
                        "distance_km": result.distance if result.success else float("nan"),
                        "time_ms": result.execution_time_ms,
                    }
                )
        return pd.DataFrame(rows)

    def summary(self) -> str:
        lines: List[str] = []
        for level, per_algorithm in self.results.items():
            lines.append(f"Destruction: {level:.0f}%")
            for algorithm, result in per_algorithm.items():
                if result.success:
                    distance = result.main_route.total_distance if result.main_route else 0.0
                    lines.append(
                        f"  {algorithm.name}: {distance:.1f} km in {result.execution_time_ms:.3f} ms"
                    )
                else:
                    lines.append(f"  {algorithm.name}: FAILED")
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class MemoryUsageReport:
    # Peak bytes allocated during one run, as seen by tracemalloc.
    peak_bytes: Dict[AlgorithmType, int]


class PerformanceAnalyzer:
    def __init__(
        self,
        service: GraphService,
        verbose: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._service = service
        self._verbose = verbose
        self._rng = rng or random.Random()
        # Own engines, so instrumentation counters are not shared with the service.
        self._engines = build_registry()
        self._history: List[BenchmarkRecord] = []

    @property
    def service(self) -> GraphService:
        return self._service

    @property
    def history(self) -> List[BenchmarkRecord]:
        return list(self._history)

    def run_full_benchmark(self, start_id: str, end_id: str, iterations: int) -> BenchmarkSummary:
        """
        Time every algorithm `iterations` times on the live graph.

        Runs bypass the result cache. Algorithms that never succeed are left
        out of the summary.
        """
        if iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {iterations}")

        times: Dict[AlgorithmType, List[float]] = {a: [] for a in AlgorithmType}
        distances: Dict[AlgorithmType, List[float]] = {a: [] for a in AlgorithmType}

        for i in range(iterations):
            self._log(f"iteration {i + 1}/{iterations}")
            for algorithm in AlgorithmType:
                result = self._service.execute_algorithm(algorithm, start_id, end_id, use_cache=False)
                if not result.success:
                    continue
                times[algorithm].append(result.execution_time_ms)
                if result.main_route is not None:
                    distances[algorithm].append(result.main_route.total_distance)

        stats: Dict[AlgorithmType, AlgorithmStats] = {}
        for algorithm in AlgorithmType:
            samples = np.asarray(times[algorithm], dtype=float)
            if samples.size == 0:
                continue
            dists = np.asarray(distances[algorithm], dtype=float)
            stats[algorithm] = AlgorithmStats(
                algorithm=algorithm,
                avg_time=float(samples.mean()),
                min_time=float(samples.min()),
                max_time=float(samples.max()),
                std_dev=float(samples.std()),
                avg_distance=float(dists.mean()) if dists.size else 0.0,
                success_count=int(samples.size),
                total_runs=iterations,
            )

        summary = BenchmarkSummary(stats, iterations, start_id, end_id)
        self._history.append(BenchmarkRecord(summary, time.time()))
        self._log(f"benchmark done: {len(stats)} algorithm(s) with results")
        return summary

    def test_scalability(
        self,
        sizes: Iterable[int],
        start_id: Optional[str] = None,
        end_id: Optional[str] = None,
    ) -> ScalabilityReport:
        """
        One timed run per algorithm on the subgraph induced by the first N
        oblasts, for each N in sizes. Rows are keyed by the requested N;
        node_counts records the oblasts actually used when N exceeds the
        graph size.

        start_id/end_id are used when present in the subgraph; otherwise the
        first and last oblasts of the subgraph stand in.
        """
        graph = self._service.snapshot()
        all_ids = [node.id for node in graph.nodes()]
        if not all_ids:
            raise ValueError("Cannot measure scalability on an empty graph")

        results: Dict[int, Dict[AlgorithmType, float]] = {}
        node_counts: Dict[int, int] = {}
        for size in sizes:
            if size <= 0:
                raise ValueError(f"Subgraph size must be positive, got {size}")
            ids = all_ids[:size]
            sub = graph.subgraph(ids)
            start = start_id if start_id in ids else ids[0]
            end = end_id if end_id in ids else ids[-1]

            row: Dict[AlgorithmType, float] = {}
            for algorithm in AlgorithmType:
                engine = self._engines[algorithm]
                started = time.perf_counter()
                engine.run(sub, start, end)
                row[algorithm] = (time.perf_counter() - started) * 1000.0
            results[size] = row
            node_counts[size] = len(ids)
            self._log(f"scalability n={len(ids)} done")
        return ScalabilityReport(results, node_counts)

    def analyze_destruction_impact(
        self,
        start_id: str,
        end_id: str,
        levels: Optional[Sequence[float]] = None,
    ) -> DestructionImpactReport:
        """
        Run every algorithm after attacks of increasing strength.

        Each level attacks its own snapshot of the live graph, so the live
        graph and the result cache are never touched.
        """
        config = self._service.config
        if levels is None:
            levels = config.destruction_levels
        results: Dict[float, Dict[AlgorithmType, AlgorithmResult]] = {}
        for level in levels:
            self._log(f"destruction level {level:.0f}%")
            damaged = self._service.snapshot()
            simulate_war_damage(damaged, level, config.frontline_ids, rng=self._rng)
            results[float(level)] = {
                algorithm: self._engines[algorithm].run(damaged, start_id, end_id)
                for algorithm in AlgorithmType
            }
        return DestructionImpactReport(results)

    def analyze_memory_usage(self, start_id: str, end_id: str) -> MemoryUsageReport:
        """Peak traced allocation of one uncached run per algorithm."""
        started_here = not tracemalloc.is_tracing()
        if started_here:
            tracemalloc.start()
        peaks: Dict[AlgorithmType, int] = {}
        try:
            for algorithm in AlgorithmType:
                tracemalloc.reset_peak()
                baseline, _ = tracemalloc.get_traced_memory()
                self._service.execute_algorithm(algorithm, start_id, end_id, use_cache=False)
                _, peak = tracemalloc.get_traced_memory()
                peaks[algorithm] = max(0, peak - baseline)
        finally:
            if started_here:
                tracemalloc.stop()
        return MemoryUsageReport(peaks)

    def generate_performance_report(self, start_id: str, end_id: str, iterations: int = 10) -> str:
        sections = [
            "Performance report",
            "",
            self.run_full_benchmark(start_id, end_id, iterations).detailed_report(),
            "Destruction impact",
            "",
            self.analyze_destruction_impact(start_id, end_id).summary(),
        ]
        return "\n".join(sections)

    def _log(self, message: str) -> None:
        if self._verbose:
            print(f"[bench] {message}")
