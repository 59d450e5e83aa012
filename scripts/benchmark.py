"""Performance benchmarking harness for stream ingestion.

Usage:
  python -m scripts.benchmark --file ./test_file.bin --scenario memory
  python -m scripts.benchmark --file ./test_file.bin --scenario backpressure --delay 0.01
  python -m scripts.benchmark --file ./test_file.bin --output results.json

Scenarios:
  - memory: read the whole file into memory vs. stream it through ingest_stream
  - backpressure: stream into a SlowSink and check one chunk in flight at a time
"""

import argparse
import json
import statistics
import time
import tracemalloc
from pathlib import Path
from typing import Any, Dict, List

from ingestion import FileSource, ingest_stream_sync
from ingestion.sinks import SlowSink


class BenchmarkResult:
    def __init__(self, name: str, iterations: int = 3):
        self.name = name
        self.iterations = iterations
        self.timings: List[float] = []
        self.peak_bytes: List[int] = []
        self.metadata: Dict[str, Any] = {}

    def record(self, elapsed: float, peak_bytes: int = 0) -> None:
        self.timings.append(elapsed)
        self.peak_bytes.append(peak_bytes)

    def summary(self) -> Dict[str, Any]:
        if not self.timings:
            return {"name": self.name, "error": "No data"}

        return {
            "name": self.name,
            "iterations": len(self.timings),
            "mean_seconds": statistics.mean(self.timings),
            "median_seconds": statistics.median(self.timings),
            "min_seconds": min(self.timings),
            "max_seconds": max(self.timings),
            "peak_traced_mb": max(self.peak_bytes) / (1024 * 1024),
            **self.metadata,
        }

    def print_summary(self) -> None:
        summary = self.summary()
        print("\n" + "=" * 60)
        print(f"Benchmark: {summary['name']}")
        print("=" * 60)
        if "error" in summary:
            print(summary["error"])
        else:
            print(f"Iterations:    {summary['iterations']}")
            print(f"Mean:          {summary['mean_seconds']:.4f}s")
            print(f"Median:        {summary['median_seconds']:.4f}s")
            print(f"Min:           {summary['min_seconds']:.4f}s")
            print(f"Max:           {summary['max_seconds']:.4f}s")
            print(f"Peak memory:   {summary['peak_traced_mb']:.1f} MB (traced)")
        if self.metadata:
            print("\nMetadata:")
            for key, value in self.metadata.items():
                print(f"  {key}: {value}")
        print("=" * 60 + "\n")


class ChecksumSink:
    """Touches every 4096th byte so the data is really read, keeps nothing."""

    def __init__(self) -> None:
        self.received = 0
        self.checksum = 0
        self.finalized = False

    async def accept(self, chunk: bytes) -> None:
        self.received += len(chunk)
        for i in range(0, len(chunk), 4096):
            self.checksum ^= chunk[i]

    async def finalize(self) -> None:
        self.finalized = True

    async def abort(self, error: BaseException) -> None:
        self.finalized = False


def _measure(fn: Any) -> Any:
    tracemalloc.start()
    start = time.perf_counter()
    try:
        value = fn()
    finally:
        elapsed = time.perf_counter() - start
        _, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
    return value, elapsed, peak


def benchmark_buffered_read(path: Path, iterations: int = 3) -> BenchmarkResult:
    """Baseline: load the whole file, then walk it like a sink would."""
    result = BenchmarkResult("Buffered read (whole file in memory)", iterations)
    result.metadata["file_bytes"] = path.stat().st_size

    def run() -> int:
        data = path.read_bytes()
        checksum = 0
        for i in range(0, len(data), 4096):
            checksum ^= data[i]
        return checksum

    for _ in range(iterations):
        _, elapsed, peak = _measure(run)
        result.record(elapsed, peak)
    return result


def benchmark_streaming(path: Path, chunk_size: int, iterations: int = 3) -> BenchmarkResult:
    """Stream the file through ingest_stream into a checksum sink."""
    result = BenchmarkResult(f"Streaming ingest ({chunk_size} byte chunks)", iterations)
    result.metadata["file_bytes"] = path.stat().st_size

    for _ in range(iterations):
        sink = ChecksumSink()
        outcome, elapsed, peak = _measure(
            lambda: ingest_stream_sync(FileSource(path, chunk_size=chunk_size), sink)
        )
        if outcome.total_bytes != sink.received:
            raise RuntimeError(
                f"Byte count mismatch: result={outcome.total_bytes} sink={sink.received}"
            )
        result.record(elapsed, peak)
    return result


def benchmark_backpressure(path: Path, chunk_size: int, delay: float) -> BenchmarkResult:
    """Stream into a SlowSink; elapsed time must cover every per-chunk delay."""
    result = BenchmarkResult(f"Backpressure (SlowSink, {delay}s per chunk)", 1)
    sink = SlowSink(delay_seconds=delay)
    outcome, elapsed, peak = _measure(
        lambda: ingest_stream_sync(FileSource(path, chunk_size=chunk_size), sink)
    )
    result.record(elapsed, peak)
    result.metadata["chunks"] = outcome.chunk_count
    result.metadata["max_in_flight"] = sink.max_in_flight
    result.metadata["min_expected_seconds"] = outcome.chunk_count * delay
    return result


def run_benchmarks(args: argparse.Namespace) -> List[BenchmarkResult]:
    """Run selected benchmarks."""
    results = []

    if args.scenario in ("memory", "all"):
        print("Running memory benchmarks...")
        results.append(benchmark_buffered_read(args.file, iterations=args.iterations))
        results.append(
            benchmark_streaming(args.file, args.chunk_size, iterations=args.iterations)
        )

    if args.scenario in ("backpressure", "all"):
        print("Running backpressure benchmark...")
        results.append(benchmark_backpressure(args.file, args.chunk_size, args.delay))

    return results


def main() -> int:
    parser = argparse.ArgumentParser(description="Stream ingestion benchmark harness")
    parser.add_argument("--file", type=Path, required=True, help="Input file to ingest")
    parser.add_argument(
        "--scenario",
        choices=["memory", "backpressure", "all"],
        default="all",
        help="Benchmark scenario to run",
    )
    parser.add_argument("--iterations", type=int, default=3)
    parser.add_argument("--chunk-size", type=int, default=1024 * 1024)
    parser.add_argument(
        "--delay", type=float, default=0.01, help="SlowSink delay per chunk (seconds)"
    )
    parser.add_argument("--output", type=Path, help="Save results to JSON file")

    args = parser.parse_args()
    if not args.file.exists():
        parser.error(f"{args.file} does not exist; create one with scripts/create_test_file.py")

    results = run_benchmarks(args)
    for result in results:
        result.print_summary()

    if args.output:
        summaries = [r.summary() for r in results]
        args.output.write_text(json.dumps(summaries, indent=2))
        print(f"Results saved to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
