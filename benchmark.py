#!/usr/bin/env python3
"""
Benchmark suite for TOON codec performance analysis.

Compares the four layouts on generated datasets of different shapes and
sizes, measuring encode and decode throughput, memory and output size
relative to the JSON input.
"""

import json
import statistics
from typing import Any, Dict, List, Tuple
from toon_codec import EncodeOptions, ToonCodec
from toon_codec.profiler import PerformanceProfiler


LAYOUTS: List[Tuple[str, EncodeOptions]] = [
    ("text", EncodeOptions()),
    ("compact", EncodeOptions(compact=True)),
    ("tabular", EncodeOptions(tabular_arrays=True)),
    ("tabular-bin", EncodeOptions(tabular_arrays=True, compact=True))
]


class BenchmarkSuite:
    """Benchmark suite for the TOON codec."""

    def __init__(self, iterations: int = 3):
        """Initialize the benchmark suite."""
        self.iterations = iterations
        self.codec = ToonCodec()

    def create_test_dataset(self, size_category: str) -> Any:
        """Create test datasets of different sizes."""
        if size_category == "small":
            return [{"id": i, "name": f"User {i}", "active": i % 2 == 0} for i in range(100)]
        elif size_category == "medium":
            return [
                {
                    "id": i,
                    "name": f"User {i}",
                    "score": i * 1.5,
                    "city": f"City {i % 20}",
                    "tags": [f"tag_{j}" for j in range(i % 4)]
                } for i in range(2000)
            ]
        elif size_category == "large":
            return {
                "sections": {
                    f"section_{i}": {
                        f"item_{j}": {
                            "id": j,
                            "data": f"Large data content {j} " * 20,
                            "metadata": {"created": f"2024-01-{(j % 30) + 1}", "ratio": j / 7}
                        } for j in range(200)
                    } for i in range(20)
                }
            }
        else:
            raise ValueError(f"Unknown size category: {size_category}")

    def benchmark_layouts(self, size_category: str) -> Dict[str, Any]:
        """Benchmark every layout on one dataset."""
        print(f"   Testing {size_category} dataset...")

        dataset = self.create_test_dataset(size_category)
        input_size = len(json.dumps(dataset).encode("utf-8"))
        results = {}

        for label, options in LAYOUTS:
            profiler = PerformanceProfiler(self.codec.logger)
            encode_times = []
            decode_times = []

            for _ in range(self.iterations):
                with profiler.profile_operation(f"encode-{label}", input_size) as session:
                    encoded = self.codec.encode(dataset, options)
                    session.record_output(len(encoded))
                encode_times.append(profiler.metrics_history[-1].duration)

                with profiler.profile_operation(f"decode-{label}", len(encoded)) as session:
                    decoded = self.codec.decode(encoded)
                    session.record_output(input_size)
                decode_times.append(profiler.metrics_history[-1].duration)

            if decoded != dataset:
                raise AssertionError(f"{label} layout did not round-trip {size_category} dataset")

            encode_time = statistics.mean(encode_times)
            results[label] = {
                "size_kb": len(encoded) / 1024,
                "size_ratio": len(encoded) / input_size,
                "encode_time": encode_time,
                "decode_time": statistics.mean(decode_times),
                "encode_mbps": (input_size / 1024 / 1024) / encode_time if encode_time > 0 else 0.0,
                "memory_peak_mb": max(m.memory_peak_mb for m in profiler.metrics_history)
            }

        return results

    def print_results(self, results: Dict[str, Any], title: str):
        """Print benchmark results in a formatted table."""
        print(f"\n📈 {title}")
        print("=" * 80)

        if not results:
            print("No results to display.")
            return

        # Determine columns based on first result
        first_key = next(iter(results.keys()))
        columns = list(results[first_key].keys())

        header = f"{'Layout':<15}"
        for col in columns:
            header += f"{col:<15}"
        print(header)
        print("-" * len(header))

        for layout, data in results.items():
            row = f"{layout:<15}"
            for col in columns:
                value = data.get(col, 0)
                if col.endswith('_time'):
                    row += f"{value:<15.4f}"
                else:
                    row += f"{value:<15.2f}"
            print(row)

    def run_comprehensive_benchmark(self):
        """Run the complete benchmark suite."""
        print("🚀 TOON Codec Benchmark Suite")
        print("=" * 60)

        for category in ["small", "medium", "large"]:
            results = self.benchmark_layouts(category)
            self.print_results(results, f"Layout Comparison ({category} dataset)")

            smallest = min(results, key=lambda label: results[label]["size_ratio"])
            fastest = min(results, key=lambda label: results[label]["encode_time"])
            print(f"\n   • Smallest output: {smallest} "
                  f"({results[smallest]['size_ratio']:.2f}x JSON)")
            print(f"   • Fastest encode: {fastest} "
                  f"({results[fastest]['encode_mbps']:.2f} MB/s)")


def main():
    """Run the benchmark suite."""
    BenchmarkSuite().run_comprehensive_benchmark()


if __name__ == "__main__":
    main()
