"""
Memory usage benchmarks for JSON repair.

Measures peak memory of the fast path against the usual parsers on valid
input, and of the repair parser on damaged input.
"""

import json
import tracemalloc
from typing import Any

import orjson
import pytest
import ujson  # type: ignore[import-untyped]

import jsonmend
from benchmarks.data_generators import DAMAGE_TYPES
from benchmarks.data_generators import VALID_DATA_TYPES
from benchmarks.data_generators import generate_damaged_data
from benchmarks.data_generators import generate_test_data


def measure_memory_usage(func: Any, *args: Any) -> tuple[Any, int]:
    """
    Measures peak memory usage during function execution.

    Returns:
        Tuple of (function_result, peak_memory_bytes)
    """
    tracemalloc.start()
    try:
        result = func(*args)
        _, peak = tracemalloc.get_traced_memory()
        return result, peak
    finally:
        tracemalloc.stop()


class TestMemoryUsage:
    """Memory usage benchmarks for JSON repair."""

    @pytest.mark.parametrize("data_type", VALID_DATA_TYPES)
    def test_fast_path_memory(self, data_type: str) -> None:
        """Measures jsonmend on valid input next to stdlib json."""
        test_data = generate_test_data(data_type)
        _, stdlib_peak = measure_memory_usage(json.loads, test_data)
        result, peak = measure_memory_usage(jsonmend.loads, test_data)

        print(
            f"\n{data_type}: stdlib_json={stdlib_peak:,} jsonmend={peak:,} bytes"
        )
        assert result

    @pytest.mark.parametrize("damage", DAMAGE_TYPES)
    def test_repair_memory(self, damage: str) -> None:
        """Measures the repair parser on a damaged large payload."""
        test_data = generate_damaged_data("large_object", damage)
        result, peak = measure_memory_usage(jsonmend.repair_json, test_data)

        print(f"\nrepair {damage}: {peak:,} bytes")
        assert result

    def test_memory_comparison_summary(self) -> None:
        """Generates a memory usage comparison on valid input."""
        results = {}

        for data_type in VALID_DATA_TYPES:
            test_data = generate_test_data(data_type)

            _, stdlib_memory = measure_memory_usage(json.loads, test_data)
            _, orjson_memory = measure_memory_usage(
                orjson.loads, test_data.encode("utf-8")
            )
            _, ujson_memory = measure_memory_usage(ujson.loads, test_data)
            _, jsonmend_memory = measure_memory_usage(
                jsonmend.loads, test_data
            )

            results[data_type] = {
                "stdlib_json": stdlib_memory,
                "orjson": orjson_memory,
                "ujson": ujson_memory,
                "jsonmend": jsonmend_memory,
            }

        print("\n" + "=" * 80)
        print("MEMORY USAGE COMPARISON (bytes)")
        print("=" * 80)
        print(
            f"{'Data Type':<20} {'stdlib_json':<12} {'orjson':<12}"
            f" {'ujson':<12} {'jsonmend':<12}"
        )
        print("-" * 80)

        for data_type, measurements in results.items():
            print(
                f"{data_type:<20} {measurements['stdlib_json']:<12,}"
                f" {measurements['orjson']:<12,} {measurements['ujson']:<12,}"
                f" {measurements['jsonmend']:<12,}"
            )

        print("=" * 80)

        print("\nMEMORY vs stdlib_json")
        print("-" * 40)
        for data_type, measurements in results.items():
            baseline = measurements["stdlib_json"] or 1
            ratio = measurements["jsonmend"] / baseline
            print(f"{data_type}: jsonmend={ratio:.2f}x")

        assert len(results) == len(VALID_DATA_TYPES)
