"""
JSON repair performance benchmarks.

Compares the fast path on valid input against the usual parsers:
- Standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)
- jsonmend (strict fast path)

and measures repair throughput on damaged model output.
"""

import json
from collections.abc import Callable
from typing import Any

import orjson
import pytest
import ujson  # type: ignore[import-untyped]

import jsonmend
from benchmarks.data_generators import DAMAGE_TYPES
from benchmarks.data_generators import VALID_DATA_TYPES
from benchmarks.data_generators import generate_damaged_data
from benchmarks.data_generators import generate_test_data

PARSERS = [
    ("stdlib_json", json.loads),
    ("orjson", orjson.loads),
    ("ujson", ujson.loads),
    ("jsonmend", jsonmend.loads),
]


class TestFastPathBenchmarks:
    """Valid input: jsonmend never leaves the strict reader."""

    @pytest.mark.benchmark(group="fast_path")
    @pytest.mark.parametrize("data_type", VALID_DATA_TYPES)
    @pytest.mark.parametrize("parser,parse_func", PARSERS)
    def test_valid_input_parsing(
        self,
        benchmark: Any,
        parser: str,
        parse_func: Callable[[Any], Any],
        data_type: str,
    ) -> None:
        """Benchmarks parsing of valid JSON across libraries."""
        test_data = generate_test_data(data_type)

        if parser == "orjson":
            result = benchmark(parse_func, test_data.encode("utf-8"))
        else:
            result = benchmark(parse_func, test_data)

        assert result

    @pytest.mark.benchmark(group="fast_path_serialize")
    @pytest.mark.parametrize("data_type", VALID_DATA_TYPES)
    def test_valid_input_repair_json(
        self, benchmark: Any, data_type: str
    ) -> None:
        """Benchmarks repair_json on input that needs no repair."""
        test_data = generate_test_data(data_type)
        result = benchmark(jsonmend.repair_json, test_data)

        assert json.loads(result) == json.loads(test_data)


class TestRepairBenchmarks:
    """Damaged input: every call goes through the repair parser."""

    @pytest.mark.benchmark(group="repair")
    @pytest.mark.parametrize("damage", DAMAGE_TYPES)
    @pytest.mark.parametrize("data_type", ["small_object", "large_object"])
    def test_repair_throughput(
        self, benchmark: Any, data_type: str, damage: str
    ) -> None:
        """Benchmarks repair_json on damaged payloads."""
        test_data = generate_damaged_data(data_type, damage)
        result = benchmark(jsonmend.repair_json, test_data)

        json.loads(result)

    @pytest.mark.benchmark(group="repair_with_log")
    def test_repair_with_log_overhead(self, benchmark: Any) -> None:
        """Benchmarks the cost of collecting the repair log."""
        test_data = generate_damaged_data("large_object", "unquoted_keys")
        value, log = benchmark(jsonmend.repair_json_with_log, test_data)

        assert value
        assert log

    @pytest.mark.benchmark(group="repair_stream_stable")
    def test_truncated_stream_stable(self, benchmark: Any) -> None:
        """Benchmarks repeated repair of a growing, truncated stream."""
        test_data = generate_test_data("large_object")
        prefixes = [test_data[:end] for end in range(64, len(test_data), 512)]

        def repair_all() -> list[str]:
            return [
                jsonmend.repair_json(prefix, stream_stable=True)
                for prefix in prefixes
            ]

        results = benchmark(repair_all)
        assert all(results)
