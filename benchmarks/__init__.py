"""
Benchmark suite for jsonmend repair performance.

Measures the valid-input fast path against standard JSON libraries
(json, orjson, ujson), repair throughput on damaged model output, and
peak memory.
"""
