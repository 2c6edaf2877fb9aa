"""
Benchmark suite for phplit parsing performance.

Compares phplit parsing PHP literals against JSON libraries parsing the same
content:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures parsing speed and memory usage across different data types.
"""
