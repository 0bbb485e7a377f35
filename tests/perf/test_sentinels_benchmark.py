"""Performance sentinels (gated)."""

from __future__ import annotations

import copy
import os

import pytest

from lindiff.api import compare, normalize


def _budget_from_env(var_name: str, default_ms: float) -> float:
    raw = os.getenv(var_name)
    if not raw:
        return default_ms
    try:
        return float(raw)
    except ValueError:
        return default_ms


MAX_NORMALIZE_MS = _budget_from_env("LINDIFF_MAX_NORMALIZE_MS", 1000.0)
MAX_COMPARE_MS = _budget_from_env("LINDIFF_MAX_COMPARE_MS", 1000.0)


def _wide_report(jobs: int = 20, stages: int = 10, nodes: int = 20) -> dict:
    def graph(prefix: str) -> dict:
        return {
            "nodes": [
                {
                    "id": f"{prefix}:{i}",
                    "name": f"table_{i % 5}",
                    "columns": [{"column_name": f"c{j}", "column_type": "int"} for j in range(5)],
                }
                for i in range(nodes)
            ],
            "edges": [
                {
                    "operation": "select",
                    "source_entity": f"{prefix}:{i}",
                    "target_entity": f"{prefix}:{i + 1}",
                    "source_column": f"c{j}",
                    "target_column": f"c{j}",
                    "operation_description": "",
                }
                for i in range(nodes - 1)
                for j in range(5)
            ],
        }

    return {
        "graph": graph("top"),
        "bulk.xml": {
            f"job{j}": {
                "proc": {
                    "graph": graph(f"j{j}"),
                    **{f"stage{s}": {"graph": graph(f"j{j}s{s}")} for s in range(stages)},
                }
            }
            for j in range(jobs)
        },
    }


def _assert_budget(benchmark, max_ms: float) -> None:
    mean_ms = benchmark.stats.stats.mean * 1000.0
    assert mean_ms < max_ms, f"Mean {mean_ms:.2f} ms exceeded budget {max_ms:.2f} ms"


@pytest.mark.perf
def test_normalize_wide_report_sentinel(benchmark):
    report = _wide_report()
    merged = benchmark.pedantic(lambda: normalize(report), rounds=3, iterations=1)

    assert len(merged["bulk.xml"]) == 20
    assert len(merged["entire_report"]["dataframe"]) == 20
    # 5 names repeat 4 times each
    assert "table_0_3" in merged["entire_report"]["dataframe"]

    _assert_budget(benchmark, MAX_NORMALIZE_MS)


@pytest.mark.perf
def test_compare_wide_report_sentinel(benchmark):
    merged = normalize(_wide_report())
    other = copy.deepcopy(merged)
    result = benchmark.pedantic(lambda: compare(merged, other), rounds=3, iterations=1)

    assert result.similarity_percentage == 100.0

    _assert_budget(benchmark, MAX_COMPARE_MS)
