"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed lindiff package.
"""

import pytest


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


def build_lineage_report():
    """Small lineage report: top-level graph plus one job collection."""
    return {
        "graph": {
            "nodes": [
                {
                    "id": "1",
                    "name": "t1",
                    "entity_type": "table",
                    "entity_value": "warehouse.t1",
                    "columns": [
                        {"column_name": "a", "column_type": "int"},
                        {"column_name": "b", "column_type": "string"},
                    ],
                },
                {"id": "2", "name": "t2", "columns": {"a": "int"}},
            ],
            "edges": [
                {
                    "operation": "select",
                    "source_entity": "1",
                    "target_entity": "2",
                    "source_column": "a",
                    "target_column": "a",
                    "operation_description": "copy a",
                },
            ],
        },
        "nightly_Load.XML": {
            "job1": {
                "proc1": {
                    "graph": {
                        "nodes": [{"id": "p", "name": "orders", "columns": []}],
                        "edges": [],
                    },
                    "stage1": {
                        "name": "extract",
                        "graph": {
                            "nodes": [
                                {"id": "s1", "name": "orders", "columns": [
                                    {"column_name": "order_id", "column_type": "int"},
                                ]},
                                {"id": "s2", "name": "orders_stg", "columns": []},
                            ],
                            "edges": [
                                {
                                    "operation": "insert",
                                    "source_entity": "s1",
                                    "target_entity": "s2",
                                    "source_column": "order_id",
                                    "target_column": "order_id",
                                    "operation_description": "stage orders",
                                    "code_info": {
                                        "code": "INSERT INTO orders_stg ...",
                                        "lineno": 12,
                                        "file_path": "etl/load.sql",
                                        "end_lineno": 14,
                                    },
                                },
                            ],
                        },
                    },
                    "stage2": {"name": "no_graph"},
                },
            },
        },
        "metadata": {"owner": "etl", "note": "not a job collection"},
    }


@pytest.fixture
def lineage_report():
    return build_lineage_report()
