"""Lineage report normalization.

Flattens node/edge graphs into keyed collections:

- nodes become a ``dataframe`` mapping (name-keyed by default) holding a
  ``column_name -> column_type`` map per node
- edges sharing ``(operation, source_entity, target_entity, file_path, lineno)``
  are coalesced into one ``operation`` entry keyed ``sourceName-targetName``

The transform is applied once to the whole-report graph (``entire_report``)
and once per process and stage found under job-collection keys (keys
containing ``.xml``, case-insensitive).

All functions here are pure: inputs are never mutated and malformed shapes
degrade (``"unknown"`` names, empty column maps) instead of raising.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from lindiff._internal.canonical_json import canonical_dumps
from lindiff.codes import DataframeShape

logger = logging.getLogger(__name__)

UNKNOWN_ENTITY = "unknown"
ENTIRE_REPORT_KEY = "entire_report"
JOB_COLLECTION_MARKER = ".xml"
PROCESS_RESERVED_KEYS = ("graph", "key_info")


def default_code_info() -> Dict[str, Any]:
    """Provenance record used for edges that carry no ``code_info``."""
    return {"code": "", "lineno": None, "file_path": "", "end_lineno": None}


@dataclass
class MergedOperation:
    """One or more edges coalesced under the same merge key."""
    code_info: Dict[str, Any]
    operation: Any
    source_entity: Any
    target_entity: Any
    operation_description: Any
    source_columns: List[Any] = field(default_factory=list)  # encounter order, duplicates kept
    target_columns: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code_info": copy.deepcopy(self.code_info),
            "operation": self.operation,
            "source_columns": copy.deepcopy(self.source_columns),
            "source_entity": self.source_entity,
            "target_columns": copy.deepcopy(self.target_columns),
            "target_entity": self.target_entity,
            "operation_description": self.operation_description,
        }


@dataclass
class MergedResult:
    """Normalized form of a single graph."""
    dataframe: Any = field(default_factory=dict)  # dict, or list for DataframeShape.LIST
    operation: Dict[str, MergedOperation] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataframe": copy.deepcopy(self.dataframe),
            "operation": {key: op.to_dict() for key, op in self.operation.items()},
        }


def generate_unique_key(base_key: str, existing_keys: Set[str]) -> str:
    """Return ``base_key``, or ``base_key_1``, ``base_key_2``... if already taken."""
    new_key = base_key
    counter = 1
    while new_key in existing_keys:
        new_key = f"{base_key}_{counter}"
        counter += 1
    return new_key


def _as_key(value: Any) -> str:
    """String form of a scalar used as a mapping key."""
    if isinstance(value, str):
        return value
    return canonical_dumps(value)


def _entity_ref(value: Any) -> Optional[str]:
    # Ids compare by their string form, so 1 and "1" address the same node
    if value is None:
        return None
    return _as_key(value)


def _key_part(value: Any) -> Tuple[str, Any]:
    """Hashable, type-tagged form of a JSON value with JSON number semantics.

    ``10`` and ``10.0`` share one form; ``True`` stays distinct from ``1``.
    """
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return ("number", value)
    if value is None or isinstance(value, str):
        return ("scalar", value)
    if isinstance(value, dict):
        items = sorted(((str(k), _key_part(v)) for k, v in value.items()), key=lambda item: item[0])
        return ("object", tuple(items))
    if isinstance(value, (list, tuple)):
        return ("array", tuple(_key_part(item) for item in value))
    return ("other", canonical_dumps(value))


def _merge_key(edge: Dict[str, Any], code_info: Dict[str, Any]) -> Tuple[Tuple[str, Any], ...]:
    return tuple(
        _key_part(value)
        for value in (
            edge.get("operation"),
            edge.get("source_entity"),
            edge.get("target_entity"),
            code_info.get("file_path"),
            code_info.get("lineno"),
        )
    )


def columns_to_mapping(columns: Any) -> Dict[str, Any]:
    """Fold a node's columns into a ``column_name -> column_type`` mapping.

    Accepts a list of ``{column_name, column_type}`` records or an existing
    mapping. Anything else yields an empty mapping.
    """
    if isinstance(columns, dict):
        return copy.deepcopy(columns)

    mapping: Dict[str, Any] = {}
    if isinstance(columns, list):
        for column in columns:
            if not isinstance(column, dict) or "column_name" not in column:
                logger.debug("Skipping malformed column record: %r", column)
                continue
            mapping[_as_key(column["column_name"])] = copy.deepcopy(column.get("column_type"))
    elif columns is not None:
        logger.debug("Unsupported columns shape %s; using empty mapping", type(columns).__name__)
    return mapping


def _node_record(node: Dict[str, Any], include_id: bool, include_name: bool) -> Dict[str, Any]:
    record: Dict[str, Any] = {}
    if include_id:
        record["id"] = copy.deepcopy(node.get("id"))
    if include_name:
        record["name"] = copy.deepcopy(node.get("name"))
    # Passthrough metadata only when the node carries it
    for optional_key in ("entity_type", "entity_value"):
        if optional_key in node:
            record[optional_key] = copy.deepcopy(node[optional_key])
    record["columns"] = columns_to_mapping(node.get("columns"))
    return record


def _build_dataframe(nodes: List[Any], shape: DataframeShape) -> Tuple[Any, Dict[str, str]]:
    """Build the dataframe collection and the id -> name table in one pass."""
    id_to_name: Dict[str, str] = {}
    existing_keys: Set[str] = set()
    dataframe: Any = [] if shape == DataframeShape.LIST else {}

    for node in nodes:
        if not isinstance(node, dict):
            logger.debug("Skipping non-mapping node: %r", node)
            continue

        name = node.get("name")
        ref = _entity_ref(node.get("id"))
        if ref is not None:
            id_to_name[ref] = "" if name is None else _as_key(name)

        if shape == DataframeShape.LIST:
            dataframe.append(_node_record(node, include_id=True, include_name=True))
            continue

        if shape == DataframeShape.ID:
            base_key = UNKNOWN_ENTITY if ref is None else ref
            record = _node_record(node, include_id=False, include_name=True)
        else:
            base_key = UNKNOWN_ENTITY if name is None else _as_key(name)
            record = _node_record(
                node,
                include_id=True,
                include_name=(shape == DataframeShape.NAME_WITH_NAME),
            )

        unique_key = generate_unique_key(base_key, existing_keys)
        existing_keys.add(unique_key)
        dataframe[unique_key] = record

    return dataframe, id_to_name


def _group_edges(edges: List[Any]) -> Dict[Tuple[Tuple[str, Any], ...], MergedOperation]:
    grouped: Dict[Tuple[Tuple[str, Any], ...], MergedOperation] = {}

    for edge in edges:
        if not isinstance(edge, dict):
            logger.debug("Skipping non-mapping edge: %r", edge)
            continue

        code_info = edge.get("code_info")
        if not isinstance(code_info, dict):
            code_info = default_code_info()

        key = _merge_key(edge, code_info)
        merged = grouped.get(key)
        if merged is None:
            merged = MergedOperation(
                code_info=copy.deepcopy(code_info),
                operation=copy.deepcopy(edge.get("operation")),
                source_entity=copy.deepcopy(edge.get("source_entity")),
                target_entity=copy.deepcopy(edge.get("target_entity")),
                operation_description=copy.deepcopy(edge.get("operation_description")),
            )
            grouped[key] = merged
        merged.source_columns.append(copy.deepcopy(edge.get("source_column")))
        merged.target_columns.append(copy.deepcopy(edge.get("target_column")))

    return grouped


def merge_graph(graph: Any, shape: DataframeShape = DataframeShape.NAME) -> MergedResult:
    """
    Merge a ``{nodes, edges}`` graph into a MergedResult.

    A missing or non-mapping graph yields an empty result. Edge endpoints that
    do not resolve to a node name are keyed as ``"unknown"``.
    """
    if not isinstance(graph, dict):
        if graph is not None:
            logger.debug("Graph is %s, not a mapping; nothing to merge", type(graph).__name__)
        else:
            logger.debug("No graph to merge")
        return MergedResult(dataframe=[] if shape == DataframeShape.LIST else {})

    nodes = graph.get("nodes")
    edges = graph.get("edges")
    nodes = nodes if isinstance(nodes, list) else []
    edges = edges if isinstance(edges, list) else []

    dataframe, id_to_name = _build_dataframe(nodes, shape)
    grouped = _group_edges(edges)

    operation: Dict[str, MergedOperation] = {}
    existing_keys: Set[str] = set()
    for merged in grouped.values():
        source_name = id_to_name.get(_entity_ref(merged.source_entity)) or UNKNOWN_ENTITY
        target_name = id_to_name.get(_entity_ref(merged.target_entity)) or UNKNOWN_ENTITY
        if UNKNOWN_ENTITY in (source_name, target_name):
            logger.debug(
                "Unresolved entity in %r -> %r",
                merged.source_entity,
                merged.target_entity,
            )
        unique_key = generate_unique_key(f"{source_name}-{target_name}", existing_keys)
        existing_keys.add(unique_key)
        operation[unique_key] = merged

    logger.debug(
        "Merged %d nodes and %d edges into %d operations",
        len(nodes),
        len(edges),
        len(operation),
    )
    return MergedResult(dataframe=dataframe, operation=operation)


def is_job_collection_key(key: Any) -> bool:
    """True for string keys containing ``.xml`` (case-insensitive)."""
    return isinstance(key, str) and JOB_COLLECTION_MARKER in key.lower()


def _report_result(report: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    nested = report.get("report")
    if not isinstance(nested, dict):
        return None
    result = nested.get("report_result")
    return result if isinstance(result, dict) else None


def _normalize_process(
    process: Any,
    shape: DataframeShape,
    annotated: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    if not isinstance(process, dict):
        logger.debug("Process is %s, not a mapping; no stages", type(process).__name__)
        return {"key_info": merge_graph(None, shape).to_dict(), "stages": {}}

    process_merged = merge_graph(process.get("graph"), shape)
    stages: Dict[str, Any] = {}
    for stage_name, stage in process.items():
        if stage_name in PROCESS_RESERVED_KEYS:
            continue
        stage_graph = stage.get("graph") if isinstance(stage, dict) else None
        stage_merged = merge_graph(stage_graph, shape)
        stages[stage_name] = stage_merged.to_dict()
        if annotated is not None and isinstance(annotated.get(stage_name), dict):
            annotated[stage_name]["key_info"] = stage_merged.to_dict()

    if annotated is not None:
        annotated["key_info"] = process_merged.to_dict()
    return {"key_info": process_merged.to_dict(), "stages": stages}


def _normalize_jobs(
    jobs: Any,
    shape: DataframeShape,
    annotated: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    merged_jobs: Dict[str, Any] = {}
    if not isinstance(jobs, dict):
        logger.debug("Job collection is %s, not a mapping; skipping", type(jobs).__name__)
        return merged_jobs

    for job_name, job in jobs.items():
        merged_processes: Dict[str, Any] = {}
        merged_jobs[job_name] = merged_processes
        if not isinstance(job, dict):
            continue
        annotated_job = annotated[job_name] if annotated is not None else None
        for process_name, process in job.items():
            annotated_process = annotated_job[process_name] if annotated_job is not None else None
            if not isinstance(annotated_process, dict):
                annotated_process = None
            merged_processes[process_name] = _normalize_process(process, shape, annotated_process)

    return merged_jobs


def _normalize(
    report: Any,
    shape: DataframeShape,
    annotate: bool,
) -> Tuple[Dict[str, Any], Any]:
    annotated = copy.deepcopy(report) if annotate else None

    if not isinstance(report, dict):
        logger.debug("Report is %s, not a mapping; nothing to normalize", type(report).__name__)
        return {ENTIRE_REPORT_KEY: merge_graph(None, shape).to_dict()}, annotated

    report_result = _report_result(report)
    graph = report.get("graph")
    if graph is None and report_result is not None:
        graph = report_result.get("graph")

    merged_report: Dict[str, Any] = {ENTIRE_REPORT_KEY: merge_graph(graph, shape).to_dict()}

    scope = report_result if report_result is not None else report
    annotated_scope = None
    if annotated is not None:
        annotated_scope = _report_result(annotated) if report_result is not None else annotated

    for key, jobs in scope.items():
        if not is_job_collection_key(key):
            continue
        annotated_jobs = annotated_scope.get(key) if annotated_scope is not None else None
        if not isinstance(annotated_jobs, dict):
            annotated_jobs = None
        merged_report[key] = _normalize_jobs(jobs, shape, annotated_jobs)

    return merged_report, annotated


def normalize_report(report: Any, shape: DataframeShape = DataframeShape.NAME) -> Dict[str, Any]:
    """
    Normalize a lineage report into its merged form.

    Returns a new mapping with ``entire_report`` plus one entry per
    job-collection key: ``{job: {process: {"key_info": ..., "stages": {...}}}}``.
    The input report is left untouched.
    """
    merged_report, _ = _normalize(report, shape, annotate=False)
    return merged_report


def normalize_report_annotated(
    report: Any,
    shape: DataframeShape = DataframeShape.NAME,
) -> Tuple[Dict[str, Any], Any]:
    """Normalize a report and also return a copy of it annotated with ``key_info``.

    The copy carries the merged result of each process and stage under a
    ``key_info`` field; the input report is left untouched.
    """
    return _normalize(report, shape, annotate=True)
