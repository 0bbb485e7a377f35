"""Public API for lindiff.

High-level functions for the presentation layer. Callers should use these
instead of importing from lindiff.kernel or lindiff._internal.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple, Union

from lindiff.codes import (
    DEFAULT_IGNORED_PROPERTIES,
    DataframeShape,
    DiffStatus,
    FileMode,
    TotalPolicy,
)
from lindiff.contracts import CompareOptions, ComparisonResult, DocumentComparison
from lindiff.kernel.classify import DiffEntry, compare_values, find_entry, walk_diff
from lindiff.kernel.normalize import (
    MergedResult,
    merge_graph,
    normalize_report,
    normalize_report_annotated,
)
from lindiff.kernel.similarity import compare_objects
from lindiff.kernel.values import MISSING
from lindiff._internal.io.documents import load_document

logger = logging.getLogger(__name__)

PathInput = Union[str, os.PathLike, Path]


def normalize(
    document: Any,
    dataframe_shape: Union[DataframeShape, str] = DataframeShape.NAME,
) -> Dict[str, Any]:
    """Normalize a lineage report into its merged ``dataframe``/``operation`` form."""
    return normalize_report(document, DataframeShape(dataframe_shape))


def normalize_annotated(
    document: Any,
    dataframe_shape: Union[DataframeShape, str] = DataframeShape.NAME,
) -> Tuple[Dict[str, Any], Any]:
    """Normalize a report; also return a copy annotated with per-stage ``key_info``."""
    return normalize_report_annotated(document, DataframeShape(dataframe_shape))


def merge(
    graph: Any,
    dataframe_shape: Union[DataframeShape, str] = DataframeShape.NAME,
) -> Dict[str, Any]:
    """Merge a single ``{nodes, edges}`` graph."""
    result: MergedResult = merge_graph(graph, DataframeShape(dataframe_shape))
    return result.to_dict()


def compare(
    document_a: Any,
    document_b: Any,
    ignored_properties: Optional[Iterable[str]] = None,
    total_policy: Union[TotalPolicy, str] = TotalPolicy.LEFT,
) -> ComparisonResult:
    """
    Similarity of ``document_b`` to ``document_a``.

    ``ignored_properties`` defaults to DEFAULT_IGNORED_PROPERTIES; pass an
    empty list to count every key.
    """
    if ignored_properties is None:
        ignored_properties = DEFAULT_IGNORED_PROPERTIES
    counts = compare_objects(
        document_a,
        document_b,
        ignored_properties=ignored_properties,
        total_policy=TotalPolicy(total_policy),
    )
    return ComparisonResult(
        similarity_percentage=counts.similarity_percentage,
        matching_properties=counts.matching_properties,
        total_properties=counts.total_properties,
    )


def classify(
    value_a: Any = MISSING,
    value_b: Any = MISSING,
    path: str = "",
    ignored_properties: Optional[Iterable[str]] = None,
) -> DiffStatus:
    """Classify one value pair; pass MISSING (or omit) for an absent side."""
    if ignored_properties is None:
        ignored_properties = DEFAULT_IGNORED_PROPERTIES
    return compare_values(value_a, value_b, path, ignored_properties)


def diff_tree(
    document_a: Any,
    document_b: Any,
    ignored_properties: Optional[Iterable[str]] = None,
    max_depth: Optional[int] = None,
) -> Iterator[DiffEntry]:
    """Walk both documents and yield the status of every path."""
    if ignored_properties is None:
        ignored_properties = DEFAULT_IGNORED_PROPERTIES
    return walk_diff(document_a, document_b, ignored_properties, max_depth=max_depth)


def locate(
    document_a: Any,
    document_b: Any,
    keys: Sequence[Any],
    ignored_properties: Optional[Iterable[str]] = None,
) -> Optional[DiffEntry]:
    """Status of the node at ``keys`` (one key per segment); None if neither side has it."""
    if ignored_properties is None:
        ignored_properties = DEFAULT_IGNORED_PROPERTIES
    return find_entry(document_a, document_b, keys, ignored_properties)


def prepare_document(
    document: Any,
    mode: Union[FileMode, str],
    dataframe_shape: Union[DataframeShape, str] = DataframeShape.NAME,
) -> Any:
    """Apply a side's processing mode: normalize for pre-process, as-is otherwise."""
    if FileMode(mode) == FileMode.PRE_PROCESS:
        return normalize(document, dataframe_shape)
    return document


def compare_documents(
    document_a: Any,
    document_b: Any,
    options: Optional[CompareOptions] = None,
) -> DocumentComparison:
    """Prepare each side per its mode, then classify and score the pair."""
    if options is None:
        options = CompareOptions()

    left = prepare_document(document_a, options.left_mode, options.dataframe_shape)
    right = prepare_document(document_b, options.right_mode, options.dataframe_shape)

    status = compare_values(left, right, "", options.ignored_properties)
    similarity = compare(
        left,
        right,
        ignored_properties=options.ignored_properties,
        total_policy=options.total_policy,
    )
    logger.info(
        "Compared documents: status=%s similarity=%.2f%%",
        status.value,
        similarity.similarity_percentage,
    )
    return DocumentComparison(
        left=left,
        right=right,
        status=status,
        similarity=similarity,
        options=options,
    )


def compare_files(
    path_a: PathInput,
    path_b: PathInput,
    options: Optional[CompareOptions] = None,
) -> DocumentComparison:
    """Load two JSON files and compare them (see compare_documents)."""
    return compare_documents(load_document(path_a), load_document(path_b), options)
