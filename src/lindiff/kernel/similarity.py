"""Aggregate similarity between two JSON-like documents.

The score counts comparable leaf properties:

- total: leaves of the left document (or the larger side, under TotalPolicy.MAX)
- matching: leaves that are equal at the same key/index on both sides

Containers are tracked by identity while counting, so a substructure reachable
twice from the same root (aliased) is counted once. Equal but distinct
substructures are still counted separately.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, FrozenSet, Iterable, Optional, Set

from lindiff.codes import TotalPolicy
from lindiff.kernel.values import ignored_set, is_array, is_container, is_object, json_equal

logger = logging.getLogger(__name__)


@dataclass
class SimilarityCounts:
    """Raw counts behind a similarity percentage."""
    similarity_percentage: float
    matching_properties: int
    total_properties: int


def _comparable_keys(obj: dict, ignored: FrozenSet[str]) -> list:
    return [key for key in obj if key not in ignored]


def count_properties(
    value: Any,
    ignored_properties: Iterable[str] = (),
    counted: Optional[Set[int]] = None,
) -> int:
    """Count the leaf properties of ``value``.

    A scalar counts 1. A container counts the sum of its (non-ignored)
    children the first time it is seen and 0 afterwards.
    """
    if counted is None:
        counted = set()
    return _count_properties(value, ignored_set(ignored_properties), counted)


def _count_properties(value: Any, ignored: FrozenSet[str], counted: Set[int]) -> int:
    if not is_container(value):
        return 1

    if id(value) in counted:
        return 0
    counted.add(id(value))

    if is_array(value):
        return sum(_count_properties(item, ignored, counted) for item in value)

    return sum(
        _count_properties(value[key], ignored, counted)
        for key in _comparable_keys(value, ignored)
    )


def count_matches(
    value1: Any,
    value2: Any,
    ignored_properties: Iterable[str] = (),
    counted: Optional[Set[int]] = None,
) -> int:
    """Count leaves of ``value1`` that are equal at the same position in ``value2``.

    Objects recurse over keys present on both sides, arrays index-wise up to
    the shorter length. Type-mismatched pairs count 0.
    """
    if counted is None:
        counted = set()
    return _count_matches(value1, value2, ignored_set(ignored_properties), counted)


def _count_matches(value1: Any, value2: Any, ignored: FrozenSet[str], counted: Set[int]) -> int:
    if not is_container(value1) and not is_container(value2):
        return 1 if json_equal(value1, value2) else 0

    if is_array(value1) and is_array(value2):
        if id(value1) in counted:
            return 0
        counted.add(id(value1))
        return sum(
            _count_matches(item1, item2, ignored, counted)
            for item1, item2 in zip(value1, value2)
        )

    if is_object(value1) and is_object(value2):
        if id(value1) in counted:
            return 0
        counted.add(id(value1))
        return sum(
            _count_matches(value1[key], value2[key], ignored, counted)
            for key in _comparable_keys(value1, ignored)
            if key in value2
        )

    return 0


def round_half_up(value: float, places: int = 2) -> float:
    """Round half away from zero at ``places`` decimals (2.675 -> 2.68)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def compare_objects(
    obj1: Any,
    obj2: Any,
    ignored_properties: Iterable[str] = (),
    total_policy: TotalPolicy = TotalPolicy.LEFT,
) -> SimilarityCounts:
    """
    Compute the similarity of ``obj2`` to ``obj1``.

    Returns SimilarityCounts with a 0-100 percentage rounded to 2 decimals;
    100 when there is nothing to count. Each count starts from a fresh
    visited set, so nothing is shared between calls.
    """
    ignored = ignored_set(ignored_properties)

    total = _count_properties(obj1, ignored, set())
    if total_policy == TotalPolicy.MAX:
        total = max(total, _count_properties(obj2, ignored, set()))

    matching = _count_matches(obj1, obj2, ignored, set())

    if total == 0:
        percentage = 100.0
    else:
        percentage = round_half_up(matching / total * 100)

    logger.debug(
        "Similarity %.2f%% (%d/%d, policy=%s)",
        percentage,
        matching,
        total,
        TotalPolicy(total_policy).value,
    )
    return SimilarityCounts(
        similarity_percentage=percentage,
        matching_properties=matching,
        total_properties=total,
    )
