"""Per-path diff classification between two JSON-like values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Iterator, Optional, Sequence

from lindiff.codes import DiffStatus
from lindiff.kernel.values import (
    MISSING,
    child_keys,
    child_path,
    child_value,
    ignored_set,
    is_array,
    is_container,
    is_object,
    json_equal,
)


@dataclass(frozen=True)
class DiffEntry:
    """Classification of one path, as produced by walk_diff()."""
    path: str  # "" for the root, "a.b[0].c" below it
    key: str  # Last path segment ("root" for the root)
    depth: int
    status: DiffStatus
    ignored: bool  # Key (or an ancestor key) is in the ignored set
    expandable: bool  # Either side is an object or array
    left: Any = field(default=MISSING, hash=False)  # Payloads may be dicts or lists
    right: Any = field(default=MISSING, hash=False)


def compare_values(
    left: Any,
    right: Any,
    path: str = "",
    ignored_properties: Iterable[str] = (),
) -> DiffStatus:
    """
    Classify a pair of values.

    Rules, in order:
    1. left absent -> ADDED, right absent -> REMOVED (``None`` is a value, not absence)
    2. two objects: MODIFIED if any non-ignored key differs, else SAME
    3. two arrays: MODIFIED on length mismatch or any differing index, else SAME
    4. anything else: deep equality

    Pass ``MISSING`` for an absent side. Safe to call on any subtree.
    """
    return _compare(left, right, path, ignored_set(ignored_properties))


def _compare(left: Any, right: Any, path: str, ignored: FrozenSet[str]) -> DiffStatus:
    if left is MISSING and right is MISSING:
        return DiffStatus.SAME
    if left is MISSING:
        return DiffStatus.ADDED
    if right is MISSING:
        return DiffStatus.REMOVED

    if is_object(left) and is_object(right):
        for key in _union_keys(left, right):
            if key in ignored:
                continue
            status = _compare(
                left.get(key, MISSING),
                right.get(key, MISSING),
                child_path(path, key),
                ignored,
            )
            if status is not DiffStatus.SAME:
                return DiffStatus.MODIFIED
        return DiffStatus.SAME

    if is_array(left) and is_array(right):
        if len(left) != len(right):
            return DiffStatus.MODIFIED
        for index, (left_item, right_item) in enumerate(zip(left, right)):
            if _compare(left_item, right_item, child_path(path, index), ignored) is not DiffStatus.SAME:
                return DiffStatus.MODIFIED
        return DiffStatus.SAME

    return DiffStatus.SAME if json_equal(left, right) else DiffStatus.MODIFIED


def _union_keys(left: Any, right: Any) -> list:
    """Keys of both containers, left order first, then right-only keys."""
    keys = child_keys(left)
    seen = set(keys)
    keys.extend(key for key in child_keys(right) if key not in seen)
    return keys


def walk_diff(
    left: Any,
    right: Any,
    ignored_properties: Iterable[str] = (),
    max_depth: Optional[int] = None,
) -> Iterator[DiffEntry]:
    """
    Yield a DiffEntry for every path in the union of both documents.

    Depth-first, parents before children. Ignored keys are still visited and
    classified on their own, flagged with ``ignored=True``; they never affect
    the status of their parent. ``max_depth`` stops expansion below that depth
    so callers can walk lazily, one level at a time.
    """
    ignored = ignored_set(ignored_properties)
    yield from _walk(left, right, "", "root", 0, False, ignored, max_depth)


def _walk(
    left: Any,
    right: Any,
    path: str,
    key: str,
    depth: int,
    inside_ignored: bool,
    ignored: FrozenSet[str],
    max_depth: Optional[int],
) -> Iterator[DiffEntry]:
    expandable = is_container(left) or is_container(right)
    yield DiffEntry(
        path=path,
        key=key,
        depth=depth,
        status=_compare(left, right, path, ignored),
        ignored=inside_ignored,
        expandable=expandable,
        left=left,
        right=right,
    )

    if not expandable or (max_depth is not None and depth >= max_depth):
        return

    for child_key in _union_keys(left, right):
        child_is_ignored = inside_ignored or (
            isinstance(child_key, str) and child_key in ignored
        )
        yield from _walk(
            child_value(left, child_key),
            child_value(right, child_key),
            child_path(path, child_key),
            str(child_key),
            depth + 1,
            child_is_ignored,
            ignored,
            max_depth,
        )


def find_entry(
    left: Any,
    right: Any,
    keys: Sequence[Any],
    ignored_properties: Iterable[str] = (),
) -> Optional[DiffEntry]:
    """
    Classify the node reached by following ``keys`` from the root.

    Each key is an object key, or an index into an array (digit strings are
    accepted for indices). Keys are followed one segment at a time, so object
    keys containing ``.`` or ``[`` are addressed exactly. Returns None when
    neither side has the path.
    """
    ignored = ignored_set(ignored_properties)
    path = ""
    inside_ignored = False
    for key in keys:
        key = _segment(left, right, key)
        left = child_value(left, key)
        right = child_value(right, key)
        if left is MISSING and right is MISSING:
            return None
        inside_ignored = inside_ignored or (isinstance(key, str) and key in ignored)
        path = child_path(path, key)

    return DiffEntry(
        path=path,
        key=str(keys[-1]) if keys else "root",
        depth=len(keys),
        status=_compare(left, right, path, ignored),
        ignored=inside_ignored,
        expandable=is_container(left) or is_container(right),
        left=left,
        right=right,
    )


def _segment(left: Any, right: Any, key: Any) -> Any:
    if isinstance(key, str) and key.isdigit() and (is_array(left) or is_array(right)):
        return int(key)
    return key
