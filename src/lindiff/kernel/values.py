"""JSON value helpers shared by the classifier and the similarity counter."""

from typing import Any, FrozenSet


class _MissingType:
    """Marker for a key or index that does not exist in its container."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _MissingType()


def is_object(value: Any) -> bool:
    return isinstance(value, dict)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_container(value: Any) -> bool:
    return is_object(value) or is_array(value)


def json_equal(left: Any, right: Any) -> bool:
    """Deep equality with JSON semantics.

    Booleans never equal numbers (``True != 1``); ints and floats compare by
    value (``1 == 1.0``); lists and tuples are both arrays.
    """
    if is_object(left) and is_object(right):
        if left.keys() != right.keys():
            return False
        return all(json_equal(left[key], right[key]) for key in left)
    if is_array(left) and is_array(right):
        if len(left) != len(right):
            return False
        return all(json_equal(a, b) for a, b in zip(left, right))
    if is_container(left) or is_container(right):
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def child_path(parent: str, key: Any) -> str:
    """Extend a display path: ``parent.key`` for object keys, ``parent[i]`` for indices."""
    if isinstance(key, int) and not isinstance(key, bool):
        return f"{parent}[{key}]"
    return f"{parent}.{key}" if parent else str(key)


def child_value(container: Any, key: Any) -> Any:
    """Value under ``key`` in ``container``, or MISSING when absent."""
    if is_object(container):
        return container.get(key, MISSING)
    if is_array(container) and isinstance(key, int) and not isinstance(key, bool):
        if 0 <= key < len(container):
            return container[key]
    return MISSING


def child_keys(container: Any) -> list:
    if is_object(container):
        return list(container.keys())
    if is_array(container):
        return list(range(len(container)))
    return []


def ignored_set(ignored_properties: Any) -> FrozenSet[str]:
    """Freeze an ignore list; a bare string names a single key."""
    if isinstance(ignored_properties, str):
        return frozenset((ignored_properties,))
    return frozenset(ignored_properties)
