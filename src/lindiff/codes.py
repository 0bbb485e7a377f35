"""Status and configuration constants for lindiff.

These constants prevent stringly-typed statuses and modes and ensure
client code uses the values the kernel understands.
"""

from enum import Enum


class DiffStatus(str, Enum):
    """Per-path classification of a value pair."""

    SAME = "same"
    ADDED = "added"  # Absent on the left side
    REMOVED = "removed"  # Absent on the right side
    MODIFIED = "modified"


class FileMode(str, Enum):
    """How a document is prepared before comparison."""

    PRE_PROCESS = "pre-process"  # Raw lineage report, run through the normalizer
    POST_PROCESS = "post-process"  # Already normalized (or arbitrary JSON), used as-is


class TotalPolicy(str, Enum):
    """Which side(s) the similarity denominator is counted from."""

    LEFT = "left"
    MAX = "max"


class DataframeShape(str, Enum):
    """Layout of the normalized ``dataframe`` collection."""

    NAME = "name"  # name-keyed, name field stripped
    NAME_WITH_NAME = "name_with_name"  # name-keyed, name field kept
    ID = "id"  # keyed by node id
    LIST = "list"  # ordered array of node records


DEFAULT_IGNORED_PROPERTIES = ("id", "source_entity", "target_entity")

EXTENDED_IGNORED_PROPERTIES = DEFAULT_IGNORED_PROPERTIES + (
    "dropped_columns",
    "entity_value",
    "operation_description",
)
