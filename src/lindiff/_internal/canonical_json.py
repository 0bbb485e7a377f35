"""Centralized canonical JSON serialization.

One serializer for everything lindiff writes or keys on: normalized report
files, comparison reports, and the frozen form of unhashable edge-key parts.
"""

import json
from typing import Any


def canonical_dumps(obj: Any) -> str:
    """
    Canonical JSON serialization.

    Rules:
    - UTF-8 output (no ASCII escaping)
    - Sorted keys
    - Compact separators (",", ":")
    - List order preserved as given

    Args:
        obj: JSON-like Python object

    Returns:
        Canonical JSON string
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    )


def pretty_dumps(obj: Any) -> str:
    """Indented JSON for terminal output; insertion order is kept for display."""
    return json.dumps(obj, indent=2, ensure_ascii=False)
