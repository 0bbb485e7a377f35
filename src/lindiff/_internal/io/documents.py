"""Load JSON documents from disk."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


class DocumentLoadError(ValueError):
    """Raised when a document cannot be read or is not valid JSON."""


def load_document(path: Union[str, os.PathLike, Path]) -> Any:
    """Read a UTF-8 JSON document and return the decoded value."""
    doc_path = Path(path)
    if not doc_path.is_file():
        raise DocumentLoadError(f"Document not found: {doc_path}")

    try:
        text = doc_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentLoadError(f"Cannot read {doc_path}: {e}") from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentLoadError(
            f"Invalid JSON in {doc_path} (line {e.lineno}, column {e.colno}): {e.msg}"
        ) from e

    logger.debug("Loaded %s (%d bytes)", doc_path, len(text))
    return document
