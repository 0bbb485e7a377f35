"""lindiff: lineage report normalization + structural JSON diff."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("lindiff")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from lindiff.api import classify, compare, compare_documents, diff_tree, normalize
from lindiff.codes import DiffStatus, FileMode, TotalPolicy, DataframeShape
from lindiff.contracts import CompareOptions, ComparisonResult, DocumentComparison
from lindiff.kernel.values import MISSING

__all__ = [
    "__version__",
    "normalize",
    "compare",
    "classify",
    "compare_documents",
    "diff_tree",
    "DiffStatus",
    "FileMode",
    "TotalPolicy",
    "DataframeShape",
    "CompareOptions",
    "ComparisonResult",
    "DocumentComparison",
    "MISSING",
]
