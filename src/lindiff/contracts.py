"""Public option and result models for lindiff package."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lindiff.codes import (
    DEFAULT_IGNORED_PROPERTIES,
    DataframeShape,
    DiffStatus,
    FileMode,
    TotalPolicy,
)


class CompareOptions(BaseModel):
    """Caller configuration for a comparison run.

    Every call receives its options explicitly; there is no module-level
    configuration state.
    """
    ignored_properties: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_PROPERTIES)
    )
    total_policy: TotalPolicy = TotalPolicy.LEFT
    dataframe_shape: DataframeShape = DataframeShape.NAME
    left_mode: FileMode = FileMode.POST_PROCESS
    right_mode: FileMode = FileMode.POST_PROCESS

    @field_validator('ignored_properties', mode='before')
    @classmethod
    def single_key_as_list(cls, v):
        """A bare string names one key, not a sequence of characters."""
        if isinstance(v, str):
            return [v]
        return v

    model_config = ConfigDict(extra="forbid")


class ComparisonResult(BaseModel):
    """Aggregate similarity between two documents."""
    similarity_percentage: float = Field(alias="similarityPercentage")  # 0-100, 2 decimals
    matching_properties: int = Field(alias="matchingProperties")
    total_properties: int = Field(alias="totalProperties")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class DocumentComparison(BaseModel):
    """Full comparison of two documents after per-side processing."""
    left: Any  # Document as compared (normalized when left_mode is pre-process)
    right: Any
    status: DiffStatus  # Root classification
    similarity: ComparisonResult
    options: CompareOptions

    model_config = ConfigDict(extra="forbid")
