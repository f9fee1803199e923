"""Linear model types and serialized formats."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from sleuth_utils import StrictModel

ARTIFACT_KIND = "rss-logreg-binary-v1"
EMBEDDED_KIND = "logreg-binary"
CLASSES = ("human", "ai")


class LinearModel(StrictModel):
    """Sparse logistic regression weights. Absent keys weigh 0."""

    weights: dict[str, float] = Field(default_factory=dict)
    bias: float = 0.0

    @field_validator("weights")
    @classmethod
    def _finite_weights(cls, value: dict[str, float]) -> dict[str, float]:
        bad = [k for k, v in value.items() if not math.isfinite(v)]
        if bad:
            raise ValueError(f"non-finite weights: {bad[:5]}")
        return value

    @field_validator("bias")
    @classmethod
    def _finite_bias(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("bias must be finite")
        return value


class ModelArtifact(StrictModel):
    """Trainer output written to disk."""

    model_config = ConfigDict(
        strict=True,
        frozen=True,
        extra="ignore",
        validate_assignment=True,
        populate_by_name=True,
    )

    kind: Literal["rss-logreg-binary-v1"]
    trained_at: str = Field(alias="trainedAt")
    n: int
    classes: list[str] = Field(default_factory=lambda: list(CLASSES))
    model: LinearModel
    top: list[tuple[str, float]] = Field(default_factory=list)

    @field_validator("classes")
    @classmethod
    def _binary_classes(cls, value: list[str]) -> list[str]:
        if tuple(value) != CLASSES:
            raise ValueError(f"classes must be {list(CLASSES)}")
        return value


class EmbeddedModel(StrictModel):
    """Default model shipped inside the package."""

    version: Literal[1] = 1
    kind: Literal["logreg-binary"] = EMBEDDED_KIND
    weights: dict[str, float] = Field(default_factory=dict)
    bias: float = 0.0

    def to_linear(self) -> LinearModel:
        return LinearModel(weights=self.weights, bias=self.bias)


@dataclass(frozen=True)
class TrainingSample:
    """One labelled feature map. ``y`` is True for the AI class."""

    x: Mapping[str, float]
    y: bool
    weight: float = 1.0


@dataclass(frozen=True)
class TrainOptions:
    """SGD hyperparameters."""

    epochs: int = 15
    lr: float = 0.08
    l2: float = 1e-4
    shuffle: bool = True
    seed: int = 1337
    min_samples: int = 2
