"""Linear model: logistic regression training, inference and artifacts."""

from slopsleuth.linear.artifacts import (
    build_artifact,
    embed_model,
    load_artifact,
    load_default_model,
    validate_artifact,
    write_artifact,
)
from slopsleuth.linear.logreg import dot, predict_proba, sigmoid, top_weights, train
from slopsleuth.linear.types import (
    ARTIFACT_KIND,
    EmbeddedModel,
    LinearModel,
    ModelArtifact,
    TrainingSample,
    TrainOptions,
)

__all__ = [
    "ARTIFACT_KIND",
    "EmbeddedModel",
    "LinearModel",
    "ModelArtifact",
    "TrainOptions",
    "TrainingSample",
    "build_artifact",
    "dot",
    "embed_model",
    "load_artifact",
    "load_default_model",
    "predict_proba",
    "sigmoid",
    "top_weights",
    "train",
    "validate_artifact",
    "write_artifact",
]
