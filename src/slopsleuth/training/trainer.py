"""Train a model artifact from featurized rows."""

from __future__ import annotations

from collections.abc import Sequence

from sleuth_utils import get_logger
from slopsleuth.linear import ModelArtifact, TrainingSample, TrainOptions, build_artifact, train
from slopsleuth.training.datasets import FeaturizedRow

log = get_logger("slopsleuth.training.trainer")

CLI_TRAIN_OPTIONS = TrainOptions(
    epochs=20,
    lr=0.06,
    l2=1e-4,
    shuffle=True,
    seed=1337,
    min_samples=10,
)


def samples_from_rows(rows: Sequence[FeaturizedRow]) -> list[TrainingSample]:
    return [TrainingSample(x=row.features, y=row.label == "ai") for row in rows]


def train_artifact(
    rows: Sequence[FeaturizedRow],
    options: TrainOptions = CLI_TRAIN_OPTIONS,
) -> ModelArtifact:
    """Fit a model on featurized rows and wrap it as an artifact.

    Raises:
        ModelError: If there are fewer rows than ``options.min_samples``.
    """
    samples = samples_from_rows(rows)
    n_ai = sum(1 for s in samples if s.y)
    log.info("training_started", samples=len(samples), ai=n_ai, human=len(samples) - n_ai)

    model = train(samples, options)
    artifact = build_artifact(model, len(samples))

    log.info("training_complete", features=len(model.weights), bias=round(model.bias, 4))
    return artifact
