"""Model artifact serialization, validation and embedding."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from sleuth_utils import get_logger
from slopsleuth.errors import ModelError
from slopsleuth.fileio import atomic_write_text
from slopsleuth.linear.logreg import top_weights
from slopsleuth.linear.types import ARTIFACT_KIND, EmbeddedModel, LinearModel, ModelArtifact

log = get_logger("slopsleuth.linear.artifacts")

DEFAULT_MODEL_RESOURCE = "default_model.json"


def default_model_path() -> Path:
    """Filesystem path of the embedded default model."""
    return Path(str(resources.files("slopsleuth.linear").joinpath(DEFAULT_MODEL_RESOURCE)))


def load_embedded(path: Path | None = None) -> EmbeddedModel:
    """Read an embedded model file (the packaged default when ``path`` is None)."""
    if path is None:
        raw = resources.files("slopsleuth.linear").joinpath(DEFAULT_MODEL_RESOURCE).read_text(
            encoding="utf-8",
        )
    else:
        raw = path.read_text(encoding="utf-8")
    try:
        return EmbeddedModel.model_validate_json(raw)
    except ValidationError as e:
        raise ModelError.invalid_artifact(str(e)) from e


def load_default_model() -> LinearModel:
    """The static model shipped with the package."""
    return load_embedded().to_linear()


def build_artifact(model: LinearModel, n: int, *, top_n: int = 40) -> ModelArtifact:
    """Wrap a trained model with provenance for writing to disk."""
    return ModelArtifact(
        kind=ARTIFACT_KIND,
        trained_at=datetime.now(UTC).isoformat(),
        n=n,
        model=model,
        top=top_weights(model, top_n),
    )


def validate_artifact(payload: str | bytes | dict[str, Any]) -> ModelArtifact:
    """Check that a payload has the trainer's ``{kind, model: {weights, bias}}`` shape.

    Raises:
        ModelError: On wrong kind, missing model or malformed weights.
    """
    raw = json.dumps(payload) if isinstance(payload, dict) else payload
    try:
        return ModelArtifact.model_validate_json(raw)
    except ValidationError as e:
        raise ModelError.invalid_artifact(
            f"does not look like trainer output (kind {ARTIFACT_KIND}): "
            f"{e.error_count()} validation error(s)",
        ) from e


def load_artifact(path: Path) -> ModelArtifact:
    """Read and validate a trainer artifact from disk."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ModelError.invalid_artifact(f"cannot read {path}: {e}") from e
    return validate_artifact(raw)


def write_artifact(artifact: ModelArtifact, path: Path) -> None:
    atomic_write_text(path, artifact.model_dump_json(by_alias=True, indent=2) + "\n")


def embed_model(artifact: ModelArtifact, target: Path | None = None) -> Path:
    """Replace the embedded default model with a trained artifact.

    Args:
        artifact: Validated trainer output.
        target: Embedded model file to rewrite; the packaged default if None.

    Returns:
        Path that was written.
    """
    target = target or default_model_path()
    embedded = EmbeddedModel(weights=artifact.model.weights, bias=artifact.model.bias)
    atomic_write_text(target, embedded.model_dump_json(indent=2) + "\n")
    log.info(
        "model_embedded",
        target=str(target),
        features=len(embedded.weights),
        trained_at=artifact.trained_at,
    )
    return target
