"""Minimal binary logistic regression with SGD + L2.

- Designed for small engineered feature maps, not TF-IDF.
- Works with sparse mappings: ``{feature_name: value}``.
- Output model is a tiny JSON object (weights + bias).
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence

from slopsleuth.errors import ModelError
from slopsleuth.linear.types import LinearModel, TrainingSample, TrainOptions

_U32 = 0xFFFFFFFF
_ZERO_SEED_REPLACEMENT = 0x9E3779B9


def sigmoid(z: float) -> float:
    """Logistic function without overflow for large |z|."""
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    e = math.exp(z)
    return e / (1.0 + e)


def _active(x: Mapping[str, float]) -> Iterator[tuple[str, float]]:
    """Yield features with finite, non-zero values."""
    for key, value in x.items():
        try:
            v = float(value)
        except (TypeError, ValueError):
            continue
        if v != 0.0 and math.isfinite(v):
            yield key, v


def dot(weights: Mapping[str, float], x: Mapping[str, float]) -> float:
    """Sparse dot product over the features present in ``x``."""
    return sum(weights.get(k, 0.0) * v for k, v in _active(x))


def predict_proba(model: LinearModel, x: Mapping[str, float]) -> float:
    """Probability of the AI class for one feature map."""
    return sigmoid(dot(model.weights, x) + model.bias)


class XorShift32:
    """Deterministic 32-bit xorshift generator for reproducible shuffles."""

    def __init__(self, seed: int) -> None:
        state = seed & _U32
        self._state = state or _ZERO_SEED_REPLACEMENT

    def random(self) -> float:
        s = self._state
        s ^= (s << 13) & _U32
        s ^= s >> 17
        s ^= (s << 5) & _U32
        self._state = s
        return s / 2**32


def _shuffle(data: list[TrainingSample], rng: XorShift32) -> None:
    """In-place Fisher-Yates shuffle."""
    for i in range(len(data) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        data[i], data[j] = data[j], data[i]


def train(
    samples: Sequence[TrainingSample],
    options: TrainOptions | None = None,
) -> LinearModel:
    """Fit a logistic regression with per-sample SGD.

    Per sample, with ``p = sigmoid(w.x + b)`` and sample weight ``sw``:
    ``b -= lr * sw * (p - y)`` and, for each active feature,
    ``w_k -= lr * (sw * (p - y) * x_k + l2 * w_k)``. L2 applies to weights only.

    Args:
        samples: Labelled feature maps.
        options: Hyperparameters; defaults to ``TrainOptions()``.

    Returns:
        Trained LinearModel.

    Raises:
        ModelError: If fewer than ``options.min_samples`` samples are given.
    """
    opts = options or TrainOptions()
    minimum = max(1, opts.min_samples)
    if len(samples) < minimum:
        raise ModelError.not_enough_samples(len(samples), minimum)

    weights: dict[str, float] = {}
    bias = 0.0
    rng = XorShift32(opts.seed)
    data = list(samples)

    for _ in range(opts.epochs):
        if opts.shuffle:
            _shuffle(data, rng)

        for sample in data:
            sw = sample.weight
            if not math.isfinite(sw) or sw <= 0:
                continue
            y = 1.0 if sample.y else 0.0
            active = list(_active(sample.x))

            p = sigmoid(sum(weights.get(k, 0.0) * v for k, v in active) + bias)
            err = p - y

            bias -= opts.lr * sw * err
            for key, value in active:
                wk = weights.get(key, 0.0)
                weights[key] = wk - opts.lr * (sw * err * value + opts.l2 * wk)

    return LinearModel(weights=weights, bias=bias)


def top_weights(model: LinearModel, n: int = 25) -> list[tuple[str, float]]:
    """Largest-magnitude non-zero weights, strongest first."""
    pairs = [(k, v) for k, v in model.weights.items() if v != 0.0 and math.isfinite(v)]
    pairs.sort(key=lambda kv: abs(kv[1]), reverse=True)
    return pairs[:n]
