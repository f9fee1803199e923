"""Feature extraction: raw text to a fixed, versioned numeric vocabulary."""

from slopsleuth.features.extractor import (
    FEATURE_NAMES,
    FEATURE_VERSION,
    extract_features,
    normalize_feature_map,
)

__all__ = ["FEATURE_NAMES", "FEATURE_VERSION", "extract_features", "normalize_feature_map"]
