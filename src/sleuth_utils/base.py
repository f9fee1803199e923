"""Base Pydantic models with strict validation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Base model with strict validation for data crossing a boundary.

    Profiles parsed from the network, cache entries read back from storage,
    dataset rows and model artifacts all inherit from this class so that:
    - No type coercion (strict=True)
    - Immutable after creation (frozen=True)
    - Fail on unknown fields (extra="forbid")
    - Validate on assignment (validate_assignment=True)
    """

    model_config = ConfigDict(
        strict=True,
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )


class MutableModel(BaseModel):
    """Base model for internal mutable data structures.

    Use this for records that are refreshed in place, like analysis entries
    recomputed after a profile arrives or a model is swapped.
    """

    model_config = ConfigDict(
        strict=True,
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )
