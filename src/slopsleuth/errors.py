"""Error types for the offline pipeline and model handling."""

from __future__ import annotations

from enum import StrEnum
from typing import Self


class ErrorCode(StrEnum):
    """Standardized pipeline error codes."""

    MISSING_FILE = "MISSING_FILE"
    MALFORMED_ROW = "MALFORMED_ROW"
    MISSING_COLUMN = "MISSING_COLUMN"
    EMPTY_DATASET = "EMPTY_DATASET"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_ENOUGH_SAMPLES = "NOT_ENOUGH_SAMPLES"
    INVALID_ARTIFACT = "INVALID_ARTIFACT"


class SleuthError(Exception):
    """Base error with a standardized code."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        """Initialize error.

        Args:
            code: Standardized error code.
            message: Human-readable error message.
        """
        super().__init__(message)
        self.code = code
        self.message = message

    def is_code(self, code: ErrorCode) -> bool:
        """Check if this error matches a specific code."""
        return self.code == code


class DatasetError(SleuthError):
    """Malformed input data or missing input files."""

    @classmethod
    def missing_file(cls, path: object) -> Self:
        return cls(ErrorCode.MISSING_FILE, f"Input file not found: {path}")

    @classmethod
    def malformed_row(cls, line_no: int, details: str) -> Self:
        return cls(ErrorCode.MALFORMED_ROW, f"Malformed row at line {line_no}: {details}")

    @classmethod
    def missing_columns(cls, wanted: list[str], found: list[str]) -> Self:
        return cls(
            ErrorCode.MISSING_COLUMN,
            f"Missing required columns {wanted}. Found: {', '.join(found)}",
        )

    @classmethod
    def empty(cls, path: object) -> Self:
        return cls(ErrorCode.EMPTY_DATASET, f"No usable rows in {path}")

    @classmethod
    def invalid_argument(cls, details: str) -> Self:
        return cls(ErrorCode.INVALID_ARGUMENT, details)


class ModelError(SleuthError):
    """Broken training or model packaging step."""

    @classmethod
    def not_enough_samples(cls, count: int, minimum: int) -> Self:
        return cls(
            ErrorCode.NOT_ENOUGH_SAMPLES,
            f"Not enough samples: {count} (need at least {minimum})",
        )

    @classmethod
    def invalid_artifact(cls, details: str) -> Self:
        return cls(ErrorCode.INVALID_ARTIFACT, f"Model artifact rejected: {details}")
