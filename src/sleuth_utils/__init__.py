"""Shared utilities: logging, settings, base models."""

from sleuth_utils.base import MutableModel, StrictModel
from sleuth_utils.logging import get_logger
from sleuth_utils.settings import Settings, get_settings

__all__ = ["MutableModel", "Settings", "StrictModel", "get_logger", "get_settings"]
