"""Shared utilities for diskcached."""

from diskcached.core.utils.logging import configure_from_config, configure_logging

__all__ = ["configure_logging", "configure_from_config"]
