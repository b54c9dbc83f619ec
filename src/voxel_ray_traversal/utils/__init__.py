"""Utilities module."""

from .config import GridConfig, TraceConfig
from .metadata import TraceSummaryWriter

__all__ = ["GridConfig", "TraceConfig", "TraceSummaryWriter"]
