"""Run configuration."""

from .settings import IngestConfig

__all__ = ["IngestConfig"]
