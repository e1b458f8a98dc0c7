"""Mochi API client module."""

from .mochi_client import MochiAPIError, MochiClient

__all__ = ["MochiAPIError", "MochiClient"]
