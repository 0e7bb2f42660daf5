"""Root of the domain error hierarchy."""

from __future__ import annotations


class ResolutionError(RuntimeError):
    """Base class for errors raised while resolving references."""
