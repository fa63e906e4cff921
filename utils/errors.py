"""
Error types raised by layers, kernels and the scratch arena.

Every check runs before the failing operation writes anything, so an error
aborts only the call in progress and leaves neighbouring nodes untouched.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LayerError(Exception):
    """Base exception for all layer-core errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class InvalidGraphError(LayerError):
    """Raised when a node is linked or used against an unusable neighbour."""
    pass


class ShapeMismatchError(LayerError):
    """Raised when tensor extents disagree with the shared shape."""
    pass


class MissingCapabilityError(LayerError):
    """Raised when a kernel or debug slot is used but was never set."""
    pass


class ResourceExhaustedError(LayerError):
    """Raised when a scratch allocation does not fit in the arena."""
    pass
