"""MCP contracts and server."""

from .contracts import (
    OperationRequest,
    OperationResult,
    ResultMetadata,
)

__all__ = [
    "OperationRequest",
    "OperationResult",
    "ResultMetadata",
]
