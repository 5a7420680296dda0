"""Dataclasses describing the MCP request/response payloads."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..git.errors import ValidationError


@dataclass(slots=True)
class OperationRequest:
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)

    @property
    def directory(self) -> Optional[str]:
        value = self.arguments.get("directory")
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(f"directory must be a string, got {type(value).__name__}")
        return value if value.strip() else None


@dataclass(slots=True)
class ResultMetadata:
    operation: str
    duration: int
    timestamp: str
    working_directory: str

    @classmethod
    def stamp(cls, operation: str, duration_ms: int, working_directory: str) -> "ResultMetadata":
        return cls(
            operation=operation,
            duration=duration_ms,
            timestamp=datetime.now(timezone.utc).isoformat(),
            working_directory=working_directory,
        )


@dataclass(slots=True)
class OperationResult:
    """Uniform envelope returned for every request, successful or not."""

    text: str
    is_error: bool = False
    metadata: Optional[ResultMetadata] = None

    @property
    def success(self) -> bool:
        return not self.is_error

    @classmethod
    def ok(cls, text: str) -> "OperationResult":
        return cls(text=text)

    @classmethod
    def failure(cls, text: str) -> "OperationResult":
        return cls(text=text, is_error=True)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }
        if self.metadata is not None:
            payload["metadata"] = {
                "operation": self.metadata.operation,
                "duration": self.metadata.duration,
                "timestamp": self.metadata.timestamp,
                "workingDirectory": self.metadata.working_directory,
            }
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), indent=2, ensure_ascii=False)
