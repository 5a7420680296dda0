"""Helpers for reading the untyped argument bag of a tool call."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..git.errors import ValidationError

DIRECTORY_PROPERTY = {
    "type": "string",
    "description": "The directory to run the command in (defaults to current working directory)",
}


def schema(properties: Dict[str, Any] | None = None, required: Sequence[str] = ()) -> Dict[str, Any]:
    """Build a tool input schema that always accepts ``directory``."""

    merged = dict(properties or {})
    merged["directory"] = DIRECTORY_PROPERTY
    result: Dict[str, Any] = {"type": "object", "properties": merged}
    if required:
        result["required"] = list(required)
    return result


def optional_text(args: Dict[str, Any], key: str) -> Optional[str]:
    """Return ``args[key]`` as a stripped string, None when absent or blank."""

    value = args.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def require_text(args: Dict[str, Any], key: str, message: str | None = None) -> str:
    value = optional_text(args, key)
    if value is None:
        raise ValidationError(message or f"{key} parameter is required")
    return value


def _reject_option(key: str, value: str) -> str:
    if value.startswith("-"):
        raise ValidationError(
            f"{key} must not start with '-': {value}",
            suggestion="Pass a branch, tag, commit or remote name, not a git option.",
        )
    return value


def optional_ref(args: Dict[str, Any], key: str) -> Optional[str]:
    """Like ``optional_text`` for values passed to git as refs or names."""

    value = optional_text(args, key)
    return None if value is None else _reject_option(key, value)


def require_ref(args: Dict[str, Any], key: str, message: str | None = None) -> str:
    return _reject_option(key, require_text(args, key, message))


def optional_int(args: Dict[str, Any], key: str, default: int) -> int:
    value = args.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be a number, got {value!r}") from exc


def optional_bool(args: Dict[str, Any], key: str) -> bool:
    value = args.get(key)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def string_list(args: Dict[str, Any], key: str) -> List[str]:
    value = args.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{key} parameter must be an array of strings")
    return [str(item) for item in value if str(item).strip()]


def choice(args: Dict[str, Any], key: str, allowed: Sequence[str], default: Optional[str] = None) -> Optional[str]:
    value = optional_text(args, key)
    if value is None:
        return default
    if value not in allowed:
        raise ValidationError(f"Invalid {key} '{value}'. Use one of: {', '.join(allowed)}.")
    return value


def plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
