"""
subtext/presentation.py
User-facing wording and JSON shaping shared by the HTTP app and the CLI.
Importing this module never touches config or the model.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from subtext.errors import LLMErrorKind, ParseErrorKind

# Presentation-layer wording for core error kinds
ERROR_MESSAGES: Dict[Enum, str] = {
    ParseErrorKind.EMPTY_TEXT:          "Please paste some text to parse",
    ParseErrorKind.NO_MESSAGES_FOUND:   "No messages could be extracted from the text",
    LLMErrorKind.MODEL_NOT_AVAILABLE:   "On-device AI is not available on this device.",
    LLMErrorKind.GENERATION_FAILED:     "Failed to generate response",
    LLMErrorKind.INVALID_RESPONSE:      "The AI returned an invalid response.",
    LLMErrorKind.PARSING_FAILED:        "Failed to parse AI response",
}


def to_jsonable(value: Any) -> Any:
    """Dataclass output → JSON-ready: enums to values, datetimes to ISO, sets sorted."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (frozenset, set)):
        return sorted(to_jsonable(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def error_payload(kind: Enum) -> Dict[str, str]:
    return {"error": kind.value, "message": ERROR_MESSAGES[kind]}
