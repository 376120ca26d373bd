"""
subtext/llm/base.py
Abstract base class for safety flag generators (the Stage 2 collaborator).
To add a new backend: subclass SafetyFlagGenerator and implement
is_available() and generate_safety_flags().

Generators RAISE LLMError on failure and never return partial flags.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from subtext.errors import LLMError, LLMErrorKind
from subtext.models.record import Message, RiskFlag, RiskSeverity, RiskType

logger = logging.getLogger(__name__)

# Only the tail of long conversations goes into the prompt
PROMPT_MESSAGE_LIMIT = 20


class SafetyFlagGenerator(ABC):
    """
    The classifier awaits generate_safety_flags() and merges the result with
    its own hard-rule flags. The caller never knows which backend is running.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Returns True if the backend is reachable and the model is ready."""
        ...

    @abstractmethod
    async def generate_safety_flags(self, messages: Sequence[Message]) -> List[RiskFlag]:
        """
        Detect subtle unhealthy patterns across the conversation.
        Raises LLMError — never returns None, never swallows.
        """
        ...


def build_safety_prompt(messages: Sequence[Message]) -> str:
    """Shared prompt builder. Adapters use this unless they need their own tags."""
    context = '\n'.join(
        f"[{'Me' if m.is_from_user else m.sender}]: {m.text}"
        for m in list(messages)[-PROMPT_MESSAGE_LIMIT:]
    )

    return (
        "Analyze this conversation for unhealthy patterns:\n\n"
        f"{context}\n\n"
        "Look for:\n"
        "- Manipulation tactics (guilt-tripping, emotional blackmail)\n"
        "- Gaslighting (denying reality, making them question themselves)\n"
        '- Boundary violations (ignoring "no", pressuring)\n'
        "- Controlling behavior (isolation, monitoring, jealousy)\n"
        "- Disrespect or toxicity\n"
        "- Threats or violence (explicit or implied)\n\n"
        "For each pattern found, provide:\n"
        "- Type of concern\n"
        "- Severity (low/medium/high)\n"
        "- Specific evidence (quote the messages)\n"
        "- Brief explanation\n\n"
        "Be conservative - only flag clear patterns, not misunderstandings.\n\n"
        "Output JSON:\n"
        "{\n"
        '  "flags": [\n'
        "    {\n"
        '      "type": "manipulation" | "gaslighting" | "pressuring" | "toxicity" | "red_flag" | "violence",\n'
        '      "severity": "low" | "medium" | "high",\n'
        '      "description": "Brief explanation of the concern",\n'
        '      "evidence": ["quote 1", "quote 2"]\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        'If no concerns are found, return: {"flags": []}\n\n'
        "IMPORTANT: Respond ONLY with valid JSON matching this schema."
    )


def parse_flags_response(text: str) -> List[RiskFlag]:
    """
    Parse a model response into RiskFlags.
    Handles models that wrap the JSON in prose or markdown fences.
    """
    start = text.find('{')
    end   = text.rfind('}')
    if start < 0 or end < start:
        raise LLMError(LLMErrorKind.INVALID_RESPONSE, 'no JSON object in response')

    try:
        data  = json.loads(text[start:end + 1])
        flags = [
            RiskFlag(
                type        = RiskType(item['type']),
                severity    = RiskSeverity(item['severity']),
                description = str(item.get('description', '')),
                evidence    = _evidence(item.get('evidence', [])),
            )
            for item in data.get('flags', [])
        ]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise LLMError(LLMErrorKind.PARSING_FAILED, str(e)) from e

    logger.debug(f"Model returned {len(flags)} flag(s)")
    return flags


def _evidence(value) -> Tuple[str, ...]:
    """A bare string is one quote; anything else must be a list of quotes."""
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list):
        raise TypeError(f"evidence must be a list, got {type(value).__name__}")
    return tuple(str(e) for e in value)
