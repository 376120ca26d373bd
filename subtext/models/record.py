"""
subtext/models/record.py
Shared dataclass schema. Parsers, detectors, the LLM layer and the API
all use these types. Do not add logic here — data only.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class ConversationFormat(str, Enum):
    IMESSAGE = 'iMessage'
    WHATSAPP = 'WhatsApp'
    TELEGRAM = 'Telegram'
    MANUAL   = 'Manual'
    UNKNOWN  = 'Unknown'


class RiskType(str, Enum):
    MANIPULATION = 'manipulation'
    GASLIGHTING  = 'gaslighting'
    PRESSURING   = 'pressuring'
    TOXICITY     = 'toxicity'
    RED_FLAG     = 'red_flag'
    VIOLENCE     = 'violence'


class RiskSeverity(str, Enum):
    LOW    = 'low'
    MEDIUM = 'medium'
    HIGH   = 'high'


class RiskLevel(str, Enum):
    """Overall ordinal: none < low < medium < high."""
    NONE   = 'none'
    LOW    = 'low'
    MEDIUM = 'medium'
    HIGH   = 'high'


@dataclass(frozen=True)
class ParsedMessage:
    """One recognized utterance from a pasted transcript."""
    text:         str
    sender:       Optional[str]       # None only if no sender could be inferred
    timestamp:    Optional[datetime]  # None when absent or unparseable
    is_from_user: bool = False        # labeling happens after parsing


@dataclass(frozen=True)
class ParsedConversation:
    format:       ConversationFormat
    messages:     Tuple[ParsedMessage, ...]
    participants: FrozenSet[str]
    detected_at:  datetime


@dataclass(frozen=True)
class Message:
    """Materialized, speaker-labeled record consumed by the safety classifier."""
    text:         str
    sender:       str
    timestamp:    datetime
    is_from_user: bool = False


@dataclass(frozen=True)
class RiskFlag:
    type:        RiskType
    severity:    RiskSeverity
    description: str
    evidence:    Tuple[str, ...] = ()   # verbatim message excerpts


@dataclass(frozen=True)
class SupportResource:
    title:       str
    description: str
    phone:       str
    website:     str


@dataclass(frozen=True)
class SafetyAnalysis:
    flags:             Tuple[RiskFlag, ...]
    overall_risk:      RiskLevel
    recommendations:   Tuple[str, ...]         = field(default_factory=tuple)
    support_resources: Tuple[SupportResource, ...] = field(default_factory=tuple)
