"""
subtext/detectors/keyword_detector.py
Stage 1 detection — pure Python, deterministic, fully offline.
Scans the other party's messages against fixed phrase tables and emits one
RiskFlag per (message, table) hit. The user's own messages are never scanned.

Matching is a plain lowercase substring test: no stemming, no negation.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from subtext.models.record import Message, RiskFlag, RiskSeverity, RiskType

logger = logging.getLogger(__name__)

# ── PHRASE TABLES ────────────────────────────────────────────
# Lowercase fragments. Tuples so they cannot be mutated at runtime.

VIOLENCE_PATTERNS: Tuple[str, ...] = (
    "i'll hurt you", "i'll kill", 'you better', 'or else', "i'll make you",
    "you'll regret", 'watch your back', "you're dead", 'i will destroy',
)

MANIPULATION_PATTERNS: Tuple[str, ...] = (
    'if you loved me', 'you owe me', "after everything i've done",
    'nobody else will', "you're lucky to have me", 'you made me do this',
    'i do everything for you', 'you need me',
)

GASLIGHTING_PATTERNS: Tuple[str, ...] = (
    "you're overreacting", 'that never happened', "you're crazy",
    "you're imagining things", "you're too sensitive", 'i never said that',
    "you're making things up", 'stop being so dramatic', 'you always twist things',
)

PRESSURE_PATTERNS: Tuple[str, ...] = (
    'you have to', 'you need to', 'prove it', "if you don't",
    'everyone else does', "don't you trust me", 'you owe me this', 'just this once',
)


@dataclass(frozen=True)
class HardRule:
    patterns:    Tuple[str, ...]
    type:        RiskType
    severity:    RiskSeverity
    description: str


# Checked in this order for every message
HARD_RULES: Tuple[HardRule, ...] = (
    HardRule(VIOLENCE_PATTERNS, RiskType.VIOLENCE, RiskSeverity.HIGH,
             'This message contains threatening or violent language'),
    HardRule(MANIPULATION_PATTERNS, RiskType.MANIPULATION, RiskSeverity.HIGH,
             'This message shows signs of manipulation'),
    HardRule(GASLIGHTING_PATTERNS, RiskType.GASLIGHTING, RiskSeverity.MEDIUM,
             'This message may be gaslighting'),
    HardRule(PRESSURE_PATTERNS, RiskType.PRESSURING, RiskSeverity.MEDIUM,
             'This message applies pressure or coercion'),
)


def scan_messages(messages: Sequence[Message]) -> List[RiskFlag]:
    """
    Scan every non-user message. A message may trip several tables;
    each tripped table yields one flag whose evidence is that message's text.
    """
    flags: List[RiskFlag] = []

    for msg in messages:
        if msg.is_from_user:
            continue

        body_lower = msg.text.lower()
        for rule in HARD_RULES:
            if _contains_any(body_lower, rule.patterns):
                flags.append(RiskFlag(
                    type        = rule.type,
                    severity    = rule.severity,
                    description = rule.description,
                    evidence    = (msg.text,),
                ))

    logger.debug(f"Hard-rule scan: {len(flags)} flag(s) across {len(messages)} messages")
    return flags


def _contains_any(text: str, patterns: Tuple[str, ...]) -> bool:
    return any(p in text for p in patterns)
