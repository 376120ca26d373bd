"""
subtext/detectors/safety_classifier.py
Safety analysis orchestrator.

  Stage 1: hard-rule scan (always runs, offline, instant)
  Stage 2: pattern detection by the injected SafetyFlagGenerator
  Stage 3: aggregate — severity sort, then keep one flag per type
  Stage 4: score overall risk, attach recommendations and resources

If Stage 2 raises, the whole analysis raises and Stage 1 results are
discarded with it.
"""

import logging
from typing import Dict, List, Sequence, Tuple

from subtext.detectors.keyword_detector import scan_messages
from subtext.llm.base import SafetyFlagGenerator
from subtext.models.record import (
    Message,
    RiskFlag,
    RiskLevel,
    RiskSeverity,
    RiskType,
    SafetyAnalysis,
    SupportResource,
)

logger = logging.getLogger(__name__)

SEVERITY_RANK: Dict[RiskSeverity, int] = {
    RiskSeverity.HIGH:   3,
    RiskSeverity.MEDIUM: 2,
    RiskSeverity.LOW:    1,
}

RECOMMENDATIONS: Dict[RiskType, str] = {
    RiskType.MANIPULATION: "Consider setting clear boundaries about what you're comfortable with",
    RiskType.GASLIGHTING:  'Trust your perception of events - your feelings are valid',
    RiskType.PRESSURING:   'You have the right to say no and take your time',
    RiskType.TOXICITY:     'Consider if this conversation pattern is healthy for you',
    RiskType.RED_FLAG:     'Pay attention to your gut feeling about this situation',
    RiskType.VIOLENCE:     'This situation may be unsafe - please reach out for support',
}

SUPPORT_RESOURCES: Tuple[SupportResource, ...] = (
    SupportResource(
        title       = 'National Domestic Violence Hotline',
        description = '24/7 support for anyone experiencing abuse',
        phone       = '1-800-799-7233',
        website     = 'https://www.thehotline.org',
    ),
    SupportResource(
        title       = 'Love Is Respect',
        description = 'Support for young people in relationships',
        phone       = '1-866-331-9474',
        website     = 'https://www.loveisrespect.org',
    ),
    SupportResource(
        title       = 'Crisis Text Line',
        description = 'Text HOME to 741741 for free 24/7 support',
        phone       = 'Text HOME to 741741',
        website     = 'https://www.crisistextline.org',
    ),
)


class SafetyClassifier:
    """
    Injectable wrapper around analyze_safety(). Holds only its generator,
    so one instance can serve concurrent callers.
    """

    def __init__(self, generator: SafetyFlagGenerator):
        self.generator = generator

    async def analyze(self, conversation: Sequence[Message]) -> SafetyAnalysis:
        return await analyze_safety(conversation, self.generator)


async def analyze_safety(
    conversation: Sequence[Message],
    generator:    SafetyFlagGenerator,
) -> SafetyAnalysis:
    """
    Full four-stage analysis. Raises whatever the generator raises.
    """
    # ── STAGE 1 ──────────────────────────────────────────────
    hard_rules = scan_messages(conversation)
    logger.info(f"Stage 1: {len(hard_rules)} hard-rule flag(s)")

    # ── STAGE 2 ──────────────────────────────────────────────
    # The generator sees every message and makes its own user/other distinction
    patterns = await generator.generate_safety_flags(conversation)
    logger.info(f"Stage 2: {len(patterns)} pattern flag(s)")

    # ── STAGE 3 + 4 ──────────────────────────────────────────
    flags = aggregate_flags(hard_rules, patterns)
    needs_resources = any(f.severity == RiskSeverity.HIGH for f in flags)

    analysis = SafetyAnalysis(
        flags             = tuple(flags),
        overall_risk      = calculate_overall_risk(flags),
        recommendations   = tuple(generate_recommendations(flags)),
        support_resources = support_resources() if needs_resources else (),
    )
    logger.info(
        f"Safety analysis complete: {len(flags)} flag(s), "
        f"overall risk {analysis.overall_risk.value}"
    )
    return analysis


def aggregate_flags(
    hard_rules: Sequence[RiskFlag],
    patterns:   Sequence[RiskFlag],
) -> List[RiskFlag]:
    """
    Stable sort by severity (high first), then keep the first flag of each type.
    Evidence from dropped duplicates is not merged into the survivor.
    """
    ranked = sorted(
        list(hard_rules) + list(patterns),
        key     = lambda f: SEVERITY_RANK[f.severity],
        reverse = True,
    )

    unique: List[RiskFlag] = []
    seen_types = set()
    for flag in ranked:
        if flag.type in seen_types:
            continue
        seen_types.add(flag.type)
        unique.append(flag)
    return unique


def calculate_overall_risk(flags: Sequence[RiskFlag]) -> RiskLevel:
    if not flags:
        return RiskLevel.NONE

    high_count   = sum(1 for f in flags if f.severity == RiskSeverity.HIGH)
    medium_count = sum(1 for f in flags if f.severity == RiskSeverity.MEDIUM)

    if high_count > 0:
        return RiskLevel.HIGH
    if medium_count >= 2:
        # Two medium concerns together escalate
        return RiskLevel.HIGH
    if medium_count == 1:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def generate_recommendations(flags: Sequence[RiskFlag]) -> List[str]:
    recommendations: List[str] = []
    for flag in flags:
        text = RECOMMENDATIONS[flag.type]
        if text not in recommendations:
            recommendations.append(text)
    return recommendations


def support_resources() -> Tuple[SupportResource, ...]:
    return SUPPORT_RESOURCES
