"""
subtext/parsers/format_detector.py
Classifies pasted transcript text into one of the known export formats.

Probes run most-specific first. WhatsApp and Telegram lines are also
"Name: message" shaped, so the generic heuristic must run last.

Examples:
  iMessage  [12/25/24, 10:30:45] Sarah: Hey there!
  WhatsApp  12/25/24, 10:30 - Sarah: Hey!
  Telegram  [10:30, 25.12.2024] Sarah: Hey!
  Manual    Sarah: Hey!
"""

import logging
import re
from typing import List, Optional, Tuple

from subtext.models.record import ConversationFormat

logger = logging.getLogger(__name__)

IMESSAGE_PROBE = re.compile(r'\[\d{1,2}/\d{1,2}/\d{2,4}, \d{1,2}:\d{2}:\d{2}\]')
WHATSAPP_PROBE = re.compile(r'\d{1,2}/\d{1,2}/\d{2,4}, \d{1,2}:\d{2}\s*-\s*[^:]+:')
TELEGRAM_PROBE = re.compile(r'\[\d{2}:\d{2}, \d{2}\.\d{2}\.\d{4}\]')

# Order matters — first match wins
FORMAT_PROBES = (
    (ConversationFormat.IMESSAGE, IMESSAGE_PROBE),
    (ConversationFormat.WHATSAPP, WHATSAPP_PROBE),
    (ConversationFormat.TELEGRAM, TELEGRAM_PROBE),
)

# A sender prefix must be shorter than this to count as a name
MAX_SENDER_LENGTH = 50


def split_sender_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a trimmed line on its first colon into (sender, remainder).
    Returns None unless the prefix looks like a display name: non-empty,
    under MAX_SENDER_LENGTH characters, and followed by some content.
    """
    idx = line.find(':')
    if idx < 0:
        return None
    sender    = line[:idx].strip()
    remainder = line[idx + 1:].strip()
    if not sender or len(sender) >= MAX_SENDER_LENGTH or not remainder:
        return None
    return sender, remainder


def detect_format(text: str) -> ConversationFormat:
    """Total function: always returns a format, Unknown when nothing fits."""
    for fmt, probe in FORMAT_PROBES:
        if probe.search(text):
            logger.debug(f"Format probe matched: {fmt.value}")
            return fmt

    lines: List[str] = [line for line in text.splitlines() if line]
    sender_shaped = sum(
        1 for line in lines if split_sender_line(line.strip()) is not None
    )

    if sender_shaped > len(lines) // 2:
        return ConversationFormat.MANUAL
    return ConversationFormat.UNKNOWN
