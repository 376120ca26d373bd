"""
subtext/parsers/transcript_parser.py
Turns pasted chat transcripts into ordered, speaker-attributed messages.

Header formats (iMessage, WhatsApp, Telegram) start every message with a
timestamp/sender prefix; any following line that does not match the header
is a continuation of the message above it. Manual text has no header — each
line is its own message, attributed to the last "Name:" seen.

The parser holds no state between calls. Patterns are compiled once at import
and shared read-only.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple

from subtext.errors import ConversationParseError, ParseErrorKind
from subtext.models.record import ConversationFormat, ParsedConversation, ParsedMessage
from subtext.parsers.format_detector import detect_format, split_sender_line

logger = logging.getLogger(__name__)

# Sender used by Manual parsing before any "Name:" line has been seen
FALLBACK_SENDER = 'Unknown'

ParseStrategy = Callable[[str], List[ParsedMessage]]


@dataclass(frozen=True)
class HeaderFormat:
    """Header regex capturing (timestamp, sender, text) plus ordered date formats."""
    header:       re.Pattern
    date_formats: Tuple[str, ...]


HEADER_FORMATS: Dict[ConversationFormat, HeaderFormat] = {

    # [12/25/24, 10:30:45] Sarah: Hey there!
    ConversationFormat.IMESSAGE: HeaderFormat(
        header       = re.compile(r'\[([^\]]+)\]\s*([^:]+):\s*(.*)', re.DOTALL),
        date_formats = ('%m/%d/%y, %H:%M:%S', '%m/%d/%Y, %H:%M:%S'),
    ),

    # 12/25/24, 10:30 - Sarah: Hey!
    ConversationFormat.WHATSAPP: HeaderFormat(
        header       = re.compile(r'(\d{1,2}/\d{1,2}/\d{2,4}, \d{1,2}:\d{2})\s*-\s*([^:]+):\s*(.*)'),
        date_formats = ('%m/%d/%y, %H:%M', '%m/%d/%Y, %H:%M'),
    ),

    # [10:30, 25.12.2024] Sarah: Hey!
    ConversationFormat.TELEGRAM: HeaderFormat(
        header       = re.compile(r'\[(\d{2}:\d{2}, \d{2}\.\d{2}\.\d{4})\]\s*([^:]+):\s*(.*)'),
        date_formats = ('%H:%M, %d.%m.%Y',),
    ),
}


# ── PUBLIC API ───────────────────────────────────────────────

def parse(text: str) -> ParsedConversation:
    """
    Detect the transcript format and extract its messages.

    Raises ConversationParseError(EMPTY_TEXT) for blank input and
    ConversationParseError(NO_MESSAGES_FOUND) when nothing is extracted.
    """
    trimmed = text.strip()
    if not trimmed:
        raise ConversationParseError(ParseErrorKind.EMPTY_TEXT)

    fmt      = detect_format(trimmed)
    messages = strategy_for(fmt)(trimmed)

    if not messages:
        logger.info(f"No messages extracted from {fmt.value} text")
        raise ConversationParseError(ParseErrorKind.NO_MESSAGES_FOUND)

    participants = frozenset(m.sender for m in messages if m.sender is not None)
    logger.info(
        f"Parsed {len(messages)} messages from {len(participants)} "
        f"participant(s) as {fmt.value}"
    )

    return ParsedConversation(
        format       = fmt,
        messages     = tuple(messages),
        participants = participants,
        detected_at  = datetime.now(),
    )


def strategy_for(fmt: ConversationFormat) -> ParseStrategy:
    """Unknown text is parsed with the Manual strategy rather than rejected."""
    header_format = HEADER_FORMATS.get(fmt)
    if header_format is None:
        return parse_manual_lines
    return partial(parse_header_lines, header_format=header_format)


# ── STRATEGIES ───────────────────────────────────────────────

def parse_header_lines(text: str, header_format: HeaderFormat) -> List[ParsedMessage]:
    messages: List[ParsedMessage] = []
    current:  Optional[Tuple[str, str, str]] = None   # (date_str, sender, text)
    dropped = 0

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue

        match = header_format.header.search(line)
        if match:
            if current is not None:
                messages.append(_flush(current, header_format.date_formats))
            date_str, sender, body = match.groups()
            current = (date_str, sender.strip(), body)
        elif current is not None:
            date_str, sender, body = current
            current = (date_str, sender, body + '\n' + line)
        else:
            # Precedes the first header — cannot be attributed
            dropped += 1

    if current is not None:
        messages.append(_flush(current, header_format.date_formats))

    if dropped:
        logger.debug(f"Dropped {dropped} line(s) before the first header")
    return messages


def parse_manual_lines(text: str) -> List[ParsedMessage]:
    messages:    List[ParsedMessage] = []
    last_sender: Optional[str] = None

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue

        split = split_sender_line(line)
        if split is not None:
            last_sender, body = split
            messages.append(ParsedMessage(text=body, sender=last_sender, timestamp=None))
        else:
            messages.append(ParsedMessage(
                text      = line,
                sender    = last_sender or FALLBACK_SENDER,
                timestamp = None,
            ))

    return messages


# ── HELPERS ──────────────────────────────────────────────────

def _flush(current: Tuple[str, str, str], date_formats: Tuple[str, ...]) -> ParsedMessage:
    date_str, sender, body = current
    return ParsedMessage(
        text         = body,
        sender       = sender,
        timestamp    = parse_date(date_str, date_formats),
        is_from_user = False,
    )


def parse_date(date_str: str, formats: Tuple[str, ...]) -> Optional[datetime]:
    """Try each format in order; first success wins, None if all fail."""
    for fmt in formats:
        try:
            return datetime.strptime(date_str, fmt)
        except ValueError:
            continue
    return None
