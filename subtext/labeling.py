"""
subtext/labeling.py
Speaker labeling: maps a ParsedConversation onto classifier-ready Message
records once the user has said which participant they are.
"""

from typing import Dict, List, Optional

from subtext.models.record import Message, ParsedConversation
from subtext.parsers.transcript_parser import FALLBACK_SENDER


def label_speakers(
    conversation:  ParsedConversation,
    user_sender:   str,
    display_names: Optional[Dict[str, str]] = None,
) -> List[Message]:
    """
    Mark messages from user_sender as the user's own and optionally rename
    participants. Messages without a timestamp take the detection time.
    """
    names = display_names or {}
    labeled: List[Message] = []

    for msg in conversation.messages:
        original = msg.sender or FALLBACK_SENDER
        labeled.append(Message(
            text         = msg.text,
            sender       = names.get(original, original),
            timestamp    = msg.timestamp or conversation.detected_at,
            is_from_user = original == user_sender,
        ))
    return labeled
