"""
subtext/parsers — format detection and transcript parsing.

Privacy: message text is never logged. Counts and formats only.
"""

from subtext.parsers.format_detector import detect_format
from subtext.parsers.transcript_parser import parse, strategy_for

__all__ = [
    "detect_format",
    "parse",
    "strategy_for",
]
