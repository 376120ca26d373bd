"""
tests/test_parsers.py
Unit tests for format detection and transcript parsing.
Synthetic transcripts only — no real conversations needed.
"""

from datetime import datetime

import pytest

from subtext.errors import ConversationParseError, ParseErrorKind
from subtext.models.record import ConversationFormat
from subtext.parsers.format_detector import detect_format, split_sender_line
from subtext.parsers.transcript_parser import (
    FALLBACK_SENDER,
    parse,
    parse_date,
    parse_manual_lines,
    strategy_for,
)


# ── FIXTURES: Synthetic transcripts ──────────────────────────

IMESSAGE_TEXT = (
    "[12/25/24, 10:30:45] Sarah: Hey there!\n"
    "[12/25/24, 10:31:00] John: Hi Sarah!"
)

WHATSAPP_TEXT = (
    "12/25/24, 10:30 - Sarah: Hey!\n"
    "This is more\n"
    "12/25/24, 10:31 - John: Got it!"
)

TELEGRAM_TEXT = (
    "[10:30, 25.12.2024] Sarah: Hey!\n"
    "[10:31, 25.12.2024] John: Hi there!\n"
    "[10:32, 25.12.2024] Sarah: How's it going?"
)

MANUAL_TEXT = "Sarah: Hey!\nHow are you?\nJohn: Good!"


# ── FORMAT DETECTION TESTS ───────────────────────────────────

class TestFormatDetector:

    def test_detects_imessage(self):
        assert detect_format(IMESSAGE_TEXT) == ConversationFormat.IMESSAGE

    def test_detects_whatsapp(self):
        assert detect_format(WHATSAPP_TEXT) == ConversationFormat.WHATSAPP

    def test_detects_telegram(self):
        assert detect_format(TELEGRAM_TEXT) == ConversationFormat.TELEGRAM

    def test_detects_manual(self):
        assert detect_format("Sarah: Hey!\nJohn: Hi!\nSarah: How are you?") == ConversationFormat.MANUAL

    def test_plain_text_is_unknown(self):
        assert detect_format("This is just plain text with no structure") == ConversationFormat.UNKNOWN

    def test_empty_text_is_unknown(self):
        assert detect_format("") == ConversationFormat.UNKNOWN

    def test_whatsapp_never_detected_as_manual(self):
        # Every line is also "Name: message" shaped
        text = "12/25/24, 10:30 - Sarah: Hey!\n12/25/24, 10:31 - John: Hi!"
        assert detect_format(text) == ConversationFormat.WHATSAPP

    def test_imessage_probe_wins_over_later_probes(self):
        text = "[12/25/24, 10:30:45] Sarah: see you at [10:30, 25.12.2024]"
        assert detect_format(text) == ConversationFormat.IMESSAGE

    def test_exactly_half_sender_lines_is_unknown(self):
        text = "Sarah: Hey!\njust some words"
        assert detect_format(text) == ConversationFormat.UNKNOWN

    def test_long_prefix_is_not_a_sender(self):
        assert split_sender_line("x" * 50 + ": message") is None
        assert split_sender_line("x" * 49 + ": message") == ("x" * 49, "message")

    def test_colon_without_content_is_not_a_sender(self):
        assert split_sender_line("Sarah:") is None
        assert split_sender_line(": hello") is None


# ── HEADER FORMAT PARSING TESTS ──────────────────────────────

class TestHeaderParsing:

    def test_imessage_two_messages(self):
        result = parse(IMESSAGE_TEXT)
        assert result.format == ConversationFormat.IMESSAGE
        assert [(m.text, m.sender) for m in result.messages] == [
            ("Hey there!", "Sarah"),
            ("Hi Sarah!", "John"),
        ]

    def test_imessage_timestamps(self):
        result = parse(IMESSAGE_TEXT)
        assert result.messages[0].timestamp == datetime(2024, 12, 25, 10, 30, 45)
        assert result.messages[1].timestamp == datetime(2024, 12, 25, 10, 31, 0)

    def test_imessage_four_digit_year(self):
        result = parse("[1/5/2024, 9:05:07] Sarah: Morning")
        assert result.messages[0].timestamp == datetime(2024, 1, 5, 9, 5, 7)

    def test_message_text_may_contain_colons(self):
        result = parse("[12/25/24, 10:30:45] Sarah: Meet at 5:30")
        assert result.messages[0].sender == "Sarah"
        assert result.messages[0].text == "Meet at 5:30"

    def test_whatsapp_continuation_merged(self):
        result = parse(WHATSAPP_TEXT)
        assert result.format == ConversationFormat.WHATSAPP
        assert len(result.messages) == 2
        assert result.messages[0].text == "Hey!\nThis is more"
        assert result.messages[1].text == "Got it!"

    def test_multiple_continuation_lines_in_order(self):
        text = (
            "[12/25/24, 10:30:45] Sarah: Line one\n"
            "   Line two\n"
            "\n"
            "Line three\n"
        )
        result = parse(text)
        assert len(result.messages) == 1
        assert result.messages[0].text == "Line one\nLine two\nLine three"

    def test_whatsapp_timestamp(self):
        result = parse(WHATSAPP_TEXT)
        assert result.messages[1].timestamp == datetime(2024, 12, 25, 10, 31)

    def test_telegram_messages_and_timestamp(self):
        result = parse(TELEGRAM_TEXT)
        assert result.format == ConversationFormat.TELEGRAM
        assert len(result.messages) == 3
        assert result.messages[2].text == "How's it going?"
        assert result.messages[0].timestamp == datetime(2024, 12, 25, 10, 30)

    def test_unparseable_date_gives_none(self):
        result = parse("13/45/24, 10:30 - Sarah: Hi")
        assert result.format == ConversationFormat.WHATSAPP
        assert result.messages[0].timestamp is None
        assert result.messages[0].text == "Hi"

    def test_lines_before_first_header_dropped(self):
        text = "Exported chat\n[12/25/24, 10:30:45] Sarah: Hi"
        result = parse(text)
        assert len(result.messages) == 1
        assert result.messages[0].text == "Hi"

    def test_sender_is_trimmed(self):
        result = parse("12/25/24, 10:30 -   Sarah Jones  : Hi")
        assert result.messages[0].sender == "Sarah Jones"

    def test_n_headers_yield_n_messages_in_order(self):
        lines = [f"[12/25/24, 10:{i:02d}:00] Sarah: message {i}" for i in range(10)]
        result = parse("\n".join(lines))
        assert [m.text for m in result.messages] == [f"message {i}" for i in range(10)]

    def test_parsed_messages_never_from_user(self):
        for text in (IMESSAGE_TEXT, WHATSAPP_TEXT, TELEGRAM_TEXT, MANUAL_TEXT):
            assert not any(m.is_from_user for m in parse(text).messages)

    def test_participants(self):
        result = parse(TELEGRAM_TEXT)
        assert result.participants == frozenset({"Sarah", "John"})

    def test_detected_at_is_naive_like_parsed_times(self):
        conversation = parse(IMESSAGE_TEXT)
        assert conversation.detected_at.tzinfo is None
        assert all(m.timestamp.tzinfo is None for m in conversation.messages)


# ── MANUAL PARSING TESTS ─────────────────────────────────────

class TestManualParsing:

    def test_continuation_attributed_to_last_sender(self):
        result = parse(MANUAL_TEXT)
        assert result.format == ConversationFormat.MANUAL
        assert [(m.text, m.sender) for m in result.messages] == [
            ("Hey!", "Sarah"),
            ("How are you?", "Sarah"),
            ("Good!", "John"),
        ]

    def test_manual_messages_have_no_timestamp(self):
        assert all(m.timestamp is None for m in parse(MANUAL_TEXT).messages)

    def test_unknown_falls_back_to_manual(self):
        result = parse("This is just plain text with no structure")
        assert result.format == ConversationFormat.UNKNOWN
        assert len(result.messages) == 1
        assert result.messages[0].sender == FALLBACK_SENDER
        assert result.participants == frozenset({FALLBACK_SENDER})

    def test_bare_name_line_absorbed_as_text(self):
        messages = parse_manual_lines("Sarah: Hi\nJohn:\nJohn: ok")
        assert [(m.text, m.sender) for m in messages] == [
            ("Hi", "Sarah"),
            ("John:", "Sarah"),
            ("ok", "John"),
        ]

    def test_long_prefix_line_attributed_to_previous_sender(self):
        long_line = "x" * 50 + ": something"
        result = parse("Sarah: Hi\n" + long_line)
        assert result.format == ConversationFormat.UNKNOWN
        assert result.messages[1].sender == "Sarah"
        assert result.messages[1].text == long_line

    def test_strategy_for_unknown_is_manual(self):
        assert strategy_for(ConversationFormat.UNKNOWN) is parse_manual_lines
        assert strategy_for(ConversationFormat.MANUAL) is parse_manual_lines


# ── ERROR TESTS ──────────────────────────────────────────────

class TestParseErrors:

    @pytest.mark.parametrize("text", ["", "   \n  "])
    def test_empty_text(self, text):
        with pytest.raises(ConversationParseError) as exc:
            parse(text)
        assert exc.value.kind == ParseErrorKind.EMPTY_TEXT

    def test_header_probe_without_messages(self):
        with pytest.raises(ConversationParseError) as exc:
            parse("[12/25/24, 10:30:45]")
        assert exc.value.kind == ParseErrorKind.NO_MESSAGES_FOUND


class TestParseDate:

    def test_first_matching_format_wins(self):
        formats = ("%m/%d/%y, %H:%M", "%m/%d/%Y, %H:%M")
        assert parse_date("12/25/24, 10:30", formats) == datetime(2024, 12, 25, 10, 30)
        assert parse_date("12/25/2024, 10:30", formats) == datetime(2024, 12, 25, 10, 30)

    def test_all_formats_fail(self):
        assert parse_date("yesterday", ("%H:%M, %d.%m.%Y",)) is None
