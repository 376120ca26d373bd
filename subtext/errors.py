"""
subtext/errors.py
Closed error taxonomy for the parsing and classification core.
User-facing wording is deliberately absent — see ERROR_MESSAGES in subtext.api.
"""

from enum import Enum


class ParseErrorKind(str, Enum):
    EMPTY_TEXT        = 'empty_text'
    NO_MESSAGES_FOUND = 'no_messages_found'


class LLMErrorKind(str, Enum):
    MODEL_NOT_AVAILABLE = 'model_not_available'
    GENERATION_FAILED   = 'generation_failed'
    INVALID_RESPONSE    = 'invalid_response'
    PARSING_FAILED      = 'parsing_failed'


class ConversationParseError(Exception):
    """Raised by the transcript parser. Never carries partial output."""

    def __init__(self, kind: ParseErrorKind):
        super().__init__(kind.value)
        self.kind = kind


class LLMError(Exception):
    """Raised by safety flag generators. Propagated verbatim by the classifier."""

    def __init__(self, kind: LLMErrorKind, detail: str = ''):
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)
        self.kind   = kind
        self.detail = detail
