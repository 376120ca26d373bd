"""
subtext/api.py
─────────────────────────────────────────────────────────────────────────────
Subtext — Dual-mode API layer

TWO USAGE MODES:
  1. Importable module:
         from subtext.api import SubtextAPI
         api = SubtextAPI(generator=OllamaAdapter())
         parsed = api.parse_transcript(pasted_text)
         report = await api.analyze(messages)

  2. FastAPI HTTP server:
         python -m subtext.api                    # default: port 8766
         uvicorn subtext.api:app --port 8766

ENDPOINTS:
  POST /parse    — detect format and parse pasted transcript text
  POST /analyze  — safety analysis over speaker-labeled messages
  GET  /health   — server status and model availability

PRIVACY NOTE:
  The server binds to 127.0.0.1 only. Message text is never logged.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from subtext import __version__
from subtext.config import build_generator, load_config
from subtext.detectors.safety_classifier import SafetyClassifier
from subtext.errors import ConversationParseError, LLMError, LLMErrorKind
from subtext.llm.base import SafetyFlagGenerator
from subtext.models.record import Message
from subtext.parsers.format_detector import detect_format
from subtext.parsers.transcript_parser import parse
from subtext.presentation import ERROR_MESSAGES, error_payload, to_jsonable  # noqa: F401

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# IMPORTABLE CLASS
# ═══════════════════════════════════════════════════════════════════════════

class SubtextAPI:
    """
    Pure-Python facade over the parser and classifier.
    No HTTP layer required — import and call directly.
    Errors from the core propagate unchanged.
    """

    def __init__(self, generator: Optional[SafetyFlagGenerator] = None):
        self.generator = generator

    def detect(self, text: str) -> str:
        return detect_format(text).value

    def parse_transcript(self, text: str) -> Dict[str, Any]:
        return to_jsonable(asdict(parse(text)))

    async def analyze(self, messages: Sequence[Message]) -> Dict[str, Any]:
        if self.generator is None:
            raise LLMError(LLMErrorKind.MODEL_NOT_AVAILABLE, "no generator configured")
        analysis = await SafetyClassifier(self.generator).analyze(messages)
        return to_jsonable(asdict(analysis))


# ═══════════════════════════════════════════════════════════════════════════
# FASTAPI HTTP APP
# ═══════════════════════════════════════════════════════════════════════════

class ParseRequest(BaseModel):
    text: str


class MessageIn(BaseModel):
    text:         str
    sender:       str
    timestamp:    Optional[datetime] = None
    is_from_user: bool = False


class AnalyzeRequest(BaseModel):
    messages: List[MessageIn]


def build_app(generator: Optional[SafetyFlagGenerator] = None) -> FastAPI:
    """
    Build the FastAPI application. Without an explicit generator the
    configured Ollama adapter is used.
    """
    if generator is None:
        generator = build_generator(load_config())

    _api = SubtextAPI(generator=generator)

    _app = FastAPI(
        title       = "Subtext API",
        description = "Chat transcript parsing and safety classification — local API",
        version     = __version__,
        docs_url    = "/docs",
        redoc_url   = None,
    )

    _app.add_middleware(
        CORSMiddleware,
        allow_origins     = [
            "http://localhost",
            "http://localhost:8766",
            "http://127.0.0.1",
            "http://127.0.0.1:8766",
        ],
        allow_methods     = ["GET", "POST", "OPTIONS"],
        allow_headers     = ["Content-Type"],
        allow_credentials = False,
    )

    @_app.post("/parse", summary="Parse a pasted transcript")
    def parse_endpoint(req: ParseRequest):
        try:
            return _api.parse_transcript(req.text)
        except ConversationParseError as exc:
            logger.info(f"Parse rejected: {exc.kind.value}")
            return JSONResponse(content=error_payload(exc.kind), status_code=422)

    @_app.post("/analyze", summary="Safety analysis over labeled messages")
    async def analyze_endpoint(req: AnalyzeRequest):
        now = datetime.now()
        messages = [
            Message(
                text         = m.text,
                sender       = m.sender,
                timestamp    = m.timestamp or now,
                is_from_user = m.is_from_user,
            )
            for m in req.messages
        ]
        try:
            return await _api.analyze(messages)
        except LLMError as exc:
            logger.error(f"Safety analysis failed: {exc}", exc_info=True)
            return JSONResponse(content=error_payload(exc.kind), status_code=502)

    @_app.get("/health", summary="Health check")
    def health():
        return {
            "status":          "ok",
            "model_available": generator.is_available(),
            "version":         __version__,
        }

    return _app


# Module-level app instance — used by uvicorn subtext.api:app
app = build_app()


# ═══════════════════════════════════════════════════════════════════════════
# SERVER ENTRYPOINT — python -m subtext.api
# ═══════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(
        prog        = "subtext.api",
        description = "Subtext API Server — serves parsing and safety analysis on localhost",
    )
    parser.add_argument("--port", type=int, default=8766,
                        help="Port to bind (default: 8766)")
    parser.add_argument("--host", type=str, default="127.0.0.1",
                        help="Host to bind — DO NOT change to 0.0.0.0 on shared networks")
    args = parser.parse_args()

    logging.basicConfig(
        level   = logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
