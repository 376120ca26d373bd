"""
subtext/llm/ollama_adapter.py
Ollama backend for Stage 2 safety flag generation. Ollama runs locally,
so conversation text never leaves the device.

INSTALL:
  https://ollama.com/download, then: ollama pull llama3.1:8b

The HTTP call is blocking; generate_safety_flags() runs it in a worker
thread so callers can await it alongside other work.
"""

import asyncio
import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import List, Sequence

from subtext.errors import LLMError, LLMErrorKind
from subtext.llm.base import SafetyFlagGenerator, build_safety_prompt, parse_flags_response
from subtext.models.record import Message, RiskFlag

logger = logging.getLogger(__name__)


class OllamaAdapter(SafetyFlagGenerator):

    def __init__(
        self,
        model:       str   = 'llama3.1:8b',
        host:        str   = 'http://localhost:11434',
        timeout_sec: int   = 120,
        temperature: float = 0.1,
    ):
        self.model       = model
        self.host        = host.rstrip('/')
        self.timeout_sec = timeout_sec
        self.temperature = temperature

    # ── AVAILABILITY CHECK ───────────────────────────────────
    def is_available(self) -> bool:
        """Ping Ollama and confirm the configured model is pulled."""
        models = self.list_available_models()
        # Prefix match: "llama3" matches "llama3:8b-instruct"
        available = any(
            m == self.model or m.startswith(self.model.split(':')[0])
            for m in models
        )
        if not available:
            logger.warning(
                f"Model '{self.model}' not found in Ollama at {self.host}. "
                f"Available: {models}. Run: ollama pull {self.model}"
            )
        return available

    # ── GENERATION ───────────────────────────────────────────
    async def generate_safety_flags(self, messages: Sequence[Message]) -> List[RiskFlag]:
        prompt = build_safety_prompt(messages)
        text   = await asyncio.to_thread(self._generate, prompt)
        return parse_flags_response(text)

    def _generate(self, prompt: str) -> str:
        payload = json.dumps({
            'model':  self.model,
            'prompt': prompt,
            'stream': False,
            'options': {
                'temperature': self.temperature,
                'num_predict': 800,
            },
            'format': 'json',   # Ollama JSON mode
        }).encode('utf-8')

        req = urllib.request.Request(
            f"{self.host}/api/generate",
            data    = payload,
            headers = {'Content-Type': 'application/json'},
            method  = 'POST',
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_sec) as resp:
                data = json.loads(resp.read().decode('utf-8'))
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise LLMError(LLMErrorKind.MODEL_NOT_AVAILABLE, self.model) from e
            raise LLMError(LLMErrorKind.GENERATION_FAILED, f"HTTP {e.code}") from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            logger.error(f"Ollama request failed: {e}")
            raise LLMError(LLMErrorKind.GENERATION_FAILED, str(e)) from e
        except http.client.HTTPException as e:
            logger.error(f"Ollama response incomplete: {e!r}")
            raise LLMError(LLMErrorKind.GENERATION_FAILED, repr(e)) from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise LLMError(LLMErrorKind.INVALID_RESPONSE, str(e)) from e

        if not isinstance(data, dict):
            raise LLMError(LLMErrorKind.INVALID_RESPONSE, f"expected JSON object, got {type(data).__name__}")
        return str(data.get('response', '')).strip()

    # ── MODEL MANAGEMENT HELPERS ─────────────────────────────
    def list_available_models(self) -> List[str]:
        """Return locally available Ollama model names, [] if unreachable."""
        try:
            req = urllib.request.Request(f"{self.host}/api/tags", method='GET')
            with urllib.request.urlopen(req, timeout=5) as resp:
                data = json.loads(resp.read().decode())
            return [m['name'] for m in data.get('models', [])]
        except (urllib.error.URLError, OSError, http.client.HTTPException,
                ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ollama not reachable at {self.host}: {e}")
            return []
