"""
subtext/config.py
JSON config with defaults. Persists to subtext_config.json in the project root.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "subtext_config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "model": "llama3.1:8b",
    "ollama_host": "http://localhost:11434",
    "timeout_sec": 120,
    "temperature": 0.1,
    "user_name": "",
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from subtext_config.json. Returns defaults if missing or unreadable."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return _coerce({**DEFAULT_CONFIG, **data})
            logger.warning(f"Config at {path} is not a JSON object — using defaults")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Config load failed: {e}")
    return dict(DEFAULT_CONFIG)


def _coerce(config: Dict[str, Any]) -> Dict[str, Any]:
    """Bring each known key to its default's type; a value that will not convert keeps the default."""
    for key, default in DEFAULT_CONFIG.items():
        value = config[key]
        if type(value) is type(default):
            continue
        try:
            if isinstance(default, str) or isinstance(value, bool):
                raise TypeError(f"expected {type(default).__name__}")
            config[key] = type(default)(value)
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Config value {key}={value!r} is invalid, using {default!r}")
            config[key] = default
    return config


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to subtext_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def build_generator(config: Dict[str, Any]):
    """Construct the configured Stage 2 generator."""
    from subtext.llm.ollama_adapter import OllamaAdapter
    return OllamaAdapter(
        model       = config["model"],
        host        = config["ollama_host"],
        timeout_sec = int(config["timeout_sec"]),
        temperature = float(config["temperature"]),
    )
