"""
subtext/cli.py
Command-line interface for Subtext.

USAGE:
  subtext chat.txt                         # parse and print JSON
  subtext chat.txt --detect-only           # print detected format only
  subtext chat.txt --analyze --me "John"   # parse, label, run safety analysis
  pbpaste | subtext -                      # read transcript from stdin

Safety analysis requires a running Ollama server. If the model call fails,
the command exits 1 with the error message.
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from subtext.presentation import ERROR_MESSAGES, to_jsonable
from subtext.config import build_generator, load_config
from subtext.detectors.safety_classifier import analyze_safety
from subtext.errors import ConversationParseError, LLMError
from subtext.labeling import label_speakers
from subtext.parsers.format_detector import detect_format
from subtext.parsers.transcript_parser import parse

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog        = 'subtext',
        description = 'Subtext — chat transcript parser and safety classifier',
    )
    parser.add_argument(
        'transcript',
        help    = 'Transcript text file, or - to read stdin',
    )
    parser.add_argument(
        '--detect-only',
        action  = 'store_true',
        help    = 'Print the detected format and exit',
    )
    parser.add_argument(
        '--analyze', '-a',
        action  = 'store_true',
        help    = 'Run safety analysis after parsing (requires Ollama)',
    )
    parser.add_argument(
        '--me',
        default = None,
        help    = 'Which participant is you — their messages are never flagged',
    )
    parser.add_argument(
        '--model', '-m',
        default = None,
        help    = 'Ollama model name (default: from subtext_config.json)',
    )
    parser.add_argument(
        '--ollama-host',
        default = None,
        help    = 'Ollama host URL (default: from subtext_config.json)',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )
    args = parser.parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    logging.basicConfig(
        level   = logging.DEBUG if args.verbose else logging.INFO,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
        stream  = sys.stderr,
    )

    if args.transcript == '-':
        text = sys.stdin.read()
    else:
        path = Path(args.transcript)
        if not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1
        text = path.read_text(encoding='utf-8-sig', errors='replace')

    if args.detect_only:
        print(detect_format(text.strip()).value)
        return 0

    try:
        conversation = parse(text)
    except ConversationParseError as e:
        print(f"Error: {ERROR_MESSAGES[e.kind]}", file=sys.stderr)
        return 1

    output = {'conversation': to_jsonable(asdict(conversation))}

    if args.analyze:
        config = load_config()
        if args.model:
            config['model'] = args.model
        if args.ollama_host:
            config['ollama_host'] = args.ollama_host

        me = args.me or config.get('user_name') or ''
        if me and me not in conversation.participants:
            logger.warning(f"--me '{me}' is not a participant: {sorted(conversation.participants)}")

        messages = label_speakers(conversation, user_sender=me)
        try:
            analysis = asyncio.run(analyze_safety(messages, build_generator(config)))
        except LLMError as e:
            print(f"Error: {ERROR_MESSAGES[e.kind]} ({e.detail})", file=sys.stderr)
            return 1
        output['safety'] = to_jsonable(asdict(analysis))

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == '__main__':
    sys.exit(main())
