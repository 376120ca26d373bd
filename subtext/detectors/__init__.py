"""
subtext/detectors — hard-rule scanning and safety classification.
"""

from subtext.detectors.keyword_detector import scan_messages
from subtext.detectors.safety_classifier import SafetyClassifier, analyze_safety

__all__ = [
    "SafetyClassifier",
    "analyze_safety",
    "scan_messages",
]
