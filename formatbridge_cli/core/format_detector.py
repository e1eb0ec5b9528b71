"""
Heuristic format detection for unlabeled text.
"""

import json
import re
import logging
from typing import Optional

from .config import Config
from .types import DetectionResult, FormatCandidate, SupportedFormat


logger = logging.getLogger(__name__)

CSV_DELIMITERS = (',', ';', '\t', '|')

_JSON_KEY = re.compile(r'"[^"]*"\s*:\s*')
_YAML_LINE_PATTERNS = (
    re.compile(r'^---\s*$'),   # document separator
    re.compile(r'^\s*-\s+'),   # list item
    re.compile(r'^\s*\w+:\s*'),  # key: value
    re.compile(r'^\s*#'),      # comment
)
_XML_DECLARATION = re.compile(r'^<\?xml')
_XML_TAG = re.compile(r'<[^>]+>')
_XML_CLOSING_TAG = re.compile(r'</[^>]+>')


def _clamp(confidence: float) -> float:
    return round(min(max(confidence, 0.0), 1.0), 4)


class FormatDetector:
    """
    Scores text against each supported format and ranks the results.

    Stateless: the scorers only read their input, so one detector can be
    shared freely.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def detect_format(self, text: str) -> DetectionResult:
        if not text or not text.strip():
            return DetectionResult(detected_format=None, confidence=0.0, alternatives=[])

        try:
            candidates = [
                self._score_json(text),
                self._score_yaml(text),
                self._score_xml(text),
                self._score_csv(text),
            ]
        except Exception as e:
            logger.error(f"Error in format detection: {e}")
            return DetectionResult(detected_format=None, confidence=0.0, alternatives=[])

        ranked = sorted(
            (candidate for candidate in candidates if candidate.confidence > 0),
            key=lambda candidate: candidate.confidence,
            reverse=True,
        )
        if not ranked:
            return DetectionResult(detected_format=None, confidence=0.0, alternatives=[])

        primary, alternatives = ranked[0], ranked[1:]
        logger.debug(f"Detected {primary.format.value} with confidence {primary.confidence}")
        return DetectionResult(
            detected_format=primary.format,
            confidence=primary.confidence,
            alternatives=alternatives,
        )

    def _score_json(self, text: str) -> FormatCandidate:
        trimmed = text.strip()
        confidence = 0.0

        if (trimmed.startswith('{') and trimmed.endswith('}')) or \
                (trimmed.startswith('[') and trimmed.endswith(']')):
            confidence += 0.4

        if _JSON_KEY.search(trimmed):
            confidence += 0.3

        try:
            json.loads(trimmed)
            confidence += 0.3
        except ValueError:
            confidence = max(0.0, confidence - 0.2)

        return FormatCandidate(SupportedFormat.JSON, _clamp(confidence))

    def _score_yaml(self, text: str) -> FormatCandidate:
        lines = text.split('\n')
        matches = sum(
            1 for line in lines
            if any(pattern.search(line) for pattern in _YAML_LINE_PATTERNS)
        )
        confidence = min(0.8, matches / len(lines) * 2) if matches else 0.0

        # defer to JSON for bracket-delimited input
        trimmed = text.strip()
        if trimmed.startswith('{') or trimmed.startswith('['):
            confidence *= 0.3

        return FormatCandidate(SupportedFormat.YAML, _clamp(confidence))

    def _score_xml(self, text: str) -> FormatCandidate:
        trimmed = text.strip()
        confidence = 0.0

        if _XML_DECLARATION.search(trimmed):
            confidence += 0.4
        if _XML_TAG.search(trimmed):
            confidence += 0.3
        if trimmed.startswith('<') and trimmed.endswith('>'):
            confidence += 0.2
        if _XML_CLOSING_TAG.search(trimmed):
            confidence += 0.1

        return FormatCandidate(SupportedFormat.XML, _clamp(confidence))

    def _score_csv(self, text: str) -> FormatCandidate:
        lines = [line for line in text.split('\n') if line.strip()]
        if len(lines) < 2:
            return FormatCandidate(SupportedFormat.CSV, 0.0)

        first_line = lines[0]
        sample = lines[1:1 + self.config.csv_sample_rows]
        confidence = 0.0

        for delimiter in CSV_DELIMITERS:
            expected_columns = len(first_line.split(delimiter))
            if expected_columns <= 1:
                continue
            consistent = sum(
                1 for line in sample
                if abs(len(line.split(delimiter)) - expected_columns) <= 1
            )
            if consistent:
                confidence = max(confidence, consistent / len(sample) * 0.8)

        if first_line.strip().startswith('<') or first_line.strip().startswith('{'):
            confidence *= 0.2

        return FormatCandidate(SupportedFormat.CSV, _clamp(confidence))
