"""
CSV syntax repair: unterminated quotes and mixed delimiters.
"""

import logging
from collections import Counter
from typing import List

from ..formats.parsers import CsvParser
from ..types import RepairIssue, RepairResult
from .base import PassResult, clean_result, run_passes

logger = logging.getLogger(__name__)

CANDIDATE_DELIMITERS = (',', ';', '\t', '|')

_parser = CsvParser()


def _count_field_quotes(line: str) -> int:
    """Count quote characters, skipping doubled ("") escapes"""
    count = 0
    index = 0
    while index < len(line):
        if line[index] == '"':
            if index + 1 < len(line) and line[index + 1] == '"':
                index += 2
                continue
            count += 1
        index += 1
    return count


def close_unterminated_quotes(text: str) -> PassResult:
    issues: List[RepairIssue] = []
    fixes: List[str] = []
    repaired_lines = []

    for index, line in enumerate(text.split('\n')):
        if _count_field_quotes(line) % 2 != 0:
            line = line + '"'
            issues.append(RepairIssue(index + 1, len(line), "unclosed_quote", "Unclosed quote in CSV field"))
            fixes.append("Added closing quote")
        repaired_lines.append(line)

    return PassResult('\n'.join(repaired_lines), issues, fixes)


def _delimiters_outside_quotes(line: str) -> Counter:
    counts: Counter = Counter()
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and char in CANDIDATE_DELIMITERS:
            counts[char] += 1
    return counts


def _replace_outside_quotes(line: str, canonical: str) -> str:
    chars = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and char in CANDIDATE_DELIMITERS and char != canonical:
            char = canonical
        chars.append(char)
    return ''.join(chars)


def detect_primary_delimiter(text: str) -> str:
    """Most frequent candidate delimiter; ties go to the earlier candidate"""
    totals: Counter = Counter()
    for line in text.split('\n'):
        if line.strip():
            totals.update(_delimiters_outside_quotes(line))
    primary, best = ',', 0
    for delimiter in CANDIDATE_DELIMITERS:
        if totals[delimiter] > best:
            primary, best = delimiter, totals[delimiter]
    return primary


def normalize_delimiters(text: str) -> PassResult:
    """Rewrite every line to use the dominant delimiter"""
    issues: List[RepairIssue] = []
    fixes: List[str] = []
    lines = text.split('\n')
    if not any(line.strip() for line in lines):
        return PassResult(text, issues, fixes)

    primary = detect_primary_delimiter(text)
    shown = '\\t' if primary == '\t' else primary
    repaired_lines = []

    for index, line in enumerate(lines):
        if line.strip():
            counts = _delimiters_outside_quotes(line)
            if any(delimiter != primary for delimiter in counts):
                line = _replace_outside_quotes(line, primary)
                issues.append(RepairIssue(
                    index + 1, 1, "inconsistent_delimiter",
                    f"Inconsistent delimiter, normalized to '{shown}'",
                ))
                fixes.append(f"Normalized delimiter to '{shown}'")
        repaired_lines.append(line)

    return PassResult('\n'.join(repaired_lines), issues, fixes)


def repair_csv(text: str) -> RepairResult:
    """Repair CSV quoting and delimiters; success means a fix was applied"""
    parses = _parser.parse(text).success
    # a strict parse still accepts stray delimiters as field content
    passes = (normalize_delimiters,) if parses else (close_unterminated_quotes, normalize_delimiters)

    repaired, issues, fixes = run_passes(text, passes)
    if parses and not fixes:
        return clean_result(text)
    return RepairResult(
        success=len(fixes) > 0,
        repaired_text=repaired,
        issues_found=issues,
        applied_fixes=fixes,
    )
