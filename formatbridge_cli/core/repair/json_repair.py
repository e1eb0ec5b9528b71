"""
JSON syntax repair.

The pipeline runs in a fixed order because each pass relies on the text
produced by the previous one:

    clean check -> trailing commas -> missing commas -> unclosed quotes
    -> bracket balancing -> re-validation

Each pass is a plain function ``str -> PassResult`` so it can be exercised on
its own.
"""

import re
import logging
from functools import partial
from typing import List, Tuple

from ..formats.parsers import JsonParser
from ..types import RepairIssue, RepairResult
from .base import PassResult, clean_result, line_and_column, run_passes

logger = logging.getLogger(__name__)

MAX_COMMA_ITERATIONS = 5

_TRAILING_COMMA = re.compile(r',(\s*[}\]])')

# value/quote, closer/quote, closer/opener separated only by whitespace
_MISSING_COMMA_PATTERNS = (
    re.compile(r'("[^"]*"|\d+|true|false|null)(\s+)(")'),
    re.compile(r'([}\]])(\s+)(")'),
    re.compile(r'([}\]])(\s+)([{\[])'),
)

_CONTINUATION = re.compile(r'^[,}\]]')

_CLOSERS = {'{': '}', '[': ']'}
_OPENERS = {'}': '{', ']': '['}

_parser = JsonParser()


def is_valid_json(text: str) -> bool:
    return _parser.parse(text).success


def remove_trailing_commas(text: str) -> PassResult:
    """Drop commas that directly precede a closing brace or bracket"""
    issues: List[RepairIssue] = []
    fixes: List[str] = []

    def _drop(match):
        line, column = line_and_column(text, match.start())
        issues.append(RepairIssue(line, column, "trailing_comma", "Trailing comma before closing bracket"))
        fixes.append("Removed trailing comma")
        return match.group(1)

    repaired = _TRAILING_COMMA.sub(_drop, text)
    return PassResult(repaired, issues, fixes)


def insert_missing_commas(text: str, max_iterations: int = MAX_COMMA_ITERATIONS) -> PassResult:
    """
    Insert commas between adjacent values.

    One insertion can expose another site, so the patterns are re-applied
    until the text stops changing or ``max_iterations`` rounds have run.
    """
    issues: List[RepairIssue] = []
    fixes: List[str] = []
    current = text
    previous = None
    iterations = 0

    while current != previous and iterations < max_iterations:
        previous = current
        iterations += 1
        for pattern in _MISSING_COMMA_PATTERNS:
            source = current

            def _insert(match, source=source):
                value, whitespace, following = match.groups()
                line, column = line_and_column(source, match.start() + len(value))
                issues.append(RepairIssue(line, column, "missing_comma", "Missing comma between values"))
                fixes.append("Added missing comma")
                return f"{value},{whitespace}{following}"

            current = pattern.sub(_insert, source)

    return PassResult(current, issues, fixes)


def _count_unescaped_quotes(line: str) -> int:
    count = 0
    escaped = False
    for char in line:
        if char == '\\' and not escaped:
            escaped = True
            continue
        if char == '"' and not escaped:
            count += 1
        escaped = False
    return count


def close_unterminated_strings(text: str) -> PassResult:
    """Append a closing quote to lines that leave a string literal open"""
    issues: List[RepairIssue] = []
    fixes: List[str] = []
    repaired_lines = []

    for index, line in enumerate(text.split('\n')):
        if _count_unescaped_quotes(line) % 2 != 0:
            tail = line[line.rfind('"') + 1:].strip()
            # a tail starting with , } or ] means the line already closes its value
            if tail and not _CONTINUATION.match(tail):
                line = line + '"'
                issues.append(RepairIssue(index + 1, len(line), "unclosed_quote", "Unclosed string quote"))
                fixes.append("Added closing quote")
        repaired_lines.append(line)

    return PassResult('\n'.join(repaired_lines), issues, fixes)


def balance_brackets(text: str) -> PassResult:
    """
    Close braces/brackets left open at end of input.

    Closers without a matching opener are reported but left untouched.
    """
    issues: List[RepairIssue] = []
    fixes: List[str] = []
    stack: List[Tuple[str, int, int]] = []
    in_string = False
    escaped = False
    line, column = 1, 0

    for char in text:
        if char == '\n':
            line += 1
            column = 0
            escaped = False
            continue
        column += 1

        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append((char, line, column))
        elif char in _OPENERS:
            if stack and stack[-1][0] == _OPENERS[char]:
                stack.pop()
            else:
                issues.append(RepairIssue(line, column, "mismatched_bracket", f"Unexpected closing bracket '{char}'"))

    closing = []
    while stack:
        opener, open_line, open_column = stack.pop()
        closer = _CLOSERS[opener]
        issues.append(RepairIssue(open_line, open_column, "unclosed_bracket", f"Unclosed '{opener}' bracket"))
        fixes.append(f"Added closing '{closer}' bracket")
        closing.append(closer)

    return PassResult(text + ''.join(closing), issues, fixes)


def repair_json(text: str, max_comma_iterations: int = MAX_COMMA_ITERATIONS) -> RepairResult:
    """Repair common JSON damage; success means the result parses"""
    if is_valid_json(text):
        return clean_result(text)

    passes = (
        remove_trailing_commas,
        partial(insert_missing_commas, max_iterations=max_comma_iterations),
        close_unterminated_strings,
        balance_brackets,
    )
    repaired, issues, fixes = run_passes(text, passes)
    success = is_valid_json(repaired)
    if not success:
        logger.debug(f"JSON still invalid after {len(fixes)} fix(es)")

    return RepairResult(
        success=success,
        repaired_text=repaired,
        issues_found=issues,
        applied_fixes=fixes,
    )
