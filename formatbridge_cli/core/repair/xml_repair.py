"""
XML syntax repair: closes tags left open at end of input.
"""

import re
import logging
from typing import List, Tuple

from ..formats.parsers import XmlParser
from ..types import RepairIssue, RepairResult
from .base import PassResult, clean_result, line_and_column, run_passes

logger = logging.getLogger(__name__)

# <name ...>, </name>, <name .../>; declarations, comments and PIs never match
_TAG = re.compile(r'<(/?)([A-Za-z_][\w.:-]*)[^>]*?(/?)>')

_parser = XmlParser()


def close_unclosed_tags(text: str) -> PassResult:
    """Report stray closing tags and append closers for tags still open"""
    issues: List[RepairIssue] = []
    fixes: List[str] = []
    stack: List[Tuple[str, int, int]] = []

    for match in _TAG.finditer(text):
        is_closing, name, self_closing = match.groups()
        if self_closing:
            continue
        line, column = line_and_column(text, match.start())
        if is_closing:
            if stack and stack[-1][0] == name:
                stack.pop()
            else:
                issues.append(RepairIssue(line, column, "mismatched_tag", f"Unexpected closing tag '</{name}>'"))
        else:
            stack.append((name, line, column))

    closing = []
    while stack:
        name, line, column = stack.pop()
        issues.append(RepairIssue(line, column, "unclosed_tag", f"Unclosed tag '<{name}>'"))
        fixes.append(f"Added closing tag '</{name}>'")
        closing.append(f"</{name}>")

    return PassResult(text + ''.join(closing), issues, fixes)


def repair_xml(text: str) -> RepairResult:
    """Repair unclosed XML tags; success means a fix was applied"""
    if _parser.parse(text).success:
        return clean_result(text)

    repaired, issues, fixes = run_passes(text, (close_unclosed_tags,))
    return RepairResult(
        success=len(fixes) > 0,
        repaired_text=repaired,
        issues_found=issues,
        applied_fixes=fixes,
    )
