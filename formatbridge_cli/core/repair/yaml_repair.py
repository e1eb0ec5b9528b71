"""
YAML syntax repair: tab characters in indentation.
"""

import re
import logging
from typing import List

from ..formats.parsers import YamlParser
from ..types import RepairIssue, RepairResult
from .base import PassResult, clean_result, run_passes

logger = logging.getLogger(__name__)

_LEADING_WHITESPACE = re.compile(r'^[ \t]*')

_parser = YamlParser()


def expand_indentation_tabs(text: str) -> PassResult:
    """Replace each tab inside leading indentation with two spaces"""
    issues: List[RepairIssue] = []
    fixes: List[str] = []
    repaired_lines = []

    for index, line in enumerate(text.split('\n')):
        indent = _LEADING_WHITESPACE.match(line).group(0)
        if '\t' in indent and line.strip():
            line = indent.replace('\t', '  ') + line[len(indent):]
            issues.append(RepairIssue(index + 1, 1, "tab_character", "Tab character in indentation"))
            fixes.append("Converted tabs to spaces")
        repaired_lines.append(line)

    return PassResult('\n'.join(repaired_lines), issues, fixes)


def repair_yaml(text: str) -> RepairResult:
    """Repair YAML indentation; success means a fix was applied"""
    if _parser.parse(text).success:
        return clean_result(text)

    repaired, issues, fixes = run_passes(text, (expand_indentation_tabs,))
    return RepairResult(
        success=len(fixes) > 0,
        repaired_text=repaired,
        issues_found=issues,
        applied_fixes=fixes,
    )
