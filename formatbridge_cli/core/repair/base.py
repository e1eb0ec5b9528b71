"""
Building blocks shared by the per-format repair pipelines.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple

from ..types import RepairIssue, RepairResult

logger = logging.getLogger(__name__)


@dataclass
class PassResult:
    """Output of one repair pass"""
    text: str
    issues: List[RepairIssue] = field(default_factory=list)
    fixes: List[str] = field(default_factory=list)

    @property
    def fixed(self) -> bool:
        return bool(self.fixes)


RepairPass = Callable[[str], PassResult]


def line_and_column(text: str, offset: int) -> Tuple[int, int]:
    """Convert a character offset into a 1-based (line, column) pair"""
    before = text[:offset]
    line = before.count('\n') + 1
    column = offset - (before.rfind('\n') + 1) + 1
    return line, column


def _pass_name(repair_pass: RepairPass) -> str:
    func = getattr(repair_pass, 'func', repair_pass)
    return getattr(func, '__name__', repr(func))


def run_passes(text: str, passes: Sequence[RepairPass]) -> Tuple[str, List[RepairIssue], List[str]]:
    """Feed text through passes in order, accumulating issues and fixes"""
    issues: List[RepairIssue] = []
    fixes: List[str] = []
    current = text
    for repair_pass in passes:
        result = repair_pass(current)
        if result.fixed or result.issues:
            logger.debug(f"{_pass_name(repair_pass)}: {len(result.issues)} issue(s), {len(result.fixes)} fix(es)")
        current = result.text
        issues.extend(result.issues)
        fixes.extend(result.fixes)
    return current, issues, fixes


def clean_result(text: str) -> RepairResult:
    """Result for input the authoritative parser already accepts"""
    return RepairResult(success=True, repaired_text=text, issues_found=[], applied_fixes=[])
