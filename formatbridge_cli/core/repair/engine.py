"""
Syntax Repair Engine.
Dispatches to the per-format repair pipelines and absorbs unexpected failures.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..config import Config
from ..types import RepairResult, SupportedFormat
from .csv_repair import repair_csv
from .json_repair import repair_json
from .xml_repair import repair_xml
from .yaml_repair import repair_yaml

logger = logging.getLogger(__name__)


class SyntaxRepairEngine:
    """
    Best-effort repair of common syntax damage.

    Holds no per-call state; one instance can serve any number of callers.
    Never raises: every entry point returns a RepairResult.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self._repairers: Dict[SupportedFormat, Callable[[str], RepairResult]] = {
            SupportedFormat.JSON: self.repair_json,
            SupportedFormat.YAML: self.repair_yaml,
            SupportedFormat.XML: self.repair_xml,
            SupportedFormat.CSV: self.repair_csv,
        }

    def repair(self, text: str, fmt: Any) -> RepairResult:
        try:
            target = SupportedFormat.coerce(fmt)
        except ValueError:
            logger.error(f"Unsupported repair format: {fmt}")
            return RepairResult(success=False, repaired_text=None)
        return self._repairers[target](text)

    def repair_json(self, text: str) -> RepairResult:
        return self._guarded(SupportedFormat.JSON, text,
                             lambda: repair_json(text, self.config.max_comma_iterations))

    def repair_yaml(self, text: str) -> RepairResult:
        return self._guarded(SupportedFormat.YAML, text, lambda: repair_yaml(text))

    def repair_xml(self, text: str) -> RepairResult:
        return self._guarded(SupportedFormat.XML, text, lambda: repair_xml(text))

    def repair_csv(self, text: str) -> RepairResult:
        return self._guarded(SupportedFormat.CSV, text, lambda: repair_csv(text))

    def _guarded(self, fmt: SupportedFormat, text: str, run: Callable[[], RepairResult]) -> RepairResult:
        try:
            result = run()
        except Exception as e:
            logger.error(f"Error in {fmt.value} repair: {e}")
            return RepairResult(success=False, repaired_text=text)

        if result.applied_fixes:
            logger.info(f"{fmt.value} repair applied {len(result.applied_fixes)} fix(es), success={result.success}")
        if self.config.enable_detailed_logging:
            for issue in result.issues_found:
                logger.debug(f"{fmt.value} {issue.type} at {issue.line}:{issue.column} - {issue.description}")
        return result
