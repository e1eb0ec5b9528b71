"""
Conversion controller.

Sequences the stages of a conversion:

    repair (optional) -> parse -> data-loss analysis -> serialize

and exposes read-only diagnostics (format detection, problem highlights,
repair previews) built on the same components.
"""

import time
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .config import Config, ConversionOptions, CsvOptions
from .format_detector import FormatDetector
from .formats import PARSERS, SERIALIZERS, CsvParser
from .repair import SyntaxRepairEngine
from .types import (
    ConversionMetadata,
    ConversionResult,
    DetectionResult,
    Highlight,
    ParseError,
    ParseResult,
    RepairPreview,
    RepairResult,
    SupportedFormat,
)

logger = logging.getLogger(__name__)

NESTED_STRUCTURE_WARNING = (
    "Warning: Converting nested data to CSV may result in data loss. "
    "Only flat structures are fully supported in CSV format."
)
INCONSISTENT_STRUCTURE_WARNING = (
    "Warning: Array elements have inconsistent properties. "
    "CSV conversion may result in missing values."
)
CSV_TYPES_NOTE = (
    "Note: CSV values are read as strings unless type detection is enabled. "
    "Enable type detection for automatic conversion of numbers and booleans."
)
XML_ARRAY_ROOT_WARNING = (
    "Warning: XML requires a root element. "
    "Array data should be wrapped in an object with a root key."
)
XML_MULTIPLE_ROOTS_WARNING = (
    "Warning: XML data has multiple root elements. "
    "Consider wrapping in a single root element for valid XML."
)


def has_nested_structure(data: Any, depth: int = 0) -> bool:
    """True when any value sits more than one container level below the root"""
    if depth > 1:
        return True
    if isinstance(data, dict):
        return any(has_nested_structure(value, depth + 1) for value in data.values())
    if isinstance(data, list):
        return any(has_nested_structure(item, depth + 1) for item in data)
    return False


def has_inconsistent_keys(items: Sequence[Any]) -> bool:
    """True when a list of objects does not share one key set"""
    if not items or not isinstance(items[0], dict):
        return False
    first_keys = set(items[0])
    return any(not isinstance(item, dict) or set(item) != first_keys for item in items[1:])


def data_loss_warnings(data: Any, source: SupportedFormat, target: SupportedFormat) -> List[str]:
    """Advisory warnings about what the target format cannot represent"""
    warnings: List[str] = []

    if target is SupportedFormat.CSV:
        if has_nested_structure(data):
            warnings.append(NESTED_STRUCTURE_WARNING)
        if isinstance(data, list) and has_inconsistent_keys(data):
            warnings.append(INCONSISTENT_STRUCTURE_WARNING)

    if source is SupportedFormat.CSV:
        warnings.append(CSV_TYPES_NOTE)

    if target is SupportedFormat.XML:
        if isinstance(data, list):
            warnings.append(XML_ARRAY_ROOT_WARNING)
        elif isinstance(data, dict) and len(data) > 1:
            warnings.append(XML_MULTIPLE_ROOTS_WARNING)

    return warnings


def _format_error(message: str) -> ConversionResult:
    return ConversionResult(success=False, errors=[ParseError(1, 1, message, "error")])


class ConversionController:
    """
    Main entry point: convert text between JSON, YAML, XML and CSV.

    Parsers and serializers can be replaced per format; by default the
    built-in ones from ``core.formats`` are used. The controller keeps no
    per-call state, so concurrent calls never interfere.
    """

    def __init__(self,
                 config: Optional[Config] = None,
                 parsers: Optional[Mapping[SupportedFormat, Any]] = None,
                 serializers: Optional[Mapping[SupportedFormat, Any]] = None):
        self.config = config or Config()
        self.format_detector = FormatDetector(self.config)
        self.repair_engine = SyntaxRepairEngine(self.config)
        self.parsers: Dict[SupportedFormat, Any] = {fmt: cls() for fmt, cls in PARSERS.items()}
        self.serializers: Dict[SupportedFormat, Any] = {fmt: cls() for fmt, cls in SERIALIZERS.items()}
        if parsers:
            self.parsers.update(parsers)
        if serializers:
            self.serializers.update(serializers)

    def convert(self,
                text: str,
                source_format: Union[SupportedFormat, str],
                target_format: Union[SupportedFormat, str],
                options: Union[ConversionOptions, Dict[str, Any], None] = None) -> ConversionResult:
        start = time.perf_counter()
        try:
            source = SupportedFormat.coerce(source_format)
        except ValueError:
            return _format_error(f"Unsupported input format: {source_format}")
        try:
            target = SupportedFormat.coerce(target_format)
        except ValueError:
            return _format_error(f"Unsupported output format: {target_format}")
        if not isinstance(options, ConversionOptions):
            try:
                options = ConversionOptions.from_dict(options)
            except (TypeError, ValueError) as e:
                logger.error(f"Invalid conversion options {options!r}: {e}")
                return _format_error(f"Invalid conversion options: {e}")

        try:
            return self._convert(text, source, target, options, start)
        except Exception as e:
            logger.error(f"Error converting {source.value} to {target.value}: {e}")
            return _format_error(f"Conversion failed: {e}")

    def _convert(self, text: str, source: SupportedFormat, target: SupportedFormat,
                 options: ConversionOptions, start: float) -> ConversionResult:
        working_text = text
        repair_applied = False

        # Stage 1: repair; a failed attempt leaves the original text in place
        if options.repair_syntax:
            repair = self.repair_syntax(text, source)
            if repair.success and repair.repaired_text is not None:
                working_text = repair.repaired_text
                repair_applied = True
                if repair.applied_fixes:
                    logger.info(f"Repair applied before parsing: {repair.applied_fixes}")
            else:
                logger.info("Repair did not succeed; parsing original input")

        # Stage 2: parse
        parsed = self._parse(working_text, source, options.csv_options)
        if not parsed.success:
            logger.info(f"Parsing {source.value} failed with {len(parsed.errors)} error(s)")
            return ConversionResult(success=False, errors=parsed.errors, warnings=parsed.warnings)

        # Stage 3: data-loss analysis
        warnings = list(parsed.warnings) + data_loss_warnings(parsed.data, source, target)

        # Stage 4: serialize
        serialized = self.serializers[target].serialize(parsed.data, options.serialization_options())
        if not serialized.success:
            logger.info(f"Serializing to {target.value} failed: {serialized.errors}")
            return ConversionResult(
                success=False,
                errors=[ParseError(1, 1, message, "error") for message in serialized.errors],
                warnings=warnings + list(serialized.warnings),
            )

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Converted {source.value} -> {target.value} in {elapsed_ms:.1f} ms")
        return ConversionResult(
            success=True,
            output=serialized.output,
            warnings=warnings + list(serialized.warnings),
            metadata=ConversionMetadata(
                input_format=source,
                output_format=target,
                processing_time_ms=elapsed_ms,
                data_size_bytes=len(text),
                repair_applied=repair_applied,
            ),
        )

    def _parse(self, text: str, source: SupportedFormat, csv_options: Optional[CsvOptions]) -> ParseResult:
        parser = self.parsers[source]
        if source is SupportedFormat.CSV and isinstance(parser, CsvParser):
            return parser.parse(text, csv_options)
        return parser.parse(text)

    def auto_detect_format(self, text: str) -> DetectionResult:
        return self.format_detector.detect_format(text)

    def repair_syntax(self, text: str, fmt: Union[SupportedFormat, str]) -> RepairResult:
        return self.repair_engine.repair(text, fmt)

    def get_repair_preview(self, text: str, fmt: Union[SupportedFormat, str]) -> RepairPreview:
        """Before/after comparison for one repair run"""
        result = self.repair_syntax(text, fmt)
        return RepairPreview(
            original=text,
            repaired=result.repaired_text,
            issues=list(result.issues_found),
            fixes=list(result.applied_fixes),
            success=result.success,
        )

    def highlight_problems(self, text: str, errors: Sequence[Any]) -> List[Highlight]:
        """
        Map located errors onto the lines they point at.

        ``errors`` may hold ParseError/RepairIssue objects or mappings with
        ``line`` and ``column``. Errors on lines that do not exist, or on
        empty lines, produce no highlight.
        """
        lines = text.split('\n')
        highlights: List[Highlight] = []

        for error in errors:
            line_number, column = self._location(error)
            if not 1 <= line_number <= len(lines):
                continue
            line_text = lines[line_number - 1]
            if not line_text:
                continue
            start = min(max(0, column - 1), len(line_text) - 1)
            end = min(len(line_text), start + self.config.highlight_width)
            highlights.append(Highlight(
                line=line_number,
                column=column,
                line_text=line_text,
                highlight_start=start,
                highlight_end=end,
            ))

        return highlights

    @staticmethod
    def _location(error: Any):
        """(line, column) of an error; a missing or non-numeric line maps to 0"""
        if isinstance(error, Mapping):
            line, column = error.get('line'), error.get('column')
        else:
            line, column = getattr(error, 'line', None), getattr(error, 'column', None)
        try:
            line = int(line)
        except (TypeError, ValueError):
            line = 0
        try:
            column = int(column)
        except (TypeError, ValueError):
            column = 1
        return line, column
