"""
Detection, repair and conversion core.
"""

from .config import Config, ConversionOptions, CsvOptions, SerializationOptions
from .converter import ConversionController
from .format_detector import FormatDetector
from .repair import SyntaxRepairEngine
from .types import (
    ConversionResult,
    DetectionResult,
    Highlight,
    ParseError,
    RepairIssue,
    RepairPreview,
    RepairResult,
    SupportedFormat,
)

__all__ = [
    "Config",
    "ConversionOptions",
    "CsvOptions",
    "SerializationOptions",
    "ConversionController",
    "FormatDetector",
    "SyntaxRepairEngine",
    "ConversionResult",
    "DetectionResult",
    "Highlight",
    "ParseError",
    "RepairIssue",
    "RepairPreview",
    "RepairResult",
    "SupportedFormat",
]
