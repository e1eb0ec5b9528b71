"""
formatbridge: convert between JSON, YAML, XML and CSV.

Besides plain conversion it guesses the format of unlabeled text and
repairs common syntax damage before parsing.

Usage:
    from formatbridge_cli import ConversionController, ConversionOptions

    controller = ConversionController()
    result = controller.convert('{"a": 1,}', "json", "yaml",
                                ConversionOptions(repair_syntax=True))
"""

from .core import (
    Config,
    ConversionController,
    ConversionOptions,
    CsvOptions,
    FormatDetector,
    SupportedFormat,
    SyntaxRepairEngine,
)
from .core.repair import repair_csv, repair_json, repair_xml, repair_yaml

__version__ = "1.0.0"

__all__ = [
    "Config",
    "ConversionController",
    "ConversionOptions",
    "CsvOptions",
    "FormatDetector",
    "SupportedFormat",
    "SyntaxRepairEngine",
    "repair_json",
    "repair_yaml",
    "repair_xml",
    "repair_csv",
]
