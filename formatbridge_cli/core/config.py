"""
Configuration used by formatbridge.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _snake_case_keys(values: Dict[str, Any]) -> Dict[str, Any]:
    """Accept camelCase option names (repairSyntax) alongside snake_case"""
    return {_CAMEL_BOUNDARY.sub(r"_\1", str(key)).lower(): value for key, value in values.items()}


@dataclass
class Config:
    """Tuning knobs for detection, repair and diagnostics"""

    # Repair
    max_comma_iterations: int = 5

    # Detection
    csv_sample_rows: int = 4

    # Diagnostics
    highlight_width: int = 10

    # Logging
    log_level: str = "INFO"
    enable_detailed_logging: bool = False

    def __post_init__(self):
        if self.max_comma_iterations < 1:
            raise ValueError("max_comma_iterations must be at least 1")
        if self.csv_sample_rows < 1:
            raise ValueError("csv_sample_rows must be at least 1")
        if self.highlight_width < 1:
            raise ValueError("highlight_width must be at least 1")

    @classmethod
    def create_lightweight_config(cls) -> 'Config':
        return cls(
            max_comma_iterations=3,
            enable_detailed_logging=False,
        )

    @classmethod
    def create_verbose_config(cls) -> 'Config':
        return cls(log_level="DEBUG", enable_detailed_logging=True)

    def to_dict(self) -> Dict[str, Any]:
        return {field.name: getattr(self, field.name) for field in self.__dataclass_fields__.values()}


@dataclass
class CsvOptions:
    """CSV reading/writing options"""
    has_headers: bool = True
    delimiter: str = ","
    type_detection: bool = False
    treat_first_row_as_headers: bool = True


@dataclass
class SerializationOptions:
    """Serializer options; None falls back to the serializer's default"""
    pretty_print: Optional[bool] = None
    indent_size: Optional[int] = None
    csv_options: Optional[CsvOptions] = None


@dataclass
class ConversionOptions:
    """Per-call options for ConversionController.convert"""
    repair_syntax: bool = False
    pretty_print: bool = True
    indent_size: int = 2
    csv_options: CsvOptions = field(default_factory=CsvOptions)

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> 'ConversionOptions':
        if not options:
            return cls()
        values = _snake_case_keys(dict(options))
        csv_options = values.pop("csv_options", None)
        if isinstance(csv_options, dict):
            values["csv_options"] = CsvOptions(**_snake_case_keys(csv_options))
        elif csv_options is not None:
            values["csv_options"] = csv_options
        return cls(**values)

    def serialization_options(self) -> SerializationOptions:
        return SerializationOptions(
            pretty_print=self.pretty_print,
            indent_size=self.indent_size,
            csv_options=self.csv_options,
        )
