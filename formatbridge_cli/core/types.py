"""
Type definitions shared by the detector, repair engine and converter.
Separated to avoid circular imports.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, List, Any, Optional


class SupportedFormat(Enum):
    """Structured-data formats the converter understands"""
    JSON = "json"
    YAML = "yaml"
    XML = "xml"
    CSV = "csv"

    @classmethod
    def coerce(cls, value: Any) -> 'SupportedFormat':
        """Accept an enum member or its (case-insensitive) name"""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class RepairIssue:
    """One finding reported by a repair pass"""
    line: int
    column: int
    type: str
    description: str


@dataclass
class RepairResult:
    """Result of one repair invocation"""
    success: bool
    repaired_text: Optional[str]
    issues_found: List[RepairIssue] = field(default_factory=list)
    applied_fixes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FormatCandidate:
    format: SupportedFormat
    confidence: float


@dataclass
class DetectionResult:
    """Best format guess plus ranked alternatives"""
    detected_format: Optional[SupportedFormat]
    confidence: float
    alternatives: List[FormatCandidate] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detected_format": self.detected_format.value if self.detected_format else None,
            "confidence": self.confidence,
            "alternatives": [
                {"format": alt.format.value, "confidence": alt.confidence}
                for alt in self.alternatives
            ],
        }


@dataclass
class ParseError:
    """Located parser error, 1-based line and column"""
    line: int
    column: int
    message: str
    severity: str = "error"


@dataclass
class ParseResult:
    success: bool
    data: Any = None
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class SerializationResult:
    success: bool
    output: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class ConversionMetadata:
    input_format: SupportedFormat
    output_format: SupportedFormat
    processing_time_ms: float
    data_size_bytes: int
    repair_applied: bool


@dataclass
class ConversionResult:
    """Outcome of one convert() call"""
    success: bool
    output: Optional[str] = None
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Optional[ConversionMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        if self.metadata is not None:
            result["metadata"]["input_format"] = self.metadata.input_format.value
            result["metadata"]["output_format"] = self.metadata.output_format.value
        return result


@dataclass
class Highlight:
    """Problem span on one physical line (0-based, end exclusive)"""
    line: int
    column: int
    line_text: str
    highlight_start: int
    highlight_end: int


@dataclass
class RepairPreview:
    """Before/after view of a single repair run"""
    original: str
    repaired: Optional[str]
    issues: List[RepairIssue]
    fixes: List[str]
    success: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
