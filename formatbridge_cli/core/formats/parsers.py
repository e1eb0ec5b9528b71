"""
Authoritative parsers, one per supported format.

Every parser returns a ParseResult; failures carry 1-based line/column
locations so the converter can highlight them.
"""

import csv
import io
import json
import re
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..config import CsvOptions
from ..types import ParseError, ParseResult, SupportedFormat

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r'^-?(0|[1-9]\d*)(\.\d+)?([eE][+-]?\d+)?$')
_CSV_NUMBER = re.compile(r'^-?\d+\.?\d*([eE][+-]?\d+)?$')
_ET_POSITION_SUFFIX = re.compile(r':\s*line \d+, column \d+$')


def _empty_input() -> ParseResult:
    return ParseResult(success=False, errors=[ParseError(1, 1, "Input is empty")])


class JsonParser:
    format = SupportedFormat.JSON

    def can_parse(self, text: str) -> bool:
        trimmed = (text or '').strip()
        return trimmed.startswith('{') or trimmed.startswith('[')

    def parse(self, text: str) -> ParseResult:
        if not text or not text.strip():
            return _empty_input()

        try:
            data = json.loads(text, parse_constant=self._reject_constant)
        except json.JSONDecodeError as e:
            return ParseResult(success=False, errors=[
                ParseError(e.lineno, e.colno, self._format_error_message(e, text))
            ])
        except ValueError as e:
            return ParseResult(success=False, errors=[ParseError(1, 1, str(e))])
        return ParseResult(success=True, data=data)

    @staticmethod
    def _reject_constant(name: str):
        raise ValueError(f"Unexpected token '{name}' - NaN and Infinity are not valid JSON")

    @staticmethod
    def _format_error_message(error: json.JSONDecodeError, text: str) -> str:
        if error.pos >= len(text.rstrip()):
            return "Unexpected end of input - missing closing bracket or brace"
        if error.msg.startswith("Expecting property name"):
            return "Expecting property name in double quotes"
        if error.msg == "Extra data":
            return "Unexpected content after the end of the JSON value"
        return error.msg


class YamlParser:
    format = SupportedFormat.YAML

    _YAML_HINTS = (
        re.compile(r'^[\w-]+:\s*'),
        re.compile(r'^-\s+'),
        re.compile(r'^---'),
        re.compile(r'^\.\.\.$'),
    )

    def can_parse(self, text: str) -> bool:
        trimmed = (text or '').strip()
        if not trimmed or trimmed.startswith('{') or trimmed.startswith('['):
            return False
        return any(pattern.match(trimmed) for pattern in self._YAML_HINTS)

    def parse(self, text: str) -> ParseResult:
        if not text or not text.strip():
            return _empty_input()

        try:
            data = yaml.safe_load(text)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            line = mark.line + 1 if mark else 1
            column = mark.column + 1 if mark else 1
            return ParseResult(success=False, errors=[
                ParseError(line, column, self._format_error_message(e.problem or str(e)))
            ])
        except yaml.YAMLError as e:
            return ParseResult(success=False, errors=[ParseError(1, 1, self._format_error_message(str(e)))])
        return ParseResult(success=True, data=data)

    @staticmethod
    def _format_error_message(message: str) -> str:
        if "found character '\\t'" in message or "found character '\t'" in message:
            return "Tab characters are not allowed in YAML indentation"
        if "expected <block end>" in message:
            return "Invalid indentation or block mapping structure"
        if "mapping values are not allowed here" in message:
            return "Incorrect indentation - YAML requires consistent spacing"
        if "end of the stream" in message:
            return "Unexpected end of input - incomplete YAML structure"
        return message


class XmlParser:
    """
    Parse XML into plain Python containers.

    Layout of the produced value:
      - the document becomes ``{root_tag: content}``
      - attributes are stored under ``@_name`` keys
      - text next to attributes or children goes under ``#text``
      - repeated child tags collapse into a list
      - numeric and boolean text is converted
    """

    format = SupportedFormat.XML

    def can_parse(self, text: str) -> bool:
        return (text or '').strip().startswith('<')

    def parse(self, text: str) -> ParseResult:
        if not text or not text.strip():
            return _empty_input()

        document = text.lstrip()
        skipped_lines = text[:len(text) - len(document)].count('\n')
        try:
            root = ET.fromstring(document)
        except ET.ParseError as e:
            line, column = getattr(e, 'position', (1, 0))
            message = _ET_POSITION_SUFFIX.sub('', str(e))
            return ParseResult(success=False, errors=[
                ParseError(line + skipped_lines, column + 1, self._format_error_message(message))
            ])
        return ParseResult(success=True, data={root.tag: self._element_to_value(root)})

    def _element_to_value(self, element: ET.Element) -> Any:
        children = list(element)
        text = (element.text or '').strip()
        if not children and not element.attrib:
            return _coerce_scalar(text) if text else ''

        node: Dict[str, Any] = {f"@_{name}": _coerce_scalar(value) for name, value in element.attrib.items()}
        for child in children:
            value = self._element_to_value(child)
            if child.tag not in node:
                node[child.tag] = value
            elif isinstance(node[child.tag], list):
                node[child.tag].append(value)
            else:
                node[child.tag] = [node[child.tag], value]
        if text:
            node['#text'] = _coerce_scalar(text)
        return node

    @staticmethod
    def _format_error_message(message: str) -> str:
        if message.startswith("mismatched tag"):
            return "Missing or mismatched closing tag"
        if message.startswith("no element found"):
            return "Unexpected end of input - unclosed element"
        if message.startswith("not well-formed"):
            return "Invalid character in XML"
        if message.startswith("junk after document element"):
            return "XML data has multiple root elements"
        return message


class CsvParser:
    format = SupportedFormat.CSV

    def __init__(self, options: Optional[CsvOptions] = None):
        self.options = options or CsvOptions()

    def can_parse(self, text: str) -> bool:
        trimmed = (text or '').strip()
        if not trimmed or trimmed[0] in '{[<':
            return False
        return (self.options.delimiter or ',') in trimmed.split('\n')[0]

    def parse(self, text: str, options: Optional[CsvOptions] = None) -> ParseResult:
        opts = options or self.options
        if not text or not text.strip():
            return _empty_input()

        try:
            rows = self._read_rows(text, opts.delimiter or ',')
        except csv.Error as e:
            line = getattr(e, 'line_num', 1)
            return ParseResult(success=False, errors=[ParseError(line, 1, f"Malformed CSV: {e}")])
        except TypeError as e:
            return ParseResult(success=False, errors=[ParseError(1, 1, f"Invalid CSV options: {e}")])

        if not opts.treat_first_row_as_headers:
            data: List[Any] = [row for _, row in rows]
            if opts.type_detection:
                data = [[_detect_type(value) for value in row] for row in data]
            return ParseResult(success=True, data=data)

        return self._rows_to_records(rows, opts)

    @staticmethod
    def _read_rows(text: str, delimiter: str) -> List[Tuple[int, List[str]]]:
        reader = csv.reader(io.StringIO(text, newline=''), delimiter=delimiter, strict=True)
        rows = []
        try:
            for row in reader:
                if any(cell.strip() for cell in row):
                    rows.append((reader.line_num, row))
        except csv.Error as e:
            e.line_num = reader.line_num or 1
            raise
        return rows

    def _rows_to_records(self, rows: List[Tuple[int, List[str]]], opts: CsvOptions) -> ParseResult:
        if not rows:
            return ParseResult(success=True, data=[])

        headers = [header.strip() for header in rows[0][1]]
        warnings = [
            f"Duplicate header '{header}'; later columns overwrite earlier ones"
            for index, header in enumerate(headers) if header in headers[:index]
        ]
        errors: List[ParseError] = []
        records = []

        for line_num, row in rows[1:]:
            if len(row) < len(headers):
                errors.append(ParseError(line_num, 1, f"Too few fields: expected {len(headers)} fields but parsed {len(row)}"))
                continue
            if len(row) > len(headers):
                errors.append(ParseError(line_num, 1, f"Too many fields: expected {len(headers)} fields but parsed {len(row)}"))
                continue
            record = dict(zip(headers, row))
            if opts.type_detection:
                record = {key: _detect_type(value) for key, value in record.items()}
            records.append(record)

        if errors:
            return ParseResult(success=False, errors=errors, warnings=warnings)
        return ParseResult(success=True, data=records, warnings=warnings)


def _coerce_scalar(value: str) -> Any:
    if value == 'true':
        return True
    if value == 'false':
        return False
    if _NUMBER.match(value):
        if '.' in value or 'e' in value.lower():
            return float(value)
        return int(value)
    return value


def _detect_type(value: Any) -> Any:
    """CSV cell type detection: null, booleans, then numbers"""
    if not isinstance(value, str):
        return value
    trimmed = value.strip()
    if trimmed in ('', 'null', 'NULL'):
        return None
    if trimmed in ('true', 'TRUE'):
        return True
    if trimmed in ('false', 'FALSE'):
        return False
    if _CSV_NUMBER.match(trimmed):
        if '.' in trimmed or 'e' in trimmed.lower():
            return float(trimmed)
        return int(trimmed)
    return value


PARSERS = {
    SupportedFormat.JSON: JsonParser,
    SupportedFormat.YAML: YamlParser,
    SupportedFormat.XML: XmlParser,
    SupportedFormat.CSV: CsvParser,
}
