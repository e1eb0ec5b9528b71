"""
Serializers, one per supported format.

Structural problems (multiple XML roots, empty CSV arrays, circular data)
are reported as plain messages in SerializationResult.errors.
"""

import csv
import datetime
import io
import json
import re
import logging
import xml.etree.ElementTree as ET
from dataclasses import replace
from typing import Any, Dict, List, Optional

import yaml

from ..config import CsvOptions, SerializationOptions
from ..types import SerializationResult, SupportedFormat

logger = logging.getLogger(__name__)

_INVALID_XML_NAME_CHARS = re.compile(r'[^\w.\-]')


class _BaseSerializer:
    format: SupportedFormat

    def default_options(self) -> SerializationOptions:
        return SerializationOptions(pretty_print=True, indent_size=2)

    def _merge(self, options: Optional[SerializationOptions]) -> SerializationOptions:
        merged = self.default_options()
        if options is None:
            return merged
        overrides = {
            name: getattr(options, name)
            for name in ('pretty_print', 'indent_size', 'csv_options')
            if getattr(options, name) is not None
        }
        return replace(merged, **overrides)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.datetime, datetime.time)):
        return value.isoformat()
    if isinstance(value, (set, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonSerializer(_BaseSerializer):
    format = SupportedFormat.JSON

    def serialize(self, data: Any, options: Optional[SerializationOptions] = None) -> SerializationResult:
        opts = self._merge(options)
        try:
            if opts.pretty_print:
                output = json.dumps(data, indent=opts.indent_size, ensure_ascii=False,
                                    allow_nan=False, default=_json_default)
            else:
                output = json.dumps(data, separators=(',', ':'), ensure_ascii=False,
                                    allow_nan=False, default=_json_default)
        except ValueError as e:
            return SerializationResult(success=False, errors=[self._format_error_message(str(e))])
        except TypeError as e:
            return SerializationResult(success=False, errors=[
                f"Data contains unsupported types: {e}"
            ])
        return SerializationResult(success=True, output=output)

    @staticmethod
    def _format_error_message(message: str) -> str:
        if "Circular reference" in message:
            return "Cannot serialize data with circular references"
        if "Out of range float" in message:
            return "Cannot serialize NaN or Infinity values to JSON"
        return f"JSON serialization error: {message}"


class _NoAliasDumper(yaml.SafeDumper):
    """Write repeated objects in full instead of as anchors/aliases"""

    def ignore_aliases(self, data):
        return True


class YamlSerializer(_BaseSerializer):
    format = SupportedFormat.YAML

    def serialize(self, data: Any, options: Optional[SerializationOptions] = None) -> SerializationResult:
        opts = self._merge(options)
        try:
            output = yaml.dump(
                data,
                Dumper=_NoAliasDumper,
                indent=opts.indent_size,
                width=80 if opts.pretty_print else float('inf'),
                sort_keys=False,
                allow_unicode=True,
                default_flow_style=False,
            )
        except RecursionError:
            return SerializationResult(success=False, errors=[
                "Cannot serialize data with circular references to YAML"
            ])
        except yaml.representer.RepresenterError:
            return SerializationResult(success=False, errors=[
                "Data contains types that cannot be represented in YAML"
            ])
        except yaml.YAMLError as e:
            return SerializationResult(success=False, errors=[f"YAML serialization error: {e}"])
        return SerializationResult(success=True, output=output)


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return ''
    return str(value)


class XmlSerializer(_BaseSerializer):
    """
    Build XML from the layout XmlParser produces: ``@_`` keys become
    attributes, ``#text`` becomes element text and lists repeat the tag.
    """

    format = SupportedFormat.XML

    def serialize(self, data: Any, options: Optional[SerializationOptions] = None) -> SerializationResult:
        opts = self._merge(options)
        error = self._validate(data)
        if error:
            return SerializationResult(success=False, errors=[error])

        warnings: List[str] = []
        root_tag, root_value = next(iter(data.items()))
        root = ET.Element(self._element_name(root_tag, warnings))
        self._fill(root, root_value, warnings)

        if opts.pretty_print:
            ET.indent(root, space=' ' * (opts.indent_size or 2))
        output = ET.tostring(root, encoding='unicode')
        return SerializationResult(success=True, output=output, warnings=warnings)

    @staticmethod
    def _validate(data: Any) -> Optional[str]:
        if data is None:
            return "Cannot serialize null to XML"
        if isinstance(data, list):
            return ("XML requires a root element - arrays cannot be serialized directly. "
                    "Wrap in an object with a root key.")
        if not isinstance(data, dict):
            return "XML requires an object structure - primitive values cannot be serialized directly"
        if not data:
            return "Cannot serialize empty object to XML"
        if len(data) > 1:
            return "XML data has multiple root elements. Consider wrapping in a single root element."
        return None

    def _fill(self, element: ET.Element, value: Any, warnings: List[str]):
        if isinstance(value, dict):
            for key, child in value.items():
                # YAML mappings can carry int, bool or date keys
                key = str(key)
                if key.startswith('@_'):
                    element.set(key[2:], _xml_text(child))
                elif key == '#text':
                    element.text = _xml_text(child)
                elif isinstance(child, list):
                    name = self._element_name(key, warnings)
                    for item in child:
                        self._fill(ET.SubElement(element, name), item, warnings)
                else:
                    self._fill(ET.SubElement(element, self._element_name(key, warnings)), child, warnings)
        elif isinstance(value, list):
            for item in value:
                self._fill(ET.SubElement(element, 'item'), item, warnings)
        elif value is not None:
            element.text = _xml_text(value)

    @staticmethod
    def _element_name(name: Any, warnings: List[str]) -> str:
        original = str(name)
        cleaned = _INVALID_XML_NAME_CHARS.sub('_', original) or '_'
        if not (cleaned[0].isalpha() or cleaned[0] == '_'):
            cleaned = f"_{cleaned}"
        if cleaned != original:
            message = f"Renamed invalid XML element name '{original}' to '{cleaned}'"
            if message not in warnings:
                warnings.append(message)
        return cleaned


def _csv_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


class CsvSerializer(_BaseSerializer):
    format = SupportedFormat.CSV

    def default_options(self) -> SerializationOptions:
        return SerializationOptions(pretty_print=False, indent_size=2, csv_options=CsvOptions())

    def serialize(self, data: Any, options: Optional[SerializationOptions] = None) -> SerializationResult:
        opts = self._merge(options)
        csv_options = opts.csv_options or CsvOptions()

        if data is None:
            return SerializationResult(success=False, errors=["Cannot serialize null to CSV"])
        if isinstance(data, list):
            if not data:
                return SerializationResult(success=False, errors=["Cannot serialize empty array to CSV"])
            items = data
        elif isinstance(data, dict):
            items = [data]
        else:
            return SerializationResult(success=False, errors=[
                "CSV requires an array of objects or a single object - primitive values cannot be serialized"
            ])

        records = [self._flatten(item if isinstance(item, dict) else {'value': item}) for item in items]
        warnings = []
        if any(self._has_nested(item) for item in items):
            warnings.append("Data contains nested objects or arrays that will be flattened or converted to strings")

        fieldnames: List[str] = []
        for record in records:
            fieldnames.extend(key for key in record if key not in fieldnames)

        buffer = io.StringIO()
        try:
            writer = csv.DictWriter(
                buffer,
                fieldnames=fieldnames,
                delimiter=csv_options.delimiter or ',',
                quoting=csv.QUOTE_ALL,
                lineterminator='\n',
                restval='',
            )
            if csv_options.has_headers:
                writer.writeheader()
            for record in records:
                writer.writerow({key: _csv_text(value) for key, value in record.items()})
        except (csv.Error, TypeError) as e:
            return SerializationResult(success=False, errors=[f"CSV serialization error: {e}"])

        return SerializationResult(success=True, output=buffer.getvalue().rstrip('\n'), warnings=warnings)

    def _flatten(self, obj: Dict[str, Any], prefix: str = '') -> Dict[str, Any]:
        flattened: Dict[str, Any] = {}
        for key, value in obj.items():
            name = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(value, dict):
                flattened.update(self._flatten(value, name))
            elif isinstance(value, list):
                flattened[name] = json.dumps(value, ensure_ascii=False, default=_json_default)
            else:
                flattened[name] = value
        return flattened

    @staticmethod
    def _has_nested(item: Any) -> bool:
        return isinstance(item, dict) and any(isinstance(value, (dict, list)) for value in item.values())


SERIALIZERS = {
    SupportedFormat.JSON: JsonSerializer,
    SupportedFormat.YAML: YamlSerializer,
    SupportedFormat.XML: XmlSerializer,
    SupportedFormat.CSV: CsvSerializer,
}
