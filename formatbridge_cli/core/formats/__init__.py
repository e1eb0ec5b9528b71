"""
Authoritative parsers and serializers for JSON, YAML, XML and CSV.
"""

from .parsers import PARSERS, CsvParser, JsonParser, XmlParser, YamlParser
from .serializers import SERIALIZERS, CsvSerializer, JsonSerializer, XmlSerializer, YamlSerializer

__all__ = [
    "PARSERS",
    "SERIALIZERS",
    "JsonParser",
    "YamlParser",
    "XmlParser",
    "CsvParser",
    "JsonSerializer",
    "YamlSerializer",
    "XmlSerializer",
    "CsvSerializer",
]
