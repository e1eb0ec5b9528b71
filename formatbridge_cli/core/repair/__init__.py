"""
Per-format syntax repair pipelines.
"""

from .engine import SyntaxRepairEngine
from .json_repair import repair_json
from .yaml_repair import repair_yaml
from .xml_repair import repair_xml
from .csv_repair import repair_csv

__all__ = [
    "SyntaxRepairEngine",
    "repair_json",
    "repair_yaml",
    "repair_xml",
    "repair_csv",
]
