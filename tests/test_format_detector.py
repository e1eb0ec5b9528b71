"""Tests for heuristic format detection."""

import pytest

from formatbridge_cli.core.config import Config
from formatbridge_cli.core.format_detector import FormatDetector
from formatbridge_cli.core.types import SupportedFormat


SAMPLES = [
    '{"name": "Ann", "age": 30}',
    '[1, 2, 3]',
    '{"broken": ',
    'name: Ann\nage: 30\ntags:\n  - a\n  - b',
    '---\n# comment\nkey: value',
    '<?xml version="1.0"?>\n<root><a>1</a></root>',
    '<root/>',
    'name,age\nAnn,30\nBob,25',
    'a;b;c\n1;2;3\n4;5',
    'plain prose without structure',
    '   \n\t  ',
    '',
    '{"a": 1}\n{"b": 2}',
]


class TestFormatDetector:

    def test_json_object(self, detector):
        result = detector.detect_format('{"name": "Ann", "age": 30}')
        assert result.detected_format is SupportedFormat.JSON
        assert result.confidence == 1.0
        assert result.alternatives == []

    def test_yaml_mapping(self, detector):
        result = detector.detect_format("name: John\nage: 30")
        assert result.detected_format is SupportedFormat.YAML
        assert result.confidence == pytest.approx(0.8)

    def test_xml_with_declaration(self, detector):
        result = detector.detect_format('<?xml version="1.0"?><root><a>1</a></root>')
        assert result.detected_format is SupportedFormat.XML
        assert result.confidence == 1.0

    def test_csv_table(self, detector):
        result = detector.detect_format("name,age\nJohn,30\nJane,25")
        assert result.detected_format is SupportedFormat.CSV
        assert result.confidence == pytest.approx(0.8)

    def test_broken_json_still_leans_json(self, detector):
        result = detector.detect_format('{"a": 1,}')
        assert result.detected_format is SupportedFormat.JSON
        assert result.confidence == pytest.approx(0.5)

    def test_bracketed_yaml_flow_defers_to_json(self, detector):
        result = detector.detect_format('[\n  1,\n  2\n]')
        assert result.detected_format is SupportedFormat.JSON

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_blank_input_detects_nothing(self, detector, text):
        result = detector.detect_format(text)
        assert result.detected_format is None
        assert result.confidence == 0.0
        assert result.alternatives == []

    def test_unstructured_text_detects_nothing(self, detector):
        result = detector.detect_format("hello")
        assert result.detected_format is None
        assert result.confidence == 0.0

    def test_alternatives_ranked_below_primary(self, detector):
        result = detector.detect_format("a: 1,2\nb: 3,4\nc: 5,6")
        assert result.detected_format is SupportedFormat.YAML
        assert SupportedFormat.CSV in [alt.format for alt in result.alternatives]
        confidences = [result.confidence] + [alt.confidence for alt in result.alternatives]
        assert confidences == sorted(confidences, reverse=True)
        assert all(alt.confidence > 0 for alt in result.alternatives)

    @pytest.mark.parametrize("text", SAMPLES)
    def test_confidence_bounds(self, detector, text):
        result = detector.detect_format(text)
        assert 0.0 <= result.confidence <= 1.0
        assert (result.detected_format is None) == (result.confidence == 0.0)
        for alt in result.alternatives:
            assert 0.0 < alt.confidence <= 1.0

    def test_sample_rows_limit_csv_scan(self):
        detector = FormatDetector(Config(csv_sample_rows=1))
        result = detector.detect_format("a,b\n1,2\nno delimiters here\nnor here")
        assert result.detected_format is SupportedFormat.CSV
        assert result.confidence == pytest.approx(0.8)

    def test_to_dict_uses_plain_values(self, detector):
        payload = detector.detect_format("name: Ann").to_dict()
        assert payload["detected_format"] == "yaml"
        assert isinstance(payload["alternatives"], list)
