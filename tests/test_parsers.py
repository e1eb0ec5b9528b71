"""Tests for the per-format parsers."""

from formatbridge_cli.core.config import CsvOptions
from formatbridge_cli.core.formats.parsers import CsvParser, JsonParser, XmlParser, YamlParser


class TestJsonParser:

    def test_parses_document(self):
        result = JsonParser().parse('{"a": [1, 2.5, true, null]}')
        assert result.success is True
        assert result.data == {"a": [1, 2.5, True, None]}

    def test_error_carries_location(self):
        result = JsonParser().parse('{"a": 1,\n}')
        assert result.success is False
        error = result.errors[0]
        assert (error.line, error.column) == (2, 1)
        assert error.message == "Expecting property name in double quotes"
        assert error.severity == "error"

    def test_truncated_input_message(self):
        result = JsonParser().parse('{"a": [1, 2')
        assert result.success is False
        assert "Unexpected end of input" in result.errors[0].message

    def test_nan_rejected(self):
        result = JsonParser().parse('[NaN]')
        assert result.success is False

    def test_empty_input(self):
        result = JsonParser().parse("   ")
        assert result.success is False
        assert result.errors[0].message == "Input is empty"

    def test_can_parse(self):
        assert JsonParser().can_parse('  [1]')
        assert not JsonParser().can_parse('a: 1')


class TestYamlParser:

    def test_parses_document(self):
        result = YamlParser().parse("name: Ann\ntags:\n  - x\n  - y\n")
        assert result.success is True
        assert result.data == {"name": "Ann", "tags": ["x", "y"]}

    def test_tab_error_is_located(self):
        result = YamlParser().parse("a:\n\tb: 1")
        assert result.success is False
        assert result.errors[0].line == 2
        assert "Tab" in result.errors[0].message

    def test_can_parse(self):
        assert YamlParser().can_parse("key: value")
        assert not YamlParser().can_parse('{"key": "value"}')


class TestXmlParser:

    def test_builds_nested_value(self):
        result = XmlParser().parse('<root><a>1</a><a>2</a><b x="y">t</b><c>hello</c><d/></root>')
        assert result.success is True
        assert result.data == {
            "root": {
                "a": [1, 2],
                "b": {"@_x": "y", "#text": "t"},
                "c": "hello",
                "d": "",
            }
        }

    def test_leading_blank_lines_keep_line_numbers(self):
        result = XmlParser().parse("\n\n<a><b></a>")
        assert result.success is False
        assert result.errors[0].line == 3
        assert result.errors[0].message == "Missing or mismatched closing tag"

    def test_unclosed_document(self):
        result = XmlParser().parse("<a>hi")
        assert result.success is False
        assert "unclosed element" in result.errors[0].message


class TestCsvParser:

    def test_records_are_strings_by_default(self):
        result = CsvParser().parse("name,age\nAnn,30\n\nBob,25\n")
        assert result.success is True
        assert result.data == [{"name": "Ann", "age": "30"}, {"name": "Bob", "age": "25"}]

    def test_type_detection(self):
        options = CsvOptions(type_detection=True)
        result = CsvParser().parse("a,b,c,d,e\n1,2.5,true,NULL,x\n-3,1e3,FALSE,,y", options)
        assert result.data == [
            {"a": 1, "b": 2.5, "c": True, "d": None, "e": "x"},
            {"a": -3, "b": 1000.0, "c": False, "d": None, "e": "y"},
        ]

    def test_quoted_fields(self):
        result = CsvParser().parse('name,note\n"Ann","says ""hi"", twice"')
        assert result.data == [{"name": "Ann", "note": 'says "hi", twice'}]

    def test_custom_delimiter(self):
        result = CsvParser(CsvOptions(delimiter=";")).parse("a;b\n1;2")
        assert result.data == [{"a": "1", "b": "2"}]

    def test_without_headers(self):
        options = CsvOptions(has_headers=False, treat_first_row_as_headers=False)
        result = CsvParser().parse("1,2\n3,4", options)
        assert result.data == [["1", "2"], ["3", "4"]]

    def test_field_count_mismatch_reports_line(self):
        result = CsvParser().parse("name,age\nAnn,30\nBob")
        assert result.success is False
        assert result.errors[0].line == 3
        assert result.errors[0].message.startswith("Too few fields")

    def test_unterminated_quote(self):
        result = CsvParser().parse('a,b\n"x,1')
        assert result.success is False
        assert result.errors[0].message.startswith("Malformed CSV")

    def test_duplicate_header_warning(self):
        result = CsvParser().parse("a,a\n1,2")
        assert result.success is True
        assert result.data == [{"a": "2"}]
        assert result.warnings
