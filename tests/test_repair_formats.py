"""Tests for YAML, XML and CSV repair and the engine that dispatches to them."""

import pytest

from formatbridge_cli.core.repair import engine as engine_module
from formatbridge_cli.core.repair.csv_repair import (
    close_unterminated_quotes,
    detect_primary_delimiter,
    normalize_delimiters,
    repair_csv,
)
from formatbridge_cli.core.repair.xml_repair import close_unclosed_tags, repair_xml
from formatbridge_cli.core.repair.yaml_repair import expand_indentation_tabs, repair_yaml
from formatbridge_cli.core.types import SupportedFormat


class TestYamlRepair:

    def test_tabs_in_indentation_become_spaces(self):
        result = repair_yaml("server:\n\thost: x\n\tport: 80")
        assert result.success is True
        assert result.repaired_text == "server:\n  host: x\n  port: 80"
        assert [issue.line for issue in result.issues_found] == [2, 3]
        assert result.applied_fixes == ["Converted tabs to spaces"] * 2

    def test_tabs_after_content_are_kept(self):
        result = expand_indentation_tabs("key: a\tb")
        assert result.text == "key: a\tb"
        assert not result.fixed

    def test_valid_yaml_is_untouched(self):
        result = repair_yaml("a: 1\nb:\n  - x\n")
        assert result.success is True
        assert result.applied_fixes == []

    def test_nothing_to_fix_is_a_failure(self):
        result = repair_yaml("a: [1, 2")
        assert result.success is False
        assert result.applied_fixes == []


class TestXmlRepair:

    def test_unclosed_root_is_closed(self):
        result = repair_xml("<a>hi")
        assert result.success is True
        assert result.repaired_text.endswith("</a>")
        assert result.issues_found
        assert result.applied_fixes == ["Added closing tag '</a>'"]

    def test_closers_appended_innermost_first(self):
        result = close_unclosed_tags("<root><item>1</item><item>2")
        assert result.text == "<root><item>1</item><item>2</item></root>"

    def test_self_closing_and_declaration_are_skipped(self):
        result = close_unclosed_tags('<?xml version="1.0"?><root><br/><a x="1">t')
        assert result.text.endswith("</a></root>")
        assert len(result.fixes) == 2

    def test_stray_closing_tag_is_reported(self):
        result = close_unclosed_tags("<a></b>")
        types = [issue.type for issue in result.issues]
        assert "mismatched_tag" in types
        assert "unclosed_tag" in types

    def test_valid_xml_is_untouched(self):
        result = repair_xml("<a><b>1</b></a>")
        assert result.success is True
        assert result.repaired_text == "<a><b>1</b></a>"
        assert result.issues_found == []


class TestCsvRepair:

    def test_mixed_delimiters_normalized_to_dominant(self):
        result = repair_csv("name,age;city\nAnn;30,NYC\nBob,25,LA")
        assert result.success is True
        assert result.repaired_text == "name,age,city\nAnn,30,NYC\nBob,25,LA"
        assert ";" not in result.repaired_text
        assert {issue.type for issue in result.issues_found} == {"inconsistent_delimiter"}
        assert "Normalized delimiter to ','" in result.applied_fixes

    def test_stray_delimiters_normalized_when_field_counts_line_up(self):
        # five commas and two semicolons; a plain comma parse accepts "2;3" as one field
        result = repair_csv("a,b\nc,d\ne,f\n1,2;3\n4,5;6")
        assert result.success is True
        assert result.repaired_text == "a,b\nc,d\ne,f\n1,2,3\n4,5,6"
        assert [issue.line for issue in result.issues_found] == [4, 5]
        assert result.applied_fixes == ["Normalized delimiter to ','"] * 2

    def test_normalized_output_repairs_to_itself(self):
        first = repair_csv("a,b\nc,d\ne,f\n1,2;3\n4,5;6")
        second = repair_csv(first.repaired_text)
        assert second.repaired_text == first.repaired_text
        assert second.applied_fixes == []

    def test_tab_delimiter_is_shown_escaped(self):
        result = normalize_delimiters("a\tb\tc\n1\t2,3\n4\t5\t6")
        assert result.text == "a\tb\tc\n1\t2\t3\n4\t5\t6"
        assert result.fixes == ["Normalized delimiter to '\\t'"]

    def test_delimiters_inside_quotes_are_kept(self):
        result = normalize_delimiters('a,b,c\n"x;y",1,2')
        assert result.text == 'a,b,c\n"x;y",1,2'
        assert result.issues == []

    def test_primary_delimiter_defaults_to_comma(self):
        assert detect_primary_delimiter("just text") == ","
        assert detect_primary_delimiter("a;b;c\n1;2;3") == ";"

    def test_unterminated_quote_is_closed(self):
        result = repair_csv('name,note\nAnn,"hello')
        assert result.success is True
        assert result.repaired_text == 'name,note\nAnn,"hello"'
        assert result.issues_found[0].type == "unclosed_quote"
        assert result.issues_found[0].line == 2

    def test_doubled_quotes_are_not_unterminated(self):
        result = close_unterminated_quotes('a\n"say ""hi"""')
        assert not result.fixed

    def test_valid_csv_is_untouched(self):
        result = repair_csv("a,b\n1,2")
        assert result.success is True
        assert result.repaired_text == "a,b\n1,2"
        assert result.applied_fixes == []


class TestSyntaxRepairEngine:

    @pytest.mark.parametrize("text,fmt", [
        ('{"a": 1}', SupportedFormat.JSON),
        ("a: 1", SupportedFormat.YAML),
        ("<a>1</a>", SupportedFormat.XML),
        ("a,b\n1,2", SupportedFormat.CSV),
    ])
    def test_valid_input_repairs_to_itself(self, engine, text, fmt):
        result = engine.repair(text, fmt)
        assert result.success is True
        assert result.repaired_text == text
        assert result.applied_fixes == []

    def test_format_name_is_case_insensitive(self, engine):
        result = engine.repair("[1,]", "JSON")
        assert result.success is True
        assert result.repaired_text == "[1]"

    def test_unknown_format(self, engine):
        result = engine.repair("x", "toml")
        assert result.success is False
        assert result.repaired_text is None

    def test_unexpected_error_returns_original_text(self, engine, monkeypatch):
        def explode(text, max_iterations):
            raise RuntimeError("boom")

        monkeypatch.setattr(engine_module, "repair_json", explode)
        result = engine.repair_json("[1,")
        assert result.success is False
        assert result.repaired_text == "[1,"
