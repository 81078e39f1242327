import pytest

from taml.core.models import DiagnosticKind, Severity
from taml.parsing.lexer import TamlLexer, check_quotes


@pytest.fixture
def lexer():
    return TamlLexer()


def test_blank_and_comment_lines_are_dropped(lexer):
    text = "# header\n\n   \nname\tapp\n\t# indented comment\nport\t80"
    lines = lexer.classify(text)

    assert [l.line_no for l in lines] == [4, 6]
    assert [l.key for l in lines] == ["name", "port"]


def test_bom_and_crlf_are_cleaned(lexer):
    lines = lexer.classify("\ufeffname\tapp\r\nport\t80\r\n")

    assert [l.key for l in lines] == ["name", "port"]
    assert lines[0].raw_value == "app"
    assert lines[1].raw_value == "80"


def test_depth_counts_leading_tabs(lexer):
    lines = lexer.classify("server\n\thost\tlocalhost\n\t\tdeep")

    assert [l.depth for l in lines] == [0, 1, 2]
    assert lines[1].content == "host\tlocalhost"


def test_multi_tab_separator_equals_single_tab(lexer):
    single = lexer.classify("key\tvalue")[0]
    multi = lexer.classify("key\t\t\tvalue")[0]

    assert single.key == multi.key == "key"
    assert single.raw_value == multi.raw_value == "value"
    assert single.value_column == 5
    assert multi.value_column == 7


def test_bare_line_has_no_value(lexer):
    line = lexer.classify("\tservices")[0]

    assert line.is_bare
    assert line.key == "services"
    assert line.raw_value is None


def test_trailing_tab_makes_a_bare_line(lexer):
    line = lexer.classify("key\t")[0]

    assert line.is_bare
    assert line.key == "key"


def test_space_indentation(lexer):
    line = lexer.classify("  name\tvalue")[0]

    assert line.indent_issue.kind is DiagnosticKind.SPACE_INDENTATION
    assert line.indent_issue.column == 1
    assert line.has_errors


def test_mixed_indentation_points_at_the_space(lexer):
    line = lexer.classify("\t host")[0]

    assert line.indent_issue.kind is DiagnosticKind.MIXED_INDENTATION
    assert line.indent_issue.column == 2
    assert line.depth == 1


def test_tab_in_value(lexer):
    line = lexer.classify("message\tHello\tWorld")[0]
    issue = line.first_error()

    assert issue.kind is DiagnosticKind.TAB_IN_VALUE
    assert issue.column == 14


def test_space_after_separator_is_part_of_the_value(lexer):
    line = lexer.classify("k\t\t v")[0]

    assert line.raw_value == " v"
    assert not line.issues


def test_space_inside_separator_run_is_a_tab_in_value(lexer):
    line = lexer.classify("k\t \tv")[0]

    assert line.raw_value == " \tv"
    assert line.first_error().kind is DiagnosticKind.TAB_IN_VALUE


@pytest.mark.parametrize("raw, column", [
    ('"value"', 1),
    ('"', 1),
    ('"""', 1),
    ('say "hi"', 5),
])
def test_check_quotes_rejects_quoted_values(raw, column):
    issue = check_quotes(raw, line_no=3, column=1)

    assert issue.kind is DiagnosticKind.INVALID_QUOTE_USAGE
    assert issue.line == 3
    assert issue.column == column


def test_check_quotes_accepts_empty_string_marker():
    assert check_quotes('""', 1, 1) is None
    assert check_quotes("plain", 1, 1) is None


def test_quote_column_accounts_for_depth_and_separator(lexer):
    line = lexer.classify('server\n\tname\t"web"')[1]

    assert line.first_error().column == 7


def test_double_space_in_key_is_a_warning(lexer):
    line = lexer.classify("server  name\tweb")[0]
    issue = line.issues[0]

    assert issue.kind is DiagnosticKind.INVALID_KEY_FORMAT
    assert issue.severity is Severity.WARNING
    assert issue.column == 7
    assert not line.has_errors


def test_count_comments(lexer):
    assert lexer.count_comments("# a\nkey\tv\n\t# b\n") == 2
