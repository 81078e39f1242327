import pytest

from taml.core.errors import TamlParseError
from taml.core.models import DiagnosticKind, Severity
from taml.parsing.pipeline import parse
from taml.validator.validator import TamlValidator, validate


def kinds(result):
    return [d.kind for d in result.diagnostics]


def test_valid_document():
    result = validate("application\tMyApp\nserver\n\thost\tlocalhost\nfeatures\n\tauth")

    assert result.is_valid
    assert result.diagnostics == []
    assert str(result) == "Valid TAML"


@pytest.mark.parametrize("text", ["", "\n\n", "# only\n# comments\n"])
def test_empty_and_comment_only_documents_are_valid(text):
    assert validate(text).is_valid


@pytest.mark.parametrize("text, kind, line, column", [
    ("  name\tvalue", DiagnosticKind.SPACE_INDENTATION, 1, 1),
    ("server\n\t host", DiagnosticKind.MIXED_INDENTATION, 2, 2),
    ("server\n\t\t\thost\tlocalhost", DiagnosticKind.INCONSISTENT_INDENTATION, 2, 1),
    ("name\tvalue\n\torphan\tvalue", DiagnosticKind.ORPHANED_INDENTATION, 2, 1),
    ("message\tHello\tWorld", DiagnosticKind.TAB_IN_VALUE, 1, 14),
    ('key\t"value"', DiagnosticKind.INVALID_QUOTE_USAGE, 1, 5),
    ('key\t"', DiagnosticKind.INVALID_QUOTE_USAGE, 1, 5),
    ('key\t"""', DiagnosticKind.INVALID_QUOTE_USAGE, 1, 5),
])
def test_single_error_per_violation(text, kind, line, column):
    result = validate(text)

    assert not result.is_valid
    assert len(result.diagnostics) == 1
    diagnostic = result.diagnostics[0]
    assert (diagnostic.kind, diagnostic.line, diagnostic.column) == (kind, line, column)


def test_double_space_key_is_only_a_warning():
    result = validate("server  name\tweb")

    assert result.is_valid
    assert kinds(result) == [DiagnosticKind.INVALID_KEY_FORMAT]
    assert result.warnings[0].severity is Severity.WARNING
    assert str(result).startswith("Valid TAML with 1 warning(s)")


def test_duplicate_key_warning_is_scoped_per_object():
    text = "a\n\tname\tx\nb\n\tname\ty\nname\tz\nname\tw"
    result = validate(text)

    assert result.is_valid
    assert kinds(result) == [DiagnosticKind.DUPLICATE_KEY]
    assert result.diagnostics[0].line == 6


def test_list_items_may_repeat():
    assert validate("tags\n\tweb\n\tweb").diagnostics == []


def test_list_item_quotes_are_reported():
    result = validate('items\n\tok\n\t"bad"')

    assert kinds(result) == [DiagnosticKind.INVALID_QUOTE_USAGE]
    assert result.diagnostics[0].column == 2


def test_collects_every_problem_in_order():
    text = (
        "  spaced\tx\n"          # SpaceIndentation
        "name\tvalue\n"
        "\torphan\tvalue\n"      # Orphaned
        "message\tHello\tWorld\n"  # TabInValue
        "title\t\"quoted\"\n"    # InvalidQuoteUsage
    )
    result = validate(text)

    assert [d.line for d in result.errors] == [1, 3, 4, 5]
    assert kinds(result) == [
        DiagnosticKind.SPACE_INDENTATION,
        DiagnosticKind.ORPHANED_INDENTATION,
        DiagnosticKind.TAB_IN_VALUE,
        DiagnosticKind.INVALID_QUOTE_USAGE,
    ]
    assert str(result).startswith("Invalid TAML: 4 error(s) found")


def test_violating_line_becomes_the_new_reference():
    # One jump is reported once; its child is judged against it
    result = validate("root\n\t\t\tjump\n\t\t\t\tchild\tv")

    assert kinds(result) == [DiagnosticKind.INCONSISTENT_INDENTATION]


def test_comments_do_not_affect_indentation():
    text = "server\n# comment\n\n\thost\tlocalhost"

    assert validate(text).is_valid


def test_validator_and_strict_parser_agree():
    samples = [
        "server\n\thost\tlocalhost",
        "name\tvalue\n\torphan\tvalue",
        "items\n\tone\n\ttwo",
        'k\t"v"',
        "k\t\t v",
    ]
    for text in samples:
        result = validate(text)
        try:
            parse(text)
            parsed = True
        except TamlParseError:
            parsed = False
        assert parsed == result.is_valid, text


def test_result_to_dict():
    result = TamlValidator().validate("message\tHello\tWorld")

    assert result.to_dict() == {
        "is_valid": False,
        "diagnostics": [{
            "line": 1,
            "column": 14,
            "kind": "TabInValue",
            "severity": "Error",
            "message": "Value contains invalid tab character",
        }],
    }


def test_space_and_inconsistent_indentation_reported_together():
    result = validate("server\n    host\tlocalhost\n\t\t\tport\t8080")

    assert not result.is_valid
    assert kinds(result) == [
        DiagnosticKind.SPACE_INDENTATION,
        DiagnosticKind.INCONSISTENT_INDENTATION,
    ]
    assert [d.line for d in result.diagnostics] == [2, 3]
