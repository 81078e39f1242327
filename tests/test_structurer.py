import pytest

from taml.core.config import ParseOptions
from taml.core.errors import TamlParseError
from taml.core.models import DiagnosticKind, ScopeKind
from taml.parsing.context import ParseContext
from taml.parsing.lexer import TamlLexer
from taml.parsing.structurer import IndentReference, TamlStructurer, check_indentation, classify_scope


def build(text, **options):
    return TamlStructurer(ParseOptions(**options)).build(TamlLexer().classify(text))


def scope_of(text, index=0):
    return classify_scope(TamlLexer().classify(text), index)


@pytest.mark.parametrize("text, expected", [
    ("items\n\tone\n\ttwo", ScopeKind.LIST),
    ("server\n\thost\tlocalhost", ScopeKind.OBJECT),
    ("server\n\tplain\n\thost\tlocalhost", ScopeKind.OBJECT),
    ("outer\n\tinner\n\t\tleaf", ScopeKind.OBJECT),
    ("empty", ScopeKind.OBJECT),
    ("empty\nnext\tvalue", ScopeKind.OBJECT),
])
def test_classify_scope(text, expected):
    assert scope_of(text) is expected


def test_classify_scope_ignores_lines_with_broken_indentation():
    assert scope_of("items\n  junk\n\tone") is ScopeKind.LIST


def test_classify_scope_does_not_mutate_lines():
    lines = TamlLexer().classify("items\n\tone\n\ttwo")
    snapshot = [(l.depth, l.key, l.raw_value) for l in lines]

    classify_scope(lines, 0)

    assert [(l.depth, l.key, l.raw_value) for l in lines] == snapshot


def test_check_indentation_rules():
    line = TamlLexer().classify("\t\tkey\tv")[0]

    assert check_indentation(line, IndentReference(0, True)).kind is DiagnosticKind.INCONSISTENT_INDENTATION
    assert check_indentation(line, IndentReference(1, False)).kind is DiagnosticKind.ORPHANED_INDENTATION
    assert check_indentation(line, IndentReference(1, True)) is None
    assert check_indentation(line, IndentReference(3, False)) is None


def test_nested_objects_and_lists():
    text = (
        "application\tMyApp\n"
        "server\n"
        "\thost\t0.0.0.0\n"
        "\tport\t8080\n"
        "\tssl\n"
        "\t\tenabled\ttrue\n"
        "features\n"
        "\tauth\n"
        "\tlogging\n"
    )

    assert build(text) == {
        "application": "MyApp",
        "server": {"host": "0.0.0.0", "port": 8080, "ssl": {"enabled": True}},
        "features": ["auth", "logging"],
    }


def test_list_items_are_coerced():
    assert build("values\n\t1\n\t~\n\t\"\"\n\ttrue") == {"values": [1, None, "", True]}


def test_dedent_closes_several_scopes():
    text = "a\n\tb\n\t\tc\n\t\t\td\tdeep\ntop\t1"

    assert build(text) == {"a": {"b": {"c": {"d": "deep"}}}, "top": 1}


def test_duplicate_keys_last_write_wins():
    assert build("key\tfirst\nkey\tsecond") == {"key": "second"}


def test_bare_key_without_children_is_an_empty_object():
    assert build("empty\nname\tx") == {"empty": {}, "name": "x"}


@pytest.mark.parametrize("text, kind, line", [
    ("  name\tvalue", DiagnosticKind.SPACE_INDENTATION, 1),
    ("server\n\t host\tx", DiagnosticKind.MIXED_INDENTATION, 2),
    ("server\n\t\t\thost\tlocalhost", DiagnosticKind.INCONSISTENT_INDENTATION, 2),
    ("name\tvalue\n\torphan\tvalue", DiagnosticKind.ORPHANED_INDENTATION, 2),
    ("message\tHello\tWorld", DiagnosticKind.TAB_IN_VALUE, 1),
    ('name\t"quoted"', DiagnosticKind.INVALID_QUOTE_USAGE, 1),
    ('items\n\t"quoted"', DiagnosticKind.INVALID_QUOTE_USAGE, 2),
    ("\tindented\tfirst", DiagnosticKind.INCONSISTENT_INDENTATION, 1),
])
def test_strict_mode_raises_positional_errors(text, kind, line):
    with pytest.raises(TamlParseError) as exc_info:
        build(text)

    assert exc_info.value.kind is kind
    assert exc_info.value.line == line
    assert str(exc_info.value).startswith(f"Line {line}, Column ")


def test_lenient_mode_skips_bad_lines():
    text = "name\tapp\n  broken\tx\nport\t80\nmessage\ta\tb"
    lines = TamlLexer().classify(text)
    context = ParseContext(raw_text=text)

    tree = TamlStructurer(ParseOptions(strict=False)).build(lines, context)

    assert tree == {"name": "app", "port": 80}
    assert context.tree is tree
    assert [d.line for d in context.skipped] == [2, 4]
    assert not context.is_complete


def test_lenient_skip_keeps_the_previous_reference():
    # The orphan is dropped; the following sibling still belongs to the root
    tree = build("name\tvalue\n\torphan\tx\nother\ty", strict=False)

    assert tree == {"name": "value", "other": "y"}


def test_raw_mode_keeps_value_text():
    assert build("port\t8080\nflag\ttrue", coerce_types=False) == {"port": "8080", "flag": "true"}


def test_bare_child_with_children_turns_the_parent_into_an_object():
    assert build("items\n\tone\n\t\tdeeper") == {"items": {"one": ["deeper"]}}


def test_classify_scope_can_skip_lines_with_errors():
    lines = TamlLexer().classify("items\n\ta\n\tb\tx\ty")

    assert classify_scope(lines, 0) is ScopeKind.OBJECT
    assert classify_scope(lines, 0, skip_errors=True) is ScopeKind.LIST
