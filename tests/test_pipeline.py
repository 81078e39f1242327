"""
Round-trip properties of the full parse / validate / serialize engine.
"""

import logging

import pytest

from taml.core.config import ParseOptions, SerializeOptions
from taml.core.errors import TamlParseError
from taml.parsing.pipeline import TamlPipeline, parse, serialize, validate

SAMPLE = (
    "# Service definition\n"
    "application\tMyApp\n"
    "version\t1.0\n"
    "\n"
    "server\n"
    "\thost\t0.0.0.0\n"
    "\tport\t8080\n"
    "\tssl\n"
    "\t\tenabled\ttrue\n"
    "\t\tcertificate\t~\n"
    "features\n"
    "\tauthentication\n"
    "\tlogging\n"
    "database\n"
    "\tpassword\t\"\"\n"
    "\tzip\t02134\n"
)

TREES = [
    {},
    {"a": 1},
    {"server": {"host": "localhost", "port": 80, "tags": ["web", "edge"]}},
    {"nothing": None, "blank": "", "ratio": 0.25, "on": False, "neg": -3},
    {"deep": {"er": {"est": {"leaf": "x"}}}, "after": "y"},
    {"list": [None, "", 7, "text with spaces"]},
]


@pytest.mark.parametrize("tree", TREES)
def test_round_trip_tree_text_tree(tree):
    """ROUND TRIP: parse(serialize(tree)) gives the tree back."""
    assert parse(serialize(tree)) == tree


def test_round_trip_text_is_canonical():
    canonical = serialize(parse(SAMPLE))

    assert serialize(parse(canonical)) == canonical
    assert "#" not in canonical
    assert "\n\n" not in canonical


def test_sample_document():
    tree = parse(SAMPLE)

    assert tree["application"] == "MyApp"
    assert tree["version"] == 1.0
    assert tree["server"]["ssl"] == {"enabled": True, "certificate": None}
    assert tree["features"] == ["authentication", "logging"]
    assert tree["database"] == {"password": "", "zip": "02134"}


def test_null_and_empty_string_survive_a_round_trip():
    tree = parse(serialize({"a": None, "b": ""}))

    assert tree["a"] is None
    assert tree["b"] == ""


@pytest.mark.parametrize("separator", ["\t", "\t\t", "\t\t\t\t"])
def test_multi_tab_separators_are_equivalent(separator):
    assert parse(f"server\n\thost{separator}localhost\n\tport{separator}80") == {
        "server": {"host": "localhost", "port": 80}
    }


def test_comments_and_blank_lines_are_transparent():
    with_noise = "# top\n\nserver\n\t# inside\n\n\thost\tlocalhost\n# tail\n"

    assert parse(with_noise) == parse("server\n\thost\tlocalhost")


def test_literal_looking_strings_are_coerced_on_reread():
    text = serialize({"a": "true", "b": "42", "c": "~"})

    assert parse(text) == {"a": True, "b": 42, "c": None}
    assert parse(text, coerce_types=False) == {"a": "true", "b": "42", "c": None}


def test_trailing_whitespace_in_values_is_trimmed_on_reread():
    assert parse(serialize({"a": "text  "})) == {"a": "text"}


def test_strict_parse_stops_at_first_error():
    with pytest.raises(TamlParseError) as exc_info:
        parse("ok\t1\n  bad\t2\nmessage\ta\tb")

    assert exc_info.value.line == 2


def test_lenient_run_records_skipped_lines(caplog):
    pipeline = TamlPipeline(ParseOptions(strict=False))

    with caplog.at_level(logging.INFO, logger="taml.pipeline"):
        context = pipeline.run("ok\t1\n  bad\t2\nmessage\ta\tb\n# note")

    assert context.tree == {"ok": 1}
    assert [d.line for d in context.skipped] == [2, 3]
    assert context.comment_lines == 1
    assert "skipped 2 line(s)" in caplog.text


def test_valid_documents_parse_strictly():
    assert validate(SAMPLE).is_valid
    assert parse(SAMPLE)


def test_pipeline_serialize_uses_its_options():
    pipeline = TamlPipeline(serialize_options=SerializeOptions(trailing_newline=True))

    assert pipeline.serialize({"a": 1}) == "a\t1\n"


def test_pipeline_instances_are_reusable():
    pipeline = TamlPipeline()

    first = pipeline.parse("a\t1")
    second = pipeline.parse("b\t2")

    assert first == {"a": 1}
    assert second == {"b": 2}


def test_key_with_trailing_space_round_trips():
    tree = parse("name \t\tvalue")

    assert tree == {"name ": "value"}
    assert serialize(tree) == "name \tvalue"
    assert parse(serialize(tree)) == tree


def test_lenient_scope_ignores_lines_it_drops():
    # The broken key/value line must not turn the list into an object
    assert parse("items\n\ta\n\tb\tx\ty", strict=False) == {"items": ["a"]}
