"""Teste do script run_regex_stream.py (saída JSON por linha)."""

import io
import json
import sys
from pathlib import Path

# Add src and scripts to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

import run_regex_stream
from run_regex_stream import json_safe, load_schema, main, parse_flags, read_fragments, run


def test_run_writes_json_lines():
    source = io.StringIO("person: alice, 30, yes person: bob, 5, n")
    out = io.StringIO()

    count = run(
        r"person:\s*(\w+)\s*,\s*(\d+),\s*(\w+)",
        {"person.name": "string", "person.age": "number", "ok": "boolean"},
        source,
        out,
        read_size=4,
    )

    lines = [json.loads(line) for line in out.getvalue().splitlines()]
    assert count == 2
    assert lines == [
        {"person": {"name": "alice", "age": 30}, "ok": True},
        {"person": {"name": "bob", "age": 5}, "ok": False},
    ]


def test_run_writes_nan_as_null():
    out = io.StringIO()

    count = run(r"n=([^;]*);", {"n": "number"}, io.StringIO("n=abc;n=7;"), out)

    assert count == 2
    assert out.getvalue().splitlines() == ['{"n": null}', '{"n": 7}']


def test_json_safe_nested():
    record = {"a": {"b": float("nan")}, "c": [float("inf"), 1.5]}
    assert json_safe(record) == {"a": {"b": None}, "c": [None, 1.5]}


def test_read_fragments_splits_input():
    assert list(read_fragments(io.StringIO("abcdefg"), 3)) == ["abc", "def", "g"]


def test_parse_flags():
    import re

    assert parse_flags("") == 0
    assert parse_flags("iM") == re.IGNORECASE | re.MULTILINE


def test_load_schema_inline_and_file(tmp_path):
    assert load_schema(None) is None
    assert load_schema('["a", "b"]') == ["a", "b"]

    schema_file = tmp_path / "schema.json"
    schema_file.write_text('{"n": "number"}', encoding="utf-8")
    assert load_schema(f"@{schema_file}") == {"n": "number"}


def test_main_reads_input_file(tmp_path, capsys):
    data = tmp_path / "data.txt"
    data.write_text("ab1 ab3 ab401xyz ab29", encoding="utf-8")

    code = main([r"ab(\d+)", "--input", str(data), "--read-size", "2"])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert [json.loads(line) for line in out] == [
        ["ab1", "1"],
        ["ab3", "3"],
        ["ab401", "401"],
        ["ab29", "29"],
    ]


def test_main_rejects_bad_schema():
    assert main([r"x(\d)", "--schema", '{"x": "float"}', "--input", __file__]) == 2
    assert main([r"x(\d)", "--schema", "not json"]) == 2
    assert main([r"x(", "--input", __file__]) == 2
    assert main([r"x(\d)", "--flags", "q"]) == 2


def test_main_rejects_non_positive_read_size(capsys):
    assert main([r"x(\d)", "--input", __file__, "--read-size", "0"]) == 2
    assert main([r"x(\d)", "--input", __file__, "--read-size", "-5"]) == 2
    assert capsys.readouterr().out == ""


if __name__ == "__main__":
    print(f"Execute com: pytest {Path(run_regex_stream.__file__).name}")
