"""
Teste do RecordBuilder.

Testa:
1. Registros sem schema, posicionais e por chave
2. Construção de dicts aninhados por chave pontuada
3. Falha em regra customizada
"""

import math
import re
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from regex_stream import CoercionError, RecordBuilder, ensure_path


def test_no_schema_returns_all_groups():
    builder = RecordBuilder()
    assert builder.build(("ab401", "401")) == ["ab401", "401"]


def test_no_schema_keeps_missing_groups_as_none():
    match = re.search(r"(a)(x)?(b)", "ab")
    record = RecordBuilder().build_from_match(match)
    assert record == ["ab", "a", None, "b"]


def test_positional_schema():
    builder = RecordBuilder(["name", "age"])
    record = builder.build(("person: bob, 55", "bob", "55"))

    assert record == {"name": "bob", "age": "55"}
    assert list(record) == ["name", "age"]


def test_positional_extra_groups_dropped_and_missing_keys_none():
    assert RecordBuilder(["a"]).build(("xy", "x", "y")) == {"a": "x"}
    assert RecordBuilder(["a", "b", "c"]).build(("x", "x")) == {"a": "x", "b": None, "c": None}


def test_nested_keys_share_container():
    """Testa que prefixos comuns geram um único dict aninhado."""
    print("=" * 60)
    print("TESTE: Nested key construction")
    print("=" * 60)

    builder = RecordBuilder({"a.b": "string", "a.c": "number"})
    record = builder.build(("x5", "x", "5"))

    print(f"    record: {record}")
    assert record == {"a": {"b": "x", "c": 5}}


def test_keyed_schema_full_record():
    builder = RecordBuilder({
        "person.name": "string",
        "person.age": "number",
        "signed_up": {"type": "boolean", "true": ["y", "yes"], "false": "n"},
    })

    record = builder.build(("...", "alice", "30", "yes"))
    assert record == {"person": {"name": "alice", "age": 30}, "signed_up": True}

    record = builder.build(("...", "child", "1", "0"))
    assert record == {"person": {"name": "child", "age": 1}, "signed_up": None}


def test_deep_paths():
    builder = RecordBuilder({"a.b.c": "string", "a.b.d": "string", "a.e": "string", "f": "string"})
    record = builder.build(("", "1", "2", "3", "4"))
    assert record == {"a": {"b": {"c": "1", "d": "2"}, "e": "3"}, "f": "4"}


def test_keyed_missing_groups():
    builder = RecordBuilder({"s": "string", "n": "number", "b": "boolean"})
    record = builder.build(("x",))

    assert record["s"] is None
    assert math.isnan(record["n"])
    assert record["b"] is None


def test_custom_rule_value_is_not_reprocessed():
    def faves(raw):
        icecream, color = [x.strip() for x in raw.split("-")]
        return {"icecream": icecream, "color": color}

    builder = RecordBuilder({"person.name": "string", "faves": faves})
    record = builder.build(("", "alice", " rocky road - heliotrope"))

    assert record == {
        "person": {"name": "alice"},
        "faves": {"icecream": "rocky road", "color": "heliotrope"},
    }


def test_custom_rule_failure_raises_coercion_error():
    builder = RecordBuilder({"n": lambda s: int(s)})

    with pytest.raises(CoercionError) as exc_info:
        builder.build(("", "abc"))

    assert exc_info.value.key == "n"
    assert exc_info.value.raw == "abc"
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_records_are_independent():
    builder = RecordBuilder({"a.b": "string"})
    first = builder.build(("", "1"))
    second = builder.build(("", "2"))

    first["a"]["b"] = "changed"
    assert second == {"a": {"b": "2"}}


def test_ensure_path():
    root = {"a": {"x": 1}}
    node = ensure_path(root, ["a", "b"])
    node["c"] = 2

    assert root == {"a": {"x": 1, "b": {"c": 2}}}
    assert ensure_path(root, []) is root


if __name__ == "__main__":
    test_no_schema_returns_all_groups()
    test_positional_schema()
    test_nested_keys_share_container()
    test_keyed_schema_full_record()
    test_custom_rule_value_is_not_reprocessed()
    print("\nTODOS OS TESTES PASSARAM!")
