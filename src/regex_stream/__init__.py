"""
regex_stream - Incremental, schema-driven record extraction from text streams.

A single pattern is applied over and over to the text received so far.
Matches that are certain to be complete become records right away; matches
that touch the end of the known input wait for more text or end-of-input.

Usage:
    from regex_stream import RegexTransform

    rt = RegexTransform(
        r"person:\\s*(\\w+)\\s*,\\s*(\\d+),\\s*(\\w+)",
        {
            "person.name": "string",
            "person.age": "number",
            "signed_up": {"type": "boolean", "true": ["y", "yes"], "false": "n"},
        },
    )

    for fragment in fragments:
        for record in rt.feed(fragment):
            print(record)
    rt.finish()
"""

from .exceptions import (
    RegexStreamError,
    ConstructionError,
    PatternError,
    SchemaError,
    CoercionError,
    StreamStateError,
)
from .schema import (
    SchemaKind,
    RuleType,
    ValueRule,
    BooleanRule,
    CustomRule,
    KeyBinding,
    Schema,
    validate_schema,
    DEFAULT_TRUE_VALUES,
    DEFAULT_FALSE_VALUES,
)
from .coercers import (
    coerce,
    coerce_string,
    coerce_number,
    coerce_boolean,
    coerce_custom,
)
from .record_builder import Record, RecordBuilder, ensure_path
from .matcher import IncrementalMatcher, MatcherConfig, compile_pattern
from .stream import RegexTransform, iter_records, collect_all

__all__ = [
    # Errors
    "RegexStreamError",
    "ConstructionError",
    "PatternError",
    "SchemaError",
    "CoercionError",
    "StreamStateError",
    # Schema
    "SchemaKind",
    "RuleType",
    "ValueRule",
    "BooleanRule",
    "CustomRule",
    "KeyBinding",
    "Schema",
    "validate_schema",
    "DEFAULT_TRUE_VALUES",
    "DEFAULT_FALSE_VALUES",
    # Coercers
    "coerce",
    "coerce_string",
    "coerce_number",
    "coerce_boolean",
    "coerce_custom",
    # Records
    "Record",
    "RecordBuilder",
    "ensure_path",
    # Engine
    "IncrementalMatcher",
    "MatcherConfig",
    "compile_pattern",
    # Stream
    "RegexTransform",
    "iter_records",
    "collect_all",
]

__version__ = "1.0.0"
