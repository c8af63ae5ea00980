"""
Schema Models - Declarative mapping from capture groups to record fields.

A schema is fixed when the engine is built and never changes afterwards.
Three shapes are accepted:

    None
        Each match yields [full_match, group_1, group_2, ...].

    ["name", "age"]
        Positional: one key per capture group, flat dict output.

    {"person.name": "string", "person.age": "number", "ok": "boolean"}
        Keyed: the i-th key binds to capture group i. Dotted keys build
        nested dicts. Each value is a rule descriptor:

            "string" | "number" | "boolean"
            {"type": "boolean", "true": ["y", "yes"], "false": "n"}
            callable(raw) -> any

Validation happens once, in validate_schema(). Every failure is raised as
SchemaError; nothing is checked lazily while matching.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from .exceptions import SchemaError

logger = logging.getLogger(__name__)


DEFAULT_TRUE_VALUES = ("1", "true", "t", "yes", "y")
DEFAULT_FALSE_VALUES = ("0", "false", "f", "no", "n")


class SchemaKind(str, Enum):
    """Shape of the records a schema produces."""
    NONE = "none"               # [full, g1, g2, ...]
    POSITIONAL = "positional"   # {key_i: g_i}
    KEYED = "keyed"             # {a: {b: coerce(g_i)}}


class RuleType(str, Enum):
    """Coercion applied to a raw captured substring."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    CUSTOM = "custom"


# Names accepted as a bare string or as {"type": ...}
NAMED_RULE_TYPES = {RuleType.STRING.value, RuleType.NUMBER.value, RuleType.BOOLEAN.value}


# =============================================================================
# RULE MODELS
# =============================================================================

class ValueRule(BaseModel):
    """Rule for a keyed schema entry."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: RuleType = Field(
        ...,
        description="Tipo de coerção: string, number ou boolean",
        examples=["string", "number", "boolean"],
    )

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, RuleType):
            v = v.value
        name = v.strip().lower() if isinstance(v, str) else None
        if name not in NAMED_RULE_TYPES:
            raise ValueError(f"Invalid type in schema: {v}")
        return name


class BooleanRule(ValueRule):
    """
    Tri-state boolean rule.

    The captured text is trimmed and lowercased, then looked up in `true`
    and `false`. Text found in neither coerces to None.
    """

    type: RuleType = RuleType.BOOLEAN

    true: tuple[str, ...] = Field(
        default=DEFAULT_TRUE_VALUES,
        description="Valores aceitos como verdadeiro",
        examples=[["y", "yes"], "sim"],
    )
    false: tuple[str, ...] = Field(
        default=DEFAULT_FALSE_VALUES,
        description="Valores aceitos como falso",
        examples=[["n", "no"], "nao"],
    )

    @field_validator("true", "false", mode="before")
    @classmethod
    def validate_overrides(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return DEFAULT_TRUE_VALUES if info.field_name == "true" else DEFAULT_FALSE_VALUES

        values = [v] if isinstance(v, str) else v
        is_valid = (
            isinstance(values, (list, tuple))
            and len(values) > 0
            and all(isinstance(x, str) and x for x in values)
        )
        if not is_valid:
            raise ValueError(
                f"Invalid value in schema: '{info.field_name}' must be a string or array of strings"
            )

        return tuple(x.strip().lower() for x in values)


class CustomRule(ValueRule):
    """Caller-supplied transform; its return value is used verbatim."""

    type: RuleType = RuleType.CUSTOM
    fn: Callable[[Optional[str]], Any]

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        return RuleType.CUSTOM


# =============================================================================
# COMPILED SCHEMA
# =============================================================================

@dataclass(frozen=True)
class KeyBinding:
    """
    One output field bound to one capture group.

    Attributes:
        key: Key as written in the schema (ex: "person.age")
        path: Key split into segments (ex: ("person", "age"))
        group: Capture group index, 1-based
        rule: Coercion rule (None for positional schemas)
    """

    key: str
    path: tuple[str, ...]
    group: int
    rule: Optional[ValueRule] = None


@dataclass(frozen=True)
class Schema:
    """Validated, immutable schema."""

    kind: SchemaKind = SchemaKind.NONE
    bindings: tuple[KeyBinding, ...] = ()

    @property
    def keys(self) -> list[str]:
        return [b.key for b in self.bindings]

    @property
    def group_count(self) -> int:
        """Number of capture groups the schema reads."""
        return len(self.bindings)

    def __repr__(self) -> str:
        return f"Schema({self.kind.value}, keys={self.keys})"


SchemaInput = Union[None, Schema, list, tuple, Mapping]


def parse_rule(descriptor: Any, key: str = "") -> ValueRule:
    """
    Converts one keyed-schema descriptor into a ValueRule.

    Raises:
        SchemaError: descriptor is not a recognized rule
    """
    if isinstance(descriptor, ValueRule):
        if descriptor.type == RuleType.BOOLEAN and not isinstance(descriptor, BooleanRule):
            return BooleanRule()
        return descriptor

    try:
        if isinstance(descriptor, str):
            if not descriptor:
                raise SchemaError("Invalid type in schema: ''", key=key)
            rule = ValueRule(type=descriptor)
            if rule.type == RuleType.BOOLEAN:
                return BooleanRule()
            return rule

        if isinstance(descriptor, Mapping):
            descriptor = dict(descriptor)
            rule = ValueRule.model_validate(descriptor)
            if rule.type == RuleType.BOOLEAN:
                return BooleanRule.model_validate(descriptor)
            return rule

        if callable(descriptor):
            return CustomRule(fn=descriptor)

    except ValidationError as exc:
        raise SchemaError(_first_error(exc), key=key) from exc

    raise SchemaError(
        "Expected schema value to be a string, callable, or mapping",
        key=key,
    )


def _first_error(exc: ValidationError) -> str:
    """Mensagem do primeiro erro do pydantic, sem o prefixo 'Value error, '."""
    error = exc.errors()[0]
    message = error.get("msg", str(exc))
    prefix = "Value error, "
    if message.startswith(prefix):
        message = message[len(prefix):]
    if error.get("type") == "missing":
        field = ".".join(str(loc) for loc in error.get("loc", ()))
        message = f"Missing '{field}' in schema value"
    return message


def _split_path(key: Any) -> tuple[str, ...]:
    if not isinstance(key, str) or not key:
        raise SchemaError("Expected schema keys to be non-empty strings", key=key)
    path = tuple(key.split("."))
    if not all(path):
        raise SchemaError(f"Empty segment in schema key: '{key}'", key=key)
    return path


def _check_conflicts(bindings: list[KeyBinding]):
    """A path cannot be both a leaf and the parent of another leaf."""
    leaves = {b.path: b.key for b in bindings}
    for binding in bindings:
        for depth in range(1, len(binding.path)):
            prefix = binding.path[:depth]
            if prefix in leaves:
                raise SchemaError(
                    f"Conflicting schema keys: '{leaves[prefix]}' is both a value and a parent of '{binding.key}'",
                    key=binding.key,
                )


def validate_schema(schema: SchemaInput = None) -> Schema:
    """
    Validates a schema literal and compiles it.

    Args:
        schema: None, a sequence of key names, a mapping of dotted keys to
            rule descriptors, or an already compiled Schema

    Returns:
        Schema

    Raises:
        SchemaError: on any invalid shape, key, type or boolean override
    """
    if schema is None:
        return Schema()

    if isinstance(schema, Schema):
        return schema

    if isinstance(schema, Mapping):
        bindings = [
            KeyBinding(
                key=key,
                path=_split_path(key),
                group=index,
                rule=parse_rule(descriptor, key),
            )
            for index, (key, descriptor) in enumerate(schema.items(), start=1)
        ]
        _check_conflicts(bindings)
        compiled = Schema(kind=SchemaKind.KEYED, bindings=tuple(bindings))

    elif isinstance(schema, (list, tuple)):
        if not all(isinstance(key, str) and key for key in schema):
            raise SchemaError("Expected schema to be a string array or mapping")
        compiled = Schema(
            kind=SchemaKind.POSITIONAL,
            bindings=tuple(
                KeyBinding(key=key, path=(key,), group=index)
                for index, key in enumerate(schema, start=1)
            ),
        )

    else:
        raise SchemaError("Expected schema to be a string array or mapping")

    logger.debug(f"Compiled {compiled!r}")
    return compiled
