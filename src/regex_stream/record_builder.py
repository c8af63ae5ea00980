"""
RecordBuilder - projects one match onto the schema.

    schema None:        ["ab401", "401"]
    positional schema:  {"name": "bob", "age": "55"}
    keyed schema:       {"person": {"name": "bob", "age": 55}, "signed_up": False}

Dotted keys that share a prefix land in one shared nested dict.
"""

import logging
import re
from typing import Any, Optional, Sequence, Union

from .coercers import coerce
from .exceptions import CoercionError
from .schema import RuleType, Schema, SchemaKind, validate_schema

logger = logging.getLogger(__name__)

Record = Union[list, dict]


def ensure_path(root: dict, segments: Sequence[str]) -> dict:
    """Descends into `root` along `segments`, creating missing dicts."""
    node = root
    for segment in segments:
        node = node.setdefault(segment, {})
    return node


def match_groups(match: re.Match) -> tuple[Optional[str], ...]:
    """Full match followed by every capture group (None if it did not participate)."""
    return (match.group(0),) + match.groups()


class RecordBuilder:
    """
    Builds records from capture groups.

    Usage:
        builder = RecordBuilder({"person.name": "string", "person.age": "number"})
        builder.build(("person: bob, 55", "bob", "55"))
        # {"person": {"name": "bob", "age": 55}}
    """

    def __init__(self, schema: Any = None):
        self.schema: Schema = validate_schema(schema)

    def build(self, groups: Sequence[Optional[str]]) -> Record:
        """
        Args:
            groups: full match text followed by capture groups 1..N

        Returns:
            list for schema None, dict otherwise

        Raises:
            CoercionError: a custom rule raised
        """
        if self.schema.kind == SchemaKind.NONE:
            return list(groups)

        if self.schema.kind == SchemaKind.POSITIONAL:
            return {b.key: self._group(groups, b.group) for b in self.schema.bindings}

        result: dict = {}
        for binding in self.schema.bindings:
            raw = self._group(groups, binding.group)
            parent = ensure_path(result, binding.path[:-1])
            parent[binding.path[-1]] = self._coerce(binding, raw)
        return result

    def build_from_match(self, match: re.Match) -> Record:
        return self.build(match_groups(match))

    @staticmethod
    def _group(groups: Sequence[Optional[str]], index: int) -> Optional[str]:
        return groups[index] if index < len(groups) else None

    def _coerce(self, binding, raw: Optional[str]) -> Any:
        if binding.rule.type != RuleType.CUSTOM:
            return coerce(raw, binding.rule)

        try:
            return coerce(raw, binding.rule)
        except Exception as exc:
            logger.error(f"Custom rule for '{binding.key}' failed on {raw!r}: {exc}")
            raise CoercionError(binding.key, raw) from exc
