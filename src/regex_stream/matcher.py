"""
IncrementalMatcher - buffer engine for matching a pattern over a text stream.

The matcher owns one growing buffer holding the text received but not yet
consumed. Each pass scans the whole buffer, left to right, and decides for
every match whether it is final or must wait for more input:

    buffer: "ab1 ab4"        pattern: ab(\\d+)

    "ab1"  ends at 3, before the buffer end  -> final, emitted, consumed
    "ab4"  ends exactly at the buffer end    -> ambiguous, the next fragment
                                                may be "01" and make it "ab401"

Ambiguous matches stop the pass. They are re-found on the next pass, once
more text arrives, or emitted on the final pass after end-of-input.

Emission order is the order the pattern engine reports matches, so records
always follow their position in the original input, no matter how the input
was split into fragments. Leading text that does not match stays in the
buffer: if the pattern never matches, the buffer grows without bound.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from .config import get_settings
from .exceptions import PatternError
from .record_builder import Record, RecordBuilder
from .schema import SchemaKind

logger = logging.getLogger(__name__)

PatternInput = Union[str, re.Pattern]


@dataclass
class MatcherConfig:
    """Configuração do matcher."""

    # Avisa (sem truncar) quando o buffer passa deste tamanho; 0 desliga
    buffer_warning_size: int = field(default_factory=lambda: get_settings().buffer_warning)

    # Flags usadas quando o pattern chega como str
    flags: int = 0


def compile_pattern(pattern: PatternInput, flags: int = 0) -> re.Pattern:
    """
    Compiles and checks a pattern for repeated left-to-right scanning.

    Raises:
        PatternError: not a text pattern, does not compile, or can match
            the empty string
    """
    if isinstance(pattern, re.Pattern):
        compiled = pattern
    elif isinstance(pattern, str):
        try:
            compiled = re.compile(pattern, flags)
        except re.error as exc:
            raise PatternError(f"Invalid pattern {pattern!r}: {exc}") from exc
    else:
        raise PatternError("Expected pattern to be a str or compiled re.Pattern")

    if isinstance(compiled.pattern, bytes):
        raise PatternError("Expected a text pattern, got a bytes pattern")

    # Um match vazio nunca consome o buffer e seria emitido a cada passada
    if compiled.search("") is not None:
        raise PatternError(f"Pattern {compiled.pattern!r} must not match the empty string")

    return compiled


class IncrementalMatcher:
    """
    Incremental pattern matcher with schema-driven record building.

    Usage:
        matcher = IncrementalMatcher(r"ab(\\d+)")
        matcher.append("ab1 ab4")
        matcher.process_buffer(False, print)   # ['ab1', '1']
        matcher.append("01 ")
        matcher.process_buffer(False, print)   # ['ab401', '401']
    """

    def __init__(
        self,
        pattern: PatternInput,
        schema: Any = None,
        config: Optional[MatcherConfig] = None,
    ):
        self.config = config or MatcherConfig()
        self.pattern = compile_pattern(pattern, self.config.flags)
        self.builder = RecordBuilder(schema)
        self._buffer = ""
        self._over_warning = False

        schema = self.builder.schema
        if schema.kind == SchemaKind.KEYED and schema.group_count > self.pattern.groups:
            logger.warning(
                f"Schema binds {schema.group_count} keys but pattern has "
                f"{self.pattern.groups} groups; extra keys get no text"
            )

        logger.debug(
            f"IncrementalMatcher: pattern={self.pattern.pattern!r}, "
            f"groups={self.pattern.groups}, schema={schema!r}"
        )

    @property
    def schema(self):
        return self.builder.schema

    @property
    def buffer(self) -> str:
        """Text received but not yet consumed."""
        return self._buffer

    def append(self, fragment: str):
        """Adds a fragment at the tail of the buffer."""
        self._buffer += fragment
        self._check_buffer_size()

    def process_buffer(self, is_final_pass: bool, emit: Callable[[Record], None]) -> int:
        """
        Runs one matching pass over the buffer.

        Matches are taken from a snapshot of the buffer while the buffer
        itself is trimmed after every final match. `drift` is the number of
        characters trimmed since the snapshot, so a reported end offset maps
        to `end - drift` in the live buffer.

        Args:
            is_final_pass: True after end-of-input; matches touching the end
                of the buffer are then emitted instead of deferred
            emit: called once per final match, in input order

        Returns:
            Number of records emitted
        """
        drift = 0
        emitted = 0
        deferred = False

        for match in self.pattern.finditer(self._buffer):
            end = match.end() - drift

            if not is_final_pass and end == len(self._buffer):
                deferred = True
                break

            self._buffer = self._buffer[end:]
            drift += end

            emit(self.builder.build_from_match(match))
            emitted += 1

        self._check_buffer_size()

        logger.debug(
            f"Pass (final={is_final_pass}): {emitted} emitted, "
            f"deferred={deferred}, buffer={len(self._buffer)} chars"
        )
        return emitted

    def _check_buffer_size(self):
        limit = self.config.buffer_warning_size
        if not limit:
            return

        if len(self._buffer) > limit:
            if not self._over_warning:
                logger.warning(
                    f"Buffer holds {len(self._buffer)} unconsumed chars "
                    f"(limit {limit}); pattern {self.pattern.pattern!r} is not matching"
                )
                self._over_warning = True
        else:
            self._over_warning = False
