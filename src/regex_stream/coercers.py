"""
Value coercers - turn a raw captured substring into a typed value.

All coercers are total except coerce_custom: unparsable numbers become NaN
and unrecognized booleans become None, so a partially malformed record never
stops the stream.
"""

import math
import re
from typing import Any, Callable, Optional, Union

from .schema import (
    DEFAULT_FALSE_VALUES,
    DEFAULT_TRUE_VALUES,
    BooleanRule,
    CustomRule,
    RuleType,
    ValueRule,
)

Number = Union[int, float]

# Formas aceitas pelo cast numérico permissivo
PATTERN_RADIX = re.compile(r'0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+', re.ASCII)
PATTERN_DECIMAL = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?', re.ASCII)
PATTERN_INTEGER = re.compile(r'[+-]?\d+', re.ASCII)

INFINITIES = {
    "Infinity": math.inf,
    "+Infinity": math.inf,
    "-Infinity": -math.inf,
}


def coerce_string(raw: Optional[str]) -> Optional[str]:
    return raw


def coerce_number(raw: Optional[str]) -> Number:
    """
    Permissive numeric cast.

    Surrounding whitespace is ignored and blank text is 0. Decimal integers
    give an int, other decimal or exponent forms a float, 0x/0o/0b prefixes
    are read in their radix. Anything else gives NaN instead of raising.
    """
    if raw is None:
        return math.nan

    text = raw.strip()
    if not text:
        return 0

    if text in INFINITIES:
        return INFINITIES[text]

    # Bases 2, 8 e 16 não têm limite de dígitos na conversão str -> int
    if PATTERN_RADIX.fullmatch(text):
        return int(text, 0)

    if PATTERN_INTEGER.fullmatch(text):
        try:
            return int(text)
        except ValueError:
            # Acima de sys.get_int_max_str_digits(): vira float grande ou inf
            return float(text)

    if PATTERN_DECIMAL.fullmatch(text):
        return float(text)

    return math.nan


def coerce_boolean(raw: Optional[str], rule: Optional[BooleanRule] = None) -> Optional[bool]:
    """
    Tri-state boolean lookup.

    Returns True or False when the trimmed, lowercased text is listed in the
    rule, None otherwise (including when the group did not participate).
    """
    if raw is None:
        return None

    text = raw.strip().lower()
    true_values = rule.true if rule is not None else DEFAULT_TRUE_VALUES
    if text in true_values:
        return True

    false_values = rule.false if rule is not None else DEFAULT_FALSE_VALUES
    if text in false_values:
        return False

    return None


def coerce_custom(raw: Optional[str], fn: Callable[[Optional[str]], Any]) -> Any:
    return fn(raw)


def coerce(raw: Optional[str], rule: Optional[ValueRule]) -> Any:
    """Applies `rule` to `raw`; no rule means the raw text is kept."""
    if rule is None or rule.type == RuleType.STRING:
        return coerce_string(raw)

    if rule.type == RuleType.NUMBER:
        return coerce_number(raw)

    if rule.type == RuleType.BOOLEAN:
        return coerce_boolean(raw, rule if isinstance(rule, BooleanRule) else None)

    if isinstance(rule, CustomRule):
        return coerce_custom(raw, rule.fn)

    raise TypeError(f"Unsupported rule: {rule!r}")
