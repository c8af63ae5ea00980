"""
Exceptions - Error taxonomy for regex_stream.

Construction errors are raised synchronously by the constructor and leave no
usable object behind. Coercion errors abort the pass that triggered them and
leave the engine failed. Deferred matches, NaN numbers and unknown booleans
are never errors.
"""

from typing import Any, Optional


class RegexStreamError(Exception):
    """Root of the regex_stream exception hierarchy."""


# =============================================================================
# CONSTRUCTION
# =============================================================================

class ConstructionError(RegexStreamError, ValueError):
    """Invalid pattern or schema given to the constructor."""


class PatternError(ConstructionError):
    """Pattern cannot be used for repeated left-to-right scanning."""


class SchemaError(ConstructionError):
    """Schema shape, rule type or boolean override is invalid."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


# =============================================================================
# RUNTIME
# =============================================================================

class CoercionError(RegexStreamError):
    """A custom rule raised while building a record."""

    def __init__(self, key: str, raw: Optional[str]):
        super().__init__(f"Custom rule for '{key}' failed on value {raw!r}")
        self.key = key
        self.raw = raw


class StreamStateError(RegexStreamError):
    """Engine used outside its feed -> finish lifecycle."""

    def __init__(self, message: str, state: Any = None):
        super().__init__(message)
        self.state = state
