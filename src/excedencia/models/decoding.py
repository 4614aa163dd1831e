from __future__ import annotations

from typing import Any, Optional


class DecodingError(ValueError):
    """Caller literal could not be coerced to the field's type."""


def decode_bool(v: Any) -> bool:
    """
    Accept a native bool or the strings "true"/"false" in any case.
    Anything else (including None) is rejected: boolean fields are mandatory.
    """
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        lowered = v.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise DecodingError(f"invalid boolean string: {v}")
    raise DecodingError(f"expected bool or string, got {type(v).__name__}: {v!r}")


def decode_number(v: Any) -> Optional[float]:
    """
    Accept an int/float, a numeric string, or None.
    Numbers always come back as float; None means "no value".
    """
    if v is None:
        return None
    # bool is an int subclass, but true/false is not a child count
    if isinstance(v, bool):
        raise DecodingError(f"expected number, string or null, got bool: {v}")
    if isinstance(v, (int, float)):
        return float(v)
    if isinstance(v, str):
        try:
            return float(v)
        except ValueError:
            raise DecodingError(f"invalid number string: {v}") from None
    raise DecodingError(f"expected number, string or null, got {type(v).__name__}: {v!r}")
