"""
Recover field-level validation issues from a rules-engine failure.

The engine does not promise a structured error for every failure kind. A
rejected input may surface as a typed error object, as a node error whose
cause is a JSON string, or only as text with a JSON fragment buried at
some offset. Recovery is an ordered cascade, each stage more permissive
than the one before:

  1. structured  - decode a {"type": "Validation", "source": {"errors": [...]}}
                   payload, following NodeError -> source when wrapped. A
                   NodeError whose source is plain "<json-pointer>: <message>"
                   text yields one issue per such line
  2. markers     - locate a known JSON fragment in the diagnostic text
                   (nested cause first, then the whole failure) and decode it
  3. heuristic   - for enum-membership failures ("is not one of"), scrape
                   the "message"/"path" values out of comma fragments

Failure text may carry a native backtrace after the JSON object; only the
leading object is decoded.

Every stage is total: it returns a list (possibly empty) and never raises.
An empty result means "not a validation failure".
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from excedencia.logs import get_logger
from excedencia.models.scenario import (
    ValidationErrorDetails,
    ValidationErrorSource,
    ValidationIssue,
)

logger = get_logger(__name__)

UNKNOWN_PATH = "/input/unknown"
ENUM_VIOLATION = "is not one of"

# (opening marker, closing marker), highest priority first
MARKERS: Tuple[Tuple[str, str], ...] = (
    ('{"source":{"errors":', '"type":"Validation"}'),
    ('{"errors":', '"type":"Validation"}'),
    ('"errors":[', "]"),
)

MESSAGE_PREFIX = '"message":"'
PATH_PREFIX = '"path":"'

# "/input/parentesco: \"hermano\" is not one of ..."
POINTER_MESSAGE = re.compile(r"^(/[^\s:]*): (.+)$")

Issues = List[ValidationIssue]

_decoder = json.JSONDecoder()


def _leading_object(text: str) -> Optional[dict]:
    """The JSON object the text starts with; whatever follows it is ignored."""
    text = text.lstrip()
    if not text.startswith("{"):
        return None
    try:
        parsed, _ = _decoder.raw_decode(text)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _as_payload(error: Any) -> Optional[dict]:
    """Typed view of a failure: dicts as-is, exceptions/strings parsed as JSON."""
    if isinstance(error, dict):
        return error
    if isinstance(error, bytes):
        text = error.decode("utf-8", errors="replace")
    elif isinstance(error, str):
        text = error
    elif isinstance(error, BaseException):
        text = str(error)
    else:
        return None
    return _leading_object(text)


def render(value: Any) -> str:
    """Diagnostic text of a failure or of its cause."""
    if isinstance(value, (dict, list)):
        # sorted keys put "source" before "type", the order the markers expect
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def nested_cause(error: Any) -> Optional[Any]:
    payload = _as_payload(error)
    if payload and payload.get("type") == "NodeError" and payload.get("source") is not None:
        return payload["source"]
    return None


def _decode_envelope(data: Any) -> Issues:
    if not isinstance(data, dict):
        return []
    try:
        if "source" in data:
            return ValidationErrorDetails.model_validate(data).source.errors
        if "errors" in data:
            return ValidationErrorSource.model_validate(data).errors
    except ValidationError:
        return []
    return []


# --- stage 1 ---

def from_structured(error: Any, _depth: int = 0) -> Issues:
    payload = _as_payload(error)
    if payload is None or _depth > 4:
        return []
    kind = payload.get("type")
    if kind == "Validation":
        return _decode_envelope({"source": payload.get("source"), "type": kind})
    if kind == "NodeError":
        source = payload.get("source")
        issues = from_structured(source, _depth + 1)
        if not issues and isinstance(source, str):
            issues = from_pointer_text(source)
        return issues
    return []


def from_pointer_text(text: str) -> Issues:
    """Issues from "<json-pointer>: <message>" lines, as the input schema check reports them."""
    issues = []
    for line in text.splitlines():
        m = POINTER_MESSAGE.match(line.strip())
        if m:
            issues.append(ValidationIssue(path=m.group(1), message=m.group(2)))
    return issues


# --- stage 2 ---

def _candidate(text: str, opening: str, closing: str) -> Optional[str]:
    start = text.find(opening)
    if start < 0:
        return None
    end = text.find(closing, start + len(opening))
    if end < 0:
        return None
    return text[start:end + len(closing)]


def from_markers(text: str) -> Issues:
    for opening, closing in MARKERS:
        fragment = _candidate(text, opening, closing)
        if fragment is None:
            continue
        if not fragment.startswith("{"):
            fragment = "{" + fragment + "}"
        try:
            data = json.loads(fragment)
        except ValueError:
            continue
        issues = _decode_envelope(data)
        if issues:
            return issues
    return []


# --- stage 3 ---

def _quoted_after(fragment: str, prefix: str) -> Optional[str]:
    start = fragment.find(prefix)
    if start < 0:
        return None
    start += len(prefix)
    end = fragment.find('"', start)
    if end < 0:
        return None
    return fragment[start:end]


def from_heuristic(text: str) -> Issues:
    if ENUM_VIOLATION not in text:
        return []

    message = ""
    path = ""
    for fragment in text.split(","):
        m = _quoted_after(fragment, MESSAGE_PREFIX)
        if m is not None:
            message = m
        p = _quoted_after(fragment, PATH_PREFIX)
        if p is not None:
            path = p

    if not message:
        return []
    return [ValidationIssue(message=message, path=path or UNKNOWN_PATH)]


TextStrategy = Callable[[str], Issues]
TEXT_STRATEGIES: Sequence[Tuple[str, TextStrategy]] = (
    ("markers", from_markers),
    ("heuristic", from_heuristic),
)


def diagnostic_texts(error: Any) -> List[str]:
    """Nested cause first (when the failure is a node error), then the whole failure."""
    texts = []
    cause = nested_cause(error)
    if cause is not None:
        texts.append(render(cause))
    texts.append(render(error))
    return texts


def extract_validation_errors(error: Any) -> Issues:
    issues = from_structured(error)
    if issues:
        logger.debug("validation_salvaged", strategy="structured", count=len(issues))
        return issues

    texts = diagnostic_texts(error)
    for name, strategy in TEXT_STRATEGIES:
        for text in texts:
            issues = strategy(text)
            if issues:
                logger.debug("validation_salvaged", strategy=name, count=len(issues))
                return issues

    return []
