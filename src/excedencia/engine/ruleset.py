from __future__ import annotations

import hashlib
from functools import lru_cache
from pathlib import Path
from typing import Optional

from excedencia.logs import get_logger

logger = get_logger(__name__)

RULES_DIR = Path(__file__).resolve().parent.parent / "rules"
BUNDLED_RULESET = RULES_DIR / "ayuda-excedencia-2025.json"


def resolve_ruleset_path(path: Optional[str] = None) -> Path:
    return Path(path) if path else BUNDLED_RULESET


@lru_cache(maxsize=8)
def load_ruleset(path: Optional[str] = None) -> str:
    """
    Return the JDM decision document as text, read once per path and
    reused for the life of the process. The engine parses it per call.
    """
    p = resolve_ruleset_path(path)
    content = p.read_text(encoding="utf-8")
    logger.info(
        "ruleset_loaded",
        path=str(p),
        sha256=hashlib.sha256(content.encode("utf-8")).hexdigest()[:12],
    )
    return content
