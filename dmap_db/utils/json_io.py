"""
JSON encode/decode helpers.

These functions guarantee:
- UTF-8 encoding, non-ASCII text kept readable (ensure_ascii=False)
- deterministic indentation for exported documents
- graceful fallback when a stored column holds malformed JSON
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def dump_json_bytes(data: Any, indent: Optional[int] = 2) -> bytes:
    """
    Serialize a JSON-compatible structure to UTF-8 bytes.

    Parameters
    ----------
    data : Any
        JSON-serializable Python structure.
    indent : Optional[int]
        Indentation width; None for compact output.
    """
    return json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")


def dump_json_text(data: Any) -> str:
    """Compact JSON text for storage columns."""
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def load_json_text(text: Optional[str], default: Any = None) -> Any:
    """
    Parse JSON text from a storage column.

    Returns `default` for NULL, empty, or malformed values.
    """
    if not text:
        return default
    try:
        return json.loads(text)
    except ValueError:
        logger.warning("Malformed JSON column value; using default")
        return default


__all__ = [
    "dump_json_bytes",
    "dump_json_text",
    "load_json_text",
]
