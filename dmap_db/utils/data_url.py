"""
Data URL codec.

Images arrive from the capture UI as "data:<mime>;base64,<payload>"
strings. decode_data_url() turns them into raw bytes for storage;
encode_data_url() is the reverse, used when a stored photo is handed
back for display.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Tuple

from ..errors import InvalidDataURLError

DEFAULT_MIME_TYPE = "application/octet-stream"

_HEADER_RE = re.compile(r"^data:(.*?);base64$", re.IGNORECASE)


def decode_data_url(data_url: str) -> Tuple[bytes, str]:
    """
    Decode a base64 data URL.

    Returns
    -------
    (payload, mime_type)
        mime_type falls back to "application/octet-stream" when the
        header names none.

    Raises
    ------
    InvalidDataURLError
        When the string has no "," separator, is not base64-encoded, or
        the payload is not valid base64.
    """
    if not isinstance(data_url, str) or "," not in data_url:
        raise InvalidDataURLError("Data URL must contain a ',' separator")

    header, payload = data_url.split(",", 1)
    match = _HEADER_RE.match(header.strip())
    if match is None:
        raise InvalidDataURLError(f"Unsupported data URL header: {header[:64]!r}")

    mime_type = match.group(1) or DEFAULT_MIME_TYPE
    try:
        data = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidDataURLError(f"Invalid base64 payload: {e}") from e
    return data, mime_type


def encode_data_url(data: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{encoded}"


__all__ = [
    "DEFAULT_MIME_TYPE",
    "decode_data_url",
    "encode_data_url",
]
