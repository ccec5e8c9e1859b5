"""
dmap_db.utils

Lightweight utility helpers shared across the DMAP DB stack.

This package aggregates:

    - timestamps: ISO-8601 / epoch-millisecond conversion
    - data_url:   data URL decode/encode for image payloads
    - json_io:    JSON encode/decode helpers

All public symbols from these modules are re-exported for convenience.
"""

from . import timestamps
from . import data_url
from . import json_io

from .timestamps import *  # noqa: F401,F403
from .data_url import *    # noqa: F401,F403
from .json_io import *     # noqa: F401,F403

__all__ = (
    timestamps.__all__
    + data_url.__all__
    + json_io.__all__
)
