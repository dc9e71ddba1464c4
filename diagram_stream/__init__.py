"""
diagram-stream - Incremental rendering of streamed JSON element arrays.

Recovers the fully written elements of a JSON array while it is still being
streamed as tool input, and withholds the element that may still change.

Copyright (C) 2024 Claude4Ξlope <xilope@esus.name>

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from .recover import (
    BraceScanRecoverer,
    DepthScanRecoverer,
    FinalParseError,
    Recoverer,
    get_recoverer,
    parse_final_elements,
    parse_partial_elements,
)
from .stability import exclude_incomplete_last_item
from .session import HostBridge, StreamingSession

__version__ = "0.1.0"
__author__ = "Claude4Ξlope"
__email__ = "xilope@esus.name"
__license__ = "GPLv3+"
__all__ = [
    "parse_partial_elements",
    "parse_final_elements",
    "exclude_incomplete_last_item",
    "Recoverer",
    "BraceScanRecoverer",
    "DepthScanRecoverer",
    "get_recoverer",
    "FinalParseError",
    "HostBridge",
    "StreamingSession",
]
