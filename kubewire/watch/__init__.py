"""Watch protocol engine for kubewire.

Submodules
----------
framer     -- LineFramer / decode_ndjson_stream: newline-delimited JSON decoding.
session    -- WatchSession: optional snapshot, then one streaming GET.
supervisor -- WatchSupervisor: fixed-delay, retry-forever loop around sessions.
"""

from kubewire.watch.framer import LineFramer, decode_ndjson_stream
from kubewire.watch.session import WatchSession, extract_resource_version
from kubewire.watch.supervisor import DEFAULT_RETRY_DELAY, WatchSupervisor

__all__ = [
    "DEFAULT_RETRY_DELAY",
    "LineFramer",
    "WatchSession",
    "WatchSupervisor",
    "decode_ndjson_stream",
    "extract_resource_version",
]
