"""
Time-ordered identifiers for store-assigned document ids.

Document ids are UUIDv7 (RFC 9562) rendered as 32 hex characters:

- 48 bits: Unix timestamp in milliseconds
- 4 bits:  version (0111)
- 12 bits: counter (randomly seeded each millisecond)
- 2 bits:  variant (10)
- 62 bits: random

Ids generated by one process are strictly increasing, including several
within the same millisecond (RFC 9562 method 1, fixed-length counter).
When the counter runs out the timestamp is advanced by one millisecond.
"""

import os
import threading
import time
from uuid import UUID

_COUNTER_MAX = 0xFFF

_lock = threading.Lock()
_last_ms = -1
_counter = 0


def _next_clock(now_ms: int):
    """Return (timestamp_ms, counter) for the next id, never going backwards."""
    global _last_ms, _counter
    with _lock:
        if now_ms > _last_ms:
            _last_ms = now_ms
            # Seed in the lower half so the millisecond has room to count
            _counter = int.from_bytes(os.urandom(2), "big") & 0x7FF
        elif _counter < _COUNTER_MAX:
            _counter += 1
        else:
            _last_ms += 1
            _counter = 0
        return _last_ms, _counter


def uuid7(timestamp_ms: int = None) -> UUID:
    """
    Generate a UUIDv7.

    Args:
        timestamp_ms: Override the embedded timestamp (tests); defaults to now.
                      Overridden ids use a random counter and are not part
                      of the monotonic sequence.

    Returns:
        A uuid.UUID with version 7.
    """
    if timestamp_ms is None:
        timestamp_ms, rand_a = _next_clock(int(time.time() * 1000))
    else:
        rand_a = int.from_bytes(os.urandom(2), "big") & _COUNTER_MAX

    rand_b = int.from_bytes(os.urandom(8), "big") & ((1 << 62) - 1)

    value = (timestamp_ms & ((1 << 48) - 1)) << 80
    value |= 0x7 << 76
    value |= rand_a << 64
    value |= 0b10 << 62
    value |= rand_b
    return UUID(int=value)


def new_document_id() -> str:
    """A fresh store document id: a UUIDv7 as 32 lowercase hex characters."""
    return uuid7().hex
