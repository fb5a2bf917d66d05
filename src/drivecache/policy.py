# SPDX-License-Identifier: MIT
"""Expiry and store policy.

Each operation carries a bandwidth threshold. A sweep that evicted entries
is flushed to the driver only when the driver is at least as cheap as the
threshold. Direct mutations (set/delete/clear and merged external updates)
always flush, whatever the driver tier.
"""

from typing import Any

from .enums import Bandwidth, Operation
from .models import CacheEntry


OPERATION_THRESHOLDS: dict[Operation, Bandwidth] = {
    Operation.GET: Bandwidth.SMALL,
    Operation.HAS: Bandwidth.NORMAL,
    Operation.EXPIRES: Bandwidth.NORMAL,
    Operation.SIZE: Bandwidth.NORMAL,
    Operation.ENTRIES: Bandwidth.NORMAL,
    Operation.KEYS: Bandwidth.NORMAL,
    Operation.VALUES: Bandwidth.NORMAL,
    Operation.HYDRATE: Bandwidth.VERY_SMALL,
    Operation.SET: Bandwidth.VERY_SMALL,
    Operation.DELETE: Bandwidth.VERY_SMALL,
    Operation.CLEAR: Bandwidth.VERY_SMALL,
    Operation.UPDATE: Bandwidth.VERY_SMALL,
}

# Direct mutations store whatever the driver tier
MUTATING_OPERATIONS = frozenset(
    {Operation.SET, Operation.DELETE, Operation.CLEAR, Operation.UPDATE}
)


def threshold_for(operation: Operation) -> Bandwidth:
    """Get the bandwidth threshold of an operation (NORMAL if unlisted)."""
    return OPERATION_THRESHOLDS.get(operation, Bandwidth.NORMAL)


def should_store(bandwidth: Bandwidth, threshold: Bandwidth) -> bool:
    """Check whether a driver of ``bandwidth`` is cheap enough for ``threshold``."""
    return bandwidth <= threshold


def store_required(operation: Operation, bandwidth: Bandwidth) -> bool:
    """Decide whether ``operation`` must flush the cache to a driver of ``bandwidth``."""
    return operation in MUTATING_OPERATIONS or should_store(
        bandwidth, threshold_for(operation)
    )


def collect_expired(mapping: dict[str, CacheEntry], now: float) -> dict[str, Any]:
    """Evict expired entries from ``mapping`` in place.

    Args:
        mapping: Live key -> entry mapping
        now: Current POSIX timestamp in seconds

    Returns:
        The evicted key -> value pairs, in mapping order
    """
    removed: dict[str, Any] = {}
    for key, entry in list(mapping.items()):
        if entry.is_expired(now):
            removed[key] = entry.value
            del mapping[key]
    return removed
