"""
Sekai Sync - Timestamp Normalisation

Upstream master data carries epoch milliseconds; the store keeps epoch
seconds. Zero and negative inputs mean "not set" upstream and map to the
sentinel 0, never to a negative value.
"""

from __future__ import annotations


def ms_to_sec(ms: int | None) -> int:
    """
    Convert an epoch-millisecond timestamp to epoch seconds.

    Args:
        ms: Milliseconds since the epoch. None, zero or negative means absent.

    Returns:
        Whole seconds (truncating division), or 0 when absent.

    Examples:
        >>> ms_to_sec(1_700_000_000_999)
        1700000000
        >>> ms_to_sec(-5)
        0
    """
    if ms is None or ms <= 0:
        return 0
    return ms // 1000
