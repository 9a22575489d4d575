"""
Dirty-marker bookkeeping and forward recomputation.

A stream keeps a single marker: the index of the earliest day whose
cache is stale, or ``None`` when every day is valid. Functions here take
the marker as an argument and return the new value; they never hold
state of their own.
"""

from __future__ import annotations

import logging

from wxstream.cascade import CalculationContext, compute_day
from wxstream.timeline import Timeline

logger = logging.getLogger(__name__)


def mark_dirty(marker: int | None, day: int) -> int:
    """Move the marker back to ``day`` if it is earlier than the current one."""
    day = max(day, 0)
    if marker is None:
        return day
    return min(marker, day)


def is_valid(marker: int | None, day: int) -> bool:
    """True if the cache of ``day`` can be read without recomputation."""
    return marker is None or day < marker


def recompute(
    records: Timeline,
    marker: int | None,
    context: CalculationContext,
    upto: int | None = None,
) -> int | None:
    """
    Recompute stale days in chronological order.

    Parameters
    ----------
    records : Timeline
        The stream's days.
    marker : int or None
        First stale day, or None if nothing is stale.
    context : CalculationContext
        Stream settings passed to each day's computation.
    upto : int, optional
        Last day that must be valid on return. Defaults to the final day.

    Returns
    -------
    int or None
        The new marker: None when the whole timeline is valid, otherwise
        the first day after ``upto``.
    """
    n_days = len(records)
    if marker is None or marker >= n_days:
        return None

    last = n_days - 1 if upto is None else min(upto, n_days - 1)
    if last < marker:
        return marker

    previous = records[marker - 1] if marker > 0 else None
    for index in range(marker, last + 1):
        record = records[index]
        compute_day(record, previous, context)
        previous = record

    logger.debug(f"Recomputed days {marker}-{last} of {n_days}")

    if last == n_days - 1:
        return None
    return last + 1
