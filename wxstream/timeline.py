"""
Contiguous day-indexed storage for daily records.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator

from wxstream.records import DailyRecord


class Timeline:
    """
    Ordered, gap-free sequence of :class:`DailyRecord`.

    Records are kept in two lists: ``_front`` holds days before the
    original anchor in reverse order and ``_back`` holds the rest, so
    growth and shrinkage at either end are amortized O(1) and indexing is
    O(1). Day ``i`` always falls on ``start + i days``.
    """

    def __init__(self, start: date):
        self._start = start
        self._front: list[DailyRecord] = []
        self._back: list[DailyRecord] = []

    @property
    def start(self) -> date:
        """Calendar day of index 0."""
        return self._start

    @property
    def end(self) -> date | None:
        """Calendar day of the last record, or None when empty."""
        if not self:
            return None
        return self._start + timedelta(days=len(self) - 1)

    def __len__(self) -> int:
        return len(self._front) + len(self._back)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __getitem__(self, index: int) -> DailyRecord:
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError(f"day index {index} out of range")
        n_front = len(self._front)
        if index < n_front:
            return self._front[n_front - 1 - index]
        return self._back[index - n_front]

    def __iter__(self) -> Iterator[DailyRecord]:
        yield from reversed(self._front)
        yield from self._back

    def offset_of(self, day: date) -> int:
        """Index the given calendar day has (or would have)."""
        return (day - self._start).days

    def index_of(self, record: DailyRecord) -> int | None:
        """Index of ``record`` or None if it does not belong to this timeline."""
        index = self.offset_of(record.day)
        if 0 <= index < len(self) and self[index] is record:
            return index
        return None

    def append(self) -> DailyRecord:
        """Add a blank day after the last one."""
        record = DailyRecord(day=self._start + timedelta(days=len(self)))
        self._back.append(record)
        return record

    def appendleft(self) -> DailyRecord:
        """Add a blank day before the first one; the start moves back a day."""
        self._start -= timedelta(days=1)
        record = DailyRecord(day=self._start)
        self._front.append(record)
        return record

    def pop(self) -> DailyRecord:
        """Remove and return the last day."""
        if not self._back:
            if not self._front:
                raise IndexError("pop from empty timeline")
            self._back = self._front[::-1]
            self._front = []
        return self._back.pop()

    def popleft(self) -> DailyRecord:
        """Remove and return the first day; the start moves forward a day."""
        if not self._front:
            if not self._back:
                raise IndexError("pop from empty timeline")
            self._front = self._back[::-1]
            self._back = []
        self._start += timedelta(days=1)
        return self._front.pop()

    def clear(self) -> None:
        self._front.clear()
        self._back.clear()
