"""
STOCKNOTE - Note Alignment
Places date-stamped notes on the trading days of a price series.

A note lands on its own date when that day is in the series, otherwise on
the latest series day before it. Notes older than the whole series are left
off the chart for this window; nothing about the note itself changes.
"""
from bisect import bisect_right
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Sequence

from stocknote.data.models import AlignedGroup, DailyPricePoint, Note
from stocknote.utils.helpers import parse_calendar_date
from stocknote.utils.logger import get_logger

logger = get_logger("alignment")


def _creation_key(created_at: datetime) -> datetime:
    # naive timestamps are taken as UTC so mixed inputs still compare
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


class AnnotationAligner:
    """Maps notes onto a sorted, date-unique series. Pure; holds no state between calls."""

    def __init__(self, series: Sequence[DailyPricePoint]):
        self._dates: List[date] = [point.date for point in series]

    def resolve_date(self, note: Note) -> Optional[date]:
        """Series date the note belongs to, or None if it falls outside the window."""
        target = parse_calendar_date(note.note_date)
        if target is None:
            logger.debug("note_date_invalid", note_id=note.id, note_date=note.note_date)
            return None
        # Greatest date <= target; an exact match is the same lookup.
        idx = bisect_right(self._dates, target)
        if idx == 0:
            return None
        return self._dates[idx - 1]

    def align(self, notes: Sequence[Note]) -> List[AlignedGroup]:
        if not notes or not self._dates:
            return []

        buckets: Dict[date, List[tuple]] = {}
        for position, note in enumerate(notes):
            matched = self.resolve_date(note)
            if matched is None:
                continue
            buckets.setdefault(matched, []).append((_creation_key(note.created_at), position, note))

        return [
            AlignedGroup(
                matched_date=matched,
                notes=[note for _, _, note in sorted(entries, key=lambda e: (e[0], e[1]))],
            )
            for matched, entries in sorted(buckets.items())
        ]


def align(series: Sequence[DailyPricePoint], notes: Sequence[Note]) -> List[AlignedGroup]:
    """Group notes by the trading day each one resolves to, in creation order."""
    return AnnotationAligner(series).align(notes)


def notes_by_date(groups: Sequence[AlignedGroup]) -> Dict[date, List[Note]]:
    """Date -> notes index over aligned groups."""
    return {group.matched_date: list(group.notes) for group in groups}
