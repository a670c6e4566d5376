"""Calendar slots derived from weekly working hours."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from milestone_planner.domain.models import WEEKDAYS, TimeSlot, WorkingHours, clock_minutes

_WEEKEND: frozenset[int] = frozenset({5, 6})


def working_hours_zone(working_hours: WorkingHours) -> ZoneInfo:
    try:
        return ZoneInfo(working_hours.timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(
            f"WorkingHours.timezone: unknown timezone {working_hours.timezone!r}"
        ) from exc


def generate_time_slots(
    working_hours: WorkingHours,
    start_date: date | datetime | None = None,
    end_date: date | datetime | None = None,
    *,
    allow_weekends: bool = False,
    horizon_days: int = 7,
    carve: bool = False,
    max_block_size_hours: float = 2.0,
    min_block_size_hours: float = 0.0,
    buffer_minutes: float = 0.0,
) -> tuple[TimeSlot, ...]:
    """Produce one slot per enabled day from ``start_date`` through ``end_date``.

    Dates are interpreted in the working-hours timezone and both ends are
    inclusive; without an ``end_date`` the range spans ``horizon_days`` days
    after the start. Saturday and Sunday are skipped unless
    ``allow_weekends``. Slot ids are ``slot_<YYYY-MM-DD>_<weekday>``.

    With ``carve`` each day window is cut into blocks of at most
    ``max_block_size_hours`` separated by ``buffer_minutes``; carved ids get a
    ``_<n>`` suffix and trailing pieces shorter than ``min_block_size_hours``
    are dropped.
    """

    if horizon_days < 0:
        raise ValueError("horizon_days must be >= 0")
    zone = working_hours_zone(working_hours)
    first = _local_date(start_date, zone) if start_date is not None else datetime.now(zone).date()
    last = (
        _local_date(end_date, zone)
        if end_date is not None
        else first + timedelta(days=horizon_days)
    )

    slots: list[TimeSlot] = []
    current = first
    while current <= last:
        weekday = current.weekday()
        window = working_hours.for_weekday(weekday)
        if window.enabled and (allow_weekends or weekday not in _WEEKEND):
            window_start = _at(current, window.start, zone)
            window_end = _at(current, window.end, zone)
            slot_id = f"slot_{current.isoformat()}_{WEEKDAYS[weekday]}"
            if carve:
                slots.extend(
                    _carve(
                        slot_id,
                        window_start,
                        window_end,
                        max_block_size_hours=max_block_size_hours,
                        min_block_size_hours=min_block_size_hours,
                        buffer_minutes=buffer_minutes,
                    )
                )
            else:
                slots.append(TimeSlot(id=slot_id, start_time=window_start, end_time=window_end))
        current += timedelta(days=1)
    return tuple(slots)


def _local_date(value: date | datetime, zone: ZoneInfo) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(zone).date()
    return value


def _at(day: date, clock: str, zone: ZoneInfo) -> datetime:
    minutes = clock_minutes(clock)
    # "24:00" closes the day at the next midnight.
    return datetime.combine(day, time(0, 0), tzinfo=zone) + timedelta(minutes=minutes)


def _carve(
    slot_id: str,
    window_start: datetime,
    window_end: datetime,
    *,
    max_block_size_hours: float,
    min_block_size_hours: float,
    buffer_minutes: float,
) -> list[TimeSlot]:
    if max_block_size_hours <= 0:
        raise ValueError("max_block_size_hours must be > 0")
    block = timedelta(hours=max_block_size_hours)
    gap = timedelta(minutes=buffer_minutes)
    minimum = timedelta(hours=min_block_size_hours)

    pieces: list[TimeSlot] = []
    cursor = window_start
    while cursor < window_end:
        end = min(cursor + block, window_end)
        if end - cursor < minimum:
            break
        pieces.append(
            TimeSlot(id=f"{slot_id}_{len(pieces) + 1}", start_time=cursor, end_time=end)
        )
        cursor = end + gap
    return pieces


__all__ = ["generate_time_slots", "working_hours_zone"]
