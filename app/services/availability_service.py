"""
Reservation availability: bookable time slots and free tables
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Protocol, Set, Tuple, Union

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.schemas.availability import ReservationCount, Slot, TableInfo

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]
TimeLike = Union[time, str, None]


class AvailabilityStore(Protocol):
    """Persistence queries consumed by the engine"""

    def count_confirmed_reservations_by_time(self, for_date: date) -> List[ReservationCount]: ...

    def list_available_tables(self, min_seats: Optional[int] = None) -> List[TableInfo]: ...

    def list_confirmed_reservation_table_ids(self, for_date: date, at_time: time) -> Set[int]: ...

    def count_available_tables(self) -> int: ...


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value.strip(), "%H:%M").time()


@dataclass(frozen=True)
class AvailabilityConfig:
    """Operating hours and capacity model for slot generation.

    ``slot_capacity`` is the number of table-equivalents bookable per slot.
    When it is ``None`` the capacity is the number of tables currently marked
    available. ``weekday_hours`` overrides the default hours for a weekday
    (Monday is 0); ``closed_weekdays`` produce no slots at all.
    """

    open_time: time = time(18, 0)
    close_time: time = time(22, 0)
    slot_minutes: int = 30
    slot_capacity: Optional[int] = 3
    seats_per_table: int = 4
    weekday_hours: Dict[int, Tuple[time, time]] = field(default_factory=dict)
    closed_weekdays: frozenset = frozenset()

    def __post_init__(self):
        if self.open_time >= self.close_time:
            raise ValueError("open_time must be before close_time")
        for weekday, (open_at, close_at) in self.weekday_hours.items():
            if open_at >= close_at:
                raise ValueError(f"open time must be before close time for weekday {weekday}")
        if self.slot_minutes <= 0:
            raise ValueError("slot_minutes must be positive")
        if self.seats_per_table <= 0:
            raise ValueError("seats_per_table must be positive")
        if self.slot_capacity is not None and self.slot_capacity < 0:
            raise ValueError("slot_capacity cannot be negative")

    @classmethod
    def from_settings(cls) -> "AvailabilityConfig":
        return cls(
            open_time=parse_hhmm(settings.OPEN_TIME),
            close_time=parse_hhmm(settings.CLOSE_TIME),
            slot_minutes=settings.SLOT_MINUTES,
            slot_capacity=settings.SLOT_CAPACITY or None,
            seats_per_table=settings.SEATS_PER_TABLE,
            closed_weekdays=frozenset(settings.CLOSED_WEEKDAYS),
        )

    def hours_for(self, for_date: date) -> Optional[Tuple[time, time]]:
        """Open/close pair for a date, or None when closed"""
        weekday = for_date.weekday()
        if weekday in self.closed_weekdays:
            return None
        return self.weekday_hours.get(weekday, (self.open_time, self.close_time))

    def tables_needed(self, party_size: int) -> int:
        return math.ceil(party_size / self.seats_per_table)


def format_display(slot_time: time) -> str:
    """12-hour label, e.g. 18:30 -> '6:30 PM'"""
    hour = slot_time.hour % 12 or 12
    suffix = "PM" if slot_time.hour >= 12 else "AM"
    return f"{hour}:{slot_time.minute:02d} {suffix}"


def coerce_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ValidationError("date is required")
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")


def coerce_time(value: TimeLike) -> time:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if value is None or not str(value).strip():
        raise ValidationError("time is required")
    raw = str(value).strip()
    # databases hand back HH:MM:SS; only whole minutes are slot times
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            parsed = datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
        if parsed.second == 0:
            return parsed
        break
    raise ValidationError(f"Invalid time '{value}', expected HH:MM")


def coerce_party_size(value: Union[int, str, None]) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"Invalid party size '{value}'")
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid party size '{value}'")
    if size <= 0:
        raise ValidationError("Party size must be a positive integer")
    return size


class AvailabilityEngine:
    """Computes bookable slots and free tables from persisted reservations.

    Both operations only read from the store. The result is a snapshot: two
    callers can see the same table as free, so booking relies on the unique
    index over confirmed (table, date, time) to settle races.
    """

    def __init__(self, store: AvailabilityStore, config: Optional[AvailabilityConfig] = None):
        self.store = store
        self.config = config or AvailabilityConfig()

    def generate_slot_times(self, for_date: date) -> List[time]:
        hours = self.config.hours_for(for_date)
        if hours is None:
            return []
        open_at, close_at = hours
        current = datetime.combine(for_date, open_at)
        close_dt = datetime.combine(for_date, close_at)
        step = timedelta(minutes=self.config.slot_minutes)
        times = []
        while current < close_dt:
            times.append(current.time())
            current += step
        return times

    def get_available_slots(self, for_date: DateLike, party_size: Union[int, str, None] = None) -> List[Slot]:
        """Slots for a date with remaining capacity, in time order.

        When ``party_size`` is given, slots without enough table-equivalents
        for the party are left out.
        """
        day = coerce_date(for_date)
        size = coerce_party_size(party_size)

        slot_times = self.generate_slot_times(day)
        if not slot_times:
            logger.info(f"Closed on {day.isoformat()}, no slots generated")
            return []

        capacity = self.config.slot_capacity
        if capacity is None:
            capacity = self.store.count_available_tables()

        booked = {row.time.replace(second=0, microsecond=0): row.count
                  for row in self.store.count_confirmed_reservations_by_time(day)}

        slots = [
            Slot(
                time=slot_time.strftime("%H:%M"),
                display=format_display(slot_time),
                available=max(0, capacity - booked.get(slot_time, 0))
            )
            for slot_time in slot_times
        ]

        if size is not None:
            needed = self.config.tables_needed(size)
            slots = [slot for slot in slots if slot.available >= needed]

        return slots

    def get_available_tables(
        self,
        for_date: DateLike,
        at_time: TimeLike,
        party_size: Union[int, str, None] = None
    ) -> List[TableInfo]:
        """Tables free at (date, time) seating the party, smallest first"""
        day = coerce_date(for_date)
        slot_time = coerce_time(at_time)
        size = coerce_party_size(party_size)

        candidates = self.store.list_available_tables(min_seats=size)
        taken = self.store.list_confirmed_reservation_table_ids(day, slot_time)

        free = [table for table in candidates if table.id not in taken]
        free.sort(key=lambda table: (table.seats, table.table_number))
        return free

    def find_best_fit_table(self, for_date: DateLike, at_time: TimeLike, party_size: int) -> Optional[TableInfo]:
        tables = self.get_available_tables(for_date, at_time, party_size)
        return tables[0] if tables else None
