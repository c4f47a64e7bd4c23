"""
Week and day calendar layout for appointments, plus the status graph.

The grid has one row per fixed time slot and one column per date. An
appointment lands in the cell whose date equals its scheduled_date and
whose slot label equals its start time truncated to minutes. Several
appointments may share a cell; nothing here rejects overlaps.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Sequence

from django.conf import settings

from .models import AppointmentStatus

S = AppointmentStatus

ALLOWED_TRANSITIONS = {
    S.SCHEDULED: {S.CONFIRMED, S.CANCELLED, S.NO_SHOW},
    S.CONFIRMED: {S.IN_PROGRESS, S.CANCELLED, S.NO_SHOW},
    S.IN_PROGRESS: {S.COMPLETED, S.CANCELLED, S.NO_SHOW},
    S.COMPLETED: set(),
    S.CANCELLED: set(),
    S.NO_SHOW: set(),
}


def is_allowed_transition(current, target) -> bool:
    """True when ``target`` may follow ``current``. Re-setting a status always is."""
    current, target = S(current), S(target)
    return current == target or target in ALLOWED_TRANSITIONS[current]


def _parse_label(label) -> time:
    if isinstance(label, time):
        return label
    return datetime.strptime(label, '%H:%M').time()


def time_slots(start=None, end=None, step_minutes=None) -> List[str]:
    """
    "HH:MM" labels from ``start`` to ``end`` inclusive, ``step_minutes`` apart.

    Defaults come from SCHEDULE_SLOT_START / SCHEDULE_SLOT_END /
    SCHEDULE_SLOT_MINUTES (08:00 to 17:30 every 30 minutes).
    """
    start = _parse_label(start or settings.SCHEDULE_SLOT_START)
    end = _parse_label(end or settings.SCHEDULE_SLOT_END)
    step = timedelta(minutes=step_minutes or settings.SCHEDULE_SLOT_MINUTES)

    current = datetime.combine(date.min, start)
    last = datetime.combine(date.min, end)
    slots = []
    while current <= last:
        slots.append(current.strftime('%H:%M'))
        current += step
    return slots


def week_of(day: date) -> List[date]:
    """The 7 dates of the Sunday-started week containing ``day``."""
    # weekday(): Monday=0 ... Sunday=6
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    return [sunday + timedelta(days=offset) for offset in range(7)]


def slot_label(value: time) -> str:
    return value.strftime('%H:%M')


def cell_for(appointments: Iterable, day: date, label: str) -> list:
    """Appointments scheduled on ``day`` whose start time reads ``label``."""
    return [
        appointment for appointment in appointments
        if appointment.scheduled_date == day and slot_label(appointment.start_time) == label
    ]


@dataclass
class WeekGrid:
    """
    Calendar grid for a run of dates.

    ``cells[label][date]`` holds the appointments starting in that slot.
    Appointments of a covered date whose start time matches no slot are
    collected in ``unslotted[date]`` so callers can still show them.
    """
    dates: List[date]
    slots: List[str]
    cells: Dict[str, Dict[date, list]] = field(default_factory=dict)
    unslotted: Dict[date, list] = field(default_factory=dict)

    @classmethod
    def build(cls, appointments: Iterable, reference_date: date, slots: Sequence[str] = None):
        return cls.for_dates(appointments, week_of(reference_date), slots)

    @classmethod
    def day(cls, appointments: Iterable, day: date, slots: Sequence[str] = None):
        return cls.for_dates(appointments, [day], slots)

    @classmethod
    def for_dates(cls, appointments: Iterable, dates: Sequence[date], slots: Sequence[str] = None):
        slots = list(slots) if slots is not None else time_slots()
        grid = cls(
            dates=list(dates),
            slots=slots,
            cells={label: {day: [] for day in dates} for label in slots},
            unslotted={day: [] for day in dates},
        )

        for appointment in sorted(appointments, key=lambda a: (a.scheduled_date, a.start_time)):
            if appointment.scheduled_date not in grid.unslotted:
                continue
            label = slot_label(appointment.start_time)
            if label in grid.cells:
                grid.cells[label][appointment.scheduled_date].append(appointment)
            else:
                grid.unslotted[appointment.scheduled_date].append(appointment)

        return grid

    def cell(self, day: date, label: str) -> list:
        return self.cells.get(label, {}).get(day, [])

    def placements(self):
        """Yield (date, label, appointment) for every slotted appointment."""
        for label in self.slots:
            for day in self.dates:
                for appointment in self.cells[label][day]:
                    yield day, label, appointment

    def serialize(self, serialize_appointment):
        return {
            'dates': [day.isoformat() for day in self.dates],
            'slots': self.slots,
            'rows': [
                {
                    'time': label,
                    'cells': [
                        {
                            'date': day.isoformat(),
                            'appointments': [serialize_appointment(a) for a in self.cells[label][day]],
                        }
                        for day in self.dates
                    ],
                }
                for label in self.slots
            ],
            'unslotted': {
                day.isoformat(): [serialize_appointment(a) for a in items]
                for day, items in self.unslotted.items()
                if items
            },
        }
