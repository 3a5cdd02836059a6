"""Demo object graph: a small in-memory calendar to drive the console.

Exposes:
    calendar            Calendar instance (events, view, navigation, undo)
    Event               constructible event class
    help()              list of available commands

    >>> calendar.add_event({title: "Standup", start: new Date("2024-05-01T09:00")})
    >>> calendar.event_store.get_stats()
    >>> calendar.state.undo()
"""

import copy
import itertools
from datetime import datetime, timedelta

VIEWS = ("month", "week", "day", "list")

_ids = itertools.count(1)


class Event:
    """A calendar event built from a dict (or keyword arguments)."""

    def __init__(self, data=None, **kwargs):
        data = dict(data or {}, **kwargs)
        self.id = str(data.get("id") or f"evt-{next(_ids)}")
        self.title = str(data.get("title") or "Untitled")
        self.start = _as_datetime(data.get("start")) or datetime.now()
        end = _as_datetime(data.get("end"))
        self.end = end or self.start + timedelta(hours=1)
        self.all_day = bool(data.get("allDay", data.get("all_day", False)))
        self.description = str(data.get("description") or "")
        self.validate()

    def validate(self):
        if self.end < self.start:
            raise ValueError(f"Event '{self.title}' ends before it starts")
        return True

    def clone(self):
        return copy.copy(self)

    def overlaps(self, other):
        return self.start < other.end and other.start < self.end

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start,
            "end": self.end,
            "allDay": self.all_day,
            "description": self.description,
        }

    def __repr__(self):
        return f"Event({self.title!r}, {self.start:%Y-%m-%d %H:%M})"


def _as_datetime(value):
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000)
    return datetime.fromisoformat(str(value))


class EventStore:
    def __init__(self):
        self._events = {}

    def add(self, event):
        if not isinstance(event, Event):
            event = Event(event)
        self._events[event.id] = event
        return event

    def update(self, event_id, changes):
        event = self.get(event_id)
        if event is None:
            raise KeyError(f"No event with id {event_id!r}")
        data = event.to_dict()
        data.update(changes or {})
        data["id"] = event.id
        updated = Event(data)
        self._events[event.id] = updated
        return updated

    def remove(self, event_id):
        return self._events.pop(event_id, None) is not None

    def get(self, event_id):
        return self._events.get(event_id)

    def get_all(self):
        return sorted(self._events.values(), key=lambda e: e.start)

    def clear(self):
        self._events.clear()

    def get_by_date(self, day):
        day = _as_datetime(day).date()
        return [e for e in self.get_all() if e.start.date() <= day <= e.end.date()]

    def get_by_date_range(self, start, end):
        start, end = _as_datetime(start), _as_datetime(end)
        return [e for e in self.get_all() if e.start < end and start < e.end]

    def get_conflicts(self, event):
        return [e for e in self.get_all() if e.id != event.id and e.overlaps(event)]

    def has_conflicts(self, event):
        return bool(self.get_conflicts(event))

    def get_stats(self):
        events = self.get_all()
        return {
            "total": len(events),
            "allDay": sum(1 for e in events if e.all_day),
            "first": events[0].start if events else None,
            "last": events[-1].end if events else None,
        }


class StateHistory:
    """Undo/redo over snapshots of the calendar's events."""

    def __init__(self, store, limit=50):
        self._store = store
        self._limit = limit
        self._undo = []
        self._redo = []

    def snapshot(self):
        self._undo.append(dict(self._store._events))
        del self._undo[:-self._limit]
        self._redo.clear()

    def undo(self):
        if not self._undo:
            return False
        self._redo.append(dict(self._store._events))
        self._store._events = self._undo.pop()
        return True

    def redo(self):
        if not self._redo:
            return False
        self._undo.append(dict(self._store._events))
        self._store._events = self._redo.pop()
        return True

    def can_undo(self):
        return bool(self._undo)

    def can_redo(self):
        return bool(self._redo)

    def get_undo_count(self):
        return len(self._undo)

    def get_redo_count(self):
        return len(self._redo)


class Calendar:
    def __init__(self, view="month", timezone="UTC"):
        self.event_store = EventStore()
        self.state = StateHistory(self.event_store)
        self.view = view
        self.timezone = timezone
        self.current_date = datetime.now()

    # Events

    def add_event(self, data):
        self.state.snapshot()
        return self.event_store.add(data)

    def update_event(self, event_id, changes):
        self.state.snapshot()
        return self.event_store.update(event_id, changes)

    def remove_event(self, event_id):
        self.state.snapshot()
        return self.event_store.remove(event_id)

    def get_events(self):
        return self.event_store.get_all()

    def get_event_by_id(self, event_id):
        return self.event_store.get(event_id)

    def get_events_for_date(self, day):
        return self.event_store.get_by_date(day)

    def get_events_in_range(self, start, end):
        return self.event_store.get_by_date_range(start, end)

    def detect_conflicts(self):
        events = self.event_store.get_all()
        return [[a, b] for i, a in enumerate(events) for b in events[i + 1:] if a.overlaps(b)]

    # View and navigation

    def set_view(self, view):
        if view not in VIEWS:
            raise ValueError(f"Unknown view {view!r}; expected one of {', '.join(VIEWS)}")
        self.view = view
        return view

    def get_view(self):
        return self.view

    def next(self):
        self.current_date += self._step()
        return self.current_date

    def previous(self):
        self.current_date -= self._step()
        return self.current_date

    def today(self):
        self.current_date = datetime.now()
        return self.current_date

    def get_current_date(self):
        return self.current_date

    def set_current_date(self, when):
        self.current_date = _as_datetime(when)
        return self.current_date

    def get_timezone(self):
        return self.timezone

    def set_timezone(self, tz):
        self.timezone = str(tz)
        return self.timezone

    def _step(self):
        if self.view == "day":
            return timedelta(days=1)
        if self.view == "week":
            return timedelta(weeks=1)
        return timedelta(days=30)


ALLOWED_METHODS = {
    "calendar": [
        "get_events", "add_event", "update_event", "remove_event",
        "get_events_for_date", "get_events_in_range", "set_view", "get_view",
        "next", "previous", "today", "get_current_date", "set_current_date",
        "get_timezone", "set_timezone", "get_event_by_id", "detect_conflicts",
    ],
    "event_store": [
        "add", "update", "remove", "get", "get_all", "clear",
        "get_by_date", "get_by_date_range", "get_stats",
        "has_conflicts", "get_conflicts",
    ],
    "state": [
        "undo", "redo", "can_undo", "can_redo", "get_undo_count", "get_redo_count",
    ],
    "help": ["help"],
}

CONSTRUCTORS = {"Event"}


def build_context(calendar=None):
    """Context mapping for the demo: a calendar, the Event class and help()."""
    calendar = calendar or Calendar()

    def help():
        lines = ["Available commands:"]
        for scope, names in ALLOWED_METHODS.items():
            if scope == "help":
                continue
            prefix = "calendar" if scope == "calendar" else f"calendar.{scope}"
            lines.extend(f"  {prefix}.{name}(...)" for name in names)
        lines.extend(f"  new {cls}({{...}})" for cls in sorted(CONSTRUCTORS))
        return "\n".join(lines)

    return {"calendar": calendar, "Event": Event, "help": help}
