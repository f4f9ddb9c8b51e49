# acadcal/palette.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class EventTypeConfig:
    value: str
    label: str
    color: str
    bg: str
    icon: str


# Calendar event categories. Order is the order filter chips are offered in.
EVENT_TYPES: Tuple[EventTypeConfig, ...] = (
    EventTypeConfig("exam", "Exam", "#ef4444", "#fef2f2", "📚"),
    EventTypeConfig("holiday", "Holiday", "#22c55e", "#f0fdf4", "🎉"),
    EventTypeConfig("school_event", "School Event", "#3b82f6", "#eff6ff", "🏫"),
    EventTypeConfig("assignment_deadline", "Assignment Deadline", "#f97316", "#fff7ed", "📝"),
    EventTypeConfig("fee_due", "Fee Due Date", "#a855f7", "#faf5ff", "💰"),
    EventTypeConfig("announcement", "Announcement", "#6366f1", "#eef2ff", "📢"),
)

# Schedule item categories (timetable cards).
SCHEDULE_TYPES: Tuple[EventTypeConfig, ...] = (
    EventTypeConfig("class", "Class", "#4f46e5", "#eef2ff", "📖"),
    EventTypeConfig("exam", "Exam", "#dc2626", "#fef2f2", "📝"),
    EventTypeConfig("meeting", "Meeting", "#d97706", "#fffbeb", "👥"),
    EventTypeConfig("activity", "Activity", "#059669", "#ecfdf5", "⚽"),
)

FALLBACK_EVENT_TYPE = "announcement"

_BY_VALUE: Dict[str, EventTypeConfig] = {c.value: c for c in EVENT_TYPES}
_SCHEDULE_BY_VALUE: Dict[str, EventTypeConfig] = {c.value: c for c in SCHEDULE_TYPES}

SUBJECT_ACCENTS: Tuple[str, ...] = (
    "blue",
    "emerald",
    "violet",
    "amber",
    "rose",
    "indigo",
    "teal",
    "slate",
)


def event_type_config(value: Optional[str]) -> EventTypeConfig:
    """Display config for a calendar event type; unknown types render as announcements."""
    return _BY_VALUE.get(str(value or ""), _BY_VALUE[FALLBACK_EVENT_TYPE])


def schedule_type_config(value: Optional[str]) -> EventTypeConfig:
    return _SCHEDULE_BY_VALUE.get(str(value or ""), _SCHEDULE_BY_VALUE["class"])


def is_known_event_type(value: Optional[str]) -> bool:
    return str(value or "") in _BY_VALUE or str(value or "") in _SCHEDULE_BY_VALUE


def color_index(key: Optional[str], palette_size: int = len(SUBJECT_ACCENTS)) -> int:
    """sum of code points mod palette size; 0 for an empty key."""
    if palette_size <= 0:
        raise ValueError("palette_size must be positive")
    if not key:
        return 0
    return sum(ord(ch) for ch in str(key)) % palette_size


def subject_accent(subject_id: Optional[str]) -> str:
    return SUBJECT_ACCENTS[color_index(subject_id, len(SUBJECT_ACCENTS))]
