# acadcal/filters.py
from __future__ import annotations

import shlex
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .model import Event, Record, Ref, ScheduleItem, WEEKDAYS_MON_FIRST


class FilterError(ValueError):
    """Raised for an unparseable filter expression."""


def _ref_id(ref: Optional[Ref]) -> str:
    return ref.id if ref is not None else ""


def _ref_name(ref: Optional[Ref]) -> str:
    return ref.name if ref is not None else ""


def _search_fields(record: Record) -> Iterable[str]:
    # Lazily yielded so matching stops at the first field that hits.
    if isinstance(record, ScheduleItem):
        yield _ref_name(record.subject)
        yield _ref_name(record.teacher)
        yield record.room
        yield _ref_name(record.class_ref)
    elif isinstance(record, Event):
        yield record.title
        yield record.description
        yield _ref_name(record.class_ref)


@dataclass(frozen=True)
class ItemFilter:
    """Conjunctive filter over events and schedule items.

    Every field left as None/"" is ignored. Id filters match the referenced
    directory record id; `search_text` is a case-insensitive substring test.
    """

    subject_id: Optional[str] = None
    teacher_id: Optional[str] = None
    event_type: Optional[str] = None
    search_text: Optional[str] = None
    class_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not any((self.subject_id, self.teacher_id, self.event_type, self.search_text, self.class_id))

    @property
    def active_count(self) -> int:
        """Number of dropdown filters in use (free-text search is not counted)."""
        return sum(1 for v in (self.subject_id, self.teacher_id, self.event_type, self.class_id) if v)

    def cleared(self) -> "ItemFilter":
        return ItemFilter()

    def with_search(self, text: Optional[str]) -> "ItemFilter":
        return replace(self, search_text=text or None)

    def matches_search(self, record: Record) -> bool:
        if not self.search_text:
            return True
        q = self.search_text.lower()
        return any(q in (field or "").lower() for field in _search_fields(record))

    def matches(self, record: Record) -> bool:
        if not self.matches_search(record):
            return False
        if self.subject_id:
            if not isinstance(record, ScheduleItem) or _ref_id(record.subject) != self.subject_id:
                return False
        if self.teacher_id:
            if not isinstance(record, ScheduleItem) or _ref_id(record.teacher) != self.teacher_id:
                return False
        if self.event_type and getattr(record, "event_type", None) != self.event_type:
            return False
        if self.class_id and _ref_id(getattr(record, "class_ref", None)) != self.class_id:
            return False
        return True

    def apply(self, records: Sequence[Record]) -> Tuple[Record, ...]:
        """New filtered tuple; the input is never modified."""
        if self.is_empty:
            return tuple(records or ())
        return tuple(r for r in records or () if self.matches(r))

    def apply_grouped(self, grouped: Mapping[str, Sequence[Record]]) -> Dict[str, Tuple[Record, ...]]:
        """Filter a weekday-keyed mapping day by day; every weekday key is present."""
        out: Dict[str, Tuple[Record, ...]] = {}
        for day in WEEKDAYS_MON_FIRST:
            out[day] = self.apply((grouped or {}).get(day) or ())
        return out

    def as_dict(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for key in ("subject_id", "teacher_id", "event_type", "class_id", "search_text"):
            v = getattr(self, key)
            if v:
                out[key] = v
        return out

    @classmethod
    def from_mapping(cls, m: Optional[Mapping[str, Any]]) -> "ItemFilter":
        """Accepts host-side filter state: {subject, teacher, eventType, search, classId}."""
        if not m:
            return cls()

        def _get(*keys: str) -> Optional[str]:
            for k in keys:
                v = m.get(k)
                if isinstance(v, str) and v.strip():
                    return v.strip()
            return None

        return cls(
            subject_id=_get("subject_id", "subjectId", "subject"),
            teacher_id=_get("teacher_id", "teacherId", "teacher"),
            event_type=_get("event_type", "eventType", "type"),
            search_text=_get("search_text", "searchText", "search", "q"),
            class_id=_get("class_id", "classId", "class"),
        )

    @classmethod
    def parse(cls, expr: Optional[str]) -> "ItemFilter":
        """Parse `subject:ID teacher:ID type:exam class:ID free words`.

        Bare words (and unknown `key:value` tokens) are joined into the search
        text. Later keyed tokens override earlier ones.
        """
        expr = (expr or "").strip()
        if not expr:
            return cls()
        try:
            toks = shlex.split(expr, posix=True)
        except ValueError as e:
            raise FilterError(f"Could not parse filter (quoting/escaping error): {e}") from e

        fields: Dict[str, Optional[str]] = {}
        words: List[str] = []
        keyed = {
            "subject": "subject_id",
            "teacher": "teacher_id",
            "type": "event_type",
            "eventtype": "event_type",
            "class": "class_id",
        }
        for tok in toks:
            tok = tok.strip()
            if not tok:
                continue
            key, sep, value = tok.partition(":")
            target = keyed.get(key.lower()) if sep else None
            if target is None:
                words.append(tok)
                continue
            if not value:
                raise FilterError(f"{key}: requires a value")
            fields[target] = value

        return cls(search_text=" ".join(words) or None, **fields)


def filter_records(records: Sequence[Record], item_filter: Optional[ItemFilter]) -> Tuple[Record, ...]:
    return (item_filter or ItemFilter()).apply(records)


def filter_grouped(
    grouped: Mapping[str, Sequence[Record]], item_filter: Optional[ItemFilter]
) -> Dict[str, Tuple[Record, ...]]:
    return (item_filter or ItemFilter()).apply_grouped(grouped)


__all__ = [
    "FilterError",
    "ItemFilter",
    "filter_records",
    "filter_grouped",
]
