# ── src/ingestor/query.py ────────────────────────────────────────────────────
"""
Query engine.

Request parameters are turned into a `QueryFilter`: an ordered tuple of
clauses over a fixed set of recognized fields, each with an explicit match
kind, ANDed together. The repository executes a filter exactly once.

Match kinds:
    EQUALS   exact value
    PATTERN  case-insensitive substring
    RANGE    inclusive [start, end] on a timestamp
    TEXT     full-text search over the text fields
    ABSENT   field missing or null

Unset parameters on `/logs` and the single-field lookups become ABSENT
clauses unless the engine is built with `omit_unset=True`; the time-range
lookup always drops unset or empty parameters.
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .repository import LogRepository

_logger = logging.getLogger(__name__)


class LogField(str, Enum):
    LEVEL              = "level"
    MESSAGE            = "message"
    RESOURCE_ID        = "resourceId"
    TRACE_ID           = "traceId"
    SPAN_ID            = "spanId"
    COMMIT             = "commit"
    PARENT_RESOURCE_ID = "metadata.parentResourceId"
    TIMESTAMP          = "timestamp"

    @property
    def path(self) -> Tuple[str, ...]:
        return tuple(self.value.split("."))


class MatchKind(str, Enum):
    EQUALS  = "equals"
    PATTERN = "pattern"
    RANGE   = "range"
    TEXT    = "text"
    ABSENT  = "absent"


# fields searched by TEXT clauses
TEXT_FIELDS: Tuple[LogField, ...] = (LogField.MESSAGE,)


# ───────────────────────── value helpers ─────────────────────────

def field_value(doc: Dict[str, Any], path: Tuple[str, ...]) -> Any:
    cur: Any = doc
    for part in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
    return cur


def parse_date(raw: Optional[str]) -> Optional[datetime.datetime]:
    """
    Parse an ISO-8601 date or date-time into an aware UTC datetime.
    Date-only and naive values are taken as UTC. Returns None when unparseable.
    """
    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.datetime.fromisoformat(s)
    except ValueError:
        try:
            d = datetime.date.fromisoformat(s)
        except ValueError:
            return None
        dt = datetime.datetime(d.year, d.month, d.day)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def format_timestamp(dt: datetime.datetime) -> str:
    """UTC ISO-8601 with milliseconds and a trailing Z; sorts lexically."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    utc = dt.astimezone(datetime.timezone.utc)
    return utc.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


_WORD_RE = re.compile(r"\w+", re.UNICODE)
_TERM_RE = re.compile(r'(-?)"([^"]*)"|(\S+)')


def _words(text: str) -> List[str]:
    return [w.lower() for w in _WORD_RE.findall(text)]


@dataclass(frozen=True)
class TextQuery:
    """A parsed full-text term: words and quoted phrases, with `-` negation."""

    include: Tuple[Tuple[str, ...], ...]
    exclude: Tuple[Tuple[str, ...], ...]

    @classmethod
    def parse(cls, term: str) -> "TextQuery":
        include: List[Tuple[str, ...]] = []
        exclude: List[Tuple[str, ...]] = []
        for m in _TERM_RE.finditer(term):
            if m.group(2) is not None:
                negate, words = m.group(1) == "-", tuple(_words(m.group(2)))
            else:
                token = m.group(3)
                negate = token.startswith("-") and len(token) > 1
                words = tuple(_words(token[1:] if negate else token))
            if not words:
                continue
            (exclude if negate else include).append(words)
        return cls(include=tuple(include), exclude=tuple(exclude))

    def phrases(self) -> List[str]:
        return [" ".join(p) for p in self.include]

    def negated(self) -> List[str]:
        return [" ".join(p) for p in self.exclude]

    def matches(self, text: str) -> bool:
        """
        True when no excluded term occurs and at least one included term does.
        A quoted phrase is one more alternative here, not a required term as
        in MongoDB `$text`, where a phrase must be present for a match.
        """
        words = _words(text)

        def contains(phrase: Tuple[str, ...]) -> bool:
            n = len(phrase)
            return any(tuple(words[i:i + n]) == phrase for i in range(len(words) - n + 1))

        if any(contains(p) for p in self.exclude):
            return False
        return any(contains(p) for p in self.include)


# ───────────────────────── filter ─────────────────────────

@dataclass(frozen=True)
class Clause:
    field: Optional[LogField]
    kind:  MatchKind
    value: Any = None

    def matches(self, doc: Dict[str, Any]) -> bool:
        if self.kind is MatchKind.TEXT:
            texts = (field_value(doc, f.path) for f in TEXT_FIELDS)
            return any(isinstance(t, str) and self.value.matches(t) for t in texts)

        actual = field_value(doc, self.field.path)
        if self.kind is MatchKind.ABSENT:
            return actual is None
        if self.kind is MatchKind.EQUALS:
            return actual == self.value
        if self.kind is MatchKind.PATTERN:
            return isinstance(actual, str) and self.value.lower() in actual.lower()
        if self.kind is MatchKind.RANGE:
            start, end = self.value
            if start is None or end is None:
                return False
            ts = parse_date(actual) if isinstance(actual, str) else None
            return ts is not None and start <= ts <= end
        raise ValueError(f"Unsupported match kind: {self.kind}")


@dataclass(frozen=True)
class QueryFilter:
    clauses: Tuple[Clause, ...] = ()

    def matches(self, doc: Dict[str, Any]) -> bool:
        return all(c.matches(doc) for c in self.clauses)

    def fields(self) -> List[Optional[LogField]]:
        return [c.field for c in self.clauses]


class FilterBuilder:
    """Accumulates clauses; `build()` returns the immutable filter."""

    def __init__(self, omit_unset: bool = False):
        self._omit_unset = omit_unset
        self._clauses: List[Clause] = []

    def equals(self, field: LogField, value: Optional[str]) -> "FilterBuilder":
        if value is None:
            if not self._omit_unset:
                self._clauses.append(Clause(field, MatchKind.ABSENT))
            return self
        self._clauses.append(Clause(field, MatchKind.EQUALS, value))
        return self

    def equals_if_set(self, field: LogField, value: Optional[str]) -> "FilterBuilder":
        if value is not None and value != "":
            self._clauses.append(Clause(field, MatchKind.EQUALS, value))
        return self

    def pattern(self, field: LogField, value: Optional[str]) -> "FilterBuilder":
        self._clauses.append(Clause(field, MatchKind.PATTERN, value or ""))
        return self

    def between(
        self,
        field: LogField,
        start: Optional[str],
        end: Optional[str],
    ) -> "FilterBuilder":
        if start and end:
            self._clauses.append(Clause(field, MatchKind.RANGE, (parse_date(start), parse_date(end))))
        return self

    def text(self, term: Optional[str]) -> "FilterBuilder":
        if term:
            self._clauses.append(Clause(None, MatchKind.TEXT, TextQuery.parse(term)))
        return self

    def build(self) -> QueryFilter:
        return QueryFilter(tuple(self._clauses))


# ───────────────────────── engine ─────────────────────────

class QueryEngine:
    def __init__(self, logs: LogRepository, omit_unset: bool = False):
        self._logs = logs
        self._omit_unset = omit_unset

    def _builder(self) -> FilterBuilder:
        return FilterBuilder(omit_unset=self._omit_unset)

    def _run(self, query_filter: QueryFilter) -> List[Dict[str, Any]]:
        _logger.debug("find logs: %s", query_filter)
        return self._logs.find(query_filter)

    def search(self, level: Optional[str], q: Optional[str]) -> List[Dict[str, Any]]:
        return self._run(self._builder().equals(LogField.LEVEL, level).text(q).build())

    def by_message(self, message: Optional[str]) -> List[Dict[str, Any]]:
        return self._run(self._builder().pattern(LogField.MESSAGE, message).build())

    def by_resource_id(self, resource_id: Optional[str]) -> List[Dict[str, Any]]:
        return self._run(self._builder().equals(LogField.RESOURCE_ID, resource_id).build())

    def by_trace_id(self, trace_id: Optional[str]) -> List[Dict[str, Any]]:
        return self._run(self._builder().equals(LogField.TRACE_ID, trace_id).build())

    def by_span_id(self, span_id: Optional[str]) -> List[Dict[str, Any]]:
        return self._run(self._builder().equals(LogField.SPAN_ID, span_id).build())

    def by_commit(self, commit: Optional[str]) -> List[Dict[str, Any]]:
        return self._run(self._builder().equals(LogField.COMMIT, commit).build())

    def by_parent_resource_id(self, parent_resource_id: Optional[str]) -> List[Dict[str, Any]]:
        return self._run(
            self._builder().equals(LogField.PARENT_RESOURCE_ID, parent_resource_id).build()
        )

    def by_timestamp_range(
        self,
        level: Optional[str] = None,
        message: Optional[str] = None,
        resource_id: Optional[str] = None,
        parent_resource_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        query_filter = (
            self._builder()
            .equals_if_set(LogField.LEVEL, level)
            .equals_if_set(LogField.MESSAGE, message)
            .equals_if_set(LogField.RESOURCE_ID, resource_id)
            .equals_if_set(LogField.PARENT_RESOURCE_ID, parent_resource_id)
            .between(LogField.TIMESTAMP, start_date, end_date)
            .build()
        )
        return self._run(query_filter)


__all__ = [
    "LogField",
    "MatchKind",
    "TEXT_FIELDS",
    "Clause",
    "QueryFilter",
    "FilterBuilder",
    "TextQuery",
    "QueryEngine",
    "parse_date",
    "format_timestamp",
    "field_value",
]
