import datetime

import pytest

from ingestor.query import (
    FilterBuilder,
    LogField,
    MatchKind,
    QueryEngine,
    TextQuery,
    format_timestamp,
    parse_date,
)
from ingestor.repository import InMemoryLogRepository

UTC = datetime.timezone.utc


def _doc(id, **fields):
    doc = {"id": id}
    doc.update(fields)
    return doc


@pytest.fixture
def repo():
    r = InMemoryLogRepository()
    r.insert_one(_doc("1", level="error", message="disk full on /var", resourceId="r1",
                      traceId="t1", spanId="s1", commit="c1",
                      metadata={"parentResourceId": "p1"},
                      timestamp="2024-01-15T10:00:00.000Z"))
    r.insert_one(_doc("2", level="info", message="Disk check passed", resourceId="r2",
                      traceId="t2", spanId="s2", commit="c2",
                      metadata={"parentResourceId": "p1"},
                      timestamp="2024-02-01T00:00:00.000Z"))
    r.insert_one(_doc("3", message="no level here", resourceId="r3",
                      timestamp="2024-01-01T00:00:00.000Z"))
    return r


class SpyRepository(InMemoryLogRepository):
    def __init__(self):
        super().__init__()
        self.filters = []

    def find(self, query_filter):
        self.filters.append(query_filter)
        return super().find(query_filter)


def _ids(docs):
    return [d["id"] for d in docs]


# ───────────────────────── builder ─────────────────────────

def test_unset_equality_becomes_absent_clause_by_default():
    f = FilterBuilder().equals(LogField.LEVEL, None).build()
    assert [(c.field, c.kind) for c in f.clauses] == [(LogField.LEVEL, MatchKind.ABSENT)]


def test_unset_equality_omitted_when_configured():
    assert FilterBuilder(omit_unset=True).equals(LogField.LEVEL, None).build().clauses == ()


def test_equals_if_set_drops_none_and_empty_string():
    f = (
        FilterBuilder()
        .equals_if_set(LogField.LEVEL, None)
        .equals_if_set(LogField.MESSAGE, "")
        .equals_if_set(LogField.RESOURCE_ID, "r1")
        .build()
    )
    assert f.fields() == [LogField.RESOURCE_ID]


def test_range_needs_both_bounds():
    assert FilterBuilder().between(LogField.TIMESTAMP, "2024-01-01", None).build().clauses == ()
    assert FilterBuilder().between(LogField.TIMESTAMP, "", "2024-01-31").build().clauses == ()


def test_text_skipped_when_term_empty():
    assert FilterBuilder().text("").text(None).build().clauses == ()


def test_nested_field_path():
    assert LogField.PARENT_RESOURCE_ID.path == ("metadata", "parentResourceId")


# ───────────────────────── helpers ─────────────────────────

def test_parse_date_variants():
    assert parse_date("2024-01-31") == datetime.datetime(2024, 1, 31, tzinfo=UTC)
    assert parse_date("2024-01-31T10:30:00Z") == datetime.datetime(2024, 1, 31, 10, 30, tzinfo=UTC)
    assert parse_date("2024-01-31T12:30:00+02:00") == datetime.datetime(2024, 1, 31, 10, 30, tzinfo=UTC)
    assert parse_date("not a date") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_format_timestamp_is_utc_millis_with_z():
    dt = datetime.datetime(2024, 1, 15, 12, 0, 0, 123456, tzinfo=datetime.timezone(datetime.timedelta(hours=2)))
    assert format_timestamp(dt) == "2024-01-15T10:00:00.123Z"


def test_text_query_words_phrases_and_negation():
    tq = TextQuery.parse('disk "out of memory" -ignored')
    assert tq.phrases() == ["disk", "out of memory"]
    assert tq.negated() == ["ignored"]

    assert tq.matches("DISK full")
    assert tq.matches("process ran out of memory")
    assert not tq.matches("memory out of range")
    assert not tq.matches("disk full, ignored")
    assert not tq.matches("diskette")


def test_quoted_phrase_is_an_alternative_not_a_requirement():
    tq = TextQuery.parse('"out of memory" disk')
    assert tq.matches("disk full")
    assert tq.matches("out of memory")
    assert not tq.matches("cpu busy")


# ───────────────────────── engine ─────────────────────────

def test_search_by_level_only(repo):
    assert _ids(QueryEngine(repo).search("error", None)) == ["1"]


def test_search_without_level_matches_records_lacking_level(repo):
    assert _ids(QueryEngine(repo).search(None, None)) == ["3"]


def test_search_without_level_omit_policy_matches_everything(repo):
    assert _ids(QueryEngine(repo, omit_unset=True).search(None, None)) == ["1", "2", "3"]


def test_search_combines_level_and_full_text(repo):
    engine = QueryEngine(repo, omit_unset=True)
    assert _ids(engine.search(None, "disk")) == ["1", "2"]
    assert _ids(engine.search("info", "disk")) == ["2"]
    assert engine.search("error", "passed") == []


def test_by_message_is_case_insensitive_substring(repo):
    engine = QueryEngine(repo)
    assert _ids(engine.by_message("DISK")) == ["1", "2"]
    assert _ids(engine.by_message("full on")) == ["1"]
    assert engine.by_message("nothing like this") == []


def test_by_message_unset_matches_all_messages(repo):
    assert _ids(QueryEngine(repo).by_message(None)) == ["1", "2", "3"]


def test_by_message_treats_input_literally(repo):
    assert QueryEngine(repo).by_message(".*") == []


@pytest.mark.parametrize("method, value, expected", [
    ("by_resource_id", "r2", ["2"]),
    ("by_trace_id", "t1", ["1"]),
    ("by_span_id", "s2", ["2"]),
    ("by_commit", "c1", ["1"]),
    ("by_parent_resource_id", "p1", ["1", "2"]),
    ("by_trace_id", None, ["3"]),
])
def test_single_field_lookups(repo, method, value, expected):
    assert _ids(getattr(QueryEngine(repo), method)(value)) == expected


def test_single_field_lookup_is_exact(repo):
    assert QueryEngine(repo).by_resource_id("R1") == []


def test_timestamp_range_is_inclusive_and_excludes_later_records(repo):
    engine = QueryEngine(repo)
    docs = engine.by_timestamp_range(start_date="2024-01-01", end_date="2024-01-31")
    assert _ids(docs) == ["1", "3"]

    docs = engine.by_timestamp_range(start_date="2024-01-15T10:00:00Z", end_date="2024-02-01")
    assert _ids(docs) == ["1", "2"]


def test_timestamp_range_with_field_filters(repo):
    engine = QueryEngine(repo)
    docs = engine.by_timestamp_range(
        level="info", parent_resource_id="p1", start_date="2024-01-01", end_date="2024-12-31",
    )
    assert _ids(docs) == ["2"]


def test_timestamp_range_message_is_exact_match(repo):
    engine = QueryEngine(repo)
    assert engine.by_timestamp_range(message="disk") == []
    assert _ids(engine.by_timestamp_range(message="no level here")) == ["3"]


def test_timestamp_range_without_filters_returns_everything(repo):
    assert _ids(QueryEngine(repo).by_timestamp_range(level="", message="")) == ["1", "2", "3"]


def test_malformed_dates_give_empty_result(repo):
    assert QueryEngine(repo).by_timestamp_range(start_date="yesterday", end_date="2024-12-31") == []


def test_each_operation_runs_one_find():
    spy = SpyRepository()
    engine = QueryEngine(spy)
    engine.search("error", "disk")
    engine.by_message("x")
    engine.by_timestamp_range(level="error", start_date="2024-01-01", end_date="2024-01-31")
    assert len(spy.filters) == 3
    assert [c.kind for c in spy.filters[0].clauses] == [MatchKind.EQUALS, MatchKind.TEXT]
    assert [c.kind for c in spy.filters[2].clauses] == [MatchKind.EQUALS, MatchKind.RANGE]


def test_no_match_is_empty_list(repo):
    assert QueryEngine(repo).by_commit("nope") == []
