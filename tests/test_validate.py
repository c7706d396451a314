import pytest

from carquery.models import Accepted, Rejected
from carquery.validate import BLOCKED_KEYWORDS, classify, strip_code_fences


def test_plain_select_is_accepted():
    verdict = classify("  SELECT * FROM cars WHERE price_eur < 10000  ")
    assert isinstance(verdict, Accepted)
    assert verdict.statement.text == "SELECT * FROM cars WHERE price_eur < 10000"


def test_with_query_is_accepted():
    sql = "WITH cheap AS (SELECT * FROM cars WHERE price_eur < 9000) SELECT brand FROM cheap"
    assert isinstance(classify(sql), Accepted)


def test_lowercase_select_keeps_original_text():
    verdict = classify("select brand from cars")
    assert isinstance(verdict, Accepted)
    assert verdict.statement.text == "select brand from cars"


def test_fenced_sql_is_unwrapped_and_accepted():
    verdict = classify("```sql\nSELECT id FROM cars\n```")
    assert isinstance(verdict, Accepted)
    assert verdict.statement.text == "SELECT id FROM cars"


def test_fence_stripping_only_touches_boundaries():
    assert strip_code_fences("```\nSELECT 1\n```") == "SELECT 1"
    assert strip_code_fences("SELECT '```' AS tick") == "SELECT '```' AS tick"


@pytest.mark.parametrize("text", ["", "   ", "```sql\n```", None])
def test_empty_statement(text):
    verdict = classify(text)
    assert isinstance(verdict, Rejected)
    assert verdict.reason == "empty statement"


@pytest.mark.parametrize("sql", [
    "PRAGMA table_info(cars)",
    "EXPLAIN SELECT * FROM cars",
    "ATTACH DATABASE 'x.db' AS x",
    "-- comment\nSELECT 1",
    "SELECTED FROM cars",
])
def test_non_read_leading_token_is_rejected(sql):
    verdict = classify(sql)
    assert isinstance(verdict, Rejected)
    assert verdict.reason == "not a read statement"


def test_drop_reports_forbidden_keyword():
    verdict = classify("DROP TABLE cars;")
    assert isinstance(verdict, Rejected)
    assert verdict.message == "forbidden keyword: DROP"
    assert verdict.offending_token == "DROP"


@pytest.mark.parametrize("kw", BLOCKED_KEYWORDS)
def test_blocked_keyword_anywhere_is_rejected(kw):
    for sql in (
        f"SELECT * FROM cars; {kw} cars",
        f"SELECT * FROM (SELECT id FROM cars WHERE 1 = 1 /* {kw.lower()} */) t",
        f"WITH x AS ({kw} FROM cars) SELECT * FROM x",
    ):
        verdict = classify(sql)
        assert isinstance(verdict, Rejected), sql
        assert verdict.offending_token == kw


def test_keyword_inside_string_literal_is_still_rejected():
    verdict = classify("SELECT * FROM cars WHERE model = 'drop'")
    assert isinstance(verdict, Rejected)
    assert verdict.message == "forbidden keyword: DROP"


@pytest.mark.parametrize("sql", [
    "SELECT updated_at FROM cars",
    "SELECT created_by, dropped, insert_ts, merged_flag FROM cars",
    "SELECT replacement_cost FROM cars",
])
def test_identifiers_containing_keywords_are_allowed(sql):
    assert isinstance(classify(sql), Accepted)


def test_acceptance_is_stable_under_reclassification():
    first = classify("```sql\nSELECT brand, COUNT(*) FROM cars GROUP BY brand\n```")
    again = classify(first.statement.text)
    assert isinstance(again, Accepted)
    assert again.statement.text == first.statement.text


def test_strict_mode_rejects_multiple_statements():
    verdict = classify("SELECT 1; SELECT 2", strict=True)
    assert isinstance(verdict, Rejected)
    assert verdict.reason == "multiple statements"
    assert isinstance(classify("SELECT 1; SELECT 2"), Accepted)


def test_strict_mode_accepts_single_query():
    assert isinstance(classify("WITH c AS (SELECT 1 AS n) SELECT n FROM c;", strict=True), Accepted)


def test_candidate_normalized_view_is_inspection_only():
    from carquery.models import CandidateStatement

    candidate = CandidateStatement(raw="  select id from cars ")
    assert candidate.normalized == "SELECT ID FROM CARS"
    assert candidate.raw == "  select id from cars "


@pytest.mark.parametrize("text, expected", [
    ("```SELECT id FROM cars```", "SELECT id FROM cars"),
    ("```select id from cars\n```", "select id from cars"),
    ("```WITH c AS (SELECT 1) SELECT * FROM c```", "WITH c AS (SELECT 1) SELECT * FROM c"),
    ("```sql SELECT id FROM cars```", "SELECT id FROM cars"),
    ("```SQL\nSELECT id FROM cars\n```", "SELECT id FROM cars"),
])
def test_inline_fence_keeps_leading_keyword(text, expected):
    verdict = classify(text)
    assert isinstance(verdict, Accepted)
    assert verdict.statement.text == expected
