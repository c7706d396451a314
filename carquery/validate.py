# carquery/validate.py
import logging
import re

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from .models import Accepted, AcceptedStatement, CandidateStatement, Rejected, SafetyVerdict

logger = logging.getLogger(__name__)

# Scan order is the report order when several keywords are present.
BLOCKED_KEYWORDS = (
    "DELETE", "UPDATE", "INSERT", "DROP", "ALTER",
    "TRUNCATE", "CREATE", "REPLACE", "MERGE",
)
_BLOCKED_RES = {kw: re.compile(rf"\b{kw}\b") for kw in BLOCKED_KEYWORDS}

_READ_PREFIX = re.compile(r"(SELECT|WITH)\b")
_LEADING_WORD = re.compile(r"[A-Z_]+")
# A language tag only counts when it sits alone on the fence line (or is "sql").
_OPEN_FENCE = re.compile(r"^```(?:[A-Za-z0-9_+-]*[ \t]*\r?\n|sql\b)?", re.IGNORECASE)
_CLOSE_FENCE = re.compile(r"```$")

REASON_EMPTY = "empty statement"
REASON_NOT_READ = "not a read statement"
REASON_FORBIDDEN = "forbidden keyword"
REASON_UNPARSEABLE = "unparseable statement"
REASON_MULTIPLE = "multiple statements"

def strip_code_fences(s: str) -> str:
    """Drop a leading ```lang fence and a trailing ``` fence; never touches mid-text."""
    s = s.strip()
    s = _OPEN_FENCE.sub("", s, count=1).strip()
    s = _CLOSE_FENCE.sub("", s, count=1)
    return s.strip()

def _leading_rejection(sql_upper: str) -> Rejected | None:
    if _READ_PREFIX.match(sql_upper):
        return None
    m = _LEADING_WORD.match(sql_upper)
    if m and m.group(0) in _BLOCKED_RES:
        return Rejected(reason=REASON_FORBIDDEN, offending_token=m.group(0))
    return Rejected(reason=REASON_NOT_READ)

def _contains_blocked(sql_upper: str) -> str | None:
    for kw in BLOCKED_KEYWORDS:
        if _BLOCKED_RES[kw].search(sql_upper):
            return kw
    return None

def _structural_rejection(sql: str) -> Rejected | None:
    try:
        statements = [s for s in sqlglot.parse(sql, read="sqlite") if s is not None]
    except SqlglotError:
        return Rejected(reason=REASON_UNPARSEABLE)
    if not statements:
        return Rejected(reason=REASON_UNPARSEABLE)
    if len(statements) > 1:
        return Rejected(reason=REASON_MULTIPLE)
    if not isinstance(statements[0], exp.Query):
        return Rejected(reason=REASON_NOT_READ)
    return None

def classify(text: str, strict: bool = False) -> SafetyVerdict:
    """
    Decides whether model-generated SQL may run against the read-only store.

    The check is textual: the statement must open with SELECT or WITH and must
    not contain any blocked keyword as a whole word anywhere, comments and
    string literals included. With `strict`, the text must also parse as
    exactly one query expression.

    Returns Accepted(statement) carrying the trimmed, fence-free text, or
    Rejected(reason, offending_token).
    """
    sql = strip_code_fences(text or "")
    if not sql:
        return Rejected(reason=REASON_EMPTY)

    sql_upper = CandidateStatement(raw=sql).normalized

    rejected = _leading_rejection(sql_upper)
    if rejected is None:
        blocked = _contains_blocked(sql_upper)
        if blocked:
            rejected = Rejected(reason=REASON_FORBIDDEN, offending_token=blocked)
    if rejected is None and strict:
        rejected = _structural_rejection(sql)

    if rejected is not None:
        logger.warning("Rejected SQL (%s): %s", rejected.message, sql)
        return rejected
    return Accepted(statement=AcceptedStatement(text=sql))
