# carquery/models.py
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

ResultRow = dict[str, Any]


class CandidateStatement(BaseModel):
    """SQL text returned by the synthesizer; untrusted until classified."""
    model_config = ConfigDict(frozen=True)

    raw: str

    @property
    def normalized(self) -> str:
        return self.raw.strip().upper()


class AcceptedStatement(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class Accepted(BaseModel):
    model_config = ConfigDict(frozen=True)

    statement: AcceptedStatement


class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str
    offending_token: Optional[str] = None

    @property
    def message(self) -> str:
        if self.offending_token:
            return f"{self.reason}: {self.offending_token}"
        return self.reason


SafetyVerdict = Union[Accepted, Rejected]


class Stage(str, Enum):
    RECEIVED = "received"
    SYNTHESIZED = "synthesized"
    VALIDATED = "validated"


class FailureKind(str, Enum):
    INPUT = "input"
    BACKEND = "backend"
    UNSAFE_SQL = "unsafe_sql"
    QUERY_FAILED = "query_failed"
    STORE_UNAVAILABLE = "store_unavailable"


class Responded(BaseModel):
    model_config = ConfigDict(frozen=True)

    sql: str
    rows: list[ResultRow]


class Aborted(BaseModel):
    """
    Terminal failure of a single request.
    `sql` is only set once a statement exists (rejection/execution failures).
    """
    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    stage: Stage
    reason: str
    detail: Optional[str] = None
    sql: Optional[str] = None

    @property
    def error(self) -> str:
        return f"{self.reason}: {self.detail}" if self.detail else self.reason

    def to_payload(self) -> dict:
        payload: dict[str, Any] = {"error": self.error}
        if self.sql is not None:
            payload["sql"] = self.sql
        return payload


Outcome = Union[Responded, Aborted]

REASON_UNSAFE_SQL = "unsafe SQL"


def sql_heading(error: Optional[str]) -> str:
    """Heading for the SQL shown next to an outcome, chosen from its `error` field."""
    if not error:
        return "Generated SQL"
    if error.startswith(REASON_UNSAFE_SQL):
        return "Refused SQL"
    # passed the gate, then failed in the store
    return "Failed SQL"


# ---------- Boundary I/O ----------

class QueryIn(BaseModel):
    question: str = ""


class SqlIn(BaseModel):
    sql: str = ""


class QueryOut(BaseModel):
    sql: str
    rows: list[ResultRow]


class ErrorOut(BaseModel):
    error: str
    sql: Optional[str] = None
