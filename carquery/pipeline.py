# carquery/pipeline.py
import logging

from fastapi.concurrency import run_in_threadpool

from .config import settings
from .db import QueryExecutor, SQLiteStore
from .errors import BackendError, ExecutionError, InputError, StoreUnavailableError
from .models import (
    Aborted,
    Accepted,
    FailureKind,
    REASON_UNSAFE_SQL,
    Outcome,
    Responded,
    Stage,
)
from .nl2sql import ChatCompletionSynthesizer, Synthesizer
from .validate import classify

logger = logging.getLogger(__name__)


def require_text(text: str, reason: str) -> str:
    """Trimmed `text`, or InputError(reason) when nothing is left."""
    text = (text or "").strip()
    if not text:
        raise InputError(reason)
    return text


class Pipeline:
    """
    question -> synthesize -> classify -> execute -> rows.

    Every failure ends the request as an Aborted outcome; nothing is raised
    to the caller and no state survives between calls.
    """

    def __init__(self, synthesizer: Synthesizer, executor: QueryExecutor, strict: bool = False):
        self.synthesizer = synthesizer
        self.executor = executor
        self.strict = strict

    @classmethod
    def from_settings(cls) -> "Pipeline":
        return cls(
            synthesizer=ChatCompletionSynthesizer.from_settings(),
            executor=QueryExecutor(SQLiteStore.from_settings()),
            strict=settings.gate_strict,
        )

    async def run(self, question: str) -> Outcome:
        try:
            question = require_text(question, "no question")
        except InputError as e:
            return Aborted(kind=FailureKind.INPUT, stage=Stage.RECEIVED, reason=e.message)

        # 1) LLM -> SQL
        try:
            candidate = await self.synthesizer.synthesize(question)
        except BackendError as e:
            logger.error("Synthesis failed: %s", e.message)
            return Aborted(
                kind=FailureKind.BACKEND,
                stage=Stage.RECEIVED,
                reason="backend error",
                detail=e.message,
            )

        # 2) validate + 3) execute, off the event loop: hydrating the store blocks
        return await run_in_threadpool(self._gate_and_execute, candidate.raw, Stage.SYNTHESIZED)

    def run_sql(self, sql: str) -> Outcome:
        """Same gate and executor for caller-supplied SQL (no synthesis step)."""
        try:
            require_text(sql, "no SQL")
        except InputError as e:
            return Aborted(kind=FailureKind.INPUT, stage=Stage.RECEIVED, reason=e.message)
        return self._gate_and_execute(sql, Stage.RECEIVED)

    def _gate_and_execute(self, sql: str, stage: Stage) -> Outcome:
        verdict = classify(sql, strict=self.strict)
        if not isinstance(verdict, Accepted):
            return Aborted(
                kind=FailureKind.UNSAFE_SQL,
                stage=stage,
                reason=REASON_UNSAFE_SQL,
                detail=verdict.message,
                sql=sql.strip(),
            )

        statement = verdict.statement
        try:
            rows = self.executor.execute(statement)
        except StoreUnavailableError as e:
            return Aborted(
                kind=FailureKind.STORE_UNAVAILABLE,
                stage=Stage.VALIDATED,
                reason="store unavailable",
                detail=e.message,
                sql=statement.text,
            )
        except ExecutionError as e:
            return Aborted(
                kind=FailureKind.QUERY_FAILED,
                stage=Stage.VALIDATED,
                reason="query failed",
                detail=e.message,
                sql=statement.text,
            )

        return Responded(sql=statement.text, rows=rows)
