# carquery/main.py
import logging

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from .config import settings
from .models import Aborted, ErrorOut, FailureKind, QueryIn, QueryOut, ResultRow, SqlIn
from .pipeline import Pipeline

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="Cars NL2SQL")

STATUS_BY_KIND = {
    FailureKind.INPUT: 400,
    FailureKind.UNSAFE_SQL: 400,
    FailureKind.BACKEND: 500,
    FailureKind.QUERY_FAILED: 500,
    FailureKind.STORE_UNAVAILABLE: 500,
}
ERROR_RESPONSES = {400: {"model": ErrorOut}, 500: {"model": ErrorOut}}

def get_pipeline() -> Pipeline:
    return Pipeline.from_settings()

def _error_response(outcome: Aborted) -> JSONResponse:
    return JSONResponse(status_code=STATUS_BY_KIND[outcome.kind], content=outcome.to_payload())

@app.get("/health")
def health():
    return {"status": "ok"}

@app.post("/nl-query", response_model=QueryOut, responses=ERROR_RESPONSES)
async def nl_query(q: QueryIn, pipeline: Pipeline = Depends(get_pipeline)):
    outcome = await pipeline.run(q.question)
    if isinstance(outcome, Aborted):
        return _error_response(outcome)
    return {"sql": outcome.sql, "rows": outcome.rows}

@app.post("/query", response_model=list[ResultRow], responses=ERROR_RESPONSES)
def query(q: SqlIn, pipeline: Pipeline = Depends(get_pipeline)):
    outcome = pipeline.run_sql(q.sql)
    if isinstance(outcome, Aborted):
        return _error_response(outcome)
    return outcome.rows
