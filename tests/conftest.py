import sqlite3

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from carquery.db import QueryExecutor, SQLiteStore
from carquery.errors import BackendError
from carquery.main import app, get_pipeline
from carquery.models import CandidateStatement
from carquery.pipeline import Pipeline
from carquery.schema import CARS_COLUMNS, CARS_DDL

CARS = [
    (1, "Volkswagen", "Golf", 2016, 98000, 9500.0, 0, "petrol", "manual"),
    (2, "BMW", "320d", 2018, 120500, 17900.0, 1, "diesel", "automatic"),
    (3, "Toyota", "Yaris", 2014, 76000, 7200.0, 0, "hybrid", "automatic"),
    (4, "Renault", "Clio", 2017, 64000, 8900.0, 0, "petrol", "manual"),
    (5, "Tesla", "Model 3", 2021, 35000, 32500.0, 0, "electric", "automatic"),
    (6, "Skoda", "Octavia", 2015, 158000, 8400.0, 1, "diesel", "manual"),
]


class FakeSynthesizer:
    """Returns canned SQL (or raises) and records every question it was asked."""

    def __init__(self, sql: str = "", error: Exception | None = None):
        self.sql = sql
        self.error = error
        self.questions = []

    async def synthesize(self, question: str) -> CandidateStatement:
        self.questions.append(question)
        if self.error:
            raise self.error
        return CandidateStatement(raw=self.sql)


class RecordingExecutor(QueryExecutor):
    def __init__(self, store):
        super().__init__(store)
        self.calls = []

    def execute(self, statement):
        self.calls.append(statement.text)
        return super().execute(statement)


# Fresh on-disk snapshot per test
@pytest.fixture
def cars_db(tmp_path):
    path = tmp_path / "cars.db"
    conn = sqlite3.connect(path)
    try:
        conn.execute(CARS_DDL)
        conn.executemany(
            f"INSERT INTO cars ({', '.join(CARS_COLUMNS)}) VALUES ({', '.join('?' for _ in CARS_COLUMNS)})",
            CARS,
        )
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def store(cars_db):
    return SQLiteStore(cars_db)


@pytest.fixture
def executor(store):
    return RecordingExecutor(store)


@pytest.fixture
def make_pipeline(executor):
    def _make(sql: str = "", error: BackendError | None = None, strict: bool = False):
        return Pipeline(FakeSynthesizer(sql, error), executor, strict=strict)
    return _make


# Client whose pipeline is swapped per test via `use_pipeline`
@pytest_asyncio.fixture(scope="function")
async def client():
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def use_pipeline():
    def _use(pipeline: Pipeline):
        app.dependency_overrides[get_pipeline] = lambda: pipeline
        return pipeline
    return _use
