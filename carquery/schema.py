# carquery/schema.py
import sqlite3

CARS_TABLE = "cars"
CARS_COLUMNS = (
    "id", "brand", "model", "year", "mileage_km",
    "price_eur", "accident_history", "fuel_type", "transmission",
)

CARS_DDL = """
CREATE TABLE IF NOT EXISTS cars (
    id INTEGER PRIMARY KEY,
    brand TEXT NOT NULL,
    model TEXT NOT NULL,
    year INTEGER,
    mileage_km INTEGER,
    price_eur REAL,
    accident_history INTEGER,
    fuel_type TEXT,
    transmission TEXT
)
"""


def get_schema_summary() -> str:
    """
    Returns the compact column listing used in the system prompt:
      "id, brand, model, ..., transmission"
    """
    return ", ".join(CARS_COLUMNS)


def list_columns(conn: sqlite3.Connection, table: str = CARS_TABLE) -> list[str]:
    """Column names of `table` as the store reports them, in ordinal order."""
    cur = conn.execute(f"PRAGMA table_info({table})")
    try:
        return [row[1] for row in cur.fetchall()]
    finally:
        cur.close()
