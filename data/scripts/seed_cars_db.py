import argparse
import csv
import logging
import sqlite3
import sys
from pathlib import Path

from carquery.schema import CARS_COLUMNS, CARS_DDL, list_columns

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

SAMPLE_ROWS = [
    (1, "Volkswagen", "Golf", 2016, 98000, 9500.0, 0, "petrol", "manual"),
    (2, "BMW", "320d", 2018, 120500, 17900.0, 1, "diesel", "automatic"),
    (3, "Toyota", "Yaris", 2014, 76000, 7200.0, 0, "hybrid", "automatic"),
    (4, "Renault", "Clio", 2017, 64000, 8900.0, 0, "petrol", "manual"),
    (5, "Tesla", "Model 3", 2021, 35000, 32500.0, 0, "electric", "automatic"),
    (6, "Skoda", "Octavia", 2015, 158000, 8400.0, 1, "diesel", "manual"),
]

def load_csv(path: Path) -> list[tuple]:
    """Reads rows keyed by the cars column names; extra columns are ignored."""
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = [c for c in CARS_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"CSV is missing columns: {', '.join(missing)}")
        return [tuple(rec[c] or None for c in CARS_COLUMNS) for rec in reader]

def main():
    parser = argparse.ArgumentParser(description="Create the cars SQLite database used by the query service.")
    parser.add_argument("--db", type=str, default="cars.db", help="Output database file.")
    parser.add_argument("--csv", type=str, default=None, help="Optional CSV with one row per car.")
    parser.add_argument("--force", action="store_true", help="Replace an existing database file.")
    args = parser.parse_args()

    db_path = Path(args.db)
    if db_path.exists():
        if not args.force:
            logger.error(f"{db_path} already exists (use --force to replace it)")
            sys.exit(1)
        db_path.unlink()

    try:
        rows = load_csv(Path(args.csv)) if args.csv else SAMPLE_ROWS
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read CSV: {e}")
        sys.exit(1)

    placeholders = ", ".join("?" for _ in CARS_COLUMNS)
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(CARS_DDL)
        conn.executemany(
            f"INSERT INTO cars ({', '.join(CARS_COLUMNS)}) VALUES ({placeholders})", rows
        )
        conn.commit()
        logger.info(f"Columns: {', '.join(list_columns(conn))}")
    finally:
        conn.close()

    logger.info(f"Wrote {len(rows)} row(s) to {db_path}")

if __name__ == "__main__":
    main()
