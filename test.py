# Smoke run against the live LLM backend and the configured cars.db.
from carquery.models import Aborted
from carquery.pipeline import Pipeline
import asyncio

question = "List cars priced under 10000 euros from 2015 onwards"
outcome = asyncio.run(Pipeline.from_settings().run(question))

if isinstance(outcome, Aborted):
    print("ABORTED:", outcome.kind.value, "at", outcome.stage.value, "-", outcome.error)
    print("SQL:", outcome.sql)
else:
    print("SQL:", outcome.sql)
    print("ROWS:", len(outcome.rows))
    for row in outcome.rows[:10]:
        print(row)
