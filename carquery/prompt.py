# carquery/prompt.py
from .schema import CARS_TABLE, get_schema_summary

SYSTEM_PROMPT = (
    "You are a SQL generator for a used cars database.\n"
    f"The database has a table named {CARS_TABLE} with columns:\n"
    f"{get_schema_summary()}.\n"
    "\n"
    "Rules:\n"
    "- ONLY output raw SQL.\n"
    "- The SQL MUST start with SELECT or WITH.\n"
    "- NEVER output DELETE, UPDATE, INSERT, DROP, ALTER, TRUNCATE, CREATE, REPLACE, MERGE.\n"
    "- Do NOT output markdown, backticks, or explanations.\n"
    "- Respond with SQL only."
)

def build_messages(user_question: str) -> list[dict[str, str]]:
    """
    Single-turn chat payload: the fixed system instruction plus the question.
    No history is carried between requests.
    """
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_question},
    ]
