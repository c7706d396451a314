from pydantic import BaseModel
from dotenv import load_dotenv
import os

# Load environment variables from .env file
load_dotenv()

class Settings(BaseModel):
    # Database (SQLite snapshot, opened read-only per request)
    db_path: str = os.getenv("CARS_DB_PATH", "cars.db")

    # Query safety
    gate_strict: bool = os.getenv("SQL_GATE_STRICT", "false").lower() in ("1", "true", "yes")

    # LLM (OpenAI-compatible chat completions, Groq by default)
    llm_base_url: str = os.getenv("LLM_BASE_URL", "https://api.groq.com/openai/v1")
    llm_api_key: str = os.getenv("LLM_API_KEY", os.getenv("GROQ_API_KEY", ""))
    llm_model: str = os.getenv("LLM_MODEL", "llama-3.3-70b-versatile")
    llm_temperature: float = float(os.getenv("LLM_TEMPERATURE", "0"))
    llm_timeout: float = float(os.getenv("LLM_TIMEOUT", "60"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

# Create a global settings object
settings = Settings()
