# carquery/nl2sql.py
import logging
from typing import Protocol

import httpx

from .config import settings
from .errors import BackendError, EmptyResponseError
from .models import CandidateStatement
from .prompt import build_messages
from .validate import strip_code_fences

logger = logging.getLogger(__name__)


class Synthesizer(Protocol):
    async def synthesize(self, question: str) -> CandidateStatement: ...


class ChatCompletionSynthesizer:
    """
    Turns a question into candidate SQL through an OpenAI-compatible
    /chat/completions endpoint. One request per question: no history,
    no retry, no streaming. The result is untrusted and must be classified.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        temperature: float = 0.0,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "ChatCompletionSynthesizer":
        return cls(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            timeout=settings.llm_timeout,
        )

    async def synthesize(self, question: str) -> CandidateStatement:
        if not self.api_key:
            raise BackendError("Missing LLM_API_KEY")

        url = f"{self.base_url}/chat/completions"
        payload = {
            "model": self.model,
            "messages": build_messages(question),
            "temperature": self.temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                resp = await client.post(url, json=payload, headers=headers)
            except httpx.HTTPError as e:
                raise BackendError(f"LLM backend unreachable: {e}") from e

        if resp.is_error:
            raise BackendError(f"LLM API error ({resp.status_code}): {resp.text}")

        try:
            data = resp.json()
        except ValueError as e:
            raise EmptyResponseError("LLM API returned a non-JSON body") from e

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            content = ""

        # clean common LLM artifacts
        sql = strip_code_fences(content)
        if not sql:
            raise EmptyResponseError("LLM returned no SQL")

        logger.info("Generated SQL: %s", sql)
        return CandidateStatement(raw=sql)
