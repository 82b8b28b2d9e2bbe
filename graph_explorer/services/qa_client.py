"""
Client for the question-answering service.

The service takes a natural-language question and answers with prose,
reasoning and evidence. It returns no graph structure; the explorer
pairs its answer with a locally resolved view.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from graph_explorer.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class QAServiceError(Exception):
    """Raised when the question-answering service fails or answers badly."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QAAnswer(BaseModel):
    """Answer returned by the question-answering service."""

    answer: str | None = None
    reasoning: str | None = None
    evidence: list[Any] = Field(default_factory=list)
    confidence: float | None = None


class QAClient:
    """
    Async HTTP client for the question-answering endpoint.

    One httpx.AsyncClient is kept for the lifetime of the object; call
    close() on shutdown.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        auth = httpx.BasicAuth(username, password) if username and password else None
        self._client = httpx.AsyncClient(
            auth=auth, timeout=httpx.Timeout(timeout), transport=transport
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> QAClient:
        settings = settings or get_settings()
        return cls(
            settings.qa_endpoint,
            username=settings.qa_username,
            password=settings.qa_password,
            timeout=settings.qa_timeout,
        )

    async def ask(self, query: str) -> QAAnswer:
        """
        Ask the service a question.

        Args:
            query: Natural-language question

        Returns:
            Parsed QAAnswer

        Raises:
            ValueError: If the query is empty
            QAServiceError: On transport failure, non-2xx status, a body
                that is not a valid answer, or an explicit error payload
        """
        question = query.strip()
        if not question:
            raise ValueError("Query must not be empty")

        logger.info(f"Sending question to QA service: {question[:80]}")
        try:
            response = await self._client.post(self.endpoint, json={"question": question})
        except httpx.HTTPError as e:
            raise QAServiceError(f"QA service unreachable: {e}") from e

        if response.is_error:
            raise QAServiceError(
                f"QA service returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise QAServiceError("QA service returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise QAServiceError("QA service returned an unexpected body")
        if body.get("error"):
            raise QAServiceError(f"QA service error: {body['error']}")

        try:
            answer = QAAnswer.model_validate(body)
        except ValidationError as e:
            raise QAServiceError(f"QA service returned a malformed answer: {e}") from e

        logger.info(f"QA service answered (confidence={answer.confidence})")
        return answer

    async def close(self) -> None:
        await self._client.aclose()
