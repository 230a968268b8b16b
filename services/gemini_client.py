import logging

import httpx

from services.errors import QueryError, QueryErrorKind
from services.query_service import classify_http_status
from utils.constants import AI_TIMEOUT_SECONDS, GEMINI_BASE_URL, GEMINI_DEFAULT_MODEL, GENERATION_CONFIG

logger = logging.getLogger(__name__)


class GeminiClient:
    """One-shot generateContent calls against the Gemini REST API."""

    def __init__(
        self,
        api_key: str,
        model: str = GEMINI_DEFAULT_MODEL,
        timeout: float = AI_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{GEMINI_BASE_URL}/{self._model}:generateContent"

    def build_body(self, prompt: str) -> dict:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": dict(GENERATION_CONFIG),
        }

    async def generate(self, prompt: str) -> dict:
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            try:
                response = await client.post(
                    self.url,
                    json=self.build_body(prompt),
                    headers={
                        "x-goog-api-key": self._api_key,
                        "Content-Type": "application/json",
                    },
                )
            except httpx.TimeoutException as e:
                raise QueryError(QueryErrorKind.TIMEOUT) from e
            except httpx.HTTPError as e:
                raise QueryError(QueryErrorKind.NETWORK_FAILURE) from e

        if response.status_code != 200:
            logger.warning("Gemini API error (%s): %.500s", response.status_code, response.text)
            raise classify_http_status(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise QueryError(QueryErrorKind.PARSE_FAILURE) from e
