"""Natural-language questions about the ledger.

Builds a bounded prompt from the most recent expenses, hands it to the
Gemini client and turns whatever comes back, answer or failure, into text
the UI can show as-is.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from models.expense import Expense
from services.errors import QueryError, QueryErrorKind
from utils.constants import AI_MAX_PROMPT_RECORDS
from utils.date_helpers import format_datetime

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = (
    "There are no expense records yet, so there is nothing to analyze. "
    "Log some expenses first and then ask me again!"
)

MISSING_KEY_MESSAGE = "No Gemini API key is configured. Add one in Settings."

PROMPT_TEMPLATE = """You are a professional bookkeeping assistant. These are the user's most recent expense records:

{records}
User question: {question}

Answer the question from the records above. When amounts need to be added up, compute them exactly. \
Keep the answer short and clear, and reply in the same language the question is written in."""


@dataclass
class QueryResult:
    answer: Optional[str] = None
    error: Optional[QueryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def display_text(self) -> str:
        return self.answer if self.ok else self.error.message


def format_expense_line(expense: Expense) -> str:
    line = (
        f"Date: {format_datetime(expense.date)}, Category: {expense.category_name}, "
        f"Amount: {expense.amount}"
    )
    if expense.note:
        line += f", Note: {expense.note}"
    return line


def build_prompt(
    expenses: Iterable[Expense],
    question: str,
    max_records: int = AI_MAX_PROMPT_RECORDS,
) -> str:
    """Return the full prompt, or NO_DATA_MESSAGE when there is nothing to send."""
    recent = sorted(expenses, key=lambda e: e.date, reverse=True)[:max(0, max_records)]
    if not recent:
        return NO_DATA_MESSAGE
    records = "".join(format_expense_line(e) + "\n" for e in recent)
    return PROMPT_TEMPLATE.format(records=records, question=question.strip())


def classify_http_status(status: int) -> QueryError:
    if status == 401:
        kind = QueryErrorKind.AUTH_FAILURE
    elif status == 403:
        kind = QueryErrorKind.PERMISSION_DENIED
    elif status == 404:
        kind = QueryErrorKind.NOT_FOUND
    elif status == 429:
        kind = QueryErrorKind.RATE_LIMITED
    elif 500 <= status <= 599:
        kind = QueryErrorKind.SERVER_ERROR
    else:
        return QueryError(
            QueryErrorKind.UNKNOWN, f"The AI service returned an error ({status}).", status=status
        )
    return QueryError(kind, status=status)


def _first_candidate(payload) -> dict:
    if not isinstance(payload, dict):
        return {}
    candidates = payload.get("candidates")
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        return candidates[0]
    return {}


def classify_response(payload) -> QueryResult:
    """Pick the generated text out of a generateContent payload, or explain why there is none."""
    candidate = _first_candidate(payload)
    content = candidate.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if isinstance(parts, list) and parts and isinstance(parts[0], dict):
        text = parts[0].get("text")
        if isinstance(text, str):
            return QueryResult(answer=text)

    finish_reason = candidate.get("finishReason")
    if finish_reason == "MAX_TOKENS":
        return QueryResult(error=QueryError(QueryErrorKind.TRUNCATED))
    if finish_reason == "SAFETY":
        return QueryResult(error=QueryError(QueryErrorKind.CONTENT_FILTERED))
    if isinstance(payload, dict) and (payload.get("promptFeedback") or {}).get("blockReason"):
        return QueryResult(error=QueryError(QueryErrorKind.CONTENT_FILTERED))

    logger.warning("Unrecognised AI response: %.500r", payload)
    return QueryResult(error=QueryError(QueryErrorKind.PARSE_FAILURE))


class QueryService:
    def __init__(self, ledger, client_factory, max_records: int = AI_MAX_PROMPT_RECORDS):
        """client_factory() returns a GeminiClient, or None when no API key is set."""
        self._ledger = ledger
        self._client_factory = client_factory
        self._max_records = max_records

    async def ask(self, question: str) -> str:
        """Answer a question; every QueryError ends up as a display string.

        Cancellation is not caught, so the caller can drop back to idle.
        """
        if not question or not question.strip():
            raise ValueError("Please enter a question.")
        expenses = self._ledger.list()
        if not expenses:
            return NO_DATA_MESSAGE
        client = self._client_factory()
        if client is None:
            return MISSING_KEY_MESSAGE

        prompt = build_prompt(expenses, question, self._max_records)
        try:
            payload = await client.generate(prompt)
        except QueryError as e:
            logger.warning("AI query failed (%s): %s", e.kind.value, e.message)
            return e.message
        result = classify_response(payload)
        if not result.ok:
            logger.warning("AI query unusable (%s)", result.error.kind.value)
        return result.display_text
