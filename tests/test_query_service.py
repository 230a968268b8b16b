import asyncio
from datetime import datetime, timedelta

import pytest

from models.expense import Expense
from services.errors import QueryError, QueryErrorKind
from services.query_service import (
    MISSING_KEY_MESSAGE,
    NO_DATA_MESSAGE,
    QueryService,
    build_prompt,
    classify_http_status,
    classify_response,
    format_expense_line,
)


class StubClient:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.payload


def _answer(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


def test_expense_line_format():
    e = Expense(date=datetime(2024, 4, 10, 8, 5), amount=85, category_name="早餐", note="蛋餅")
    assert format_expense_line(e) == "Date: 2024-04-10 08:05, Category: 早餐, Amount: 85, Note: 蛋餅"
    bare = Expense(date=datetime(2024, 4, 10, 8, 5), amount=85, category_name="早餐")
    assert format_expense_line(bare).endswith("Amount: 85")


def test_prompt_keeps_most_recent_records_newest_first():
    start = datetime(2024, 1, 1, 12, 0)
    expenses = [
        Expense(date=start + timedelta(days=i), amount=i + 1, category_name="午餐")
        for i in range(60)
    ]
    prompt = build_prompt(expenses, "  total?  ", max_records=50)
    lines = [l for l in prompt.splitlines() if l.startswith("Date: ")]
    assert len(lines) == 50
    assert lines[0].endswith("Amount: 60")
    assert lines[-1].endswith("Amount: 11")
    assert "User question: total?" in prompt


def test_prompt_for_empty_ledger_is_no_data_message():
    assert build_prompt([], "anything") == NO_DATA_MESSAGE


@pytest.mark.parametrize(
    "status, kind",
    [
        (401, QueryErrorKind.AUTH_FAILURE),
        (403, QueryErrorKind.PERMISSION_DENIED),
        (404, QueryErrorKind.NOT_FOUND),
        (429, QueryErrorKind.RATE_LIMITED),
        (500, QueryErrorKind.SERVER_ERROR),
        (503, QueryErrorKind.SERVER_ERROR),
        (418, QueryErrorKind.UNKNOWN),
    ],
)
def test_http_status_classification(status, kind):
    error = classify_http_status(status)
    assert error.kind is kind
    assert error.status == status
    assert error.message


def test_unknown_status_message_mentions_code():
    assert "418" in classify_http_status(418).message


def test_classify_response_extracts_text():
    result = classify_response(_answer("You spent NT$ 300."))
    assert result.ok
    assert result.display_text == "You spent NT$ 300."


@pytest.mark.parametrize(
    "payload, kind",
    [
        ({"candidates": [{"finishReason": "MAX_TOKENS", "content": {}}]}, QueryErrorKind.TRUNCATED),
        ({"candidates": [{"finishReason": "SAFETY"}]}, QueryErrorKind.CONTENT_FILTERED),
        ({"promptFeedback": {"blockReason": "OTHER"}}, QueryErrorKind.CONTENT_FILTERED),
        ({"candidates": []}, QueryErrorKind.PARSE_FAILURE),
        ("not a dict", QueryErrorKind.PARSE_FAILURE),
    ],
)
def test_classify_response_failures(payload, kind):
    result = classify_response(payload)
    assert not result.ok
    assert result.error.kind is kind
    assert result.display_text == result.error.message


def test_empty_ledger_never_calls_client(ledger):
    calls = []

    def factory():
        calls.append(1)
        return StubClient(_answer("x"))

    answer = asyncio.run(QueryService(ledger, factory).ask("how much?"))
    assert answer == NO_DATA_MESSAGE
    assert calls == []


def test_missing_key_message(ledger):
    ledger.append(100, "午餐")
    assert asyncio.run(QueryService(ledger, lambda: None).ask("how much?")) == MISSING_KEY_MESSAGE


def test_blank_question_is_rejected(ledger):
    with pytest.raises(ValueError):
        asyncio.run(QueryService(ledger, lambda: StubClient()).ask("   "))


def test_answer_is_returned(ledger):
    ledger.append(100, "午餐")
    client = StubClient(_answer("NT$ 100 on lunch."))
    answer = asyncio.run(QueryService(ledger, lambda: client).ask("lunch?"))
    assert answer == "NT$ 100 on lunch."
    assert "Category: 午餐, Amount: 100" in client.prompts[0]


def test_client_errors_become_messages(ledger):
    ledger.append(100, "午餐")
    client = StubClient(error=QueryError(QueryErrorKind.RATE_LIMITED))
    answer = asyncio.run(QueryService(ledger, lambda: client).ask("lunch?"))
    assert answer == QueryError(QueryErrorKind.RATE_LIMITED).message


def test_cancellation_propagates(ledger):
    ledger.append(100, "午餐")

    class SlowClient:
        async def generate(self, prompt):
            await asyncio.sleep(10)

    async def run():
        task = asyncio.create_task(QueryService(ledger, SlowClient).ask("lunch?"))
        await asyncio.sleep(0)
        task.cancel()
        await task

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(run())
