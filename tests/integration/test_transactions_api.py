"""
Integration tests for transaction posting and read-back.

These tests verify:
1. POST /v1/accounts/{id}/transactions - Apply credits and debits
2. Idempotent replays (status 200, Idempotent-Replayed header)
3. Error mapping (400, 401, 403, 404, 409, 500)
4. GET /v1/accounts/{id}/transactions - History, newest first
5. GET /v1/transactions/by-key/{key} - Read-back after a lost response
6. GET /v1/accounts/{id}/reconciliation - Log replay
7. Unhandled errors answer 500 with the request id still attached
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from odysseus.domain.entities import MAX_AMOUNT_CENTS
from odysseus.infrastructure.repositories import (
    PostgresAccountRepository,
    PostgresTransactionRepository,
)


def transactions_url(account: dict) -> str:
    return f"/v1/accounts/{account['id']}/transactions"


async def balance_of(client: AsyncClient, account: dict, user: dict) -> int:
    response = await client.get(f"/v1/accounts/{account['id']}", headers=user["headers"])
    assert response.status_code == 200
    return response.json()["balance_cents"]


# =============================================================================
# POST /v1/accounts/{id}/transactions
# =============================================================================

class TestPostTransaction:
    """Tests for applying credits and debits."""

    @pytest.mark.asyncio
    async def test_credit(self, client: AsyncClient, ada: dict, checking: dict):
        response = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 10000, "description": "Salary"},
            headers=ada["headers"],
        )

        assert response.status_code == 201
        assert response.headers["Idempotent-Replayed"] == "false"

        data = response.json()
        assert data["account_id"] == checking["id"]
        assert data["kind"] == "credit"
        assert data["amount_cents"] == 10000
        assert data["balance_after_cents"] == 10000
        assert data["description"] == "Salary"
        assert data["created_at"].endswith("Z")

        assert await balance_of(client, checking, ada) == 10000

    @pytest.mark.asyncio
    async def test_debit_after_credit(self, client: AsyncClient, ada: dict, checking: dict):
        await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 5000},
            headers=ada["headers"],
        )

        response = await client.post(
            transactions_url(checking),
            json={"kind": "debit", "amount_cents": 1500},
            headers=ada["headers"],
        )

        assert response.status_code == 201
        assert response.json()["balance_after_cents"] == 3500

    @pytest.mark.asyncio
    async def test_overdraft_rejected(self, client: AsyncClient, ada: dict, open_account):
        account = await open_account(ada, opening_balance_cents=2500)

        drained = await client.post(
            transactions_url(account),
            json={"kind": "debit", "amount_cents": 2500},
            headers=ada["headers"],
        )
        assert drained.json()["balance_after_cents"] == 0

        response = await client.post(
            transactions_url(account),
            json={"kind": "debit", "amount_cents": 1},
            headers=ada["headers"],
        )

        assert response.status_code == 409
        assert response.json()["error"] == "INSUFFICIENT_FUNDS"
        assert await balance_of(client, account, ada) == 0


# =============================================================================
# Idempotency
# =============================================================================

class TestIdempotentPosting:
    """Tests for idempotency keys on POST."""

    @pytest.mark.asyncio
    async def test_retry_with_same_key_is_replayed(
        self, client: AsyncClient, ada: dict, checking: dict
    ):
        body = {"kind": "credit", "amount_cents": 10000, "idempotency_key": "tx-1-retry"}

        first = await client.post(transactions_url(checking), json=body, headers=ada["headers"])
        second = await client.post(transactions_url(checking), json=body, headers=ada["headers"])

        assert first.status_code == 201
        assert first.headers["Idempotent-Replayed"] == "false"
        assert second.status_code == 200
        assert second.headers["Idempotent-Replayed"] == "true"
        assert second.json() == first.json()
        assert await balance_of(client, checking, ada) == 10000

        history = await client.get(transactions_url(checking), headers=ada["headers"])
        assert len(history.json()["transactions"]) == 1

    @pytest.mark.asyncio
    async def test_replay_ignores_changed_parameters(
        self, client: AsyncClient, ada: dict, checking: dict
    ):
        first = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 700, "idempotency_key": "tx-changed"},
            headers=ada["headers"],
        )
        second = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 900, "idempotency_key": "tx-changed"},
            headers=ada["headers"],
        )

        assert second.status_code == 200
        assert second.json()["amount_cents"] == 700
        assert second.json()["id"] == first.json()["id"]
        assert await balance_of(client, checking, ada) == 700

    @pytest.mark.asyncio
    async def test_key_reused_on_another_account(
        self, client: AsyncClient, ada: dict, checking: dict, open_account
    ):
        savings = await open_account(ada, kind="savings")
        body = {"kind": "credit", "amount_cents": 100, "idempotency_key": "tx-shared-key"}

        await client.post(transactions_url(checking), json=body, headers=ada["headers"])
        response = await client.post(transactions_url(savings), json=body, headers=ada["headers"])

        assert response.status_code == 409
        assert response.json()["error"] == "IDEMPOTENCY_KEY_CONFLICT"
        assert await balance_of(client, savings, ada) == 0

    @pytest.mark.asyncio
    async def test_key_conflict_is_documented(self, client: AsyncClient):
        schema = (await client.get("/openapi.json")).json()

        posting = schema["paths"]["/v1/accounts/{account_id}/transactions"]["post"]
        assert "idempotency key" in posting["responses"]["409"]["description"]

    @pytest.mark.asyncio
    async def test_without_key_each_request_applies(
        self, client: AsyncClient, ada: dict, checking: dict
    ):
        body = {"kind": "credit", "amount_cents": 100}

        first = await client.post(transactions_url(checking), json=body, headers=ada["headers"])
        second = await client.post(transactions_url(checking), json=body, headers=ada["headers"])

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["id"] != second.json()["id"]
        assert await balance_of(client, checking, ada) == 200


# =============================================================================
# Authorization and existence
# =============================================================================

class TestPostingAccess:
    """Tests for identity and ownership on POST."""

    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient, checking: dict):
        response = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 100},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHENTICATED"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_garbage_token(self, client: AsyncClient, checking: dict):
        response = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 100},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_token_is_not_accepted(
        self, client: AsyncClient, ada: dict, checking: dict
    ):
        response = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 100},
            headers={"Authorization": f"Bearer {ada['refresh_token']}"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(
        self, client: AsyncClient, ada: dict, eve: dict, open_account
    ):
        account = await open_account(ada, opening_balance_cents=1000)

        response = await client.post(
            transactions_url(account),
            json={"kind": "debit", "amount_cents": 1000},
            headers=eve["headers"],
        )

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"
        assert await balance_of(client, account, ada) == 1000

    @pytest.mark.asyncio
    async def test_unknown_account(self, client: AsyncClient, ada: dict):
        response = await client.post(
            f"/v1/accounts/{uuid4()}/transactions",
            json={"kind": "credit", "amount_cents": 100},
            headers=ada["headers"],
        )

        assert response.status_code == 404
        assert response.json()["error"] == "ACCOUNT_NOT_FOUND"


# =============================================================================
# Validation
# =============================================================================

class TestPostingValidation:
    """Malformed requests are rejected before any mutation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"kind": "credit", "amount_cents": 0},
            {"kind": "debit", "amount_cents": -500},
            {"kind": "credit", "amount_cents": 10.5},
            {"kind": "credit", "amount_cents": "100"},
            {"kind": "refund", "amount_cents": 100},
            {"amount_cents": 100},
            {"kind": "credit", "amount_cents": 100, "idempotency_key": "abc"},
            {"kind": "credit", "amount_cents": 100, "description": "x" * 257},
            {"kind": "credit", "amount_cents": MAX_AMOUNT_CENTS + 1},
            {"kind": "credit", "amount_cents": 2**63},
        ],
    )
    async def test_invalid_body(self, client: AsyncClient, ada: dict, checking: dict, body):
        response = await client.post(transactions_url(checking), json=body, headers=ada["headers"])

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "INVALID_INPUT"
        assert data["request_id"]
        assert await balance_of(client, checking, ada) == 0

    @pytest.mark.asyncio
    async def test_malformed_account_id(self, client: AsyncClient, ada: dict):
        response = await client.post(
            "/v1/accounts/not-a-uuid/transactions",
            json={"kind": "credit", "amount_cents": 100},
            headers=ada["headers"],
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_largest_amount_accepted(self, client: AsyncClient, ada: dict, checking: dict):
        response = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": MAX_AMOUNT_CENTS},
            headers=ada["headers"],
        )

        assert response.status_code == 201
        assert await balance_of(client, checking, ada) == MAX_AMOUNT_CENTS


# =============================================================================
# Log append failure
# =============================================================================

class TestLedgerFailure:

    @pytest.mark.asyncio
    async def test_append_failure_returns_500(
        self, client: AsyncClient, ada: dict, checking: dict, monkeypatch
    ):
        async def failing_append(self, transaction):
            raise RuntimeError("disk full")

        monkeypatch.setattr(PostgresTransactionRepository, "append", failing_append)

        response = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 100, "idempotency_key": "tx-disk-full"},
            headers=ada["headers"],
        )

        assert response.status_code == 500
        assert response.json()["error"] == "LEDGER_INCONSISTENT"

    @pytest.mark.asyncio
    async def test_failed_request_rolls_back_balance(
        self, client: AsyncClient, ada: dict, checking: dict, monkeypatch
    ):
        async def failing_append(self, transaction):
            raise RuntimeError("disk full")

        monkeypatch.setattr(PostgresTransactionRepository, "append", failing_append)
        await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 100},
            headers=ada["headers"],
        )
        monkeypatch.undo()

        report = await client.get(
            f"/v1/accounts/{checking['id']}/reconciliation",
            headers=ada["headers"],
        )

        assert report.json()["consistent"] is True
        assert await balance_of(client, checking, ada) == 0


# =============================================================================
# Unexpected failures
# =============================================================================

class TestUnexpectedFailure:
    """Errors no handler maps still carry the request id."""

    @pytest.mark.asyncio
    async def test_500_echoes_client_request_id(
        self, client: AsyncClient, ada: dict, checking: dict, monkeypatch
    ):
        async def broken_lookup(self, account_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(PostgresAccountRepository, "get_by_id", broken_lookup)

        response = await client.get(
            f"/v1/accounts/{checking['id']}",
            headers={**ada["headers"], "X-Request-ID": "trace-500"},
        )

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "INTERNAL_ERROR"
        assert data["request_id"] == "trace-500"
        assert response.headers["X-Request-ID"] == "trace-500"

    @pytest.mark.asyncio
    async def test_500_carries_generated_request_id(
        self, client: AsyncClient, ada: dict, checking: dict, monkeypatch
    ):
        async def broken_lookup(self, account_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(PostgresAccountRepository, "get_by_id", broken_lookup)

        response = await client.get(f"/v1/accounts/{checking['id']}", headers=ada["headers"])

        assert response.status_code == 500
        assert response.json()["request_id"] is not None
        assert response.json()["request_id"] == response.headers["X-Request-ID"]


# =============================================================================
# History, read-back and reconciliation
# =============================================================================

class TestTransactionQueries:

    @pytest.mark.asyncio
    async def test_history_newest_first(self, client: AsyncClient, ada: dict, checking: dict):
        for amount in (100, 200, 300):
            await client.post(
                transactions_url(checking),
                json={"kind": "credit", "amount_cents": amount},
                headers=ada["headers"],
            )

        response = await client.get(transactions_url(checking), headers=ada["headers"])

        assert response.status_code == 200
        data = response.json()
        assert data["account_id"] == checking["id"]
        assert [t["amount_cents"] for t in data["transactions"]] == [300, 200, 100]
        assert [t["balance_after_cents"] for t in data["transactions"]] == [600, 300, 100]

    @pytest.mark.asyncio
    async def test_history_pagination(self, client: AsyncClient, ada: dict, checking: dict):
        for amount in (100, 200, 300):
            await client.post(
                transactions_url(checking),
                json={"kind": "credit", "amount_cents": amount},
                headers=ada["headers"],
            )

        response = await client.get(
            transactions_url(checking),
            params={"limit": 2, "offset": 1},
            headers=ada["headers"],
        )

        assert [t["amount_cents"] for t in response.json()["transactions"]] == [200, 100]

    @pytest.mark.asyncio
    async def test_history_of_foreign_account(
        self, client: AsyncClient, eve: dict, checking: dict
    ):
        response = await client.get(transactions_url(checking), headers=eve["headers"])

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_read_back_by_key(self, client: AsyncClient, ada: dict, checking: dict):
        posted = await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 4200, "idempotency_key": "tx-lost-response"},
            headers=ada["headers"],
        )

        response = await client.get(
            "/v1/transactions/by-key/tx-lost-response",
            headers=ada["headers"],
        )

        assert response.status_code == 200
        assert response.json() == posted.json()

    @pytest.mark.asyncio
    async def test_read_back_unknown_key(self, client: AsyncClient, ada: dict):
        response = await client.get("/v1/transactions/by-key/tx-never-sent", headers=ada["headers"])

        assert response.status_code == 404
        assert response.json()["error"] == "TRANSACTION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_read_back_hidden_from_other_users(
        self, client: AsyncClient, ada: dict, eve: dict, checking: dict
    ):
        await client.post(
            transactions_url(checking),
            json={"kind": "credit", "amount_cents": 4200, "idempotency_key": "tx-ada-only"},
            headers=ada["headers"],
        )

        response = await client.get("/v1/transactions/by-key/tx-ada-only", headers=eve["headers"])

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_reconciliation(self, client: AsyncClient, ada: dict, open_account):
        account = await open_account(ada, opening_balance_cents=1000)
        for kind, amount in (("credit", 500), ("debit", 1200), ("debit", 5000), ("credit", 50)):
            await client.post(
                transactions_url(account),
                json={"kind": kind, "amount_cents": amount},
                headers=ada["headers"],
            )

        response = await client.get(
            f"/v1/accounts/{account['id']}/reconciliation",
            headers=ada["headers"],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["consistent"] is True
        assert data["opening_balance_cents"] == 1000
        assert data["replayed_balance_cents"] == 350
        assert data["current_balance_cents"] == 350
        assert data["transaction_count"] == 3
        assert data["mismatches"] == []
