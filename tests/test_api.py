from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from household_ledger.errors import NetworkError, QueryError
from household_ledger.main import app
from household_ledger.models import Transaction

client = TestClient(app)


def _tx(tx_id: str, amount: float, tx_type: str, tx_date: str, category: str, user_id: str = "ray") -> Transaction:
    return Transaction(
        id=tx_id,
        description=f"{category} {tx_id}",
        amount=amount,
        type=tx_type,
        date=tx_date,
        category=category,
        user_id=user_id,
    )


@pytest.fixture
def mock_store() -> Generator[AsyncMock, None, None]:
    had_store = hasattr(app.state, "store")
    original_store = getattr(app.state, "store", None)
    mock = AsyncMock()
    mock.list_transactions.return_value = [
        _tx("2", 40, "expense", "2024-06-02", "food"),
        _tx("1", 100, "income", "2024-06-01", "salary"),
    ]
    app.state.store = mock
    yield mock
    if had_store:
        app.state.store = original_store
    else:
        delattr(app.state, "store")


def test_list_transactions(mock_store: AsyncMock) -> None:
    response = client.get("/transactions?user_id=ray")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [row["id"] for row in data] == ["2", "1"]
    assert all(row["user_id"] == "ray" for row in data)
    mock_store.list_transactions.assert_awaited_once_with("ray")


def test_list_transactions_without_user(mock_store: AsyncMock) -> None:
    mock_store.list_transactions.return_value = []

    response = client.get("/transactions")

    assert response.status_code == 200
    assert response.json() == {"data": []}
    mock_store.list_transactions.assert_awaited_once_with(None)


def test_list_transactions_query_error(mock_store: AsyncMock) -> None:
    mock_store.list_transactions.side_effect = QueryError('relation "transactions" does not exist')

    response = client.get("/transactions?user_id=ray")

    assert response.status_code == 400
    assert response.json() == {"error": 'relation "transactions" does not exist'}


def test_list_transactions_unexpected_error_is_generic(mock_store: AsyncMock) -> None:
    mock_store.list_transactions.side_effect = NetworkError("dns failure")

    response = client.get("/transactions?user_id=ray")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch transactions"}


def test_create_transaction(mock_store: AsyncMock) -> None:
    created = _tx("7", 25.5, "expense", "2024-06-05", "gift", user_id="bon")
    mock_store.create_transaction.return_value = created
    body = {
        "description": "gift 7",
        "amount": 25.5,
        "category": "gift",
        "type": "expense",
        "date": "2024-06-05",
        "user_id": "bon",
    }

    response = client.post("/transactions", json=body)

    assert response.status_code == 200
    assert response.json() == {"data": created.model_dump()}
    payload = mock_store.create_transaction.call_args.args[0]
    assert payload.amount == 25.5
    assert mock_store.create_transaction.call_args.kwargs == {"user_id": "bon"}


def test_create_transaction_store_rejection(mock_store: AsyncMock) -> None:
    mock_store.create_transaction.side_effect = QueryError("new row violates check constraint")

    response = client.post(
        "/transactions",
        json={"description": "", "amount": 1, "category": "general", "type": "income"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "new row violates check constraint"}


def test_create_transaction_invalid_body(mock_store: AsyncMock) -> None:
    response = client.post("/transactions", json={"category": "food", "type": "transfer"})

    assert response.status_code == 422
    assert response.json()["error"].startswith("Invalid request")
    mock_store.create_transaction.assert_not_called()


def test_delete_transaction(mock_store: AsyncMock) -> None:
    response = client.delete("/transactions/2")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    mock_store.delete_transaction.assert_awaited_once_with("2")


def test_delete_transaction_error(mock_store: AsyncMock) -> None:
    mock_store.delete_transaction.side_effect = QueryError("permission denied for table transactions")

    response = client.delete("/transactions/2")

    assert response.status_code == 400
    assert response.json() == {"error": "permission denied for table transactions"}


def test_users_and_categories() -> None:
    users = client.get("/users").json()
    assert [u["user_id"] for u in users] == ["ray", "bon"]

    categories = client.get("/categories").json()
    assert [c["key"] for c in categories] == [
        "general", "food", "transport", "lodging", "equipment",
        "medical", "salary", "cosmetics", "gift",
    ]


def test_dashboard_view_selecting_day(mock_store: AsyncMock) -> None:
    response = client.get("/api/dashboard?user_id=ray&day=2024-06-02")

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is None
    view = body["view"]
    assert view["filters"]["month"] == "2024-6"
    assert view["monthly"] == {"income": 100.0, "expense": 40.0, "balance": 60.0}
    ids = [t["id"] for g in view["groups"] for t in g["transactions"]]
    assert ids == ["2"]


def test_dashboard_view_load_failure(mock_store: AsyncMock) -> None:
    mock_store.list_transactions.side_effect = NetworkError("timed out")

    body = client.get("/api/dashboard?user_id=bon").json()

    assert body["error"] == "Failed to load transactions. Please try again."
    assert body["view"]["total_count"] == 0
