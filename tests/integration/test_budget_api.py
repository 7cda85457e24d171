"""Integration tests for budget endpoints and the spent accumulator"""

from decimal import Decimal
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import update

from tripledger.models.budget import Budget
from tripledger.schemas.expense import ExpenseCreate
from tripledger.services.expense_service import ExpenseService


@pytest_asyncio.fixture
async def budget(client: AsyncClient, auth_headers: dict, trip: dict) -> dict:
    response = await client.post(
        "/api/v1/budgets",
        json={"trip_id": trip["id"], "name": "Food", "amount": "500.00"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()


async def get_spent(client: AsyncClient, headers: dict, budget_id: str) -> Decimal:
    response = await client.get(f"/api/v1/budgets/{budget_id}", headers=headers)
    assert response.status_code == 200
    return Decimal(response.json()["spent"])


class TestBudgetCrud:
    """Budget CRUD"""

    @pytest.mark.asyncio
    async def test_create_budget_defaults(self, budget: dict):
        assert Decimal(budget["spent"]) == Decimal("0")
        assert Decimal(budget["remaining"]) == Decimal("500")
        assert budget["currency"] == "USD"

    @pytest.mark.asyncio
    async def test_create_budget_outsider_forbidden(self, client: AsyncClient, headers_for, trip: dict, outsider):
        response = await client.post(
            "/api/v1/budgets",
            json={"trip_id": trip["id"], "name": "Sneaky", "amount": "1.00"},
            headers=headers_for(outsider),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_negative_allocation_rejected(self, client: AsyncClient, auth_headers: dict, trip: dict):
        response = await client.post(
            "/api/v1/budgets",
            json={"trip_id": trip["id"], "name": "Broken", "amount": "-1.00"},
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_budgets(self, client: AsyncClient, auth_headers: dict, trip: dict, budget: dict):
        response = await client.get("/api/v1/budgets", params={"trip_id": trip["id"]}, headers=auth_headers)

        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [budget["id"]]

    @pytest.mark.asyncio
    async def test_update_ignores_spent(self, client: AsyncClient, auth_headers: dict, budget: dict):
        response = await client.patch(
            f"/api/v1/budgets/{budget['id']}",
            json={"name": "Food & drinks", "amount": "650.00", "spent": "999.00"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Food & drinks"
        assert Decimal(data["amount"]) == Decimal("650")
        assert Decimal(data["spent"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_get_unknown_budget(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(
            "/api/v1/budgets/6f1c2a8e-0000-4000-8000-000000000000", headers=auth_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_budget_detaches_expenses(
        self, client: AsyncClient, auth_headers: dict, budget: dict, expense_payload
    ):
        created = await client.post(
            "/api/v1/expenses", json=expense_payload(budget_id=budget["id"]), headers=auth_headers
        )
        assert created.status_code == 201

        response = await client.delete(f"/api/v1/budgets/{budget['id']}", headers=auth_headers)
        assert response.status_code == 204

        response = await client.get(f"/api/v1/expenses/{created.json()['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["budget_id"] is None


class TestSpentAccumulator:
    """spent always equals the sum of the budget's expenses"""

    @pytest.mark.asyncio
    async def test_create_update_delete_cycle(
        self, client: AsyncClient, auth_headers: dict, budget: dict, expense_payload
    ):
        response = await client.post(
            "/api/v1/expenses", json=expense_payload(budget_id=budget["id"], amount="50.00"), headers=auth_headers
        )
        expense_id = response.json()["id"]
        assert await get_spent(client, auth_headers, budget["id"]) == Decimal("50.00")

        response = await client.patch(
            f"/api/v1/expenses/{expense_id}", json={"amount": "80.00"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert await get_spent(client, auth_headers, budget["id"]) == Decimal("80.00")

        response = await client.delete(f"/api/v1/expenses/{expense_id}", headers=auth_headers)
        assert response.status_code == 204
        assert await get_spent(client, auth_headers, budget["id"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_increment_survives_stale_budget_read(
        self, client: AsyncClient, auth_headers: dict, budget: dict, expense_payload, session_factory, test_user
    ):
        """A session holding an outdated budget row still adds on top of other writers"""
        budget_id = UUID(budget["id"])

        async with session_factory() as session_a:
            stale = await session_a.get(Budget, budget_id)
            assert stale.spent == Decimal("0")
            # end the read transaction; the loaded row stays in session_a's identity map
            await session_a.commit()

            async with session_factory() as session_b:
                await ExpenseService.create_expense(
                    ExpenseCreate.model_validate(expense_payload(budget_id=budget["id"], amount="60.00")),
                    test_user.id,
                    session_b,
                )

            assert stale.spent == Decimal("0")
            await ExpenseService.create_expense(
                ExpenseCreate.model_validate(expense_payload(budget_id=budget["id"], amount="40.00")),
                test_user.id,
                session_a,
            )

        assert await get_spent(client, auth_headers, budget["id"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_moving_expense_between_budgets(
        self, client: AsyncClient, auth_headers: dict, trip: dict, budget: dict, expense_payload
    ):
        response = await client.post(
            "/api/v1/budgets",
            json={"trip_id": trip["id"], "name": "Transport", "amount": "300.00"},
            headers=auth_headers,
        )
        transport = response.json()

        response = await client.post(
            "/api/v1/expenses", json=expense_payload(budget_id=budget["id"], amount="40.00"), headers=auth_headers
        )
        expense_id = response.json()["id"]

        response = await client.patch(
            f"/api/v1/expenses/{expense_id}",
            json={"budget_id": transport["id"], "amount": "45.00"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert await get_spent(client, auth_headers, budget["id"]) == Decimal("0")
        assert await get_spent(client, auth_headers, transport["id"]) == Decimal("45.00")

        response = await client.patch(
            f"/api/v1/expenses/{expense_id}", json={"budget_id": None}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["budget_id"] is None
        assert await get_spent(client, auth_headers, transport["id"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_update_without_amount_or_budget_leaves_spent(
        self, client: AsyncClient, auth_headers: dict, budget: dict, expense_payload
    ):
        response = await client.post(
            "/api/v1/expenses", json=expense_payload(budget_id=budget["id"], amount="25.00"), headers=auth_headers
        )

        await client.patch(
            f"/api/v1/expenses/{response.json()['id']}",
            json={"description": "Choripán stand"},
            headers=auth_headers,
        )

        assert await get_spent(client, auth_headers, budget["id"]) == Decimal("25.00")

    @pytest.mark.asyncio
    async def test_budget_from_other_trip_rejected(
        self, client: AsyncClient, auth_headers: dict, expense_payload
    ):
        other = await client.post("/api/v1/trips", json={"name": "Other trip"}, headers=auth_headers)
        other_budget = await client.post(
            "/api/v1/budgets",
            json={"trip_id": other.json()["id"], "name": "Misc", "amount": "10.00"},
            headers=auth_headers,
        )

        response = await client.post(
            "/api/v1/expenses", json=expense_payload(budget_id=other_budget.json()["id"]), headers=auth_headers
        )

        assert response.status_code == 400
        assert await get_spent(client, auth_headers, other_budget.json()["id"]) == Decimal("0")


class TestReconcile:
    """Reconciliation repairs drift"""

    @pytest.mark.asyncio
    async def test_reconcile_fixes_drift(
        self, client: AsyncClient, auth_headers: dict, trip: dict, budget: dict, expense_payload, session_factory
    ):
        await client.post(
            "/api/v1/expenses", json=expense_payload(budget_id=budget["id"], amount="12.50"), headers=auth_headers
        )
        await client.post(
            "/api/v1/expenses", json=expense_payload(budget_id=budget["id"], amount="7.25"), headers=auth_headers
        )

        async with session_factory() as session:
            await session.execute(
                update(Budget).where(Budget.id == UUID(budget["id"])).values(spent=Decimal("999.99"))
            )
            await session.commit()
        assert await get_spent(client, auth_headers, budget["id"]) == Decimal("999.99")

        response = await client.post(f"/api/v1/budgets/trip/{trip['id']}/reconcile", headers=auth_headers)

        assert response.status_code == 200
        assert Decimal(response.json()[0]["spent"]) == Decimal("19.75")
        assert await get_spent(client, auth_headers, budget["id"]) == Decimal("19.75")
