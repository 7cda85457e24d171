"""Integration tests for expense API endpoints"""

from decimal import Decimal

import pytest
from httpx import AsyncClient


def amounts(expense: dict) -> list:
    return [Decimal(s["amount"]) for s in expense["splits"]]


async def seven_way_splits(client: AsyncClient, headers: dict, trip: dict, participants: dict) -> list:
    """Split lines for the three fixture participants plus four more guests"""
    ids = [participants["owner"], participants["member"], participants["guest"]]
    for name in ("Hana", "Ivo", "Juno", "Kai"):
        response = await client.post(
            "/api/v1/participants/guest", json={"trip_id": trip["id"], "guest_name": name}, headers=headers
        )
        ids.append(response.json()["id"])
    return [{"participant_id": pid} for pid in ids]


class TestCreateExpense:
    """Test expense creation endpoint"""

    @pytest.mark.asyncio
    async def test_create_expense_equal_split(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        """Remainder cent goes to the last participant in the given order"""
        order = [participants["guest"], participants["member"], participants["owner"]]
        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                amount="100.00",
                is_divisible=True,
                split_type="equal",
                splits=[{"participant_id": pid} for pid in order],
            ),
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert [s["participant_id"] for s in data["splits"]] == order
        assert amounts(data) == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
        assert data["status"] == "paid"
        assert data["currency"] == "ARS"
        assert data["payer"] == {"type": "participant", "participant_id": participants["owner"]}

    @pytest.mark.asyncio
    async def test_create_expense_manual_split(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                amount="100.00",
                is_divisible=True,
                split_type="manual",
                splits=[
                    {"participant_id": participants["owner"], "amount": "70.00"},
                    {"participant_id": participants["member"], "amount": "30.00"},
                ],
                tags=["food", "group"],
                merchant_name="Parrilla Don Julio",
                category="food",
            ),
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert amounts(data) == [Decimal("70.00"), Decimal("30.00")]
        assert data["tags"] == ["food", "group"]
        assert data["merchant_name"] == "Parrilla Don Julio"

    @pytest.mark.asyncio
    async def test_manual_split_sum_mismatch(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                amount="100.00",
                is_divisible=True,
                split_type="manual",
                splits=[
                    {"participant_id": participants["owner"], "amount": "70.00"},
                    {"participant_id": participants["member"], "amount": "20.00"},
                ],
            ),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_amount_too_small_for_equal_split(
        self, client: AsyncClient, auth_headers: dict, trip: dict, participants: dict, expense_payload
    ):
        """0.05 over 7 rounds to 0.01 each, which would leave the last share at -0.01"""
        splits = await seven_way_splits(client, auth_headers, trip, participants)

        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(amount="0.05", is_divisible=True, split_type="equal", splits=splits),
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "ValidationError"

        response = await client.get("/api/v1/expenses", params={"trip_id": trip["id"]}, headers=auth_headers)
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_non_divisible_with_splits_rejected(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(splits=[{"participant_id": participants["owner"], "amount": "90.00"}]),
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_split_participant_from_other_trip(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        other = await client.post("/api/v1/trips", json={"name": "Other trip"}, headers=auth_headers)
        other_members = await client.get(
            f"/api/v1/participants/trip/{other.json()['id']}", headers=auth_headers
        )
        stranger = other_members.json()[0]["id"]

        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                is_divisible=True,
                split_type="equal",
                splits=[{"participant_id": participants["owner"]}, {"participant_id": stranger}],
            ),
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_third_party_payer_defaults_to_pending(
        self, client: AsyncClient, auth_headers: dict, expense_payload
    ):
        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(payer={"type": "third_party", "name": "Hostel Bolsón", "email": "info@bolson.com"}),
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["payer"] == {"type": "third_party", "name": "Hostel Bolsón", "email": "info@bolson.com"}

    @pytest.mark.asyncio
    async def test_paid_with_third_party_rejected(self, client: AsyncClient, auth_headers: dict, expense_payload):
        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(payer={"type": "third_party", "name": "Hostel"}, status="paid"),
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_payer_without_kind_rejected(self, client: AsyncClient, auth_headers: dict, expense_payload):
        response = await client.post(
            "/api/v1/expenses", json=expense_payload(payer={"name": "Nobody"}), headers=auth_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_payer_not_in_trip(self, client: AsyncClient, auth_headers: dict, expense_payload):
        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                payer={"type": "participant", "participant_id": "6f1c2a8e-0000-4000-8000-000000000000"}
            ),
            headers=auth_headers,
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-5.00"])
    async def test_non_positive_amount(self, client: AsyncClient, auth_headers: dict, expense_payload, amount):
        response = await client.post(
            "/api/v1/expenses", json=expense_payload(amount=amount), headers=auth_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_outsider_forbidden(self, client: AsyncClient, headers_for, outsider, expense_payload):
        response = await client.post(
            "/api/v1/expenses", json=expense_payload(), headers=headers_for(outsider)
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_idempotent_replay(self, client: AsyncClient, auth_headers: dict, trip: dict, expense_payload):
        headers = {**auth_headers, "Idempotency-Key": "dinner-2026-03-01"}

        first = await client.post("/api/v1/expenses", json=expense_payload(), headers=headers)
        second = await client.post("/api/v1/expenses", json=expense_payload(), headers=headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["id"] == second.json()["id"]

        listed = await client.get("/api/v1/expenses", params={"trip_id": trip["id"]}, headers=auth_headers)
        assert len(listed.json()) == 1


class TestPaymentMethod:
    """Cash and card rules"""

    @pytest.mark.asyncio
    async def test_card_payment(self, client: AsyncClient, auth_headers: dict, trip: dict, expense_payload):
        card = await client.post(
            "/api/v1/cards",
            json={"name": "Travel Visa", "last_four_digits": "4242", "type": "visa"},
            headers=auth_headers,
        )

        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(payment_method="card", card_id=card.json()["id"]),
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["card_id"] == card.json()["id"]

    @pytest.mark.asyncio
    async def test_card_payment_without_card(self, client: AsyncClient, auth_headers: dict, expense_payload):
        response = await client.post(
            "/api/v1/expenses", json=expense_payload(payment_method="card"), headers=auth_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_cash_with_card_rejected(self, client: AsyncClient, auth_headers: dict, expense_payload):
        card = await client.post(
            "/api/v1/cards",
            json={"name": "Travel Visa", "last_four_digits": "4242"},
            headers=auth_headers,
        )

        response = await client.post(
            "/api/v1/expenses", json=expense_payload(card_id=card.json()["id"]), headers=auth_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_deactivated_card_rejected(self, client: AsyncClient, auth_headers: dict, expense_payload):
        card = await client.post(
            "/api/v1/cards",
            json={"name": "Old Amex", "last_four_digits": "0005", "type": "amex"},
            headers=auth_headers,
        )
        await client.delete(f"/api/v1/cards/{card.json()['id']}", headers=auth_headers)

        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(payment_method="card", card_id=card.json()["id"]),
            headers=auth_headers,
        )

        assert response.status_code == 400


class TestListAndGetExpenses:
    """Listing and details"""

    @pytest.mark.asyncio
    async def test_list_filters_and_order(self, client: AsyncClient, auth_headers: dict, trip: dict, expense_payload):
        await client.post(
            "/api/v1/expenses",
            json=expense_payload(description="Bus to El Chaltén", expense_date="2026-03-01"),
            headers=auth_headers,
        )
        await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                description="Glacier tour",
                expense_date="2026-03-03",
                payer={"type": "third_party", "name": "Hielo y Aventura"},
            ),
            headers=auth_headers,
        )

        response = await client.get("/api/v1/expenses", params={"trip_id": trip["id"]}, headers=auth_headers)
        assert [e["description"] for e in response.json()] == ["Glacier tour", "Bus to El Chaltén"]

        response = await client.get(
            "/api/v1/expenses", params={"trip_id": trip["id"], "status": "pending"}, headers=auth_headers
        )
        assert [e["description"] for e in response.json()] == ["Glacier tour"]

    @pytest.mark.asyncio
    async def test_get_expense_outsider_forbidden(
        self, client: AsyncClient, auth_headers: dict, headers_for, outsider, expense_payload
    ):
        created = await client.post("/api/v1/expenses", json=expense_payload(), headers=auth_headers)

        response = await client.get(f"/api/v1/expenses/{created.json()['id']}", headers=headers_for(outsider))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_get_unknown_expense(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(
            "/api/v1/expenses/6f1c2a8e-0000-4000-8000-000000000000", headers=auth_headers
        )

        assert response.status_code == 404


class TestUpdateExpense:
    """Split recomputation on update"""

    @pytest.mark.asyncio
    async def test_amount_change_rescales_manual_splits(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        created = await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                amount="100.00",
                is_divisible=True,
                split_type="manual",
                splits=[
                    {"participant_id": participants["owner"], "amount": "70.00"},
                    {"participant_id": participants["guest"], "amount": "30.00"},
                ],
            ),
            headers=auth_headers,
        )

        response = await client.patch(
            f"/api/v1/expenses/{created.json()['id']}", json={"amount": "200.00"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert amounts(response.json()) == [Decimal("140.00"), Decimal("60.00")]
        assert response.json()["split_type"] == "manual"

    @pytest.mark.asyncio
    async def test_rescale_too_small_rejected(
        self, client: AsyncClient, auth_headers: dict, trip: dict, participants: dict, expense_payload
    ):
        """Shrinking 0.07 over 7 to 0.05 rescales each cent to 0.01 and the last to -0.01"""
        splits = await seven_way_splits(client, auth_headers, trip, participants)
        created = await client.post(
            "/api/v1/expenses",
            json=expense_payload(amount="0.07", is_divisible=True, split_type="equal", splits=splits),
            headers=auth_headers,
        )
        assert created.status_code == 201
        expense_id = created.json()["id"]

        response = await client.patch(
            f"/api/v1/expenses/{expense_id}", json={"amount": "0.05"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "ValidationError"

        response = await client.get(f"/api/v1/expenses/{expense_id}", headers=auth_headers)
        assert Decimal(response.json()["amount"]) == Decimal("0.07")
        assert amounts(response.json()) == [Decimal("0.01")] * 7

    @pytest.mark.asyncio
    async def test_new_split_participants_recomputed(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        created = await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                is_divisible=True,
                split_type="equal",
                splits=[{"participant_id": participants["owner"]}, {"participant_id": participants["member"]}],
            ),
            headers=auth_headers,
        )
        assert amounts(created.json()) == [Decimal("45.00"), Decimal("45.00")]

        response = await client.patch(
            f"/api/v1/expenses/{created.json()['id']}",
            json={"splits": [
                {"participant_id": participants["member"]},
                {"participant_id": participants["owner"]},
                {"participant_id": participants["guest"]},
            ]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert [s["participant_id"] for s in data["splits"]] == [
            participants["member"], participants["owner"], participants["guest"],
        ]
        assert amounts(data) == [Decimal("30.00"), Decimal("30.00"), Decimal("30.00")]

    @pytest.mark.asyncio
    async def test_split_type_only_reuses_participants(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        created = await client.post(
            "/api/v1/expenses",
            json=expense_payload(
                is_divisible=True,
                split_type="manual",
                splits=[
                    {"participant_id": participants["owner"], "amount": "80.00"},
                    {"participant_id": participants["member"], "amount": "10.00"},
                ],
            ),
            headers=auth_headers,
        )

        response = await client.patch(
            f"/api/v1/expenses/{created.json()['id']}", json={"split_type": "equal"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert amounts(response.json()) == [Decimal("45.00"), Decimal("45.00")]

    @pytest.mark.asyncio
    async def test_toggle_divisibility(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        created = await client.post("/api/v1/expenses", json=expense_payload(), headers=auth_headers)
        expense_id = created.json()["id"]

        response = await client.patch(
            f"/api/v1/expenses/{expense_id}",
            json={
                "is_divisible": True,
                "split_type": "equal",
                "splits": [{"participant_id": participants["owner"]}, {"participant_id": participants["guest"]}],
            },
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert amounts(response.json()) == [Decimal("45.00"), Decimal("45.00")]

        response = await client.patch(
            f"/api/v1/expenses/{expense_id}", json={"is_divisible": False}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["splits"] == []
        assert response.json()["split_type"] is None

    @pytest.mark.asyncio
    async def test_divisible_without_splits_rejected(self, client: AsyncClient, auth_headers: dict, expense_payload):
        created = await client.post("/api/v1/expenses", json=expense_payload(), headers=auth_headers)

        response = await client.patch(
            f"/api/v1/expenses/{created.json()['id']}",
            json={"is_divisible": True, "split_type": "equal"},
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_divisible_update_with_splits_rejected(
        self, client: AsyncClient, auth_headers: dict, participants: dict, expense_payload
    ):
        created = await client.post("/api/v1/expenses", json=expense_payload(), headers=auth_headers)

        response = await client.patch(
            f"/api/v1/expenses/{created.json()['id']}",
            json={"is_divisible": False, "splits": [{"participant_id": participants["owner"], "amount": "90.00"}]},
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_paid_expense_cannot_move_to_third_party(
        self, client: AsyncClient, auth_headers: dict, expense_payload
    ):
        created = await client.post("/api/v1/expenses", json=expense_payload(), headers=auth_headers)

        response = await client.patch(
            f"/api/v1/expenses/{created.json()['id']}",
            json={"payer": {"type": "third_party", "name": "Someone else"}},
            headers=auth_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_status_not_updatable(self, client: AsyncClient, auth_headers: dict, expense_payload):
        created = await client.post(
            "/api/v1/expenses",
            json=expense_payload(payer={"type": "third_party", "name": "Hostel"}),
            headers=auth_headers,
        )

        response = await client.patch(
            f"/api/v1/expenses/{created.json()['id']}",
            json={"status": "paid", "description": "Hostel, two nights"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["description"] == "Hostel, two nights"


class TestSettleExpense:
    """pending -> paid only"""

    @pytest.mark.asyncio
    async def test_settle_once(self, client: AsyncClient, auth_headers: dict, expense_payload):
        created = await client.post(
            "/api/v1/expenses",
            json=expense_payload(payer={"type": "third_party", "name": "Hostel"}),
            headers=auth_headers,
        )
        expense_id = created.json()["id"]

        response = await client.post(f"/api/v1/expenses/{expense_id}/settle", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "paid"

        response = await client.post(f"/api/v1/expenses/{expense_id}/settle", headers=auth_headers)
        assert response.status_code == 400
