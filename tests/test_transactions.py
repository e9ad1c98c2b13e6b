"""
Tests for ledger transaction endpoints.

These tests verify:
  - Each apply endpoint moves balances and returns the logged entry
  - Business rule rejections map to 422 with machine-readable details,
    and leave balances untouched (the request session rolls back)
  - Listing, filtering and detail views resolve card/ad account names
  - Only note and transaction_date can be edited
  - DELETE reverses the entry, or answers 409 when it can't
"""

CARDS = "/marketing/cards"
TXNS = "/marketing/transactions"


async def create_card(client, name="Card", cold="100", limit="100"):
    response = await client.post(
        CARDS,
        json={
            "name": name,
            "last_four_digits": "1234",
            "dotation_limit": limit,
            "cold_balance": cold,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_ad_account(client, name="Meta Ads"):
    response = await client.post("/marketing/ad-accounts", json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()


async def get_card(client, card_id):
    return (await client.get(f"{CARDS}/{card_id}")).json()


class TestApply:

    async def test_cold_to_real(self, admin_client):
        card = await create_card(admin_client, cold="50")

        response = await admin_client.post(
            f"{TXNS}/cold-to-real",
            json={"card_id": card["id"], "amount": "30.00", "note": "weekly budget"},
        )
        assert response.status_code == 201
        txn = response.json()
        assert txn["kind"] == "cold_to_real"
        assert txn["type"] == "revenue"
        assert txn["amount_cents"] == 3000
        assert txn["note"] == "weekly budget"
        assert txn["created_by"] is not None

        after = await get_card(admin_client, card["id"])
        assert after["cold_balance_cents"] == 2000
        assert after["real_balance_cents"] == 3000
        assert after["dotation_used_cents"] == 3000

    async def test_rejection_returns_details_and_changes_nothing(self, admin_client):
        card = await create_card(admin_client, cold="50")

        response = await admin_client.post(
            f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": 80}
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error_type"] == "insufficient_cold_balance"
        assert body["requested_cents"] == 8000
        assert body["available_cents"] == 5000

        after = await get_card(admin_client, card["id"])
        assert after["cold_balance_cents"] == 5000
        assert after["real_balance_cents"] == 0
        assert (await admin_client.get(TXNS)).json() == []

    async def test_from_card_cold(self, admin_client):
        source = await create_card(admin_client, name="Source", cold="100", limit="0")
        target = await create_card(admin_client, name="Target", cold="0", limit="50")

        response = await admin_client.post(
            f"{TXNS}/from-card-cold",
            json={"source_card_id": source["id"], "target_card_id": target["id"], "amount": 20},
        )
        assert response.status_code == 201
        assert response.json()["source_card_id"] == source["id"]

        assert (await get_card(admin_client, source["id"]))["cold_balance_cents"] == 8000
        target_after = await get_card(admin_client, target["id"])
        assert target_after["real_balance_cents"] == 2000
        assert target_after["dotation_used_cents"] == 2000

    async def test_from_card_cold_same_card(self, admin_client):
        card = await create_card(admin_client)

        response = await admin_client.post(
            f"{TXNS}/from-card-cold",
            json={"source_card_id": card["id"], "target_card_id": card["id"], "amount": 1},
        )
        assert response.status_code == 422
        assert response.json()["error_type"] == "invalid_operation"

    async def test_spend_and_real_to_cold(self, admin_client):
        card = await create_card(admin_client, cold="100", limit="100")
        ad_account = await create_ad_account(admin_client)
        await admin_client.post(f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": 60})

        spend = await admin_client.post(
            f"{TXNS}/spend",
            json={"card_id": card["id"], "ad_account_id": ad_account["id"], "amount": 20},
        )
        assert spend.status_code == 201
        assert spend.json()["type"] == "expense"

        parked = await admin_client.post(
            f"{TXNS}/real-to-cold", json={"card_id": card["id"], "amount": 30}
        )
        assert parked.status_code == 201

        after = await get_card(admin_client, card["id"])
        assert after["cold_balance_cents"] == 7000
        assert after["real_balance_cents"] == 1000
        assert after["dotation_used_cents"] == 5000

    async def test_spend_unknown_ad_account(self, admin_client):
        card = await create_card(admin_client)
        await admin_client.post(f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": 10})

        response = await admin_client.post(
            f"{TXNS}/spend", json={"card_id": card["id"], "ad_account_id": 999, "amount": 5}
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "ad_account_not_found"

    async def test_real_to_cold_without_real_funds(self, admin_client):
        card = await create_card(admin_client)

        response = await admin_client.post(
            f"{TXNS}/real-to-cold", json={"card_id": card["id"], "amount": 5}
        )
        assert response.status_code == 422
        assert response.json()["error_type"] == "insufficient_real_balance"

    async def test_invalid_amounts(self, admin_client):
        card = await create_card(admin_client)

        for amount in [0, "-5", "0.001"]:
            response = await admin_client.post(
                f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": amount}
            )
            assert response.status_code == 422
            assert response.json()["error_type"] == "invalid_amount"

        malformed = await admin_client.post(
            f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": "abc"}
        )
        assert malformed.status_code == 422

    async def test_unknown_card(self, authenticated_client):
        response = await authenticated_client.post(
            f"{TXNS}/cold-to-real", json={"card_id": 999, "amount": 5}
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "card_not_found"

    async def test_requires_authentication(self, client):
        response = await client.post(f"{TXNS}/cold-to-real", json={"card_id": 1, "amount": 5})
        assert response.status_code == 401


class TestListAndDetail:

    async def test_list_filters_and_names(self, admin_client):
        card = await create_card(admin_client, name="Main")
        other = await create_card(admin_client, name="Other")
        ad_account = await create_ad_account(admin_client, "Meta Ads")
        await admin_client.post(f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": 50})
        spend = await admin_client.post(
            f"{TXNS}/spend",
            json={"card_id": card["id"], "ad_account_id": ad_account["id"], "amount": 10},
        )
        await admin_client.post(f"{TXNS}/cold-to-real", json={"card_id": other["id"], "amount": 5})

        everything = (await admin_client.get(TXNS)).json()
        assert len(everything) == 3

        by_card = (await admin_client.get(TXNS, params={"card_id": card["id"]})).json()
        assert len(by_card) == 2

        spends = (await admin_client.get(TXNS, params={"kind": "spend_ad_account"})).json()
        assert [s["id"] for s in spends] == [spend.json()["id"]]

        detail = await admin_client.get(f"{TXNS}/{spend.json()['id']}")
        assert detail.status_code == 200
        assert detail.json()["card_name"] == "Main"
        assert detail.json()["ad_account_name"] == "Meta Ads"

    async def test_newest_business_date_first(self, admin_client):
        card = await create_card(admin_client)
        for day in ["2024-01-10", "2024-03-01", "2024-02-15"]:
            await admin_client.post(
                f"{TXNS}/cold-to-real",
                json={"card_id": card["id"], "amount": 1, "transaction_date": day},
            )

        dates = [t["transaction_date"] for t in (await admin_client.get(TXNS)).json()]
        assert dates == ["2024-03-01", "2024-02-15", "2024-01-10"]

    async def test_missing_transaction(self, admin_client):
        response = await admin_client.get(f"{TXNS}/999")
        assert response.status_code == 404
        assert response.json()["error_type"] == "transaction_not_found"


class TestMetadataUpdate:

    async def test_edit_note_and_date_only(self, admin_client):
        card = await create_card(admin_client)
        txn = (
            await admin_client.post(
                f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": 10}
            )
        ).json()

        response = await admin_client.patch(
            f"{TXNS}/{txn['id']}",
            json={"note": "corrected", "transaction_date": "2024-05-05", "amount": 99},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["note"] == "corrected"
        assert data["transaction_date"] == "2024-05-05"
        assert data["amount_cents"] == 1000

        after = await get_card(admin_client, card["id"])
        assert after["real_balance_cents"] == 1000

    async def test_partial_update_keeps_other_fields(self, admin_client):
        card = await create_card(admin_client)
        txn = (
            await admin_client.post(
                f"{TXNS}/cold-to-real",
                json={"card_id": card["id"], "amount": 10, "note": "keep me"},
            )
        ).json()

        response = await admin_client.patch(
            f"{TXNS}/{txn['id']}", json={"transaction_date": "2024-05-05"}
        )
        assert response.json()["note"] == "keep me"

    async def test_missing_transaction(self, admin_client):
        response = await admin_client.patch(f"{TXNS}/999", json={"note": "x"})
        assert response.status_code == 404


class TestReversal:

    async def test_delete_reverses_effect(self, admin_client):
        card = await create_card(admin_client, cold="50")
        txn = (
            await admin_client.post(
                f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": 30}
            )
        ).json()

        response = await admin_client.delete(f"{TXNS}/{txn['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == txn["id"]

        after = await get_card(admin_client, card["id"])
        assert after["cold_balance_cents"] == 5000
        assert after["real_balance_cents"] == 0
        assert after["dotation_used_cents"] == 0
        assert (await admin_client.get(f"{TXNS}/{txn['id']}")).status_code == 404

    async def test_conflict_keeps_entry(self, admin_client):
        card = await create_card(admin_client, cold="50")
        ad_account = await create_ad_account(admin_client)
        funding = (
            await admin_client.post(
                f"{TXNS}/cold-to-real", json={"card_id": card["id"], "amount": 30}
            )
        ).json()
        await admin_client.post(
            f"{TXNS}/spend",
            json={"card_id": card["id"], "ad_account_id": ad_account["id"], "amount": 30},
        )

        response = await admin_client.delete(f"{TXNS}/{funding['id']}")
        assert response.status_code == 409
        body = response.json()
        assert body["error_type"] == "reversal_conflict"
        assert body["transaction_id"] == funding["id"]

        assert (await admin_client.get(f"{TXNS}/{funding['id']}")).status_code == 200
        after = await get_card(admin_client, card["id"])
        assert after["real_balance_cents"] == 0
        assert after["dotation_used_cents"] == 6000

    async def test_reverse_missing_transaction(self, authenticated_client):
        response = await authenticated_client.delete(f"{TXNS}/999")
        assert response.status_code == 404
