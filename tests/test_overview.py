"""
Tests for the overview and summary endpoints.
"""


async def seed(client):
    cards = []
    for name, cold, limit in [("Alpha", "100", "80"), ("Beta", "40", "50")]:
        response = await client.post(
            "/marketing/cards",
            json={"name": name, "last_four_digits": "1111", "dotation_limit": limit, "cold_balance": cold},
        )
        cards.append(response.json())
    ad_account = (await client.post("/marketing/ad-accounts", json={"name": "Meta"})).json()
    await client.post(
        f"/marketing/ad-accounts/{ad_account['id']}/cards", json={"card_id": cards[0]["id"]}
    )
    await client.post(
        "/marketing/transactions/cold-to-real", json={"card_id": cards[0]["id"], "amount": 30}
    )
    await client.post(
        "/marketing/transactions/spend",
        json={"card_id": cards[0]["id"], "ad_account_id": ad_account["id"], "amount": 10},
    )
    return cards, ad_account


class TestSummary:

    async def test_empty(self, authenticated_client):
        response = await authenticated_client.get("/marketing/summary")
        assert response.status_code == 200
        assert response.json() == {
            "total_cold_balance_cents": 0,
            "total_real_balance_cents": 0,
            "total_balance_cents": 0,
            "total_dotation_limit_cents": 0,
            "total_dotation_used_cents": 0,
            "total_available_dotation_cents": 0,
            "total_cards": 0,
            "total_ad_accounts": 0,
        }

    async def test_totals(self, admin_client):
        await seed(admin_client)

        summary = (await admin_client.get("/marketing/summary")).json()

        # Alpha: cold 70, real 20, used 40 / 80. Beta: cold 40, used 0 / 50.
        assert summary["total_cold_balance_cents"] == 11000
        assert summary["total_real_balance_cents"] == 2000
        assert summary["total_balance_cents"] == 13000
        assert summary["total_dotation_limit_cents"] == 13000
        assert summary["total_dotation_used_cents"] == 4000
        assert summary["total_available_dotation_cents"] == 9000
        assert summary["total_cards"] == 2
        assert summary["total_ad_accounts"] == 1


class TestOverview:

    async def test_overview(self, admin_client):
        cards, ad_account = await seed(admin_client)

        response = await admin_client.get("/marketing/overview")
        assert response.status_code == 200
        data = response.json()

        assert data["summary"]["total_cards"] == 2
        assert [c["name"] for c in data["cards"]] == ["Alpha", "Beta"]
        alpha = data["cards"][0]
        assert alpha["available_dotation_cents"] == 4000
        assert alpha["total_balance_cents"] == 9000

        assert len(data["ad_accounts"]) == 1
        assert data["ad_accounts"][0]["id"] == ad_account["id"]
        assert [c["id"] for c in data["ad_accounts"][0]["linked_cards"]] == [cards[0]["id"]]
