from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from conftest import CRON_API_KEY

pytestmark = pytest.mark.asyncio


def _in_days(days: int) -> str:
    return (datetime.now(timezone.utc).date() + timedelta(days=days)).isoformat()


@pytest.fixture
def rental_setup(make_user, make_item):
    async def _make():
        ana = await make_user()
        bob = await make_user(name="Bob", personal_email="b@x.com", uni_email="b@uni.edu")
        item_id = await make_item(ana, title="Projector", category="rent", item_type="electronics", price=5)
        return ana, bob, item_id

    return _make


async def _rent(client: AsyncClient, borrower, item_id: int, days: int):
    return await client.post(
        "/api/rentals/create",
        json={"item_id": item_id, "due_date": _in_days(days)},
        headers=borrower["headers"],
    )


async def test_create_and_list_rentals(client: AsyncClient, rental_setup):
    ana, bob, item_id = await rental_setup()

    response = await _rent(client, bob, item_id, 3)
    assert response.status_code == 201
    rental = response.json()["rental"]
    assert rental["borrower_id"] == bob["user_id"]
    assert rental["owner_id"] == ana["user_id"]
    assert rental["days_left"] == 3
    assert rental["reminder_sent"] is False

    response = await client.get("/api/rentals/active", headers=bob["headers"])
    assert response.json()["count"] == 1
    assert response.json()["rentals"][0]["title"] == "Projector"

    response = await client.get("/api/rentals/active", headers=ana["headers"])
    assert response.json()["count"] == 0


async def test_rental_rules(client: AsyncClient, rental_setup, make_item):
    ana, bob, item_id = await rental_setup()
    sell_id = await make_item(ana, category="sell")

    assert (await _rent(client, ana, item_id, 2)).status_code == 400
    assert (await _rent(client, bob, sell_id, 2)).status_code == 400
    assert (await _rent(client, bob, item_id, -1)).status_code == 400
    assert (await _rent(client, bob, 9999, 2)).status_code == 404


async def test_send_reminders_requires_key(client: AsyncClient):
    response = await client.get("/api/cron/send_reminders")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}

    response = await client.get("/api/cron/send_reminders", params={"api_key": "wrong"})
    assert response.status_code == 401


async def test_send_reminders_is_idempotent(client: AsyncClient, rental_setup):
    _, bob, item_id = await rental_setup()
    await _rent(client, bob, item_id, 1)
    await _rent(client, bob, item_id, 0)
    await _rent(client, bob, item_id, 5)

    first = await client.get("/api/cron/send_reminders", params={"api_key": CRON_API_KEY})
    assert first.status_code == 200
    assert first.json()["sent_count"] == 2
    assert first.json()["message"] == "Reminders sent: 2"

    second = await client.get("/api/cron/send_reminders", params={"api_key": CRON_API_KEY})
    assert second.json()["sent_count"] == 0

    rentals = (await client.get("/api/rentals/active", headers=bob["headers"])).json()["rentals"]
    assert [rental["reminder_sent"] for rental in rentals] == [True, True, False]


async def test_send_reminders_through_query_dispatch(client: AsyncClient, rental_setup):
    _, bob, item_id = await rental_setup()
    await _rent(client, bob, item_id, 1)

    response = await client.get(
        "/api/",
        params={"endpoint": "cron", "action": "send_reminders", "api_key": CRON_API_KEY},
    )
    assert response.status_code == 200
    assert response.json()["sent_count"] == 1
