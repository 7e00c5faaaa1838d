from datetime import timedelta

import pytest

from wanderlust.core.enums import PollStatus
from wanderlust.core.utils import utcnow
from wanderlust.models.poll import Poll
from wanderlust.services.poll_services import is_open_for_voting


async def create_poll(client, auth, trip, **overrides):
    payload = {
        "title": "Where for dinner",
        "type": "PLACE",
        "options": [{"label": "Ramiro"}, {"label": "Time Out Market"}, {"label": "Cervejaria"}],
    }
    payload.update(overrides)
    res = await client.post(f"/api/v1/trips/{trip.id}/polls", json=payload, headers=auth(trip.alice))
    assert res.status_code == 201, res.text
    return res.json()


def poll_url(trip, poll, suffix=""):
    return f"/api/v1/trips/{trip.id}/polls/{poll['id']}{suffix}"


async def test_single_choice_vote_and_results(client, auth, trip):
    poll = await create_poll(client, auth, trip)
    ramiro, market, _ = [o["id"] for o in poll["options"]]

    res = await client.post(poll_url(trip, poll, "/votes"), json={"option_id": ramiro}, headers=auth(trip.bob))
    assert res.status_code == 201
    assert res.json()["option_id"] == ramiro
    assert res.json()["user_id"] == trip.bob

    await client.post(poll_url(trip, poll, "/votes"), json={"option_id": ramiro}, headers=auth(trip.carol))
    await client.post(poll_url(trip, poll, "/votes"), json={"option_id": market}, headers=auth(trip.alice))

    res = await client.get(poll_url(trip, poll, "/results"), headers=auth(trip.bob))
    assert res.status_code == 200
    body = res.json()
    assert body["total_votes"] == 3
    assert body["status"] == "ACTIVE"
    assert [(o["id"], o["vote_count"], o["has_voted"]) for o in body["options"]] == [
        (ramiro, 2, True),
        (market, 1, False),
        (poll["options"][2]["id"], 0, False),
    ]


async def test_single_choice_rejects_second_vote(client, auth, trip):
    poll = await create_poll(client, auth, trip)
    ramiro, market, _ = [o["id"] for o in poll["options"]]

    await client.post(poll_url(trip, poll, "/votes"), json={"option_id": ramiro}, headers=auth(trip.bob))
    res = await client.post(poll_url(trip, poll, "/votes"), json={"option_id": market}, headers=auth(trip.bob))

    assert res.status_code == 422
    assert res.json()["error"]["details"][0]["path"] == "option_id"

    res = await client.post(poll_url(trip, poll, "/votes"), json={"option_id": ramiro}, headers=auth(trip.bob))
    assert res.status_code == 422
    assert res.json()["error"]["details"][0]["message"] == "You have already voted for this option"


async def test_change_and_remove_vote(client, auth, trip):
    poll = await create_poll(client, auth, trip)
    ramiro, market, _ = [o["id"] for o in poll["options"]]

    await client.post(poll_url(trip, poll, "/votes"), json={"option_id": ramiro}, headers=auth(trip.bob))

    res = await client.put(
        poll_url(trip, poll, "/votes"),
        json={"old_option_id": ramiro, "new_option_id": market},
        headers=auth(trip.bob),
    )
    assert res.status_code == 200
    assert res.json()["option_id"] == market

    res = await client.get(poll_url(trip, poll, "/votes/me"), headers=auth(trip.bob))
    assert res.json() == [market]

    res = await client.delete(poll_url(trip, poll, f"/votes/{market}"), headers=auth(trip.bob))
    assert res.status_code == 200

    res = await client.get(poll_url(trip, poll, "/votes/me"), headers=auth(trip.bob))
    assert res.json() == []

    res = await client.delete(poll_url(trip, poll, f"/votes/{market}"), headers=auth(trip.bob))
    assert res.status_code == 404


async def test_change_vote_requires_existing_vote(client, auth, trip):
    poll = await create_poll(client, auth, trip)
    ramiro, market, _ = [o["id"] for o in poll["options"]]

    res = await client.put(
        poll_url(trip, poll, "/votes"),
        json={"old_option_id": ramiro, "new_option_id": market},
        headers=auth(trip.bob),
    )

    assert res.status_code == 404
    assert res.json()["error"]["message"] == "You have not voted for the old option"


async def test_multiple_choice_respects_max_votes(client, auth, trip):
    poll = await create_poll(client, auth, trip, allow_multiple=True, max_votes=2)
    ids = [o["id"] for o in poll["options"]]

    for option_id in ids[:2]:
        res = await client.post(poll_url(trip, poll, "/votes"), json={"option_id": option_id}, headers=auth(trip.bob))
        assert res.status_code == 201

    res = await client.post(poll_url(trip, poll, "/votes"), json={"option_id": ids[2]}, headers=auth(trip.bob))
    assert res.status_code == 422
    assert res.json()["error"]["details"][0]["message"] == "Maximum 2 votes allowed for this poll"


async def test_vote_for_option_of_other_poll(client, auth, trip):
    poll = await create_poll(client, auth, trip)
    other = await create_poll(client, auth, trip, title="Which museum")

    res = await client.post(
        poll_url(trip, poll, "/votes"),
        json={"option_id": other["options"][0]["id"]},
        headers=auth(trip.bob),
    )

    assert res.status_code == 404


async def test_viewers_and_outsiders_cannot_vote(client, auth, trip):
    poll = await create_poll(client, auth, trip)
    option_id = poll["options"][0]["id"]

    res = await client.post(poll_url(trip, poll, "/votes"), json={"option_id": option_id}, headers=auth(trip.vic))
    assert res.status_code == 403

    res = await client.post(poll_url(trip, poll, "/votes"), json={"option_id": option_id}, headers=auth(trip.dave))
    assert res.status_code == 403

    res = await client.get(poll_url(trip, poll, "/results"), headers=auth(trip.vic))
    assert res.status_code == 200


async def test_close_poll_stops_voting(client, auth, trip):
    poll = await create_poll(client, auth, trip)
    option_id = poll["options"][0]["id"]

    res = await client.post(poll_url(trip, poll, "/close"), headers=auth(trip.bob))
    assert res.status_code == 403

    res = await client.post(poll_url(trip, poll, "/close"), headers=auth(trip.alice))
    assert res.status_code == 200
    assert res.json()["status"] == "CLOSED"
    assert res.json()["updated_at"] != poll["updated_at"]

    res = await client.post(poll_url(trip, poll, "/votes"), json={"option_id": option_id}, headers=auth(trip.bob))
    assert res.status_code == 422

    res = await client.post(poll_url(trip, poll, "/close"), headers=auth(trip.alice))
    assert res.status_code == 422


async def test_status_transitions(client, auth, trip):
    poll = await create_poll(client, auth, trip)

    res = await client.patch(poll_url(trip, poll), json={"status": "ARCHIVED"}, headers=auth(trip.alice))
    assert res.status_code == 200

    res = await client.patch(poll_url(trip, poll), json={"status": "ACTIVE"}, headers=auth(trip.alice))
    assert res.status_code == 422
    assert res.json()["error"]["details"] == [
        {"path": "status", "message": "Invalid status transition from ARCHIVED to ACTIVE"}
    ]


async def test_list_and_get_polls(client, auth, trip):
    dinner = await create_poll(client, auth, trip)
    museum = await create_poll(client, auth, trip, title="Which museum")
    await client.post(poll_url(trip, museum, "/close"), headers=auth(trip.alice))
    await client.post(
        poll_url(trip, dinner, "/votes"),
        json={"option_id": dinner["options"][1]["id"]},
        headers=auth(trip.carol),
    )

    res = await client.get(f"/api/v1/trips/{trip.id}/polls", headers=auth(trip.carol))
    assert res.status_code == 200
    assert {p["id"] for p in res.json()} == {dinner["id"], museum["id"]}

    res = await client.get(f"/api/v1/trips/{trip.id}/polls", params={"status": "ACTIVE"}, headers=auth(trip.carol))
    assert [p["id"] for p in res.json()] == [dinner["id"]]
    assert res.json()[0]["total_votes"] == 1
    assert res.json()[0]["options"][1]["has_voted"] is True

    res = await client.get(poll_url(trip, dinner), headers=auth(trip.bob))
    assert res.status_code == 200
    assert res.json()["options"][1]["vote_count"] == 1
    assert res.json()["options"][1]["has_voted"] is False

    res = await client.get(poll_url(trip, dinner), headers=auth(trip.dave))
    assert res.status_code == 403


async def test_delete_poll(client, auth, trip):
    poll = await create_poll(client, auth, trip)
    await client.post(
        poll_url(trip, poll, "/votes"),
        json={"option_id": poll["options"][0]["id"]},
        headers=auth(trip.bob),
    )

    res = await client.delete(poll_url(trip, poll), headers=auth(trip.bob))
    assert res.status_code == 403

    res = await client.delete(poll_url(trip, poll), headers=auth(trip.alice))
    assert res.json() == {"status": "deleted"}

    res = await client.get(poll_url(trip, poll), headers=auth(trip.alice))
    assert res.status_code == 404


@pytest.mark.parametrize(
    "status, closes_in, expected",
    [
        (PollStatus.ACTIVE, None, True),
        (PollStatus.ACTIVE, timedelta(hours=1), True),
        (PollStatus.ACTIVE, timedelta(hours=-1), False),
        (PollStatus.CLOSED, None, False),
        (PollStatus.ARCHIVED, None, False),
    ],
)
def test_is_open_for_voting(status, closes_in, expected):
    closes_at = utcnow() + closes_in if closes_in is not None else None
    poll = Poll(status=status, closes_at=closes_at)

    assert is_open_for_voting(poll) is expected
