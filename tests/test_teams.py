import asyncio
import time

import httpx
from sqlalchemy import event

from featureforge.main import app
from featureforge.models import User, TeamMember, Feature
from featureforge.utils import team_service


def test_create_team_makes_creator_admin(client, test_db, alice, headers_for):
    response = client.post("/api/teams", json={"name": "Growth", "description": "Funnels"}, headers=headers_for(alice))
    assert response.status_code == 201
    team_id = response.json()["data"]["id"]

    membership = test_db.query(TeamMember).filter(TeamMember.team_id == team_id).one()
    assert membership.user_id == alice.id
    assert membership.role == "admin"

    teams = client.get("/api/teams/my-teams", headers=headers_for(alice)).json()["data"]
    assert [(t["name"], t["role"], t["member_count"]) for t in teams] == [("Growth", "admin", 1)]


def test_get_team_is_members_only(client, team, bob, outsider, headers_for):
    data = client.get(f"/api/teams/{team.id}", headers=headers_for(bob)).json()["data"]
    assert data["member_count"] == 2
    assert data["creator"]["name"] == "Alice"
    assert client.get(f"/api/teams/{team.id}", headers=headers_for(outsider)).status_code == 403


def test_update_and_delete_require_admin(client, test_db, team, alice, bob, make_feature, headers_for):
    assert client.put(f"/api/teams/{team.id}", json={"name": "X"}, headers=headers_for(bob)).status_code == 403
    response = client.put(f"/api/teams/{team.id}", json={"name": "Platform"}, headers=headers_for(alice))
    assert response.json()["data"]["name"] == "Platform"

    make_feature(team, alice, "Goes with the team")
    assert client.delete(f"/api/teams/{team.id}", headers=headers_for(bob)).status_code == 403
    assert client.delete(f"/api/teams/{team.id}", headers=headers_for(alice)).status_code == 200
    assert test_db.query(Feature).count() == 0
    assert test_db.query(TeamMember).count() == 0


def test_unknown_team_for_admin_check_is_403(client, alice, headers_for):
    assert client.put("/api/teams/999", json={"name": "Ghost"}, headers=headers_for(alice)).status_code == 403


def test_add_existing_user(client, team, alice, make_user, headers_for):
    carol = make_user("Carol")
    response = client.post(
        f"/api/teams/{team.id}/members",
        json={"email": carol.email, "role": "product-owner"},
        headers=headers_for(alice)
    )
    assert response.status_code == 201
    body = response.json()
    assert body["data"]["user_id"] == carol.id
    assert body["data"]["role"] == "product-owner"
    assert body["data"]["is_new_user"] is False
    assert body["message"] == f"{carol.email} has been added to the team."


def test_add_unknown_email_creates_account(client, test_db, team, alice, headers_for):
    response = client.post(
        f"/api/teams/{team.id}/members",
        json={"email": "New.Person@Example.com"},
        headers=headers_for(alice)
    )
    assert response.status_code == 201
    assert response.json()["data"]["is_new_user"] is True

    user = test_db.query(User).filter(User.email == "new.person@example.com").one()
    assert user.name == "new.person"
    assert user.hashed_password


def test_add_member_rules(client, team, alice, bob, headers_for):
    response = client.post(f"/api/teams/{team.id}/members", json={"email": bob.email}, headers=headers_for(alice))
    assert response.status_code == 400
    assert response.json()["error"] == "User is already a team member"

    response = client.post(
        f"/api/teams/{team.id}/members",
        json={"email": "x@example.com", "role": "owner"},
        headers=headers_for(alice)
    )
    assert response.status_code == 400

    response = client.post(f"/api/teams/{team.id}/members", json={"email": "y@example.com"}, headers=headers_for(bob))
    assert response.status_code == 403


def test_eleventh_member_rejected(client, test_db, team, alice, make_user, headers_for):
    for i in range(8):
        test_db.add(TeamMember(team_id=team.id, user_id=make_user(f"Member{i}").id, role="user"))
    test_db.commit()
    assert test_db.query(TeamMember).filter(TeamMember.team_id == team.id).count() == 10

    extra = make_user("Extra")
    response = client.post(f"/api/teams/{team.id}/members", json={"email": extra.email}, headers=headers_for(alice))
    assert response.status_code == 400
    assert response.json()["error"] == "Team size limit exceeded"
    assert test_db.query(TeamMember).filter(TeamMember.team_id == team.id).count() == 10


def test_user_team_limit(client, test_db, alice, make_user, make_team, headers_for):
    carol = make_user("Carol")
    for i in range(5):
        make_team(f"Team {i}", [(alice, "admin"), (carol, "user")])
    target = make_team("Sixth", [(alice, "admin")])

    response = client.post(f"/api/teams/{target.id}/members", json={"email": carol.email}, headers=headers_for(alice))
    assert response.status_code == 400
    assert "more than 5 teams" in response.json()["error"]

    # The creator's own cap applies when creating a team
    response = client.post("/api/teams", json={"name": "Seventh"}, headers=headers_for(alice))
    assert response.status_code == 400


def test_member_role_and_removal(client, team, alice, bob, headers_for):
    response = client.put(
        f"/api/teams/{team.id}/members/{bob.id}", json={"role": "product-owner"}, headers=headers_for(alice)
    )
    assert response.json()["data"]["role"] == "product-owner"

    assert client.put(
        f"/api/teams/{team.id}/members/9999", json={"role": "user"}, headers=headers_for(alice)
    ).status_code == 404

    assert client.delete(f"/api/teams/{team.id}/members/{bob.id}", headers=headers_for(bob)).status_code == 403
    assert client.delete(f"/api/teams/{team.id}/members/{bob.id}", headers=headers_for(alice)).status_code == 200

    members = client.get(f"/api/teams/{team.id}/members", headers=headers_for(alice)).json()["data"]
    assert [m["name"] for m in members] == ["Alice"]


def test_settings_admin_only(client, team, alice, bob, headers_for):
    assert client.get(f"/api/teams/{team.id}/settings", headers=headers_for(bob)).status_code == 403
    data = client.get(f"/api/teams/{team.id}/settings", headers=headers_for(alice)).json()["data"]
    assert data["limits"] == {"max_team_size": 10, "max_teams_per_user": 5}
    assert len(data["members"]) == 2


def test_invite_does_not_block_event_loop(client, team, alice, headers_for, monkeypatch):
    def slow_hash(password):
        time.sleep(0.5)
        return "slow-hash"

    monkeypatch.setattr(team_service, "hash_password", slow_hash)

    async def scenario():
        gaps = []
        done = asyncio.Event()

        async def ticker():
            last = time.monotonic()
            while not done.is_set():
                await asyncio.sleep(0.02)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as async_client:
            tick = asyncio.create_task(ticker())
            response = await async_client.post(
                f"/api/teams/{team.id}/members",
                json={"email": "slow@example.com"},
                headers=headers_for(alice)
            )
            done.set()
            await tick
        return response, max(gaps)

    response, max_gap = asyncio.run(scenario())
    assert response.status_code == 201
    assert max_gap < 0.3


def test_my_teams_counts_members_in_one_query(test_db, alice, bob, make_user, make_team):
    carol = make_user("Carol")
    make_team("One", [(alice, "admin")])
    make_team("Two", [(alice, "admin"), (bob, "user")])
    make_team("Three", [(alice, "user"), (bob, "user"), (carol, "user")])
    test_db.expire_all()
    assert alice.id

    statements = []

    def count_statement(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    engine = test_db.get_bind()
    event.listen(engine, "before_cursor_execute", count_statement)
    try:
        teams = team_service.get_my_teams(test_db, alice)
    finally:
        event.remove(engine, "before_cursor_execute", count_statement)

    assert [(t["name"], t["member_count"]) for t in teams] == [("One", 1), ("Two", 2), ("Three", 3)]
    assert len(statements) == 2
