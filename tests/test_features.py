from featureforge.models import Notification


def test_create_feature_normalises_fields(client, team, alice, headers_for):
    response = client.post(
        f"/api/teams/{team.id}/features",
        json={"title": "  Export to CSV ", "status": "in-progress", "priority": "urgent", "type": "story"},
        headers=headers_for(alice)
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["title"] == "Export to CSV"
    assert data["status"] == "in_progress"
    assert data["priority"] == "critical"
    assert data["created_by_email"] == alice.email


def test_unknown_status_falls_back_to_backlog(client, team, alice, headers_for):
    response = client.post(
        f"/api/teams/{team.id}/features",
        json={"title": "Dark mode", "status": "someday"},
        headers=headers_for(alice)
    )
    assert response.json()["data"]["status"] == "backlog"
    assert response.json()["data"]["type"] == "task"


def test_missing_title_is_400_envelope(client, team, alice, headers_for):
    response = client.post(f"/api/teams/{team.id}/features", json={}, headers=headers_for(alice))
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "title" in body["error"]


def test_non_member_cannot_create_feature(client, team, outsider, headers_for):
    response = client.post(
        f"/api/teams/{team.id}/features",
        json={"title": "Sneaky"},
        headers=headers_for(outsider)
    )
    assert response.status_code == 403


def test_child_under_parent_feature(client, team, alice, make_feature, headers_for):
    epic = make_feature(team, alice, "Reporting", type="parent")
    response = client.post(
        f"/api/teams/{team.id}/features",
        json={"title": "Monthly report", "type": "story", "parentId": epic.id},
        headers=headers_for(alice)
    )
    assert response.status_code == 201
    assert response.json()["data"]["parent_id"] == epic.id

    children = client.get(f"/api/features/{epic.id}/children", headers=headers_for(alice)).json()["data"]
    assert [c["title"] for c in children] == ["Monthly report"]


def test_story_cannot_have_children(client, team, alice, make_feature, headers_for):
    story = make_feature(team, alice, "Login", type="story")
    response = client.post(
        f"/api/teams/{team.id}/features",
        json={"title": "Subtask", "type": "task", "parent_id": story.id},
        headers=headers_for(alice)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Story features cannot have children"


def test_parent_from_other_team_rejected(client, team, alice, make_team, make_feature, headers_for):
    other = make_team("Other", [(alice, "admin")])
    epic = make_feature(other, alice, "Elsewhere", type="parent")
    response = client.post(
        f"/api/teams/{team.id}/features",
        json={"title": "Child", "type": "task", "parentId": epic.id},
        headers=headers_for(alice)
    )
    assert response.status_code == 400


def test_parent_with_children_keeps_type(client, team, alice, make_feature, headers_for):
    epic = make_feature(team, alice, "Epic", type="parent")
    make_feature(team, alice, "Child", type="task", parent=epic)
    response = client.put(
        f"/api/teams/{team.id}/features/{epic.id}",
        json={"type": "story"},
        headers=headers_for(alice)
    )
    assert response.status_code == 400


def test_only_managers_change_status(client, team, alice, bob, make_feature, headers_for):
    feature = make_feature(team, alice, "Search")

    response = client.put(
        f"/api/teams/{team.id}/features/{feature.id}",
        json={"status": "done"},
        headers=headers_for(bob)
    )
    assert response.status_code == 403

    # Plain members may still edit other fields
    response = client.put(
        f"/api/teams/{team.id}/features/{feature.id}",
        json={"description": "Full text"},
        headers=headers_for(bob)
    )
    assert response.status_code == 200

    response = client.put(
        f"/api/teams/{team.id}/features/{feature.id}",
        json={"status": "completed"},
        headers=headers_for(alice)
    )
    assert response.json()["data"]["status"] == "done"


def test_status_change_notifies_assignee(client, test_db, team, alice, bob, make_feature, headers_for):
    feature = make_feature(team, alice, "Billing")
    client.put(
        f"/api/teams/{team.id}/features/{feature.id}",
        json={"assignedTo": bob.id},
        headers=headers_for(alice)
    )
    client.put(
        f"/api/teams/{team.id}/features/{feature.id}",
        json={"status": "review"},
        headers=headers_for(alice)
    )
    notifications = test_db.query(Notification).filter(Notification.user_id == bob.id).all()
    assert len(notifications) == 1
    assert notifications[0].type == "feature_update"


def test_delete_requires_manager_role(client, team, alice, bob, make_feature, headers_for):
    feature = make_feature(team, alice, "Old idea")
    assert client.delete(f"/api/teams/{team.id}/features/{feature.id}", headers=headers_for(bob)).status_code == 403
    assert client.delete(f"/api/teams/{team.id}/features/{feature.id}", headers=headers_for(alice)).status_code == 200
    assert client.get(f"/api/features/{feature.id}", headers=headers_for(alice)).status_code == 404


def test_feature_hidden_from_other_teams(client, team, alice, outsider, make_feature, headers_for):
    feature = make_feature(team, alice, "Private")
    assert client.get(f"/api/features/{feature.id}", headers=headers_for(outsider)).status_code == 404


def test_vote_and_stats(client, team, alice, bob, make_feature, headers_for):
    feature = make_feature(team, alice, "Popular")
    make_feature(team, alice, "Shipped", status="done")
    client.post(f"/api/features/{feature.id}/vote", headers=headers_for(alice))
    response = client.post(f"/api/features/{feature.id}/vote", headers=headers_for(bob))
    assert response.json()["data"]["votes"] == 2

    stats = client.get(f"/api/teams/{team.id}/features/stats", headers=headers_for(bob)).json()["data"]
    assert stats["total"] == 2
    assert stats["by_status"]["done"] == 1
    assert stats["by_status"]["backlog"] == 1
    assert stats["by_type"]["story"] == 2
