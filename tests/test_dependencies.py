import pytest

from featureforge.models import FeatureDependency


@pytest.fixture
def pair(team, alice, make_feature):
    return make_feature(team, alice, "F1"), make_feature(team, alice, "F2")


def link(client, headers, source, target, dependency_type, **extra):
    return client.post(
        f"/api/features/{source.id}/dependencies",
        json={"targetFeatureId": target.id, "dependencyType": dependency_type, **extra},
        headers=headers
    )


def test_blocks_end_to_end(client, test_db, team, alice, bob, pair, headers_for):
    f1, f2 = pair
    response = link(client, headers_for(alice), f1, f2, "blocks", description="API first")
    assert response.status_code == 201
    created = response.json()["data"]
    assert created["dependency_type"] == "blocks"
    assert created["target_feature"]["title"] == "F2"
    assert created["creator"]["id"] == alice.id

    data = client.get(f"/api/features/{f2.id}/dependencies", headers=headers_for(bob)).json()["data"]
    assert len(data["incoming"]) == 1
    incoming = data["incoming"][0]
    assert incoming["source_feature_id"] == f1.id
    assert incoming["inverse_type"] == "blocked_by"
    assert [(d["dependency_type"], d["target_feature_id"]) for d in data["outgoing"]] == [("blocked_by", f1.id)]
    assert data["outgoing"][0]["description"] == "Inverse of: API first"
    assert data["stats"]["blocked_by_count"] == 1
    assert data["is_blocked"] is True

    f1_view = client.get(f"/api/features/{f1.id}/dependencies", headers=headers_for(bob)).json()["data"]
    assert f1_view["stats"]["blocking_count"] == 1
    assert f1_view["is_blocked"] is False

    f1.status = "done"
    test_db.commit()
    data = client.get(f"/api/features/{f2.id}/dependencies", headers=headers_for(bob)).json()["data"]
    assert data["is_blocked"] is False


def test_depends_on_has_no_inverse_and_blocks(client, test_db, team, alice, pair, headers_for):
    f1, f2 = pair
    assert link(client, headers_for(alice), f1, f2, "depends_on").status_code == 201
    assert test_db.query(FeatureDependency).count() == 1

    data = client.get(f"/api/features/{f2.id}/dependencies", headers=headers_for(alice)).json()["data"]
    assert data["incoming"][0]["inverse_type"] is None
    assert data["is_blocked"] is True


def test_relates_to_is_symmetric(client, test_db, alice, pair, headers_for):
    f1, f2 = pair
    link(client, headers_for(alice), f1, f2, "relates_to")
    data = client.get(f"/api/features/{f2.id}/dependencies", headers=headers_for(alice)).json()["data"]
    assert data["outgoing"][0]["dependency_type"] == "relates_to"
    assert data["stats"]["related_count"] == 2
    assert data["is_blocked"] is False

    response = link(client, headers_for(alice), f2, f1, "relates_to")
    assert response.status_code == 400
    assert response.json()["error"] == "This dependency already exists"


def test_self_dependency_rejected(client, alice, pair, headers_for):
    f1, _ = pair
    response = link(client, headers_for(alice), f1, f1, "blocks")
    assert response.status_code == 400
    assert response.json()["error"] == "A feature cannot depend on itself"


def test_duplicate_triple_rejected(client, test_db, alice, pair, headers_for):
    f1, f2 = pair
    assert link(client, headers_for(alice), f1, f2, "blocks").status_code == 201
    response = link(client, headers_for(alice), f1, f2, "blocks")
    assert response.status_code == 400
    assert "already exists" in response.json()["error"]
    assert test_db.query(FeatureDependency).count() == 2


def test_reversed_pair_is_circular(client, alice, pair, headers_for):
    f1, f2 = pair
    link(client, headers_for(alice), f1, f2, "blocks")

    response = link(client, headers_for(alice), f2, f1, "blocks")
    assert response.status_code == 400
    assert "circular" in response.json()["error"]

    # F2 -> F1 blocked_by is the stored inverse
    response = link(client, headers_for(alice), f1, f2, "blocked_by")
    assert response.status_code == 400
    assert "circular" in response.json()["error"]


def test_equivalent_inverse_edge_is_reported(client, test_db, alice, pair, headers_for):
    f1, f2 = pair
    test_db.add(FeatureDependency(
        source_feature_id=f2.id,
        target_feature_id=f1.id,
        dependency_type="blocked_by",
        created_by=alice.id
    ))
    test_db.commit()

    response = link(client, headers_for(alice), f1, f2, "blocks")
    assert response.status_code == 400
    assert response.json()["error"] == 'This dependency already exists as a "Blocked by" relationship'
    assert test_db.query(FeatureDependency).count() == 1


def test_direct_cycle_rejected(client, alice, pair, headers_for):
    f1, f2 = pair
    link(client, headers_for(alice), f1, f2, "depends_on")
    response = link(client, headers_for(alice), f2, f1, "depends_on")
    assert response.status_code == 400
    assert "circular" in response.json()["error"]


def test_validation_order(client, alice, outsider, team, make_team, make_feature, pair, headers_for):
    f1, f2 = pair
    response = client.post(f"/api/features/{f1.id}/dependencies", json={}, headers=headers_for(alice))
    assert response.status_code == 400
    assert link(client, headers_for(alice), f1, f2, "duplicates").status_code == 400

    missing = client.post(
        f"/api/features/{f1.id}/dependencies",
        json={"target_feature_id": 9999, "dependency_type": "blocks"},
        headers=headers_for(alice)
    )
    assert missing.status_code == 404

    assert link(client, headers_for(outsider), f1, f2, "blocks").status_code == 404

    other = make_team("Other", [(alice, "admin")])
    foreign = make_feature(other, alice, "Foreign")
    response = link(client, headers_for(alice), f1, foreign, "blocks")
    assert response.status_code == 400
    assert "same team" in response.json()["error"]


def test_description_length_limit(client, alice, pair, headers_for):
    f1, f2 = pair
    response = link(client, headers_for(alice), f1, f2, "blocks", description="x" * 501)
    assert response.status_code == 400


def test_delete_removes_inverse(client, test_db, alice, pair, headers_for):
    f1, f2 = pair
    created = link(client, headers_for(alice), f1, f2, "blocks").json()["data"]
    assert test_db.query(FeatureDependency).count() == 2

    response = client.delete(
        f"/api/features/{f1.id}/dependencies/{created['id']}", headers=headers_for(alice)
    )
    assert response.status_code == 200
    assert test_db.query(FeatureDependency).count() == 0


def test_delete_requires_matching_source(client, alice, pair, headers_for):
    f1, f2 = pair
    created = link(client, headers_for(alice), f1, f2, "blocks").json()["data"]
    response = client.delete(
        f"/api/features/{f2.id}/dependencies/{created['id']}", headers=headers_for(alice)
    )
    assert response.status_code == 404


def test_team_dependencies_and_types(client, team, alice, pair, make_feature, headers_for):
    f1, f2 = pair
    f3 = make_feature(team, alice, "F3")
    link(client, headers_for(alice), f1, f2, "blocks")
    link(client, headers_for(alice), f3, f1, "depends_on")

    data = client.get(f"/api/teams/{team.id}/dependencies", headers=headers_for(alice)).json()["data"]
    assert data["stats"]["total"] == 3
    assert data["stats"]["by_type"]["blocks"] == 1
    assert data["stats"]["by_type"]["blocked_by"] == 1
    assert data["stats"]["by_type"]["depends_on"] == 1
    assert data["stats"]["blocked_features"] == 1

    types = client.get("/api/features/dependencies/types", headers=headers_for(alice)).json()["data"]
    assert {t["value"]: t["inverse"] for t in types} == {
        "blocks": "blocked_by",
        "blocked_by": "blocks",
        "depends_on": None,
        "relates_to": "relates_to",
    }
