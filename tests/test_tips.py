import pytest
from bson.objectid import ObjectId

from conftest import auth_header


@pytest.fixture
def make_tip(client):
    def _make(email="author@x.com", **overrides):
        body = {"title": "Carry a tote", "content": "Keep a reusable bag in your backpack", "category": "waste", **overrides}
        resp = client.post("/api/tips", json=body, headers=auth_header(email))
        assert resp.status_code == 201
        return resp.get_json()["tipId"]
    return _make


def test_create_tip_sets_author(client, store, make_tip):
    tip_id = make_tip(author="x@y.com", upvotes=100)
    doc = store.tips.find_one({"_id": ObjectId(tip_id)})
    assert doc["author"] == "author@x.com"
    assert doc["upvotes"] == 0


def test_create_tip_requires_content(client):
    resp = client.post("/api/tips", json={"title": "Empty"}, headers=auth_header("a@x.com"))
    assert resp.status_code == 400


def test_list_tips_by_upvotes(client, make_tip):
    make_tip(title="Quiet tip")
    popular = make_tip(title="Popular tip")
    client.patch(f"/api/tips/{popular}/upvote", headers=auth_header("a@x.com"))
    titles = [t["title"] for t in client.get("/api/tips").get_json()]
    assert titles == ["Popular tip", "Quiet tip"]


def test_list_tips_filters(client, make_tip):
    make_tip()
    make_tip(title="Cold wash", content="Wash laundry at 30 degrees", category="energy")
    assert [t["title"] for t in client.get("/api/tips?category=energy").get_json()] == ["Cold wash"]
    assert [t["title"] for t in client.get("/api/tips?search=LAUNDRY").get_json()] == ["Cold wash"]
    assert client.get("/api/tips?search=a.b").get_json() == []


def test_upvote_tip(client, make_tip):
    tip_id = make_tip()
    client.patch(f"/api/tips/{tip_id}/upvote", headers=auth_header("a@x.com"))
    resp = client.patch(f"/api/tips/{tip_id}/upvote", headers=auth_header("b@x.com"))
    assert resp.status_code == 200
    assert resp.get_json()["upvotes"] == 2


def test_upvote_requires_auth(client, make_tip):
    tip_id = make_tip()
    assert client.patch(f"/api/tips/{tip_id}/upvote").status_code == 401


def test_upvote_missing_tip(client):
    assert client.patch(f"/api/tips/{ObjectId()}/upvote", headers=auth_header("a@x.com")).status_code == 404


def test_update_and_delete_tip_ownership(client, store, make_tip):
    tip_id = make_tip()
    assert client.patch(f"/api/tips/{tip_id}", json={"title": "x"}, headers=auth_header("a@x.com")).status_code == 403
    assert client.delete(f"/api/tips/{tip_id}", headers=auth_header("a@x.com")).status_code == 403

    resp = client.patch(f"/api/tips/{tip_id}", json={"title": "Carry two totes"}, headers=auth_header("author@x.com"))
    assert resp.status_code == 200
    doc = store.tips.find_one({"_id": ObjectId(tip_id)})
    assert doc["title"] == "Carry two totes"
    assert doc["content"] == "Keep a reusable bag in your backpack"

    assert client.delete(f"/api/tips/{tip_id}", headers=auth_header("author@x.com")).status_code == 200
    assert client.get(f"/api/tips/{tip_id}").status_code == 404
