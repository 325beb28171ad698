from datetime import datetime

import pytest
from bson.objectid import ObjectId

from errors import BadRequest
from models import (
    ROLE_CREATOR,
    ROLE_PARTICIPANT,
    build_challenge,
    build_patch,
    build_user_challenge,
    parse_datetime,
    parse_object_id,
)


def test_parse_object_id():
    oid = ObjectId()
    assert parse_object_id(str(oid), "tip") == oid
    with pytest.raises(BadRequest, match="Invalid tip ID"):
        parse_object_id("12345", "tip")


def test_parse_datetime_normalizes_to_naive_utc():
    assert parse_datetime("2030-05-01T12:00:00Z", "date") == datetime(2030, 5, 1, 12, 0)
    assert parse_datetime("2030-05-01T14:00:00+02:00", "date") == datetime(2030, 5, 1, 12, 0)
    with pytest.raises(BadRequest):
        parse_datetime(12, "date")


def test_build_challenge_keeps_supplied_lists():
    doc = build_challenge(
        {"title": "t", "category": "c", "howToParticipate": ["Step one", "Step two"], "_id": "x"},
        "a@x.com",
    )
    assert doc["howToParticipate"] == ["Step one", "Step two"]
    assert "_id" not in doc
    assert doc["createdAt"] == doc["updatedAt"]


def test_build_challenge_rejects_negative_duration():
    with pytest.raises(BadRequest):
        build_challenge({"title": "t", "category": "c", "duration": -1}, "a@x.com")


def test_build_user_challenge_roles():
    challenge = {"_id": ObjectId(), "title": "t", "category": "c", "communityGoal": {"currentProgress": 12}}
    creator = build_user_challenge("a@x.com", challenge, ROLE_CREATOR)
    assert (creator["role"], creator["status"], creator["progress"]) == ("creator", "created", 12)
    participant = build_user_challenge("b@x.com", challenge, ROLE_PARTICIPANT)
    assert (participant["role"], participant["status"], participant["progress"]) == ("participant", "Not Started", 0)
    assert participant["challengeId"] == challenge["_id"]


def test_build_patch_strips_owner_and_counters():
    patch = build_patch({"title": "new", "author": "b@x.com", "upvotes": 99}, "tips")
    assert set(patch) == {"title", "updatedAt"}
    with pytest.raises(BadRequest):
        build_patch({"author": "b@x.com"}, "tips")
