from flask import Blueprint, current_app, g, jsonify
from pymongo import DESCENDING

from auth import authorize, token_required
from errors import BadRequest, NotFound
from models import build_challenge, build_patch, parse_object_id, utcnow
from util import combine, get_membership, get_store, json_body, query_arg, search_clause

challenges_blueprint = Blueprint("challenges", __name__, url_prefix="/api/challenges")


def _find_challenge(challenge_id):
    oid = parse_object_id(challenge_id, "challenge")
    challenge = get_store().challenges.find_one({"_id": oid})
    if not challenge:
        raise NotFound("Challenge not found")
    return challenge


@challenges_blueprint.get("")
def list_challenges():
    clauses = []
    category = query_arg("category")
    if category:
        clauses.append({"category": category})
    search = query_arg("search")
    if search:
        clauses.append(search_clause(search, ("title", "description")))
    status = query_arg("status")
    if status == "active":
        clauses.append({"$or": [{"endDate": {"$gte": utcnow()}}, {"endDate": None}]})
    elif status == "past":
        clauses.append({"endDate": {"$lt": utcnow()}})
    elif status is not None:
        raise BadRequest("status must be 'active' or 'past'")

    cursor = get_store().challenges.find(combine(clauses)).sort("createdAt", DESCENDING)
    return jsonify(list(cursor))


@challenges_blueprint.get("/<challenge_id>")
def get_challenge(challenge_id):
    return jsonify(_find_challenge(challenge_id))


@challenges_blueprint.post("")
@token_required
def create_challenge():
    email = g.token_email
    challenge = build_challenge(json_body(), email)
    result = get_store().challenges.insert_one(challenge)
    get_membership().add_creator(email, challenge)
    current_app.logger.info("Challenge %s created by %s", result.inserted_id, email)
    return jsonify({
        'success': True,
        'challengeId': result.inserted_id,
        'message': "Challenge created successfully"
    }), 201


@challenges_blueprint.patch("/<challenge_id>")
@token_required
def update_challenge(challenge_id):
    challenge = _find_challenge(challenge_id)
    authorize(g.token_email, challenge.get("createdBy"))
    patch = build_patch(json_body(), "challenges")
    result = get_store().challenges.update_one({"_id": challenge["_id"]}, {"$set": patch})
    return jsonify({
        'success': True,
        'modifiedCount': result.modified_count,
        'message': "Challenge updated successfully"
    })


@challenges_blueprint.delete("/<challenge_id>")
@token_required
def delete_challenge(challenge_id):
    challenge = _find_challenge(challenge_id)
    authorize(g.token_email, challenge.get("createdBy"))
    get_store().challenges.delete_one({"_id": challenge["_id"]})
    removed = get_membership().remove_for_challenge(challenge["_id"])
    current_app.logger.info("Challenge %s deleted by %s (%d memberships removed)",
                            challenge["_id"], g.token_email, removed)
    return jsonify({
        'success': True,
        'removedMemberships': removed,
        'message': "Challenge deleted successfully"
    })


@challenges_blueprint.post("/join/<challenge_id>")
@token_required
def join_challenge(challenge_id):
    oid = parse_object_id(challenge_id, "challenge")
    membership_id = get_membership().join(g.token_email, oid)
    return jsonify({
        'success': True,
        'userChallengeId': membership_id,
        'message': "Successfully joined challenge"
    })
