from flask import Blueprint, g, jsonify

from auth import token_required
from models import parse_object_id
from util import get_membership, json_body

user_challenges_blueprint = Blueprint("user_challenges", __name__, url_prefix="/api/user-challenges")


@user_challenges_blueprint.get("")
@token_required
def list_user_challenges():
    return jsonify(get_membership().list_for(g.token_email))


@user_challenges_blueprint.get("/<membership_id>")
@token_required
def get_user_challenge(membership_id):
    oid = parse_object_id(membership_id, "user challenge")
    return jsonify(get_membership().get_for(g.token_email, oid))


@user_challenges_blueprint.patch("/<membership_id>")
@token_required
def update_user_challenge(membership_id):
    oid = parse_object_id(membership_id, "user challenge")
    updated = get_membership().update_progress(g.token_email, oid, json_body())
    return jsonify({
        'success': True,
        'userChallenge': updated,
        'message': "Progress updated successfully"
    })
