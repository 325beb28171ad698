from flask import Blueprint, current_app, g, jsonify
from pymongo import DESCENDING, ReturnDocument

from auth import authorize, token_required
from errors import NotFound
from models import build_patch, build_tip, parse_object_id
from util import combine, get_store, json_body, query_arg, search_clause

tips_blueprint = Blueprint("tips", __name__, url_prefix="/api/tips")


def _find_tip(tip_id):
    oid = parse_object_id(tip_id, "tip")
    tip = get_store().tips.find_one({"_id": oid})
    if not tip:
        raise NotFound("Tip not found")
    return tip


@tips_blueprint.get("")
def list_tips():
    clauses = []
    category = query_arg("category")
    if category:
        clauses.append({"category": category})
    search = query_arg("search")
    if search:
        clauses.append(search_clause(search, ("title", "content")))
    cursor = get_store().tips.find(combine(clauses)).sort(
        [("upvotes", DESCENDING), ("createdAt", DESCENDING)]
    )
    return jsonify(list(cursor))


@tips_blueprint.get("/<tip_id>")
def get_tip(tip_id):
    return jsonify(_find_tip(tip_id))


@tips_blueprint.post("")
@token_required
def create_tip():
    tip = build_tip(json_body(), g.token_email)
    result = get_store().tips.insert_one(tip)
    current_app.logger.info("Tip %s created by %s", result.inserted_id, g.token_email)
    return jsonify({
        'success': True,
        'tipId': result.inserted_id,
        'message': "Tip created successfully"
    }), 201


@tips_blueprint.patch("/<tip_id>")
@token_required
def update_tip(tip_id):
    tip = _find_tip(tip_id)
    authorize(g.token_email, tip.get("author"))
    patch = build_patch(json_body(), "tips")
    result = get_store().tips.update_one({"_id": tip["_id"]}, {"$set": patch})
    return jsonify({
        'success': True,
        'modifiedCount': result.modified_count,
        'message': "Tip updated successfully"
    })


@tips_blueprint.delete("/<tip_id>")
@token_required
def delete_tip(tip_id):
    tip = _find_tip(tip_id)
    authorize(g.token_email, tip.get("author"))
    get_store().tips.delete_one({"_id": tip["_id"]})
    current_app.logger.info("Tip %s deleted by %s", tip["_id"], g.token_email)
    return jsonify({'success': True, 'message': "Tip deleted successfully"})


@tips_blueprint.patch("/<tip_id>/upvote")
@token_required
def upvote_tip(tip_id):
    oid = parse_object_id(tip_id, "tip")
    updated = get_store().tips.find_one_and_update(
        {"_id": oid},
        {"$inc": {"upvotes": 1}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise NotFound("Tip not found")
    return jsonify({'success': True, 'upvotes': updated["upvotes"]})
