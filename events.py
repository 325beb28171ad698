from flask import Blueprint, current_app, g, jsonify
from pymongo import ASCENDING, ReturnDocument

from auth import authorize, token_required
from errors import AlreadyJoined, BadRequest, EventFull, NotFound
from models import build_event, build_patch, parse_object_id, utcnow
from util import combine, get_store, json_body, query_arg, search_clause

events_blueprint = Blueprint("events", __name__, url_prefix="/api/events")


def _find_event(event_id):
    oid = parse_object_id(event_id, "event")
    event = get_store().events.find_one({"_id": oid})
    if not event:
        raise NotFound("Event not found")
    return event


@events_blueprint.get("")
def list_events():
    clauses = []
    category = query_arg("category")
    if category:
        clauses.append({"category": category})
    search = query_arg("search")
    if search:
        clauses.append(search_clause(search, ("title", "description")))

    status = query_arg("status")
    if query_arg("upcoming") == "true":
        status = "upcoming"
    if status == "upcoming":
        clauses.append({"date": {"$gte": utcnow()}})
    elif status == "past":
        clauses.append({"date": {"$lt": utcnow()}})
    elif status is not None:
        raise BadRequest("status must be 'upcoming' or 'past'")

    cursor = get_store().events.find(combine(clauses)).sort("date", ASCENDING)
    return jsonify(list(cursor))


@events_blueprint.get("/<event_id>")
def get_event(event_id):
    return jsonify(_find_event(event_id))


@events_blueprint.post("")
@token_required
def create_event():
    event = build_event(json_body(), g.token_email)
    result = get_store().events.insert_one(event)
    current_app.logger.info("Event %s created by %s", result.inserted_id, g.token_email)
    return jsonify({
        'success': True,
        'eventId': result.inserted_id,
        'message': "Event created successfully"
    }), 201


@events_blueprint.patch("/<event_id>")
@token_required
def update_event(event_id):
    event = _find_event(event_id)
    authorize(g.token_email, event.get("organizer"))
    patch = build_patch(json_body(), "events")
    query = {"_id": event["_id"]}
    if "maxParticipants" in patch:
        # never shrink below attendance, even if a join lands meanwhile
        query["currentParticipants"] = {"$lte": patch["maxParticipants"]}
    result = get_store().events.update_one(query, {"$set": patch})
    if result.matched_count == 0:
        if "maxParticipants" not in patch:
            raise NotFound("Event not found")
        raise BadRequest("'maxParticipants' cannot be lower than the current participant count")
    return jsonify({
        'success': True,
        'modifiedCount': result.modified_count,
        'message': "Event updated successfully"
    })


@events_blueprint.delete("/<event_id>")
@token_required
def delete_event(event_id):
    event = _find_event(event_id)
    authorize(g.token_email, event.get("organizer"))
    get_store().events.delete_one({"_id": event["_id"]})
    current_app.logger.info("Event %s deleted by %s", event["_id"], g.token_email)
    return jsonify({'success': True, 'message': "Event deleted successfully"})


@events_blueprint.post("/<event_id>/join")
@token_required
def join_event(event_id):
    email = g.token_email
    event = _find_event(event_id)
    # capacity and duplicate checks happen in the same conditional update
    updated = get_store().events.find_one_and_update(
        {
            "_id": event["_id"],
            "$expr": {"$lt": ["$currentParticipants", "$maxParticipants"]},
            "attendees": {"$ne": email},
        },
        {"$inc": {"currentParticipants": 1}, "$addToSet": {"attendees": email}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        current = get_store().events.find_one({"_id": event["_id"]})
        if current is None:
            raise NotFound("Event not found")
        if email in current.get("attendees", []):
            raise AlreadyJoined("Already joined this event")
        raise EventFull()
    current_app.logger.info("%s joined event %s", email, event["_id"])
    return jsonify({
        'success': True,
        'currentParticipants': updated["currentParticipants"],
        'message': "Successfully joined event"
    })
