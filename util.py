import re

from flask import current_app, request

from errors import BadRequest


def get_store():
    return current_app.extensions["mongo_store"]


def get_membership():
    return current_app.extensions["membership"]


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def query_arg(name):
    value = request.args.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def search_clause(term, fields):
    # case-insensitive substring match on any of the fields
    pattern = {"$regex": re.escape(term), "$options": "i"}
    return {"$or": [{field: pattern} for field in fields]}


def combine(clauses):
    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}
