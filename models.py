# models.py
# MongoDB document schemas (for documentation/reference) and the helpers that
# shape request bodies into stored documents.
from datetime import datetime, timezone

from bson.objectid import ObjectId

from errors import BadRequest

challenge_schema = {
    'title': 'str',  # required
    'category': 'str',  # required
    'description': 'str',
    'duration': 0,  # days
    'target': 'str',
    'imageUrl': 'str',
    'startDate': 'datetime',
    'endDate': 'datetime',  # challenges without an end date stay active
    'participants': 0,  # Integer, never negative
    'howToParticipate': ['str'],
    'environmentalImpact': 'str',
    'communityGoal': {
        'goal': 'str',
        'currentProgress': 0,
        'percentage': 0
    },
    'createdBy': 'str',  # owner email, set once from the verified token
    'createdAt': 'datetime',
    'updatedAt': 'datetime'
}

event_schema = {
    'title': 'str',  # required
    'description': 'str',
    'category': 'str',
    'date': 'datetime',  # required
    'location': 'str',
    'organizer': 'str',  # owner email
    'maxParticipants': 0,  # required, at least 1
    'currentParticipants': 0,  # 0 <= currentParticipants <= maxParticipants
    'attendees': ['str'],  # emails that joined
    'createdAt': 'datetime',
    'updatedAt': 'datetime'
}

tip_schema = {
    'title': 'str',  # required
    'content': 'str',  # required
    'category': 'str',
    'author': 'str',  # owner email
    'upvotes': 0,
    'createdAt': 'datetime',
    'updatedAt': 'datetime'
}

user_challenge_schema = {
    'email': 'str',
    'challengeId': 'ObjectId',  # unique together with email
    'challengeTitle': 'str',
    'imageUrl': 'str',
    'category': 'str',
    'role': 'creator | participant',
    'status': 'str',  # 'created', 'Not Started', 'In Progress', 'Completed'
    'progress': 0,  # 0-100
    'joinDate': 'datetime',
    'updatedAt': 'datetime'
}

ROLE_CREATOR = "creator"
ROLE_PARTICIPANT = "participant"
STATUS_CREATED = "created"
STATUS_NOT_STARTED = "Not Started"

# Fields a client may never write directly.
PROTECTED_FIELDS = {
    "challenges": {"_id", "createdBy", "createdAt", "updatedAt", "participants"},
    "events": {"_id", "organizer", "createdAt", "updatedAt", "currentParticipants", "attendees"},
    "tips": {"_id", "author", "createdAt", "updatedAt", "upvotes"},
}

REQUIRED_FIELDS = {
    "challenges": ("title", "category"),
    "events": ("title", "date", "maxParticipants"),
    "tips": ("title", "content"),
}

DATE_FIELDS = ("date", "startDate", "endDate")


def utcnow():
    # stored as naive UTC, matching what pymongo hands back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_object_id(value, label):
    if not ObjectId.is_valid(value):
        raise BadRequest(f"Invalid {label} ID")
    return ObjectId(value)


def parse_datetime(value, field):
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise BadRequest(f"Invalid date for '{field}'")
    else:
        raise BadRequest(f"Invalid date for '{field}'")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def require_fields(body, *fields):
    missing = [f for f in fields if body.get(f) in (None, "")]
    if missing:
        raise BadRequest(f"Missing required field(s): {', '.join(missing)}")


def _strip(body, collection):
    # dotted or $-prefixed keys would reach into protected fields or operators
    for key in body:
        if key.startswith("$") or "." in key:
            raise BadRequest(f"Invalid field name '{key}'")
    protected = PROTECTED_FIELDS[collection]
    cleaned = {k: v for k, v in body.items() if k not in protected}
    for field in DATE_FIELDS:
        if cleaned.get(field) is not None:
            cleaned[field] = parse_datetime(cleaned[field], field)
    return cleaned


def _non_negative_int(value, field):
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise BadRequest(f"'{field}' must be a non-negative integer")
    return value


def _positive_int(value, field):
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise BadRequest(f"'{field}' must be a positive integer")
    return value


def _check_challenge_fields(doc):
    if doc.get("duration") is not None:
        _non_negative_int(doc["duration"], "duration")
    if "communityGoal" in doc and not isinstance(doc["communityGoal"], (dict, type(None))):
        raise BadRequest("'communityGoal' must be an object")
    steps = doc.get("howToParticipate")
    if steps is not None and (not isinstance(steps, list) or not all(isinstance(s, str) for s in steps)):
        raise BadRequest("'howToParticipate' must be a list of strings")


def build_challenge(body, email):
    require_fields(body, *REQUIRED_FIELDS["challenges"])
    challenge = _strip(body, "challenges")
    _check_challenge_fields(challenge)
    goal = dict(challenge.get("communityGoal") or {})
    goal.setdefault("goal", "")
    if not goal.get("currentProgress"):
        goal["currentProgress"] = 0
    if not goal.get("percentage"):
        goal["percentage"] = 0
    now = utcnow()
    challenge.update({
        'participants': 0,
        'howToParticipate': challenge.get("howToParticipate") or [],
        'environmentalImpact': challenge.get("environmentalImpact") or "",
        'communityGoal': goal,
        'createdBy': email,
        'createdAt': now,
        'updatedAt': now
    })
    return challenge


def build_event(body, email):
    require_fields(body, *REQUIRED_FIELDS["events"])
    event = _strip(body, "events")
    _positive_int(event["maxParticipants"], "maxParticipants")
    now = utcnow()
    event.update({
        'currentParticipants': 0,
        'attendees': [],
        'organizer': email,
        'createdAt': now,
        'updatedAt': now
    })
    return event


def build_tip(body, email):
    require_fields(body, *REQUIRED_FIELDS["tips"])
    tip = _strip(body, "tips")
    now = utcnow()
    tip.update({
        'upvotes': 0,
        'author': email,
        'createdAt': now,
        'updatedAt': now
    })
    return tip


def build_user_challenge(email, challenge, role):
    """Membership row for ``email`` in ``challenge``; title and image are copied
    from the challenge so a membership list renders without a lookup."""
    if role == ROLE_CREATOR:
        status = STATUS_CREATED
        progress = challenge.get("communityGoal", {}).get("currentProgress", 0)
    else:
        status = STATUS_NOT_STARTED
        progress = 0
    now = utcnow()
    return {
        'email': email,
        'challengeId': challenge["_id"],
        'challengeTitle': challenge.get("title"),
        'imageUrl': challenge.get("imageUrl"),
        'category': challenge.get("category"),
        'role': role,
        'status': status,
        'progress': progress,
        'joinDate': now,
        'updatedAt': now
    }


def build_patch(body, collection):
    patch = _strip(body, collection)
    if not patch:
        raise BadRequest("No updatable fields supplied")
    blanked = [f for f in REQUIRED_FIELDS[collection] if f in patch and patch[f] in (None, "")]
    if blanked:
        raise BadRequest(f"Required field(s) cannot be cleared: {', '.join(blanked)}")
    if collection == "events" and "maxParticipants" in patch:
        _positive_int(patch["maxParticipants"], "maxParticipants")
    if collection == "challenges":
        _check_challenge_fields(patch)
    patch["updatedAt"] = utcnow()
    return patch
