# membership.py
# Challenge membership workflow across the challenges and user_challenges
# collections.
from numbers import Number

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import AlreadyJoined, BadRequest, NotFound
from models import ROLE_CREATOR, ROLE_PARTICIPANT, build_user_challenge, utcnow


class MembershipCoordinator:
    def __init__(self, store, logger):
        self.store = store
        self.logger = logger

    def add_creator(self, email, challenge):
        """Record the creator's membership; undo the challenge insert on failure."""
        row = build_user_challenge(email, challenge, ROLE_CREATOR)
        try:
            self.store.user_challenges.insert_one(row)
        except PyMongoError:
            self.logger.error("Creator membership insert failed, removing challenge %s", challenge["_id"])
            self.store.challenges.delete_one({"_id": challenge["_id"]})
            raise
        return row

    def join(self, email, challenge_id):
        challenge = self.store.challenges.find_one({"_id": challenge_id})
        if not challenge:
            raise NotFound("Challenge Not Found")

        if self.store.user_challenges.find_one({"email": email, "challengeId": challenge_id}):
            raise AlreadyJoined("Already joined this challenge")

        row = build_user_challenge(email, challenge, ROLE_PARTICIPANT)
        try:
            result = self.store.user_challenges.insert_one(row)
        except DuplicateKeyError:
            # a concurrent join won the race
            raise AlreadyJoined("Already joined this challenge")

        try:
            self.store.challenges.update_one({"_id": challenge_id}, {"$inc": {"participants": 1}})
        except PyMongoError:
            self.logger.error("Participant increment failed, rolling back membership %s", result.inserted_id)
            self.store.user_challenges.delete_one({"_id": result.inserted_id})
            raise

        self.logger.info("%s joined challenge %s", email, challenge_id)
        return result.inserted_id

    def update_progress(self, email, membership_id, body):
        changes = {}
        if "status" in body:
            status = body["status"]
            if not isinstance(status, str) or not status.strip():
                raise BadRequest("'status' must be a non-empty string")
            changes["status"] = status.strip()
        if "progress" in body:
            progress = body["progress"]
            if isinstance(progress, bool) or not isinstance(progress, Number) or not 0 <= progress <= 100:
                raise BadRequest("'progress' must be a number between 0 and 100")
            changes["progress"] = progress
        if not changes:
            raise BadRequest("Nothing to update: supply 'status' and/or 'progress'")
        changes["updatedAt"] = utcnow()

        updated = self.store.user_challenges.find_one_and_update(
            {"_id": membership_id, "email": email},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            raise NotFound("User challenge not found")
        return updated

    def remove_for_challenge(self, challenge_id):
        result = self.store.user_challenges.delete_many({"challengeId": challenge_id})
        return result.deleted_count

    def _pipeline(self, match):
        return [
            {"$match": match},
            {"$lookup": {
                "from": "challenges",
                "localField": "challengeId",
                "foreignField": "_id",
                "as": "challenge",
            }},
            {"$unwind": {"path": "$challenge", "preserveNullAndEmptyArrays": True}},
            {"$sort": {"joinDate": -1}},
        ]

    def list_for(self, email):
        return list(self.store.user_challenges.aggregate(self._pipeline({"email": email})))

    def get_for(self, email, membership_id):
        rows = list(self.store.user_challenges.aggregate(
            self._pipeline({"_id": membership_id, "email": email})
        ))
        if not rows:
            raise NotFound("User challenge not found")
        return rows[0]
