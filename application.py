import logging
from datetime import datetime, timezone

from bson.errors import InvalidDocument
from bson.objectid import ObjectId
from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from pymongo.errors import PyMongoError
from werkzeug.exceptions import HTTPException

from auth import FirebaseTokenVerifier
from challenges import challenges_blueprint
from config import Config
from database import MongoStore
from errors import ApiError
from events import events_blueprint
from membership import MembershipCoordinator
from models import utcnow
from tips import tips_blueprint
from user_challenges import user_challenges_blueprint


class MongoJSONProvider(DefaultJSONProvider):
    """Renders ObjectId as its hex string and datetimes as ISO-8601 UTC."""

    @staticmethod
    def default(o):
        if isinstance(o, ObjectId):
            return str(o)
        if isinstance(o, datetime):
            if o.tzinfo is None:
                o = o.replace(tzinfo=timezone.utc)
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def create_app(config=None, store=None, verifier=None):
    application = Flask(__name__)
    application.json = MongoJSONProvider(application)
    application.config.from_object(Config)
    if config:
        application.config.update(config)
    application.logger.setLevel(getattr(logging, application.config["LOG_LEVEL"].upper(), logging.INFO))

    CORS(application, origins=application.config["CORS_ORIGINS"], supports_credentials=True)

    if store is None:
        store = MongoStore(
            application.config["MONGODB_URL"],
            application.config["MONGODB_NAME"],
            timeout_ms=application.config["MONGODB_TIMEOUT_MS"],
            logger=application.logger,
        )
    if verifier is None:
        verifier = FirebaseTokenVerifier(
            application.config["FIREBASE_API_KEY"],
            timeout=application.config["AUTH_TIMEOUT_SECONDS"],
        )
    application.extensions["mongo_store"] = store
    application.extensions["token_verifier"] = verifier
    application.extensions["membership"] = MembershipCoordinator(store, application.logger)

    application.register_blueprint(challenges_blueprint)
    application.register_blueprint(user_challenges_blueprint)
    application.register_blueprint(events_blueprint)
    application.register_blueprint(tips_blueprint)
    register_error_handlers(application)

    @application.route("/")
    def index():
        return jsonify({
            'message': "EcoTrack API is running!",
            'status': "success",
            'timestamp': utcnow()
        })

    return application


def register_error_handlers(application):
    @application.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify(e.to_dict()), e.status_code

    @application.errorhandler(InvalidDocument)
    def handle_invalid_document(e):
        return jsonify({'message': "Invalid document"}), 400

    @application.errorhandler(PyMongoError)
    def handle_store_error(e):
        # never leak store details to the client
        application.logger.exception("Database operation failed on %s %s", request.method, request.path)
        return jsonify({'message': "Internal server error"}), 500

    # here is route of 404 means route not found error
    @application.errorhandler(404)
    def route_not_found(e):
        return jsonify({'message': "Route not found", 'path': request.path}), 404

    @application.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'message': e.description}), e.code


if __name__ == "__main__":
    app = create_app()
    app.run(port=app.config["PORT"])
