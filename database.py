# database.py
# One MongoStore per application. The client is opened lazily, once, and shared
# by every request; pymongo's MongoClient is thread-safe.
import threading

from pymongo import ASCENDING, MongoClient

CHALLENGES = "challenges"
EVENTS = "events"
TIPS = "tips"
USER_CHALLENGES = "user_challenges"


class MongoStore:
    def __init__(self, url, db_name, timeout_ms=5000, client=None, logger=None):
        self.url = url
        self.db_name = db_name
        self.timeout_ms = timeout_ms
        self.logger = logger
        self._client = client
        self._db = None
        self._lock = threading.Lock()

    @property
    def db(self):
        if self._db is None:
            with self._lock:
                if self._db is None:
                    self._db = self._connect()
        return self._db

    def _connect(self):
        if self._client is None:
            self._client = MongoClient(
                self.url,
                serverSelectionTimeoutMS=self.timeout_ms,
                connectTimeoutMS=self.timeout_ms,
                socketTimeoutMS=self.timeout_ms,
            )
        db = self._client[self.db_name]
        # one membership row per (email, challenge)
        db[USER_CHALLENGES].create_index(
            [("email", ASCENDING), ("challengeId", ASCENDING)],
            unique=True,
            name="uq_user_challenge",
        )
        if self.logger:
            self.logger.info("Connected to MongoDB database %r", self.db_name)
        return db

    @property
    def challenges(self):
        return self.db[CHALLENGES]

    @property
    def events(self):
        return self.db[EVENTS]

    @property
    def tips(self):
        return self.db[TIPS]

    @property
    def user_challenges(self):
        return self.db[USER_CHALLENGES]

    def close(self):
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None
