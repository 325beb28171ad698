import os
from dotenv import load_dotenv

load_dotenv()


def _split_origins(value):
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class Config:
    # MongoDB setup
    MONGODB_URL = os.environ.get("MONGODB_URL", "mongodb://localhost:27017/")
    MONGODB_NAME = os.environ.get("MONGODB_NAME", "ecotrack")
    MONGODB_TIMEOUT_MS = int(os.environ.get("MONGODB_TIMEOUT_MS", "5000"))

    # Firebase ID tokens are looked up through the Identity Toolkit REST API
    FIREBASE_API_KEY = os.environ.get("FIREBASE_API_KEY", "")
    AUTH_TIMEOUT_SECONDS = float(os.environ.get("AUTH_TIMEOUT_SECONDS", "10"))

    CORS_ORIGINS = _split_origins(
        os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
    )
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    PORT = int(os.environ.get("PORT", "5000"))
