# auth.py
# Firebase ID token verification and the ownership check used before mutations.
from functools import wraps

import requests
from flask import current_app, g, request

from errors import Forbidden, Unauthenticated

IDENTITY_LOOKUP_URL = "https://identitytoolkit.googleapis.com/v1/accounts:lookup"


class FirebaseTokenVerifier:
    """Exchanges a Firebase ID token for the account email.

    The Identity Toolkit lookup endpoint rejects expired or forged tokens, so a
    successful lookup is the verification. No retries: any failure is a 401.
    """

    def __init__(self, api_key, timeout=10, session=None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def verify(self, token):
        if not token or not self.api_key:
            raise Unauthenticated()
        try:
            r = self.session.post(
                IDENTITY_LOOKUP_URL,
                params={"key": self.api_key},
                json={"idToken": token},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            current_app.logger.warning("Token lookup failed: %s", type(e).__name__)
            raise Unauthenticated()
        users = data.get("users") or [{}]
        email = users[0].get("email")
        if not email:
            raise Unauthenticated()
        return email


def bearer_token(header):
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def token_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token(request.headers.get("Authorization"))
        if token is None:
            raise Unauthenticated()
        verifier = current_app.extensions["token_verifier"]
        g.token_email = verifier.verify(token)
        return view(*args, **kwargs)
    return wrapper


def authorize(principal, owner):
    if not principal or principal != owner:
        raise Forbidden()
