# englishpath/auth.py
from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass
from functools import wraps
from typing import Callable

import jwt
from flask import request, jsonify, current_app

from .feeds import Feed, Subscription

ALGORITHM = "HS256"


class AuthError(Exception):
    """Sign-in or token verification failed."""


@dataclass(frozen=True)
class Identity:
    uid: str
    is_anonymous: bool = False

    def to_dict(self) -> dict:
        return {"uid": self.uid, "is_anonymous": self.is_anonymous}


def _checked_uid(sub, kind: str) -> str:
    # uids become a path segment in the document store
    uid = str(sub or "").strip()
    if not uid or "/" in uid:
        raise AuthError(f"{kind} token is invalid")
    return uid


# ----------------------------
# Auth client (token issuing / verification)
# ----------------------------
class AuthClient:
    def __init__(self, secret: str, session_days: int = 7):
        if not secret:
            raise ValueError("an auth secret is required")
        self.secret = secret
        self.session_days = session_days

    def _encode(self, payload: dict) -> str:
        token = jwt.encode(payload, self.secret, algorithm=ALGORITHM)
        return token if isinstance(token, str) else token.decode("utf-8")

    def mint_custom_token(self, uid: str, hours: int = 1) -> str:
        """Token a trusted backend hands to a client so it signs in as ``uid``."""
        now = datetime.datetime.now(datetime.timezone.utc)
        return self._encode({
            "sub": str(uid),
            "typ": "custom",
            "iat": now,
            "exp": now + datetime.timedelta(hours=hours),
        })

    def sign_in(self, custom_token: str | None = None) -> Identity:
        """Custom token when given, otherwise a fresh anonymous identity."""
        if not custom_token:
            return Identity(uid=uuid.uuid4().hex, is_anonymous=True)
        try:
            data = jwt.decode(custom_token, self.secret, algorithms=[ALGORITHM],
                              options={"require": ["sub"]})
        except jwt.ExpiredSignatureError as e:
            raise AuthError("custom token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthError("custom token is invalid") from e
        return Identity(uid=_checked_uid(data["sub"], "custom"), is_anonymous=False)

    def issue_session_token(self, identity: Identity) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        return self._encode({
            "sub": identity.uid,
            "anon": identity.is_anonymous,
            "typ": "session",
            "iat": now,
            "exp": now + datetime.timedelta(days=self.session_days),
        })

    def verify_session_token(self, token: str) -> Identity:
        try:
            data = jwt.decode(token, self.secret, algorithms=[ALGORITHM],
                              options={"require": ["sub", "exp"]})
        except jwt.ExpiredSignatureError as e:
            raise AuthError("session token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthError("session token is invalid") from e
        if data.get("typ") != "session":
            raise AuthError("not a session token")
        return Identity(uid=_checked_uid(data["sub"], "session"), is_anonymous=bool(data.get("anon")))


# ----------------------------
# One client's view of who is signed in
# ----------------------------
class AuthSession:
    """Current identity for one client plus a push feed of identity changes."""

    _KEY = "identity"

    def __init__(self, client: AuthClient):
        self.client = client
        self.current: Identity | None = None
        self.token: str | None = None
        self._feed = Feed("auth")

    def on_identity_changed(self, callback: Callable[[Identity | None], None]) -> Subscription:
        sub = self._feed.listen(self._KEY, callback)
        callback(self.current)
        return sub

    def _set(self, identity: Identity | None, token: str | None) -> None:
        self.current = identity
        self.token = token
        self._feed.publish(self._KEY, identity)

    def sign_in(self, custom_token: str | None = None) -> Identity:
        identity = self.client.sign_in(custom_token)
        self._set(identity, self.client.issue_session_token(identity))
        return identity

    def restore(self, session_token: str) -> Identity:
        identity = self.client.verify_session_token(session_token)
        self._set(identity, session_token)
        return identity

    def sign_out(self) -> None:
        self._set(None, None)

    def close(self) -> None:
        self._feed.close()


# ----------------------------
# Request helpers
# ----------------------------
def get_bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return request.args.get("token") or None


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        # Allow CORS preflight without auth
        if request.method == "OPTIONS":
            return ("", 204)

        token = get_bearer_token()
        if not token:
            return jsonify({"message": "Authorization token is missing"}), 401

        try:
            from .services import get_services  # local import to avoid cycles
            identity = get_services().auth.verify_session_token(token)
        except AuthError as e:
            current_app.logger.warning("Rejected session token: %s", e)
            return jsonify({"message": "Authorization token is invalid", "error": str(e)}), 401
        return f(identity, *args, **kwargs)
    return decorated
