# englishpath/session.py
"""
Session/profile shell.

One explicit state at a time::

    AuthLoading -> LoggedOut | NeedsProfile | Ready
    NeedsProfile -> Ready       (profile created)
    Ready        -> LoggedOut   (sign out)

The shell watches the auth session's identity feed; every new identity is
looked up in the profile collection to decide between NeedsProfile and Ready.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, Union

from .auth import AuthError, AuthSession, Identity
from .feeds import Subscription
from .store import DocumentStore, StoreError, PROFILE, PROFILE_DOC, server_timestamp

log = logging.getLogger(__name__)

SIGN_IN_FAILED = "Sorry, we could not sign you in. Please refresh the page and try again."
PROFILE_LOAD_FAILED = "Sorry, we could not load your profile. Please try again."
MAX_NAME_LEN = 60


@dataclass(frozen=True)
class AuthLoading:
    kind: ClassVar[str] = "auth_loading"

    def to_dict(self) -> dict:
        return {"state": self.kind}


@dataclass(frozen=True)
class LoggedOut:
    error: str | None = None
    kind: ClassVar[str] = "logged_out"

    def to_dict(self) -> dict:
        return {"state": self.kind, "error": self.error}


@dataclass(frozen=True)
class NeedsProfile:
    identity: Identity
    kind: ClassVar[str] = "needs_profile"

    def to_dict(self) -> dict:
        return {"state": self.kind, **self.identity.to_dict()}


@dataclass(frozen=True)
class Ready:
    identity: Identity
    display_name: str
    kind: ClassVar[str] = "ready"

    def to_dict(self) -> dict:
        return {"state": self.kind, "display_name": self.display_name, **self.identity.to_dict()}


SessionState = Union[AuthLoading, LoggedOut, NeedsProfile, Ready]


def clean_display_name(raw) -> str:
    name = " ".join(str(raw or "").split())
    if not name:
        raise ValueError("display name is required")
    if len(name) > MAX_NAME_LEN:
        raise ValueError(f"display name must be at most {MAX_NAME_LEN} characters")
    return name


class SessionShell:
    def __init__(self, auth: AuthSession, store: DocumentStore):
        self.auth = auth
        self.store = store
        self.state: SessionState = AuthLoading()
        self._sub: Subscription | None = None
        self._touch_login = True

    # ---------------------------
    # Entry points
    # ---------------------------
    def start(self, custom_token: str | None = None) -> SessionState:
        """Sign in (custom token or anonymous) and route on the profile record."""
        self.state = AuthLoading()
        self._touch_login = True
        try:
            self.auth.sign_in(custom_token)
        except AuthError as e:
            log.warning("Sign-in failed: %s", e)
            self.state = LoggedOut(error=SIGN_IN_FAILED)
            return self.state
        self._watch()
        return self.state

    def resume(self, session_token: str | None, touch_login: bool = True) -> SessionState:
        """
        Pick up an existing session from its token.

        ``touch_login=False`` leaves ``lastLogin`` alone (used on sign-out).
        """
        self.state = AuthLoading()
        self._touch_login = touch_login
        if not session_token:
            self.state = LoggedOut()
            return self.state
        try:
            self.auth.restore(session_token)
        except AuthError as e:
            log.warning("Session restore failed: %s", e)
            self.state = LoggedOut(error=SIGN_IN_FAILED)
            return self.state
        self._watch()
        return self.state

    # ---------------------------
    # Transitions
    # ---------------------------
    def create_profile(self, display_name) -> Ready:
        if not isinstance(self.state, NeedsProfile):
            raise RuntimeError(f"cannot create a profile in state {self.state.kind}")
        name = clean_display_name(display_name)
        identity = self.state.identity
        now = server_timestamp()
        self.store.set(identity.uid, PROFILE, PROFILE_DOC, {
            "displayName": name,
            "createdAt": now,
            "lastLogin": now,
        })
        log.info("Created profile for %s", identity.uid)
        self.state = Ready(identity=identity, display_name=name)
        return self.state

    def rename(self, display_name) -> Ready:
        if not isinstance(self.state, Ready):
            raise RuntimeError(f"cannot rename in state {self.state.kind}")
        name = clean_display_name(display_name)
        self.store.set(self.state.identity.uid, PROFILE, PROFILE_DOC, {"displayName": name}, merge=True)
        self.state = Ready(identity=self.state.identity, display_name=name)
        return self.state

    def sign_out(self) -> SessionState:
        self.auth.sign_out()
        return self.state

    def close(self) -> None:
        if self._sub is not None:
            self._sub.cancel()
            self._sub = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    # ---------------------------
    # Identity feed
    # ---------------------------
    def _watch(self) -> None:
        if self._sub is None:
            self._sub = self.auth.on_identity_changed(self._on_identity)

    def _on_identity(self, identity: Identity | None) -> None:
        if identity is None:
            self.state = LoggedOut()
            return
        try:
            profile = self.store.get(identity.uid, PROFILE, PROFILE_DOC)
        except StoreError:
            log.exception("Profile lookup failed for %s", identity.uid)
            self.state = LoggedOut(error=PROFILE_LOAD_FAILED)
            return

        if not profile or not profile.get("displayName"):
            self.state = NeedsProfile(identity=identity)
            return

        self.state = Ready(identity=identity, display_name=profile["displayName"])
        if self._touch_login:
            self._touch_last_login(identity)

    def _touch_last_login(self, identity: Identity) -> None:
        try:
            self.store.set(identity.uid, PROFILE, PROFILE_DOC, {"lastLogin": server_timestamp()}, merge=True)
        except StoreError:
            log.exception("Could not refresh lastLogin for %s", identity.uid)
