# englishpath/account.py
# Sign-in, session state and profile setup.
from flask import Blueprint, request, jsonify, current_app

from .auth import AuthSession, get_bearer_token
from .services import get_services
from .session import SessionShell, LoggedOut, NeedsProfile, Ready
from .store import StoreError

account_bp = Blueprint("account", __name__)


def _shell() -> SessionShell:
    services = get_services()
    return SessionShell(AuthSession(services.auth), services.store)


@account_bp.route("/signin", methods=["POST"])
def signin():
    data = request.get_json(silent=True) or {}
    custom_token = (data.get("token") or "").strip() or current_app.config.get("INITIAL_AUTH_TOKEN")

    with _shell() as shell:
        state = shell.start(custom_token)
        if isinstance(state, LoggedOut):
            return jsonify({"ok": False, "error": state.error, "session": state.to_dict()}), 401
        identity = shell.auth.current
        current_app.logger.info("Signed in %s (anonymous=%s)", identity.uid, identity.is_anonymous)
        return jsonify({
            "ok": True,
            "token": shell.auth.token,
            **identity.to_dict(),
            "session": state.to_dict(),
        })


@account_bp.route("/session", methods=["GET"])
def session_state():
    with _shell() as shell:
        state = shell.resume(get_bearer_token())
        return jsonify(state.to_dict())


@account_bp.route("/profile", methods=["POST"])
def create_profile():
    data = request.get_json(silent=True) or {}
    with _shell() as shell:
        state = shell.resume(get_bearer_token())
        if isinstance(state, LoggedOut):
            return jsonify({"message": state.error or "Please sign in first", "session": state.to_dict()}), 401
        if isinstance(state, Ready):
            return jsonify({"message": "A profile already exists", "session": state.to_dict()}), 409
        try:
            state = shell.create_profile(data.get("display_name"))
        except ValueError as e:
            return jsonify({"message": str(e)}), 400
        except StoreError:
            current_app.logger.exception("Profile creation failed")
            return jsonify({"message": "Could not save your profile. Please try again."}), 503
        return jsonify({"ok": True, "session": state.to_dict()}), 201


@account_bp.route("/profile", methods=["PATCH"])
def rename_profile():
    data = request.get_json(silent=True) or {}
    with _shell() as shell:
        state = shell.resume(get_bearer_token())
        if isinstance(state, LoggedOut):
            return jsonify({"message": state.error or "Please sign in first"}), 401
        if isinstance(state, NeedsProfile):
            return jsonify({"message": "Create a profile first", "session": state.to_dict()}), 409
        try:
            state = shell.rename(data.get("display_name"))
        except ValueError as e:
            return jsonify({"message": str(e)}), 400
        except StoreError:
            current_app.logger.exception("Profile rename failed")
            return jsonify({"message": "Could not save your profile. Please try again."}), 503
        return jsonify({"ok": True, "session": state.to_dict()})


@account_bp.route("/signout", methods=["POST"])
def signout():
    with _shell() as shell:
        shell.resume(get_bearer_token(), touch_login=False)
        state = shell.sign_out()
        return jsonify({"ok": True, "session": state.to_dict()})
