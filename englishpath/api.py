# englishpath/api.py
from flask import Blueprint, Response, request, jsonify, current_app, stream_with_context
from datetime import datetime, timezone
import json, queue

from .auth import Identity, token_required
from .content import DICTATION_SENTENCES, SPEAKING_PROMPT
from .dictation import DictationPanel
from .lessons import LessonsPanel
from .services import get_services
from .speaking import SpeakingPanel
from .store import (StoreError, PROFILE, PROFILE_DOC, PROGRESS, PROGRESS_DOC,
                    SPEAKING_RESULTS, DICTATION_RESULTS)
from .tts import MediaError
from .vocabulary import VocabularyPanel

api_bp = Blueprint("api", __name__)


@api_bp.route("/healthz", methods=["GET"])
def healthz():
    return jsonify({"ok": True, "time": datetime.now(timezone.utc).isoformat()})

# ---------------------------
# Helpers
# ---------------------------
def _display_name(identity: Identity) -> str:
    try:
        profile = get_services().store.get(identity.uid, PROFILE, PROFILE_DOC) or {}
    except StoreError:
        current_app.logger.exception("Profile read failed for %s", identity.uid)
        profile = {}
    return profile.get("displayName") or ""

def _int_arg(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default

def _mp3(data: bytes) -> Response:
    return Response(data, mimetype="audio/mpeg", headers={"Cache-Control": "no-store"})

def _media_error(e: MediaError):
    current_app.logger.warning("Media failure: %s", e)
    return jsonify({"ok": False, "message": str(e)}), 422

# ---------------------------
# Lessons / progress
# ---------------------------

@api_bp.route("/lessons", methods=["GET"])
@token_required
def lessons(identity):
    with LessonsPanel(get_services().store, identity.uid) as panel:
        return jsonify(panel.snapshot())

@api_bp.route("/lessons/<lesson_id>/complete", methods=["POST"])
@token_required
def complete_lesson(identity, lesson_id):
    services = get_services()
    with LessonsPanel(services.store, identity.uid, _display_name(identity)) as panel:
        try:
            saved = panel.complete(lesson_id)
        except KeyError:
            return jsonify({"message": f"Unknown lesson: {lesson_id}"}), 404
        return jsonify({"ok": True, "saved": saved, **panel.snapshot()})

@api_bp.route("/progress/stream", methods=["GET"])
@token_required
def progress_stream(identity):
    """Server-sent events: one snapshot per progress change, until the client goes away."""
    updates = queue.Queue()
    panel = LessonsPanel(get_services().store, identity.uid, on_change=updates.put)
    panel.mount()
    heartbeat = current_app.config.get("SSE_HEARTBEAT_SECONDS", 15)

    def generate():
        try:
            while not panel.closed:
                try:
                    updates.get(timeout=heartbeat)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                yield f"data: {json.dumps(panel.snapshot())}\n\n"
        finally:
            panel.close()

    resp = Response(stream_with_context(generate()), mimetype="text/event-stream",
                    headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"})
    resp.call_on_close(panel.close)
    return resp

# ---------------------------
# Dictation
# ---------------------------

@api_bp.route("/dictation", methods=["GET"])
@token_required
def dictation(identity):
    total = len(DICTATION_SENTENCES)
    index = _int_arg(request.args.get("index")) % total
    return jsonify({"index": index, "total": total, "audio": f"/api/dictation/{index}/audio"})

@api_bp.route("/dictation/<int:index>/audio", methods=["GET"])
@token_required
def dictation_audio(identity, index):
    services = get_services()
    with DictationPanel(services.store, identity.uid, speech=services.speech, index=index) as panel:
        try:
            return _mp3(panel.play())
        except MediaError as e:
            return _media_error(e)

@api_bp.route("/dictation/check", methods=["POST"])
@token_required
def dictation_check(identity):
    data = request.get_json(silent=True) or {}
    answer = data.get("answer")
    if not isinstance(answer, str):
        return jsonify({"message": "answer is required"}), 400
    index = _int_arg(data.get("index"))

    services = get_services()
    with DictationPanel(services.store, identity.uid, _display_name(identity), index=index) as panel:
        result = panel.check(answer)
        return jsonify({"index": panel.index, **result.to_dict()})

# ---------------------------
# Speaking
# ---------------------------

@api_bp.route("/speaking", methods=["GET"])
@token_required
def speaking_prompt(identity):
    return jsonify({"prompt": SPEAKING_PROMPT})

@api_bp.route("/speaking", methods=["POST"])
@token_required
def speaking_submit(identity):
    upload = request.files.get("audio")
    blob = upload.read() if upload else request.get_data()

    services = get_services()
    with SpeakingPanel(services.store, identity.uid, _display_name(identity), feedback=services.feedback) as panel:
        try:
            attempt = panel.submit(blob)
        except MediaError as e:
            return _media_error(e)
        return jsonify(attempt.to_dict())

# ---------------------------
# Vocabulary
# ---------------------------

@api_bp.route("/vocabulary", methods=["GET"])
@token_required
def vocabulary(identity):
    with VocabularyPanel(get_services().store, identity.uid) as panel:
        entries = panel.search(request.args.get("q"))
        return jsonify({"count": len(entries), "words": [e.to_dict() for e in entries]})

@api_bp.route("/vocabulary/<word>/audio", methods=["GET"])
@token_required
def vocabulary_audio(identity, word):
    services = get_services()
    with VocabularyPanel(services.store, identity.uid, speech=services.speech) as panel:
        try:
            return _mp3(panel.speak(word))
        except KeyError:
            return jsonify({"message": f"Unknown word: {word}"}), 404
        except MediaError as e:
            return _media_error(e)

# ---------------------------
# Export
# ---------------------------

@api_bp.route("/me/export", methods=["GET"])
@token_required
def my_export(identity):
    store = get_services().store
    return jsonify({
        "user": identity.to_dict(),
        "profile": store.get(identity.uid, PROFILE, PROFILE_DOC),
        "progress": store.get(identity.uid, PROGRESS, PROGRESS_DOC),
        "speaking_results": store.list_collection(identity.uid, SPEAKING_RESULTS),
        "dictation_results": store.list_collection(identity.uid, DICTATION_RESULTS),
    })
