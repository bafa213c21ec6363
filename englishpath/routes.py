# englishpath/routes.py
from pathlib import Path
from flask import Blueprint, send_from_directory, current_app

routes_bp = Blueprint("routes", __name__)

# Browser page: renders panels, captures the microphone, plays audio.
STATIC_DIR = Path(__file__).resolve().parent / "static"


@routes_bp.route("/")
def index():
    page = STATIC_DIR / "index.html"
    if not page.exists():
        current_app.logger.warning("Static page not found: %s", page)
        return "Not found", 404
    return send_from_directory(STATIC_DIR, "index.html")
