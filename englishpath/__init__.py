# englishpath/__init__.py
import logging
import re
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate

from .config import Config, canon_db_url
from .models import db
from .services import Services, EXTENSION_KEY, get_services

__all__ = ["create_app", "db", "get_services"]

migrate = Migrate()


def _cors_origins(app: Flask):
    allowed = app.config.get("CORS_ALLOWED_ORIGINS") or []
    if not app.config.get("CORS_STRICT") or not allowed:
        return "*"
    out: list[object] = []
    for item in allowed:
        if isinstance(item, str) and item.startswith("regex:"):
            try:
                out.append(re.compile(item.split(":", 1)[1]))
            except re.error:
                app.logger.warning("Ignoring bad CORS pattern: %s", item)
        else:
            out.append(item)
    return out or "*"


def create_app(overrides: dict | None = None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # --- Secrets ---
    if not app.config.get("JWT_SECRET"):
        app.config["JWT_SECRET"] = app.config["SECRET_KEY"]

    # --- Database config ---
    db_url = canon_db_url(app.config.get("SQLALCHEMY_DATABASE_URI"))
    if not db_url:
        raise RuntimeError("DATABASE_URL not configured. Set DATABASE_URL or SQLALCHEMY_DATABASE_URI.")
    app.config["SQLALCHEMY_DATABASE_URI"] = db_url
    if not db_url.startswith("sqlite"):
        app.config.setdefault(
            "SQLALCHEMY_ENGINE_OPTIONS", {"pool_pre_ping": True, "pool_recycle": 280}
        )
    db.init_app(app)
    migrate.init_app(app, db)

    # --- Collaborators ---
    services = Services.from_config(app.config, db)
    app.extensions[EXTENSION_KEY] = services

    # --- CORS ---
    cors_origins = _cors_origins(app)
    CORS(
        app,
        resources={r"/api/*": {"origins": cors_origins}},
        supports_credentials=cors_origins != "*",
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        expose_headers=["Content-Type", "Authorization"],
    )

    # --- Blueprints ---
    from .account import account_bp
    from .api import api_bp
    from .routes import routes_bp

    app.register_blueprint(account_bp, url_prefix="/api")
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(routes_bp)

    app.add_url_rule(
        "/ping", "ping",
        lambda: (jsonify(status="ok", time=datetime.now(timezone.utc).isoformat()), 200),
    )

    # Optional local-only init
    if app.config.get("AUTO_INIT_DB"):
        with app.app_context():
            db.create_all()

    # --- Errors ---
    from .store import StoreError
    from .tts import MediaError

    @app.errorhandler(MediaError)
    def on_media_error(e):
        app.logger.warning("Media error: %s", e)
        return jsonify({"ok": False, "message": str(e)}), 422

    @app.errorhandler(StoreError)
    def on_store_error(e):
        app.logger.exception("Store error: %s", e)
        return jsonify({"ok": False, "error": "store_unavailable"}), 503

    @app.errorhandler(Exception)
    def on_error(e):
        from werkzeug.exceptions import HTTPException
        if isinstance(e, HTTPException):
            return e
        app.logger.exception("Unhandled error: %s", e)
        return jsonify({"ok": False, "error": "internal_error"}), 500

    return app
