# config.py
import os, secrets
from urllib.parse import urlparse, urlsplit, urlunsplit, parse_qsl, urlencode

# ---------- helpers ----------
def _origin(url: str) -> str | None:
    try:
        p = urlparse(url or "")
        if not p.scheme or not p.hostname:
            return None
        port = f":{p.port}" if p.port else ""
        return f"{p.scheme}://{p.hostname}{port}"
    except ValueError:
        return None

def _add_query_params(url: str, extra: dict[str, str]) -> str:
    if not url:
        return url
    p = urlsplit(url)
    q = dict(parse_qsl(p.query, keep_blank_values=True))
    for k, v in extra.items():
        q.setdefault(k, v)
    return urlunsplit((p.scheme, p.netloc, p.path, urlencode(q), p.fragment))

def canon_db_url(url: str | None) -> str:
    """
    Hosted Postgres hands out postgres://; prefer postgresql+psycopg:// and require SSL.
    SQLite and other schemes are returned untouched.
    """
    if not url:
        return ""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    if not url.startswith("postgresql"):
        return url
    return _add_query_params(
        url,
        {
            "sslmode": "require",
            "connect_timeout": os.getenv("DB_CONNECT_TIMEOUT", "10"),
        },
    )

def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "on")

def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# ---------- database ----------
def resolve_db_url() -> str:
    for name in ("DATABASE_URL", "DATABASE_INTERNAL_URL", "POSTGRES_URL", "SQLALCHEMY_DATABASE_URI"):
        raw = os.getenv(name)
        if raw:
            return canon_db_url(raw)
    return "sqlite:///englishpath.db"

# ---------- CORS ----------
DEFAULT_CORS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5000",
    "http://127.0.0.1:5000",
    "http://localhost:5173",
]

def _merge_origins(*lists):
    out = []
    for lst in lists:
        for o in lst or []:
            v = _origin(o.strip()) if o else None
            if v and v not in out:
                out.append(v)
    return out

EXTRA_CORS = [s.strip() for s in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",") if s.strip()]
CORS_ALLOWED_ORIGINS = _merge_origins(DEFAULT_CORS, EXTRA_CORS)
CORS_STRICT = _env_bool("CORS_STRICT", False)

# ---------- identity / namespace ----------
APP_NAMESPACE = os.getenv("APP_NAMESPACE") or os.getenv("APP_ID") or "default-app-id"
INITIAL_AUTH_TOKEN = os.getenv("INITIAL_AUTH_TOKEN") or None
SESSION_TOKEN_DAYS = int(os.getenv("SESSION_TOKEN_DAYS", "7"))

# ---------- generative feedback (Gemini) ----------
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_API_URL = os.getenv(
    "GEMINI_API_URL",
    f"https://generativelanguage.googleapis.com/v1beta/models/{GEMINI_MODEL}:generateContent",
)
FEEDBACK_TIMEOUT = _env_float("FEEDBACK_TIMEOUT", 20.0)

# ---------- speech ----------
TTS_PROVIDER = os.getenv("TTS_PROVIDER", "gtts").lower()  # gtts | azure
TTS_LANG = os.getenv("TTS_LANG", "en")
TTS_VOICE = os.getenv("TTS_VOICE", "en-US-JennyNeural")
AZURE_SPEECH_KEY = os.getenv("AZURE_SPEECH_KEY") or os.getenv("SPEECH_KEY")
AZURE_SPEECH_REGION = os.getenv("AZURE_SPEECH_REGION") or os.getenv("AZURE_REGION")
AZURE_SPEECH_ENDPOINT = os.getenv("AZURE_SPEECH_ENDPOINT")

# ---------- canonical Config used by Flask ----------
class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY") or ("dev-" + secrets.token_urlsafe(32))
    JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY

    # SQLAlchemy/general
    SQLALCHEMY_DATABASE_URI = resolve_db_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_AS_ASCII = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    AUTO_INIT_DB = _env_bool("AUTO_INIT_DB", False)
    SSE_HEARTBEAT_SECONDS = _env_float("SSE_HEARTBEAT_SECONDS", 15.0)
    # uploads above this get a 413 before the body is read; leaves room over the 10 MB audio cap
    MAX_CONTENT_LENGTH = int(_env_float("MAX_UPLOAD_MB", 12) * 1024 * 1024)

    # Identity / store
    APP_NAMESPACE = APP_NAMESPACE
    INITIAL_AUTH_TOKEN = INITIAL_AUTH_TOKEN
    SESSION_TOKEN_DAYS = SESSION_TOKEN_DAYS

    # Feedback
    GEMINI_API_KEY = GEMINI_API_KEY
    GEMINI_MODEL = GEMINI_MODEL
    GEMINI_API_URL = GEMINI_API_URL
    FEEDBACK_TIMEOUT = FEEDBACK_TIMEOUT

    # Speech
    TTS_PROVIDER = TTS_PROVIDER
    TTS_LANG = TTS_LANG
    TTS_VOICE = TTS_VOICE
    AZURE_SPEECH_KEY = AZURE_SPEECH_KEY
    AZURE_SPEECH_REGION = AZURE_SPEECH_REGION
    AZURE_SPEECH_ENDPOINT = AZURE_SPEECH_ENDPOINT

    # CORS
    CORS_ALLOWED_ORIGINS = CORS_ALLOWED_ORIGINS
    CORS_STRICT = CORS_STRICT
