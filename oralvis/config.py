"""
Centralised configuration constants and environment helpers.
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Backend API ──────────────────────────────────────────────────────
API_BASE_URL = os.getenv("ORALVIS_API_URL", "http://localhost:5000/api").rstrip("/")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("ORALVIS_REQUEST_TIMEOUT", "30"))

# ── Session persistence ──────────────────────────────────────────────
TOKEN_STORAGE_KEY = "token"
TOKEN_FILE = Path(
    os.getenv("ORALVIS_TOKEN_FILE", str(Path.home() / ".oralvis" / "session.json"))
)

# ── Routes ───────────────────────────────────────────────────────────
LOGIN_ROUTE = "/login"
LANDING_ROUTE = "/dashboard"
UPLOAD_ROUTE = "/upload"
SCANS_ROUTE = "/scans"

# ── Scans / uploads ──────────────────────────────────────────────────
SCAN_REGIONS = ("Frontal", "Upper Arch", "Lower Arch")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
RECENT_SCANS_LIMIT = 5

# Minimum lengths for upload metadata (after trimming)
MIN_PATIENT_NAME_CHARS = 2
MIN_PATIENT_ID_CHARS = 3
MIN_SCAN_TYPE_CHARS = 2

# ── Portal server ────────────────────────────────────────────────────
# Signs the session cookie. Required outside development; `oralvis-portal
# --new-secret` prints a fresh value for .env.
DEV_SECRET_KEY = "dev-secret-key-change-in-production"
PORTAL_HOST = os.getenv("PORTAL_HOST", "127.0.0.1")
PORTAL_PORT = int(os.getenv("PORTAL_PORT", "8000"))


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value


def portal_secret_key() -> str:
    """PORTAL_SECRET_KEY, falling back to DEV_SECRET_KEY only when FLASK_ENV=development."""
    if os.getenv("FLASK_ENV") == "development":
        return os.getenv("PORTAL_SECRET_KEY") or DEV_SECRET_KEY
    return get_env("PORTAL_SECRET_KEY")
