import os
from pathlib import Path

from dotenv import load_dotenv

from models.common import parse_bool

# Load environment variables from .env file in the backend folder
backend_dir = Path(__file__).parent
env_path = backend_dir / ".env"
load_dotenv(env_path)

SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")
if not SESSION_SECRET_KEY:  # pragma: no cover
    raise ValueError("SESSION_SECRET_KEY must be set")

API_PREFIX = os.getenv("API_PREFIX", "")
BACKEND_DIR = Path(__file__).parent
DATABASE_PATH = BACKEND_DIR / "habitpals.sqlite"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_PATH}")
DB_STATEMENT_TIMEOUT_MS = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "5000"))
PROJECT_PATH = BACKEND_DIR.parent

TESTING_MODE = parse_bool(os.getenv("TESTING_MODE", False))  # don't wait on retries
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# --- Friendship ---
ONLINE_WINDOW_SECONDS = int(os.getenv("ONLINE_WINDOW_SECONDS", "300"))
NOTIFICATIONS_PAGE_SIZE = int(os.getenv("NOTIFICATIONS_PAGE_SIZE", "20"))
NOTIFICATIONS_MAX_PAGE_SIZE = int(os.getenv("NOTIFICATIONS_MAX_PAGE_SIZE", "100"))
UID_MAX_LENGTH = int(os.getenv("UID_MAX_LENGTH", "11"))
MESSAGE_MAX_LENGTH = 500
ALIAS_MAX_LENGTH = 100

# --- Ops alerts ---
SLACK_TOKEN = os.getenv("SLACK_TOKEN") or None
SLACK_CHANNEL = os.getenv("SLACK_CHANNEL", "#habitpals")
