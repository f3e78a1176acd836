# file: app/core/config.py

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", "serviceAccountKey.json")
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

USERS_COLLECTION = os.getenv("USERS_COLLECTION", "users")
NOTIFICATIONS_SUBCOLLECTION = os.getenv("NOTIFICATIONS_SUBCOLLECTION", "notifications")

ENABLE_FIRESTORE_LISTENER = _env_flag("ENABLE_FIRESTORE_LISTENER", False)
LISTENER_RECENT_LIMIT = int(os.getenv("LISTENER_RECENT_LIMIT", 10))
LISTENER_SKIP_EXISTING = _env_flag("LISTENER_SKIP_EXISTING", True)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", 3000))
