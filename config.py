"""Global configuration values."""

import os

# Horizontal drag distance a gesture must exceed to commit a decision
SWIPE_COMMIT_THRESHOLD = float(os.environ.get("SWIPE_COMMIT_THRESHOLD", "120"))

# Session bootstrap (seconds)
SESSION_LOAD_TIMEOUT = float(os.environ.get("SESSION_LOAD_TIMEOUT", "15"))
PROFILE_FETCH_ATTEMPTS = int(os.environ.get("PROFILE_FETCH_ATTEMPTS", "3"))
PROFILE_FETCH_BACKOFF = float(os.environ.get("PROFILE_FETCH_BACKOFF", "0.2"))

# Accept actions allowed per day on the free tier
FREE_LIKES_PER_DAY = int(os.environ.get("FREE_LIKES_PER_DAY", "3"))

# Comma-separated viewer ids on the premium tier for the in-memory backend
PREMIUM_USER_IDS = tuple(uid.strip() for uid in os.environ.get("PREMIUM_USER_IDS", "").split(",") if uid.strip())

# Optional Supabase (PostgREST) backend; in-memory stores are used when unset
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_KEY = os.environ.get("SUPABASE_KEY", "")
SUPABASE_TIMEOUT = float(os.environ.get("SUPABASE_TIMEOUT", "10"))

# Viewer used by the CLI and the in-memory backend when none is given
CURRENT_USER_ID = os.environ.get("CURRENT_USER_ID", "user_1")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
