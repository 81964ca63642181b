import os

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://postgres:postgres@db:5432/swipe_match")
MIGRATIONS_DIR = os.getenv("MIGRATIONS_DIR", "").strip()

JWT_SECRET = os.getenv("JWT_SECRET", "")
ACCESS_TOKEN_TTL_MINUTES = int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "15"))
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"

# 0 disables the free-tier cap
DAILY_SWIPE_LIMIT_FREE = int(os.getenv("DAILY_SWIPE_LIMIT_FREE", "50"))
MATCH_EXPIRY_DAYS = int(os.getenv("MATCH_EXPIRY_DAYS", "14"))

SIDE_EFFECT_WORKERS = int(os.getenv("SIDE_EFFECT_WORKERS", "4"))
NOTIFY_MAX_ATTEMPTS = int(os.getenv("NOTIFY_MAX_ATTEMPTS", "5"))
# "outbox" queues rows for process_notifications; "log" only writes to the log
NOTIFY_BACKEND = os.getenv("NOTIFY_BACKEND", "outbox")

RL_SWIPE_LIMIT = int(os.getenv("RL_SWIPE_LIMIT", "120"))
RL_WINDOW_SECONDS = int(os.getenv("RL_WINDOW_SECONDS", "60"))
