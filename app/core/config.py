import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gather.db")

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Per-event lock used while deciding and writing a registration
EVENT_LOCK_TIMEOUT = int(os.getenv("EVENT_LOCK_TIMEOUT", "10"))
EVENT_LOCK_BLOCKING_TIMEOUT = int(os.getenv("EVENT_LOCK_BLOCKING_TIMEOUT", "5"))

# Notification endpoint; empty disables delivery
NOTIFICATION_URL = os.getenv("NOTIFICATION_URL", "")
NOTIFICATION_TIMEOUT = float(os.getenv("NOTIFICATION_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")


def get_database_url():
    return DATABASE_URL


def get_redis_url():
    return REDIS_URL


def get_cors_origins() -> list[str]:
    return [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]
