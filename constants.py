import os

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", None)
REDIS_DB = int(os.getenv("REDIS_DB", 0))

# Number of records returned by the call history endpoint
CALL_HISTORY_LIMIT = int(os.getenv("CALL_HISTORY_LIMIT", 50))

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

CALL_STATUS_INITIATED = "initiated"
CALL_STATUS_STARTED = "started"
CALL_STATUS_ENDED = "ended"
