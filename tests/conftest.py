import os

# Settings are read at import time; keep tests away from Redis throttling
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")
