"""Global pytest configuration."""

import os

# Tests build their own stores; keep developer environment out of Settings
os.environ.pop("DATABASE_URL", None)
os.environ.pop("REDIS_URL", None)
os.environ.setdefault("LOG_LEVEL", "WARNING")
