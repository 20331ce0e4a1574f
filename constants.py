import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

STATIC_DIR = os.getenv("STATIC_DIR", "static")
WS_PATH = os.getenv("WS_PATH", "/ws")

ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]

# 0 disables eviction of rooms still waiting for a second player
ROOM_IDLE_TIMEOUT_SECONDS = int(os.getenv("ROOM_IDLE_TIMEOUT_SECONDS", 0))
ROOM_SWEEP_INTERVAL_SECONDS = int(os.getenv("ROOM_SWEEP_INTERVAL_SECONDS", 30))
