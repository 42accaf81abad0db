from pathlib import Path
import os

BASE_DIR_ENV = "INFOHUB_BASE_DIR"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value:
        return int(value)
    return default


BASE_DIR = Path(os.getenv(BASE_DIR_ENV, "~/infohub")).expanduser()

HOST = os.getenv("INFOHUB_HOST", "127.0.0.1")
PORT = _env_int("INFOHUB_PORT", 8090)

LOG_LEVEL = os.getenv("INFOHUB_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("INFOHUB_LOG_FILE")

# Shared secret for the editor API; unset means every request is trusted.
API_TOKEN = os.getenv("INFOHUB_API_TOKEN")
