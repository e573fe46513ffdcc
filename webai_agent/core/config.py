import os
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()


def env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    return default


def env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


def parse_viewport(text: str) -> Dict[str, int]:
    """Parse "WIDTHxHEIGHT" into a Playwright viewport dict."""
    parts = text.lower().replace(" ", "").split("x")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ConfigError(f"Invalid viewport '{text}', expected WIDTHxHEIGHT")
    width, height = (int(p) for p in parts)
    if width <= 0 or height <= 0:
        raise ConfigError(f"Invalid viewport '{text}', sizes must be positive")
    return {"width": width, "height": height}


# Browsing
START_URL = os.getenv("WEBAI_START_URL", "")
TIMEOUT_MS = env_int("WEBAI_TIMEOUT_MS", 4000)
HEADLESS = env_bool("WEBAI_HEADLESS", True)
VIEWPORT = parse_viewport(os.getenv("WEBAI_VIEWPORT", "1200x1200"))

# Model
MODEL_NAME = os.getenv("WEBAI_MODEL", "gpt-4o")
MAX_TOKENS = env_int("WEBAI_MAX_TOKENS", 1024)
MAX_STEPS = env_int("WEBAI_MAX_STEPS", 20)
KEEP_SCREENSHOTS = env_int("WEBAI_KEEP_SCREENSHOTS", 2)

# Output paths
OUT_DIR = Path(os.getenv("WEBAI_OUT_DIR", "artifacts/webai_agent"))
LOG_FILE = os.getenv("WEBAI_LOG_FILE", "agent.log")
LOG_LEVEL = os.getenv("WEBAI_LOG_LEVEL", "INFO").upper()
