"""
Load environment variables from env.txt / .env at project root, plus typed accessors.
"""
import os
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
ENV_FILES = ("env.txt", ".env")


def load_env():
    for name in ENV_FILES:
        env_file = ROOT / name
        if not env_file.exists():
            continue
        for line in env_file.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, val = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export "):].strip()
            val = val.strip()
            # remove inline comments
            if "#" in val:
                val = val.split("#", 1)[0].strip()
            val = val.strip('"').strip("'")
            if key and val and key not in os.environ:
                os.environ[key] = val


def env_str(key: str, default: str | None = None) -> str | None:
    val = os.getenv(key, "")
    return val if val else default


def env_int(key: str, default: int) -> int:
    raw = os.getenv(key, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        print(f"[config] invalid int for {key}={raw!r}, using {default}")
        return default


# retrieval limits
DEFAULT_MAX_FILES = 50
DEFAULT_MAX_BYTES = 200_000
WALKTHROUGH_MAX_FILES = 60
WALKTHROUGH_MAX_BYTES = 300_000
SCORING_WINDOW = 500
FETCH_CONCURRENCY = 8

# model provider
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_EMBED_MODEL = "text-embedding-3-large"

# rate limiting
RATE_LIMIT_WINDOW_MS = 60_000
RATE_LIMIT_MAX = 10

# load on import
load_env()
