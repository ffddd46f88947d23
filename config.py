"""
Process configuration, read once from the environment (and a local .env file).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw.isdigit():
        return default
    return int(raw)


# -----------------------------
# GitHub
# -----------------------------
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "").strip()
GITHUB_API_BASE = "https://api.github.com"
GITHUB_GRAPHQL = "https://api.github.com/graphql"
API_VERSION = os.getenv("GITHUB_API_VERSION", "2022-11-28")
REQUEST_TIMEOUT = _env_int("GITHUB_TIMEOUT", 20)

# Upper bound on /users/{login}/repos pages (100 repos each)
MAX_REPO_PAGES = _env_int("MAX_REPO_PAGES", 10)

# -----------------------------
# Ratings dataset
# -----------------------------
RATINGS_PATH = Path(os.getenv("RATINGS_PATH", "") or BASE_DIR / "player_ratings.json")

# -----------------------------
# HTTP layer
# -----------------------------
IMAGE_PROXY_VERIFY_TLS = _env_bool("IMAGE_PROXY_VERIFY_TLS", True)
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").strip() or "*"
PORT = _env_int("PORT", 3000)

# -----------------------------
# Logging
# -----------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "").strip()
