"""Utilities for loading local (gitignored) credentials."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SECRETS_FILENAME = "local_secrets.json"
TOKEN_ENV_VAR = "GITHUB_COMMUNITY_TOKEN"


def _default_secrets_path() -> Path:
    root = Path(__file__).resolve().parents[1]
    return root / DEFAULT_SECRETS_FILENAME


def load_local_secrets(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Load secrets from a JSON file; return {} when unavailable or malformed."""

    candidate = path or os.getenv("LOCAL_SECRETS_FILE") or _default_secrets_path()
    secrets_path = Path(candidate).expanduser()
    if not secrets_path.exists():
        return {}
    try:
        with secrets_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def resolve_github_token(secrets: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Prefer the environment token, then `github_token` from the secrets file."""
    token = os.getenv(TOKEN_ENV_VAR)
    if token:
        return token.strip() or None
    secrets = load_local_secrets() if secrets is None else secrets
    value = secrets.get("github_token")
    if not value:
        return None
    return str(value).strip() or None


__all__ = [
    "load_local_secrets",
    "resolve_github_token",
    "DEFAULT_SECRETS_FILENAME",
    "TOKEN_ENV_VAR",
]
