from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from .models import Secrets

SECRETS_ENV_VAR = "SECRETS_PATH"
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_SECRETS_PATH = PROJECT_ROOT / "secrets.json"

ENV_SECRET_KEYS = {
    "supabase_url": "SUPABASE_URL",
    "supabase_key": "SUPABASE_KEY",
    "solapi_api_key": "SOLAPI_API_KEY",
    "solapi_api_secret": "SOLAPI_API_SECRET",
    "solapi_sender_number": "SOLAPI_SENDER_NUMBER",
    "twilio_sid": "TWILIO_ACCOUNT_SID",
    "twilio_token": "TWILIO_AUTH_TOKEN",
    "twilio_phone": "TWILIO_PHONE_NUMBER",
}
REQUIRED_FIELDS = ("supabase_url", "supabase_key")

FILE_SECRET_PATHS: Dict[str, Sequence[Sequence[str]]] = {
    "supabase_url": (("supabase", "url"),),
    "supabase_key": (("supabase", "key"), ("supabase", "anon_key")),
    "solapi_api_key": (("solapi", "api_key"),),
    "solapi_api_secret": (("solapi", "api_secret"),),
    "solapi_sender_number": (("solapi", "sender_number"),),
    "twilio_sid": (("twilio", "account_sid"), ("twilio", "secrets", "account_sid")),
    "twilio_token": (("twilio", "auth_token"), ("twilio", "secrets", "auth_token")),
    "twilio_phone": (("twilio", "phone_number"), ("twilio", "secrets", "phone_number")),
}


def load_secrets(path: Path | str | None = None) -> Secrets:
    """
    Load secrets from environment variables or a json secrets file.

    Environment variables take precedence. If the required Supabase values are
    missing we fall back to the secrets json file whose path can be overridden
    via SECRETS_PATH. Gateway credentials are optional here and validated when
    the gateway is built.
    """
    env_values = _collect_env_values()
    secrets_path = _resolve_secrets_path(path)

    if not secrets_path.exists():
        missing = [ENV_SECRET_KEYS[name] for name in REQUIRED_FIELDS if not env_values.get(name)]
        if missing:
            raise FileNotFoundError(
                f"Secrets file not found at {secrets_path} and missing environment variables: {', '.join(missing)}"
            )
        return Secrets(**env_values)  # type: ignore[arg-type]

    with open(secrets_path, "r", encoding="utf-8") as fh:
        payload: Dict[str, Any] = json.load(fh)

    # Fill in any missing env values using the loaded file content.
    for name, paths in FILE_SECRET_PATHS.items():
        if not env_values.get(name):
            env_values[name] = _extract(payload, paths)

    missing_fields = [name for name in REQUIRED_FIELDS if not env_values.get(name)]
    if missing_fields:
        raise KeyError(f"Missing secret values in file {secrets_path}: {', '.join(missing_fields)}")

    return Secrets(**env_values)  # type: ignore[arg-type]


def _collect_env_values() -> Dict[str, Optional[str]]:
    return {field: (os.getenv(env_key) or "").strip() or None for field, env_key in ENV_SECRET_KEYS.items()}


def _extract(payload: Mapping[str, Any], paths: Iterable[Sequence[str]]) -> str | None:
    for path in paths:
        node: Any = payload
        for key in path:
            if isinstance(node, Mapping) and key in node:
                node = node[key]
            else:
                node = None
                break
        if node is None:
            continue
        if isinstance(node, Mapping) and "value" in node:
            candidate = node["value"]
        else:
            candidate = node
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def _resolve_secrets_path(path: Path | str | None) -> Path:
    if path:
        return Path(path).expanduser()

    env_override = os.getenv(SECRETS_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser()

    return DEFAULT_SECRETS_PATH.expanduser()
