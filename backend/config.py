# Role: Central configuration module. Loads .env into environment variables and computes runtime settings
# (DEBUG, PORT), parses the Dialogflow service-account credentials and installs the log sink.
# Importers read backend.config.DEBUG / backend.config.PORT without threading settings through every call.

from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict

from dotenv import load_dotenv
from loguru import logger

PROJECT_ID = "nomadia-chatbot-hjcj"
LANGUAGE_CODE = "fr-FR"

CREDENTIALS_ENV_VAR = "GOOGLE_CREDENTIALS_JSON"
REQUIRED_CREDENTIAL_KEYS = ("private_key", "client_email")

HOST = "0.0.0.0"
DEFAULT_PORT = 5000

DEBUG: bool = False
PORT: int = DEFAULT_PORT


class ConfigurationError(RuntimeError):
    """Raised when the process cannot be configured (credentials, port)."""


def load_env() -> None:
    """
    Load .env into os.environ, then recompute DEBUG and PORT and reinstall the log sink.
    This makes settings correct even if load_env() is called after import.
    """
    global DEBUG, PORT
    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}
    PORT = read_port()
    configure_logging()


def read_port() -> int:
    raw = (os.getenv("PORT") or "").strip()
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"PORT must be an integer, got {raw!r}") from e


def parse_credentials(raw: str) -> Dict[str, Any]:
    # 1) Parse the JSON document
    # 2) Require an object with non-empty private_key + client_email
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{CREDENTIALS_ENV_VAR} is not valid JSON: {e}") from e

    if not isinstance(info, dict):
        raise ConfigurationError(f"{CREDENTIALS_ENV_VAR} must be a JSON object")

    missing = [key for key in REQUIRED_CREDENTIAL_KEYS if not info.get(key)]
    if missing:
        raise ConfigurationError(f"{CREDENTIALS_ENV_VAR} is missing: {', '.join(missing)}")

    return info


def load_credentials() -> Dict[str, Any]:
    raw = os.getenv(CREDENTIALS_ENV_VAR)
    if not raw or not raw.strip():
        raise ConfigurationError(f"Missing {CREDENTIALS_ENV_VAR} in environment or .env")
    return parse_credentials(raw)


def configure_logging() -> None:
    # Single stderr sink; DEBUG switches on the per-request traces.
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if DEBUG else "INFO")
