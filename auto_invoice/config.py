# auto_invoice/config.py
"""Run constants, environment settings and the static client configuration loader."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .errors import ConfigurationError

COUNTER_KEY = "LAST_INVOICE_NUMBER"

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_MAILPACE_API_URL = "https://app.mailpace.com/api/v1/send"
DEFAULT_STATE_DIR = "state"
DEFAULT_ARCHIVE_DIR = "invoices"
DEFAULT_ARTIFACT_PREFIX = "techops"
DEFAULT_SENDER_NAME = "Santiago"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_DUE_DAYS = 30

# Invoice numbers are shown as "#0007" on the document
INVOICE_NUMBER_WIDTH = 4


class Settings(BaseModel):
    from_email: Optional[str] = None
    mailpace_api_token: Optional[str] = None
    mailpace_api_url: str = DEFAULT_MAILPACE_API_URL
    state_dir: str = DEFAULT_STATE_DIR
    archive_dir: str = DEFAULT_ARCHIVE_DIR
    artifact_prefix: str = DEFAULT_ARTIFACT_PREFIX
    sender_name: str = DEFAULT_SENDER_NAME
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    due_days: int = DEFAULT_DUE_DAYS

    @property
    def artifact_name(self) -> str:
        return f"{self.artifact_prefix}-invoice"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            from_email=env.get("FROM_EMAIL") or None,
            mailpace_api_token=env.get("MAILPACE_API_TOKEN") or None,
            mailpace_api_url=env.get("MAILPACE_API_URL", DEFAULT_MAILPACE_API_URL),
            state_dir=env.get("AUTO_INVOICE_STATE_DIR", DEFAULT_STATE_DIR),
            archive_dir=env.get("AUTO_INVOICE_ARCHIVE_DIR", DEFAULT_ARCHIVE_DIR),
            artifact_prefix=env.get("AUTO_INVOICE_ARTIFACT_PREFIX", DEFAULT_ARTIFACT_PREFIX),
            sender_name=env.get("AUTO_INVOICE_SENDER_NAME", DEFAULT_SENDER_NAME),
            http_timeout=float(env.get("AUTO_INVOICE_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)),
            due_days=int(env.get("AUTO_INVOICE_DUE_DAYS", DEFAULT_DUE_DAYS)),
        )


def default_config_path() -> str:
    return os.getenv("AUTO_INVOICE_CONFIG", DEFAULT_CONFIG_PATH)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Read the company/clients JSON document as a raw mapping.

    The result is not validated; pass it through
    :func:`auto_invoice.validator.validate_config` before building models.
    """
    cfg_path = Path(path or default_config_path())
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError([f"config file not found: {cfg_path}"])
    except json.JSONDecodeError as e:
        raise ConfigurationError([f"config file is not valid JSON: {cfg_path}: {e}"])

    if not isinstance(data, dict):
        raise ConfigurationError(["config must be a JSON object"])
    return data
