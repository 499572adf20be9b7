"""
Runtime configuration for send-bridge.

All settings come from environment variables (optionally via a .env file
loaded with python-dotenv). They are read once at startup by
``Settings.from_env()`` and then passed explicitly into the Drive fetcher,
the Gotenberg merge client and the Brevo email client.

Environment variables
---------------------
MAX_FILE_MB          Size ceiling for each downloaded PDF, in MB (default: 20).
TIMEOUT_MS           Timeout applied to every outbound call (default: 45000).
MAX_REDIRECTS        Redirect hops followed on Drive downloads (default: 5).
MAX_BODY_BYTES       Largest accepted /send request body (default: 2 MB).
GOTENBERG_URL        Base URL of the Gotenberg merge service.
BREVO_API_KEY        Brevo transactional email API key (required to send).
BREVO_SENDER_EMAIL   Sender address shown to recipients.
BREVO_SENDER_NAME    Sender display name (default: "Sender").
BREVO_API_URL        Brevo send endpoint (override for testing only).
LOG_LEVEL            Root log level (default: INFO).
PORT                 Port used when running ``python -m send_bridge.main``.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Railway private networking DNS: SERVICE_NAME.railway.internal
DEFAULT_GOTENBERG_URL = "http://gotenberg.railway.internal:3000"
DEFAULT_BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


def _env_number(name: str, default, cast):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


class Settings(BaseModel):
    """Process-wide settings, immutable once built."""

    model_config = {"frozen": True}

    max_file_mb: float = 20
    timeout_ms: int = 45000
    max_redirects: int = 5
    max_body_bytes: int = 2 * 1024 * 1024
    gotenberg_url: str = DEFAULT_GOTENBERG_URL
    brevo_api_key: Optional[str] = None
    brevo_sender_email: Optional[str] = None
    brevo_sender_name: str = "Sender"
    brevo_api_url: str = DEFAULT_BREVO_API_URL
    log_level: str = "INFO"
    port: int = 3000

    @property
    def max_file_bytes(self) -> int:
        return int(self.max_file_mb * 1024 * 1024)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """
        Build Settings from the process environment.

        Args:
            dotenv: When True, load a .env file first (existing environment
                    variables win, matching load_dotenv's default).

        Raises:
            ValueError: If a numeric variable cannot be parsed.
        """
        if dotenv:
            load_dotenv()

        return cls(
            max_file_mb=_env_number("MAX_FILE_MB", 20, float),
            timeout_ms=_env_number("TIMEOUT_MS", 45000, int),
            max_redirects=_env_number("MAX_REDIRECTS", 5, int),
            max_body_bytes=_env_number("MAX_BODY_BYTES", 2 * 1024 * 1024, int),
            gotenberg_url=os.getenv("GOTENBERG_URL") or DEFAULT_GOTENBERG_URL,
            brevo_api_key=os.getenv("BREVO_API_KEY") or None,
            brevo_sender_email=os.getenv("BREVO_SENDER_EMAIL") or None,
            brevo_sender_name=os.getenv("BREVO_SENDER_NAME") or "Sender",
            brevo_api_url=os.getenv("BREVO_API_URL") or DEFAULT_BREVO_API_URL,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            port=_env_number("PORT", 3000, int),
        )
