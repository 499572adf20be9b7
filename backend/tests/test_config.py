"""
Unit tests for Settings.from_env and the size helpers.
"""

import pytest

from send_bridge.config import DEFAULT_BREVO_API_URL, DEFAULT_GOTENBERG_URL, Settings
from send_bridge.services.sizes import bytes_to_mb

_ENV_VARS = [
    "MAX_FILE_MB", "TIMEOUT_MS", "MAX_REDIRECTS", "MAX_BODY_BYTES", "GOTENBERG_URL",
    "BREVO_API_KEY", "BREVO_SENDER_EMAIL", "BREVO_SENDER_NAME", "BREVO_API_URL",
    "LOG_LEVEL", "PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettingsFromEnv:
    def test_defaults(self, clean_env):
        settings = Settings.from_env(dotenv=False)

        assert settings.max_file_mb == 20
        assert settings.timeout_ms == 45000
        assert settings.max_redirects == 5
        assert settings.max_body_bytes == 2 * 1024 * 1024
        assert settings.gotenberg_url == DEFAULT_GOTENBERG_URL
        assert settings.brevo_api_key is None
        assert settings.brevo_sender_email is None
        assert settings.brevo_sender_name == "Sender"
        assert settings.brevo_api_url == DEFAULT_BREVO_API_URL
        assert settings.port == 3000

    def test_reads_environment(self, clean_env):
        clean_env.setenv("MAX_FILE_MB", "7.5")
        clean_env.setenv("TIMEOUT_MS", "1000")
        clean_env.setenv("GOTENBERG_URL", "http://gotenberg:3000")
        clean_env.setenv("BREVO_API_KEY", "xkeysib-123")
        clean_env.setenv("BREVO_SENDER_EMAIL", "noreply@example.com")
        clean_env.setenv("BREVO_SENDER_NAME", "Contracts")
        clean_env.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env(dotenv=False)

        assert settings.max_file_mb == 7.5
        assert settings.max_file_bytes == int(7.5 * 1024 * 1024)
        assert settings.timeout_ms == 1000
        assert settings.timeout_seconds == 1.0
        assert settings.gotenberg_url == "http://gotenberg:3000"
        assert settings.brevo_api_key == "xkeysib-123"
        assert settings.brevo_sender_email == "noreply@example.com"
        assert settings.brevo_sender_name == "Contracts"
        assert settings.log_level == "DEBUG"

    def test_blank_values_fall_back_to_defaults(self, clean_env):
        clean_env.setenv("MAX_FILE_MB", "  ")
        clean_env.setenv("BREVO_API_KEY", "")

        settings = Settings.from_env(dotenv=False)

        assert settings.max_file_mb == 20
        assert settings.brevo_api_key is None

    def test_invalid_number_raises(self, clean_env):
        clean_env.setenv("TIMEOUT_MS", "soon")

        with pytest.raises(ValueError, match="TIMEOUT_MS"):
            Settings.from_env(dotenv=False)

    def test_settings_are_frozen(self):
        settings = Settings()

        with pytest.raises(Exception):
            settings.max_file_mb = 100


class TestBytesToMb:
    @pytest.mark.parametrize(
        "size_bytes, expected",
        [
            (0, 0.0),
            (1024 * 1024, 1.0),
            (3 * 1024 * 1024 // 2, 1.5),
            (int(1.25 * 1024 * 1024), 1.3),   # half rounds up
            (int(20.04 * 1024 * 1024), 20.0),
        ],
    )
    def test_rounds_to_one_decimal(self, size_bytes, expected):
        assert bytes_to_mb(size_bytes) == expected
