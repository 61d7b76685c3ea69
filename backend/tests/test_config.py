"""
PetReport — Configuration Tests
=================================

What:  Parsing of list-valued settings, range checks and log level validation.
"""

import pytest
from pydantic import ValidationError

from petreport.config import GatewaySettings, Settings


class TestSettings:
    """Environment-backed server and gateway settings."""

    def test_origins_split_and_trimmed(self):
        """Origins are comma-separated; blanks and padding are dropped."""
        s = Settings(allowed_origins=" http://a.test:4000 , http://b.test ,,")
        assert s.allowed_origins_set == frozenset({"http://a.test:4000", "http://b.test"})

    def test_user_agents_split_on_pipe(self):
        """User agents are '|'-separated since they contain commas."""
        s = Settings(blocked_user_agents="Mozilla/5.0 (X11, Linux)|curl/8.0")
        assert s.blocked_user_agents_set == frozenset({"Mozilla/5.0 (X11, Linux)", "curl/8.0"})

    def test_empty_blocklist(self):
        """An empty blocklist blocks nobody."""
        assert Settings(blocked_user_agents="").blocked_user_agents_set == frozenset()

    def test_log_level_normalized(self):
        """Log level names are upper-cased."""
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        """Unknown log level names fail validation."""
        with pytest.raises(ValidationError):
            Settings(log_level="VERBOSE")

    def test_rate_limit_must_be_positive(self):
        """A zero request cap is rejected."""
        with pytest.raises(ValidationError):
            Settings(rate_limit_requests=0)

    def test_body_limit_must_be_positive(self):
        """A zero body limit is rejected."""
        with pytest.raises(ValidationError):
            Settings(max_body_bytes=0)

    def test_defaults(self, monkeypatch):
        """Defaults match the documented production values."""
        for name in ("RATE_LIMIT_REQUESTS", "RATE_LIMIT_WINDOW_MS", "PORT", "MAX_BODY_BYTES"):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.port == 5000
        assert s.rate_limit_requests == 45
        assert s.rate_limit_window_ms == 1000
        assert s.max_body_bytes == 100 * 1024

    def test_body_limit_from_env(self, monkeypatch):
        """MAX_BODY_BYTES overrides the body limit."""
        monkeypatch.setenv("MAX_BODY_BYTES", "2048")
        assert Settings(_env_file=None).max_body_bytes == 2048

    def test_gateway_settings_from_env(self, monkeypatch):
        """API_URL points the client gateway at another backend."""
        monkeypatch.setenv("API_URL", "http://api.example:5000")
        assert GatewaySettings(_env_file=None).api_url == "http://api.example:5000"
