"""Tests for configuration loading and the startup settings check."""

import pytest

from src.config import RoutingSettings, validate_all_settings


class TestValidateAllSettings:
    """Tests for validate_all_settings."""

    def test_sheets_missing(self, monkeypatch):
        """Test missing Sheets settings are reported, others still pass."""
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)

        status = validate_all_settings()

        assert status["google_sheets"] is False
        assert status["google_sheets_error"]
        assert status["routing"] is True
        assert status["app"] is True

    def test_sheets_configured(self, monkeypatch, tmp_path):
        """Test a complete Sheets configuration passes."""
        credentials = tmp_path / "credentials.json"
        credentials.write_text("{}")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")

        status = validate_all_settings()

        assert status["google_sheets"] is True


class TestRoutingSettings:
    """Tests for RoutingSettings."""

    def test_defaults(self):
        """Test the default paths."""
        settings = RoutingSettings()
        assert settings.sign_in_path == "/sign-in"
        assert settings.public_paths_list == ["/sign-in", "/sign-up"]
        assert "_stcore" in settings.internal_prefixes_list

    def test_env_override(self, monkeypatch):
        """Test lists are read from comma-separated env vars."""
        monkeypatch.setenv("ROUTING_PUBLIC_PATHS", "/sign-in, /welcome")
        assert RoutingSettings().public_paths_list == ["/sign-in", "/welcome"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
