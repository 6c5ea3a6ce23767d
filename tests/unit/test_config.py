"""Tests for environment-driven settings."""

import logging

from gemini_discord.config import DEFAULT_WIKI_API_URL, Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.daily_limit == 20
        assert settings.weather_provider == "openmeteo"
        assert settings.default_city == "台北"
        assert settings.wiki_api_url == DEFAULT_WIKI_API_URL
        assert settings.gemini_timeout == 20.0
        assert settings.http_timeout == 8.0
        assert settings.port == 3000
        assert settings.log_level == "INFO"

    def test_values_are_read_and_trimmed(self):
        settings = Settings.from_env(
            {
                "DISCORD_TOKEN": "  token  ",
                "AI_CHANNEL_ID": "42",
                "AI_DAILY_LIMIT_PER_USER": "5",
                "GEMINI_MODEL_TIMEOUT": "15000",
                "WEATHER_PROVIDER": "OpenMeteo",
                "PORT": "8080",
                "LOG_LEVEL": "debug",
            }
        )

        assert settings.discord_token == "token"
        assert settings.ai_channel_id == "42"
        assert settings.daily_limit == 5
        assert settings.gemini_timeout == 15.0
        assert settings.weather_provider == "openmeteo"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"

    def test_gemini_key_alias(self):
        assert Settings.from_env({"GEMINI_KEY": "alias"}).gemini_api_key == "alias"
        both = Settings.from_env({"GEMINI_API_KEY": "primary", "GEMINI_KEY": "alias"})
        assert both.gemini_api_key == "primary"

    def test_blank_value_uses_default(self):
        assert Settings.from_env({"DEFAULT_CITY": "   "}).default_city == "台北"

    def test_invalid_number_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            settings = Settings.from_env({"AI_DAILY_LIMIT_PER_USER": "lots"})

        assert settings.daily_limit == 20
        assert "AI_DAILY_LIMIT_PER_USER" in caplog.text

    def test_log_warnings_without_channel(self, caplog):
        with caplog.at_level(logging.WARNING):
            Settings(discord_token="t").log_warnings()

        assert "AI_CHANNEL_ID is not set" in caplog.text
        assert "SERPER_API_KEY" not in caplog.text

    def test_log_warnings_with_channel_but_no_keys(self, caplog):
        with caplog.at_level(logging.WARNING):
            Settings(discord_token="t", ai_channel_id="1").log_warnings()

        assert "GEMINI_API_KEY is missing" in caplog.text
        assert "SERPER_API_KEY is missing" in caplog.text

    def test_non_numeric_guild_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            settings = Settings.from_env({"GUILD_ID": "my-server"})

        assert settings.guild_id == ""
        assert "GUILD_ID" in caplog.text
        assert Settings.from_env({"GUILD_ID": " 123 "}).guild_id == "123"
