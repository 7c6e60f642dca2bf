import pytest

from travel_companion.config import REQUIRED_VARS, load_settings
from travel_companion.errors import ConfigError
from travel_companion.main import create_app


def _env(**overrides):
    env = {name: f"value-for-{name.lower()}" for name in REQUIRED_VARS}
    env.update(overrides)
    return env


def test_load_settings_reads_environment():
    settings = load_settings(
        _env(
            TRAVEL_COMPANION_ADMIN_USERNAMES="alice, bob ,",
            TRAVEL_COMPANION_ALLOWED_ORIGINS="http://localhost:5173",
            TRAVEL_COMPANION_LLM_TIMEOUT="12.5",
        )
    )

    assert settings.openai_api_key == "value-for-openai_api_key"
    assert settings.admin_usernames == ["alice", "bob"]
    assert settings.allowed_origins == ["http://localhost:5173"]
    assert settings.llm_timeout == 12.5
    assert settings.database_url.startswith("sqlite")


def test_missing_credentials_are_all_reported():
    env = _env(OPENAI_API_KEY="", GOOGLE_TRANSLATE_API_KEY="   ")
    del env["FIREBASE_APP_ID"]

    with pytest.raises(ConfigError) as excinfo:
        load_settings(env)

    message = str(excinfo.value)
    for name in ("OPENAI_API_KEY", "GOOGLE_TRANSLATE_API_KEY", "FIREBASE_APP_ID"):
        assert name in message
    assert "GOOGLE_PROJECT_ID" not in message


def test_app_refuses_to_start_without_credentials(monkeypatch):
    for name in REQUIRED_VARS:
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(ConfigError):
        create_app()
