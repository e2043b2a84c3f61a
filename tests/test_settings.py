import pytest

from portfolio_api.settings import Settings, get_settings

ENV_VARS = [
    "STORE_BACKEND",
    "SQLITE_DB_PATH",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "ADMIN_PASSWORD",
    "CORS_ALLOW_ORIGINS",
    "STORE_TIMEOUT_SECONDS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert get_settings() == Settings()


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "SQLite")
    monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/p.db")
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.dev, https://b.dev,")
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = get_settings()
    assert s.store_backend == "sqlite"
    assert s.sqlite_db_path == "/tmp/p.db"
    assert s.admin_password == "s3cret"
    assert s.cors_allow_origins == ["https://a.dev", "https://b.dev"]
    assert s.store_timeout_seconds == 2.5
    assert s.log_level == "DEBUG"


def test_unknown_backend_falls_back_to_memory(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "mongo")
    assert get_settings().store_backend == "memory"


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_bad_timeout_uses_default(monkeypatch, value):
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", value)
    assert get_settings().store_timeout_seconds == 15.0


def test_bad_log_level_uses_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert get_settings().log_level == "INFO"


def test_empty_admin_password_is_unset(monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "")
    assert get_settings().admin_password is None
