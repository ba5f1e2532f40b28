from bookstore.config import get_settings


def test_database_url_prefers_app_env(monkeypatch):
    monkeypatch.setenv("APP_DATABASE_URL", "sqlite:///explicit.db")
    monkeypatch.setenv("DB_HOST", "ignored")
    assert get_settings().database_url == "sqlite:///explicit.db"


def test_database_url_composed_from_db_env(monkeypatch):
    monkeypatch.delenv("APP_DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_HOST", "db")
    monkeypatch.setenv("DB_USER", "books")
    monkeypatch.setenv("DB_PASSWORD", "secret")
    monkeypatch.setenv("DB_NAME", "bookstore")
    monkeypatch.setenv("DB_PORT", "5433")
    assert get_settings().database_url == "postgresql+psycopg://books:secret@db:5433/bookstore"


def test_pool_settings_from_env(monkeypatch):
    monkeypatch.setenv("APP_DB_POOL_SIZE", "3")
    monkeypatch.setenv("APP_DB_MAX_OVERFLOW", "2")
    monkeypatch.setenv("APP_DB_POOL_TIMEOUT", "1.5")
    settings = get_settings()
    assert (settings.db_pool_size, settings.db_max_overflow, settings.db_pool_timeout) == (3, 2, 1.5)


def test_pool_defaults_match_single_pool_of_ten(monkeypatch):
    for name in ("APP_DB_POOL_SIZE", "APP_DB_MAX_OVERFLOW", "APP_DB_POOL_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.db_pool_size == 10
    assert settings.db_max_overflow == 0


def test_cors_origins_are_split(monkeypatch):
    monkeypatch.setenv("APP_CORS_ORIGINS", "http://localhost:3000, https://books.example ,")
    assert get_settings().allowed_origins == ["http://localhost:3000", "https://books.example"]
