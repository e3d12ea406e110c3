import pytest

from ingestor.config import BACKEND_COSMOS, BACKEND_MEMORY, load_settings, parse_origins

_VARS = (
    "JWT_SECRET", "SECRET", "TOKEN_TTL_SECONDS", "STORAGE_BACKEND", "COSMOS_ENDPOINT",
    "COSMOS_KEY", "COSMOS_DATABASE", "USERS_CONTAINER", "LOGS_CONTAINER", "PASSWORD_SCHEME",
    "OMIT_UNSET_FILTERS", "FRONTEND_ORIGIN", "LOG_LEVEL", "PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = load_settings()
    assert s.storage_backend == BACKEND_MEMORY
    assert s.jwt_secret == "change-me"
    assert s.token_ttl_seconds == 3600
    assert s.password_scheme == "sha256_crypt"
    assert s.omit_unset_filters is False
    assert s.frontend_origins == []
    assert s.port == 3000


def test_cosmos_selected_when_endpoint_set(monkeypatch):
    monkeypatch.setenv("COSMOS_ENDPOINT", "https://acct.documents.azure.com")
    monkeypatch.setenv("COSMOS_KEY", "k")
    s = load_settings()
    assert s.storage_backend == BACKEND_COSMOS
    assert s.cosmos_key == "k"


def test_cosmos_without_endpoint_is_an_error(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "cosmos")
    with pytest.raises(ValueError):
        load_settings()


def test_unknown_backend(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "mongo")
    with pytest.raises(ValueError):
        load_settings()


def test_legacy_secret_name(monkeypatch):
    monkeypatch.setenv("SECRET", "from-secret")
    assert load_settings().jwt_secret == "from-secret"
    monkeypatch.setenv("JWT_SECRET", "from-jwt-secret")
    assert load_settings().jwt_secret == "from-jwt-secret"


def test_flags_and_ints(monkeypatch):
    monkeypatch.setenv("OMIT_UNSET_FILTERS", "yes")
    monkeypatch.setenv("TOKEN_TTL_SECONDS", "60")
    monkeypatch.setenv("PASSWORD_SCHEME", "PlainText")
    s = load_settings()
    assert s.omit_unset_filters is True
    assert s.token_ttl_seconds == 60
    assert s.password_scheme == "plaintext"


def test_bad_int(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError):
        load_settings()


def test_parse_origins():
    assert parse_origins("https://a.example/, https://b.example https://a.example") == [
        "https://a.example",
        "https://b.example",
    ]
    assert parse_origins("") == []
