import pytest

from jumboboxd.core.settings import Settings


def test_plain_env_values_become_lists(monkeypatch):
    monkeypatch.setenv("IDENTITY_JWT_ALGORITHMS", "RS256")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    s = Settings(_env_file=None)
    assert s.identity_jwt_algorithms == ["RS256"]
    assert s.cors_origins == ["https://a.example", "https://b.example"]


def test_json_list_env_values_still_work(monkeypatch):
    monkeypatch.setenv("IDENTITY_JWT_ALGORITHMS", '["RS256", "ES256"]')
    s = Settings(_env_file=None)
    assert s.identity_jwt_algorithms == ["RS256", "ES256"]


@pytest.mark.parametrize("name", ["IDENTITY_JWT_ALGORITHMS", "CORS_ORIGINS"])
def test_list_defaults_without_env(monkeypatch, name):
    monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert isinstance(getattr(s, name.lower()), list)
    assert getattr(s, name.lower())
