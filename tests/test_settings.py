from storefront_rbac.settings import Settings


def test_defaults_without_environment(monkeypatch):
    monkeypatch.delenv("RBAC_CORS_ALLOW_ORIGINS", raising=False)
    monkeypatch.delenv("RBAC_PERMISSION_CHECK_TIMEOUT_SECONDS", raising=False)

    s = Settings(_env_file=None)

    assert s.CORS_ALLOW_ORIGINS == []
    assert s.API_PREFIX == "/api/v1/rbac"
    assert s.PERMISSION_CHECK_TIMEOUT_SECONDS == 2.0


def test_cors_origins_from_json_env(monkeypatch):
    monkeypatch.setenv("RBAC_CORS_ALLOW_ORIGINS", '["http://localhost:3000", "https://shop.example.com"]')

    s = Settings(_env_file=None)

    assert s.CORS_ALLOW_ORIGINS == ["http://localhost:3000", "https://shop.example.com"]
