from handle_resolver.settings import Settings, get_settings


def test_defaults(monkeypatch):
    for var in ("GNS_API_BASE_URL", "GNS_API_TIMEOUT_SECONDS", "HANDLE_DEBOUNCE_MS", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)
    assert s.gns_api_base_url == "http://localhost:8000"
    assert s.handle_debounce_ms == 500
    assert s.debounce_seconds == 0.5
    assert s.log_level == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("GNS_API_BASE_URL", " https://gns.example.com/api/ ")
    monkeypatch.setenv("HANDLE_DEBOUNCE_MS", "300")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = get_settings()
    assert s.gns_api_base_url == "https://gns.example.com/api"
    assert s.debounce_seconds == 0.3
    assert s.log_level == "DEBUG"
