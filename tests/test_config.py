from leasing_api.core import config


def test_settings_are_loaded_lazily_and_cached(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_MODEL_FALLBACKS", "gemini-a, gemini-b,")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://leasing.example.com")
    config.get_settings.cache_clear()
    try:
        settings = config.get_settings()

        assert settings.gemini_model_fallbacks == ["gemini-a", "gemini-b"]
        assert settings.cors_allow_origins == ["https://leasing.example.com"]
        assert config.get_settings() is settings
    finally:
        config.get_settings.cache_clear()

    assert not hasattr(config, "settings")
