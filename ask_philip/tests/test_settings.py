from ask_philip.config.settings import Settings


def test_blank_api_key_is_none(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    assert Settings(gemini_api_key="   ").gemini_api_key is None
    assert Settings(gemini_api_key="").gemini_api_key is None


def test_api_key_from_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", " secret-key-value ")
    assert Settings().gemini_api_key == "secret-key-value"


def test_yaml_config_file(monkeypatch, tmp_path):
    cfg = tmp_path / "philip.yaml"
    cfg.write_text("default_model: gemini-2.5-flash\nstream_replies: true\n", encoding="utf-8")
    monkeypatch.setenv("ASK_PHILIP_CONFIG_FILE", str(cfg))
    monkeypatch.delenv("DEFAULT_MODEL", raising=False)
    monkeypatch.delenv("STREAM_REPLIES", raising=False)
    s = Settings()
    assert s.default_model == "gemini-2.5-flash"
    assert s.stream_replies is True


def test_env_overrides_yaml(monkeypatch, tmp_path):
    cfg = tmp_path / "philip.yaml"
    cfg.write_text("temperature: 0.1\n", encoding="utf-8")
    monkeypatch.setenv("ASK_PHILIP_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("TEMPERATURE", "0.5")
    assert Settings().temperature == 0.5
