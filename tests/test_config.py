"""
Configuration Tests
===================
"""

from filmstrip.config import Settings, load_config
from filmstrip.models.export import ExportSettings


class TestLoadConfig:
    
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("FILMSTRIP_PORT", raising=False)
        settings = load_config(str(tmp_path / "missing.yaml"))
        
        assert settings.export.frame_height_px == 200
        assert settings.export.padding_px == 10
        assert settings.export.animation_frame_delay_ms == 500
        assert settings.sampling.interval_ms == 100
        assert settings.upload.accepted_extensions == [".json"]
        assert settings.server.port == 8002
    
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("export:\n  frame_height_px: 120\n  decode_workers: 2\n")
        
        settings = load_config(str(path))
        
        assert settings.export.frame_height_px == 120
        assert settings.export.decode_workers == 2
        assert settings.export.padding_px == 10
    
    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("export:\n  frame_height_px: 120\n")
        monkeypatch.setenv("FILMSTRIP_EXPORT_HEIGHT", "300")
        monkeypatch.setenv("FILMSTRIP_FRAME_DELAY_MS", "250")
        monkeypatch.setenv("FILMSTRIP_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("PORT", "9000")
        
        settings = load_config(str(path))
        
        assert settings.export.frame_height_px == 300
        assert settings.export.animation_frame_delay_ms == 250
        assert settings.logging.level == "DEBUG"
        assert settings.server.port == 9000
    
    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("sampling:\n  interval_ms: 40\n")
        monkeypatch.setenv("FILMSTRIP_CONFIG", str(path))
        
        assert load_config().sampling.interval_ms == 40
    
    def test_default_records(self):
        settings = Settings()
        
        assert settings.export.default_settings() == ExportSettings()
        policy = settings.sampling.default_policy()
        assert policy.interval_ms == 100
        assert not policy.use_interval_filtering
