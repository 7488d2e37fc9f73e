"""Tests for environment-driven configuration."""

import pytest

from unity_bridge.config import Config, TransportKind, get_config, is_unity_project, reset_config, set_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "UNITY_BRIDGE_HOST",
        "UNITY_BRIDGE_PORT",
        "BRIDGE_TRANSPORT",
        "BRIDGE_REQUEST_TIMEOUT",
        "UNITY_PROJECT_PATH",
        "BRIDGE_AUTO_DETECT_PROJECT",
        "BRIDGE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestConfig:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        cfg = Config()

        assert cfg.bridge_host == "localhost"
        assert cfg.bridge_port == 8090
        assert cfg.transport == TransportKind.WEBSOCKET
        assert cfg.request_timeout == 10.0
        assert cfg.project_path is None
        assert cfg.log_level == "INFO"
        assert cfg.bridge_url == "ws://localhost:8090"
        assert cfg.health_url == "http://localhost:8090"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("UNITY_BRIDGE_HOST", "editor.local")
        monkeypatch.setenv("UNITY_BRIDGE_PORT", "9100")
        monkeypatch.setenv("BRIDGE_TRANSPORT", "LOCAL")
        monkeypatch.setenv("BRIDGE_REQUEST_TIMEOUT", "2.5")
        monkeypatch.setenv("UNITY_PROJECT_PATH", str(tmp_path))
        cfg = Config()

        assert cfg.bridge_url == "ws://editor.local:9100"
        assert cfg.transport == TransportKind.LOCAL
        assert cfg.request_timeout == 2.5
        assert cfg.project_path == str(tmp_path.resolve())

    def test_bad_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("BRIDGE_TRANSPORT", "carrier-pigeon")
        monkeypatch.setenv("BRIDGE_REQUEST_TIMEOUT", "soon")
        cfg = Config()

        assert cfg.transport == TransportKind.WEBSOCKET
        assert cfg.request_timeout == 10.0

    def test_auto_detects_project_from_subdirectory(self, monkeypatch, unity_project):
        package_dir = unity_project / "Packages" / "com.example.bridge"
        package_dir.mkdir(parents=True)
        monkeypatch.chdir(package_dir)

        assert is_unity_project(unity_project)
        assert Config().project_path == str(unity_project.resolve())

    def test_auto_detect_disabled(self, monkeypatch, unity_project):
        monkeypatch.chdir(unity_project)
        monkeypatch.setenv("BRIDGE_AUTO_DETECT_PROJECT", "false")

        assert Config().project_path is None

    def test_global_instance(self):
        custom = Config(bridge_port=1234)
        set_config(custom)
        assert get_config() is custom

        reset_config()
        assert get_config() is not custom
