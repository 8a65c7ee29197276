"""
配置加载器单元测试
"""
import pytest

from netprobe.integrations.config_loader import AppConfig, load_config

ENV_VARS = ["PORT", "ORACLE_USER", "ORACLE_PASSWORD", "ORACLE_CONNECTSTRING", "NETPROBE_SSRF_GUARD", "NETPROBE_CONFIG"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """配置加载测试"""

    def test_defaults(self, tmp_path):
        """测试空配置文件时使用默认值"""
        path = tmp_path / "netprobe.yaml"
        path.write_text("", encoding="utf-8")

        config = load_config(str(path))

        assert config == AppConfig()
        assert config.port == 3000
        assert config.command_timeout == 8.0
        assert config.port_timeout_ms == 3000
        assert config.ssrf_guard is True
        assert config.oracle_configured is False

    def test_yaml_values_and_env_expansion(self, tmp_path, monkeypatch):
        """测试YAML配置和 ${VAR} 替换"""
        monkeypatch.setenv("DB_PASS", "s3cret")
        path = tmp_path / "netprobe.yaml"
        path.write_text(
            "port: 8080\n"
            "command_timeout: 5\n"
            "ssrf_guard: false\n"
            "oracle_user: scott\n"
            "oracle_password: ${DB_PASS}\n"
            "oracle_connect_string: db.example.com/XEPDB1\n"
            "unknown_key: ignored\n",
            encoding="utf-8"
        )

        config = load_config(str(path))

        assert config.port == 8080
        assert config.command_timeout == 5.0
        assert config.ssrf_guard is False
        assert config.oracle_password == "s3cret"
        assert config.oracle_configured is True

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """测试环境变量优先于配置文件"""
        path = tmp_path / "netprobe.yaml"
        path.write_text("port: 8080\nssrf_guard: true\n", encoding="utf-8")
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("NETPROBE_SSRF_GUARD", "off")
        monkeypatch.setenv("ORACLE_USER", "scott")

        config = load_config(str(path))

        assert config.port == 9000
        assert config.ssrf_guard is False
        assert config.oracle_user == "scott"
        assert config.oracle_configured is False

    def test_missing_explicit_file(self, tmp_path):
        """测试显式指定的配置文件不存在"""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        """测试通过 NETPROBE_CONFIG 指定配置文件"""
        path = tmp_path / "custom.yaml"
        path.write_text("ping_count: 2\n", encoding="utf-8")
        monkeypatch.setenv("NETPROBE_CONFIG", str(path))

        assert load_config().ping_count == 2
