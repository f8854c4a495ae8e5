"""Tests for configuration loading."""

import pytest

from replicaplanner.errors import ConfigurationError
from replicaplanner.utils.config import DEFAULT_KAFKA_BIN_PATH, Config


class TestConfig:
    """Test Config."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        """Remove environment overrides."""
        for name in (
            "REPLICA_PLANNER_ZOOKEEPER",
            "REPLICA_PLANNER_BOOTSTRAP_SERVER",
            "REPLICA_PLANNER_KAFKA_BIN_PATH",
            "LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        """Test built-in defaults."""
        config = Config()

        assert config.get("kafka.bin_path") == DEFAULT_KAFKA_BIN_PATH
        assert config.get("kafka.zookeeper") is None
        assert config.get("logging.output") == "stderr"
        assert config.get("missing.key", "fallback") == "fallback"

    def test_yaml_file(self, tmp_path):
        """Test file values are deep merged."""
        path = tmp_path / "planner.yaml"
        path.write_text(
            "kafka:\n"
            "  zookeeper: zk1:2181,zk2:2181\n"
            "planner:\n"
            "  exclude: [3, 4]\n"
        )

        config = Config(str(path))

        assert config.get("kafka.zookeeper") == "zk1:2181,zk2:2181"
        assert config.get("kafka.bin_path") == DEFAULT_KAFKA_BIN_PATH
        assert config.get("planner.exclude") == [3, 4]

    def test_empty_file(self, tmp_path):
        """Test empty file keeps defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert Config(str(path)).get("logging.level") == "INFO"

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML raises."""
        path = tmp_path / "bad.yaml"
        path.write_text("kafka: [unclosed\n")

        with pytest.raises(ConfigurationError):
            Config(str(path))

    def test_non_mapping(self, tmp_path):
        """Test non-mapping document raises."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            Config(str(path))

    def test_missing_file(self, tmp_path):
        """Test missing file raises."""
        with pytest.raises(ConfigurationError):
            Config(str(tmp_path / "nope.yaml"))

    def test_env_overrides(self, monkeypatch):
        """Test environment overrides."""
        monkeypatch.setenv("REPLICA_PLANNER_BOOTSTRAP_SERVER", "kafka1:9092")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        config = Config()

        assert config.get("kafka.bootstrap_server") == "kafka1:9092"
        assert config.get("logging.level") == "DEBUG"

    def test_set(self):
        """Test dot-notation set."""
        config = Config()

        config.set("planner.seed", 7)
        config.set("new.nested.key", True)

        assert config.get("planner.seed") == 7
        assert config.to_dict()["new"] == {"nested": {"key": True}}
