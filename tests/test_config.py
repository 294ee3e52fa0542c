"""Tests for tlvlog/config.py — Config and its loaders."""

import dataclasses

import pytest

from tlvlog.config import Config, _parse_bool, load_config, load_yaml_config
from tlvlog.levels import Level

ENV_VARS = [
    "TLVLOG_LOG_FILE", "TLVLOG_ERR_FILE", "TLVLOG_LEVEL", "TLVLOG_TRUNCATE", "TLVLOG_VERBOSE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


# ── _parse_bool helper ──────────────────────────────────────────────

class TestParseBool:
    @pytest.mark.parametrize("value", ["true", "True", "1", "yes", " YES ", True])
    def test_truthy_values(self, value):
        assert _parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "", "random", False])
    def test_falsy_values(self, value):
        assert _parse_bool(value) is False


# ── Config defaults ────────────────────────────────────────────────

class TestConfigDefaults:
    def test_all_defaults(self):
        cfg = Config()
        assert cfg.log_file == "logs/app.binlog"
        assert cfg.err_file is None
        assert cfg.min_level is Level.INFO
        assert cfg.truncate is False
        assert cfg.verbose is False
        assert cfg.args == ()

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.log_file = "other"

    def test_load_without_env_or_args(self):
        assert load_config(argv=[]) == Config()


# ── Environment overrides ──────────────────────────────────────────

class TestLoadConfigEnv:
    def test_log_file(self, monkeypatch):
        monkeypatch.setenv("TLVLOG_LOG_FILE", "/tmp/env.binlog")
        assert load_config(argv=[]).log_file == "/tmp/env.binlog"

    def test_err_file(self, monkeypatch):
        monkeypatch.setenv("TLVLOG_ERR_FILE", "/tmp/err.binlog")
        assert load_config(argv=[]).err_file == "/tmp/err.binlog"

    def test_empty_err_file_means_none(self, monkeypatch):
        monkeypatch.setenv("TLVLOG_ERR_FILE", "")
        assert load_config(argv=[]).err_file is None

    def test_level(self, monkeypatch):
        monkeypatch.setenv("TLVLOG_LEVEL", "warn")
        assert load_config(argv=[]).min_level is Level.WARN

    def test_bad_level_raises(self, monkeypatch):
        monkeypatch.setenv("TLVLOG_LEVEL", "shout")
        with pytest.raises(ValueError):
            load_config(argv=[])

    def test_truncate(self, monkeypatch):
        monkeypatch.setenv("TLVLOG_TRUNCATE", "yes")
        assert load_config(argv=[]).truncate is True

    def test_verbose(self, monkeypatch):
        monkeypatch.setenv("TLVLOG_VERBOSE", "1")
        assert load_config(argv=[]).verbose is True


# ── CLI overrides ──────────────────────────────────────────────────

class TestLoadConfigCLI:
    def test_log_file_positional(self):
        assert load_config(argv=["a.binlog"]).log_file == "a.binlog"

    def test_err_file_positional(self):
        cfg = load_config(argv=["a.binlog", "b.binlog"])
        assert cfg.log_file == "a.binlog"
        assert cfg.err_file == "b.binlog"

    def test_extra_positionals_become_args(self):
        cfg = load_config(argv=["a.binlog", "b.binlog", "one", "two"])
        assert cfg.log_file == "a.binlog"
        assert cfg.err_file == "b.binlog"
        assert cfg.args == ("one", "two")
        assert cfg.first_arg_index == 3

    def test_single_file_has_no_args(self):
        cfg = load_config(argv=["a.binlog"])
        assert cfg.args == ()
        assert cfg.first_arg_index == 2

    def test_options_between_positionals(self):
        cfg = load_config(argv=["a.binlog", "--truncate", "b.binlog", "one"])
        assert cfg.err_file == "b.binlog"
        assert cfg.args == ("one",)
        assert cfg.truncate is True

    def test_level_flag(self):
        assert load_config(argv=["--level", "debug"]).min_level is Level.DEBUG

    def test_truncate_flag(self):
        assert load_config(argv=["--truncate"]).truncate is True

    def test_args_collected_in_order(self):
        cfg = load_config(argv=["a", "b", "z", "y", "x"])
        assert cfg.args == ("z", "y", "x")

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("TLVLOG_LOG_FILE", "env.binlog")
        monkeypatch.setenv("TLVLOG_LEVEL", "error")
        cfg = load_config(argv=["cli.binlog", "--level", "info"])
        assert cfg.log_file == "cli.binlog"
        assert cfg.min_level is Level.INFO


# ── YAML file ──────────────────────────────────────────────────────

class TestYamlConfig:
    def test_no_path_returns_empty(self):
        assert load_yaml_config(None) == {}

    def test_missing_file_returns_empty(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "missing.yml")) == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_yaml_config(str(path))

    def test_file_values_used(self, tmp_path):
        path = tmp_path / "tlvlog.yml"
        path.write_text(
            "log_file: from-yaml.binlog\n"
            "err_file: errors.binlog\n"
            "level: critical\n"
            "truncate: true\n"
        )
        cfg = load_config(argv=["--config", str(path)])
        assert cfg.log_file == "from-yaml.binlog"
        assert cfg.err_file == "errors.binlog"
        assert cfg.min_level is Level.CRITICAL
        assert cfg.truncate is True

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "tlvlog.yml"
        path.write_text("level: critical\n")
        monkeypatch.setenv("TLVLOG_LEVEL", "debug")
        assert load_config(argv=["--config", str(path)]).min_level is Level.DEBUG

    def test_min_level_key(self, tmp_path):
        path = tmp_path / "tlvlog.yml"
        path.write_text("min_level: error\n")
        assert load_config(argv=["--config", str(path)]).min_level is Level.ERROR

    def test_min_level_wins_over_level_alias(self, tmp_path):
        path = tmp_path / "tlvlog.yml"
        path.write_text("min_level: warn\nlevel: critical\n")
        assert load_config(argv=["--config", str(path)]).min_level is Level.WARN
