from __future__ import annotations

import os
from pathlib import Path

import pytest

from envboot.config import (
    ConfigLoader,
    EnvbootConfig,
    LogLevel,
    dotenv_search_dirs,
    env_flag,
    forked_worker,
    load_config,
    load_env,
)
from envboot.errors import ConfigError


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestConfigLoader:

    def test_defaults_without_file(self, workdir):
        cfg = load_config()
        assert cfg == EnvbootConfig()
        assert cfg.default_environment == "development"
        assert cfg.runtime_record_key == "content/config/process/runtime.json"

    def test_default_file_location(self, workdir):
        _write(workdir / "config" / "envboot.yaml", "default_environment: staging\n")
        assert load_config().default_environment == "staging"

    def test_explicit_file(self, workdir):
        path = _write(workdir / "settings.yaml", (
            "default_environment: production\n"
            "store:\n"
            "  root_dir: /var/lib/app/config\n"
            "logging:\n"
            "  log_level: DEBUG\n"
            "  json_logs: false\n"
        ))
        cfg = load_config(path)
        assert cfg.default_environment == "production"
        assert cfg.store.root_dir == Path("/var/lib/app/config")
        assert cfg.logging.log_level is LogLevel.DEBUG
        assert cfg.logging.json_logs is False

    def test_explicit_missing_file(self, workdir):
        with pytest.raises(FileNotFoundError):
            load_config(workdir / "nope.yaml")

    def test_config_path_from_env(self, workdir, monkeypatch):
        path = _write(workdir / "elsewhere.yaml", "default_environment: qa\n")
        monkeypatch.setenv("ENVBOOT_CONFIG", str(path))
        assert load_config().default_environment == "qa"

    def test_empty_file_gives_defaults(self, workdir):
        path = _write(workdir / "empty.yaml", "")
        assert load_config(path) == EnvbootConfig()

    def test_non_mapping_file(self, workdir):
        path = _write(workdir / "list.yaml", "- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_env_overrides_file(self, workdir, monkeypatch):
        path = _write(workdir / "settings.yaml", "default_environment: production\n")
        monkeypatch.setenv("ENVBOOT_DEFAULT_ENV", "canary")
        monkeypatch.setenv("ENVBOOT_STORE_DIR", str(workdir / "store"))
        monkeypatch.setenv("ENVBOOT_LOG_LEVEL", "WARNING")

        cfg = load_config(path)
        assert cfg.default_environment == "canary"
        assert cfg.store.root_dir == workdir / "store"
        assert cfg.logging.log_level is LogLevel.WARNING

    def test_dotenv_file_feeds_overrides(self, workdir):
        _write(workdir / ".env", "ENVBOOT_DEFAULT_ENV=from-dotenv\n")
        try:
            assert load_config().default_environment == "from-dotenv"
        finally:
            os.environ.pop("ENVBOOT_DEFAULT_ENV", None)

    def test_dotenv_does_not_override_process_env(self, workdir, monkeypatch):
        _write(workdir / ".env", "ENVBOOT_DEFAULT_ENV=from-dotenv\n")
        monkeypatch.setenv("ENVBOOT_DEFAULT_ENV", "from-process")
        assert load_config().default_environment == "from-process"

    def test_dotenv_can_be_skipped(self, workdir):
        _write(workdir / ".env", "ENVBOOT_DEFAULT_ENV=from-dotenv\n")
        cfg = ConfigLoader(load_dotenv_files=False).load_and_validate()
        assert cfg.default_environment == "development"

    @pytest.mark.parametrize("text", [
        "default_environment: '  '\n",
        "runtime_record_key: /abs/runtime.json\n",
        "runtime_record_key: ../runtime.json\n",
        "unknown_key: 1\n",
        "logging:\n  log_level: LOUD\n",
    ])
    def test_invalid_settings(self, workdir, text):
        path = _write(workdir / "bad.yaml", text)
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(path)


class TestEnvHelpers:

    def test_env_flag(self, monkeypatch):
        assert env_flag("ENVBOOT_FORKED_WORKER") is False
        assert env_flag("ENVBOOT_FORKED_WORKER", default=True) is True
        monkeypatch.setenv("ENVBOOT_FORKED_WORKER", " Yes ")
        assert env_flag("ENVBOOT_FORKED_WORKER") is True
        monkeypatch.setenv("ENVBOOT_FORKED_WORKER", "0")
        assert env_flag("ENVBOOT_FORKED_WORKER") is False

    def test_load_env_reports_loaded_files(self, tmp_path):
        first = _write(tmp_path / ".env.local", "ENVBOOT_TEST_ONLY=local\n")
        _write(tmp_path / ".env", "ENVBOOT_TEST_ONLY=shared\n")

        try:
            loaded = load_env(search_dirs=[tmp_path, tmp_path / "missing"])

            assert loaded == [first, tmp_path / ".env"]
            assert os.environ["ENVBOOT_TEST_ONLY"] == "local"
        finally:
            os.environ.pop("ENVBOOT_TEST_ONLY", None)

    def test_forked_worker_reads_its_variable(self, monkeypatch):
        assert forked_worker() is False
        monkeypatch.setenv("ENVBOOT_FORKED_WORKER", "on")
        assert forked_worker() is True

    def test_search_dirs_include_settings_directory(self, workdir):
        settings = workdir / "deploy" / "envboot.yaml"

        assert dotenv_search_dirs() == [workdir, workdir / "config"]
        assert dotenv_search_dirs(settings)[-1] == (workdir / "deploy").resolve()
        assert len(dotenv_search_dirs(Path("config") / "envboot.yaml")) == 2

    def test_dotenv_next_to_settings_file_feeds_overrides(self, workdir):
        settings = _write(workdir / "deploy" / "envboot.yaml", "default_environment: staging\n")
        _write(workdir / "deploy" / ".env", "ENVBOOT_DEFAULT_ENV=qa\n")

        assert load_config(settings).default_environment == "qa"

    def test_process_environment_beats_dotenv(self, workdir, monkeypatch):
        _write(workdir / ".env", "ENVBOOT_DEFAULT_ENV=qa\n")
        monkeypatch.setenv("ENVBOOT_DEFAULT_ENV", "production")

        assert load_config().default_environment == "production"
