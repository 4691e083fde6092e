import pytest
from pydantic import ValidationError

from app.main import main
from app.utils.config import load_settings

CONFIG = """
remote:
  server: ftp.build.local
  user: releases
  password: from-yaml
  dir: /releases
  pattern: "rel_*.json"
  period: 10
notify:
  host: smtp.build.local
  port: "465"
  from: bot@build.local
  to: [qa@build.local]
  subject: Release
  text: New release build
ledger_path: state/sent_files.log
"""


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "watchman.yaml"
    path.write_text(CONFIG)
    return path


def test_load_settings_from_yaml(config_file):
    settings = load_settings(config_file)

    assert settings.remote.server == "ftp.build.local"
    assert settings.remote.period == 10
    assert settings.remote.port == 21
    assert settings.notify.port == 465
    assert settings.notify.from_address == "bot@build.local"
    assert settings.notify.verify_tls is False
    assert str(settings.ledger_path) == "state/sent_files.log"


def test_environment_overrides_yaml(config_file, monkeypatch):
    monkeypatch.setenv("WATCHMAN_REMOTE__PASSWORD", "from-env")

    assert load_settings(config_file).remote.password == "from-env"


def test_default_config_file_in_working_directory(config_file):
    config_file.rename(config_file.with_name("config.yaml"))

    assert load_settings().notify.to == ["qa@build.local"]


def test_missing_or_invalid_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("remote:\n  server: ftp\n  period: 0\n")
    with pytest.raises(ValidationError):
        load_settings(bad)


def test_cli_exits_non_zero_on_bad_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("app.main.configure_logging", lambda *args, **kwargs: None)

    assert main(["--config", str(tmp_path / "absent.yaml"), "--once"]) == 1
