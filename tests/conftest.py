"""Shared fixtures for the release watchman tests."""

import pytest

from app.utils.config import Settings
from domains.release_notify.ledger import SentLedger
from tests.fixtures.fakes import RecordingTransport


@pytest.fixture
def settings(tmp_path, monkeypatch):
    # Keep a developer's config.yaml or .env out of the tests.
    monkeypatch.chdir(tmp_path)
    return Settings(
        remote={"server": "ftp.test", "dir": "/releases", "pattern": "rel_*.json", "period": 1},
        notify={
            "host": "smtp.test",
            "port": 25,
            "from": "release-bot@test",
            "to": ["qa@test", "ops@test"],
            "subject": "Release",
            "text": "New release build",
        },
        ledger_path=tmp_path / "sent_files.log",
    )


@pytest.fixture
def ledger(settings):
    return SentLedger(settings.ledger_path)


@pytest.fixture
def transport():
    return RecordingTransport()
