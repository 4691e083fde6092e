import pytest

from app.utils.errors import (
    AuthError,
    DirectoryError,
    LedgerIOError,
    ListError,
    ParseError,
    RemoteConnectionError,
    RetrieveError,
    SendError,
    WatchmanError,
)


@pytest.mark.parametrize(
    "error_type",
    [
        RemoteConnectionError,
        AuthError,
        DirectoryError,
        ListError,
        RetrieveError,
        ParseError,
        SendError,
        LedgerIOError,
    ],
)
def test_errors_carry_entity_and_cause(error_type):
    cause = OSError("connection reset")

    error = error_type("Step failed", entity="rel_a.json", cause=cause)

    assert isinstance(error, WatchmanError)
    assert error.entity == "rel_a.json"
    assert error.cause is cause
    assert str(error) == "Step failed: connection reset"


def test_error_without_cause_is_just_the_message():
    assert str(ListError("Failed to list files", entity="/releases")) == "Failed to list files"
