import pytest

from app.utils.errors import AuthError, ListError
from domains.release_notify.grouper import group_by_day
from domains.release_notify.selector import CandidateSelector
from tests.fixtures.fakes import FakeRemote, make_entry


def test_selector_filters_by_pattern_and_ledger(ledger):
    sent = make_entry("rel_2024-05-01.json", "2024-05-01")
    fresh = make_entry("rel_2024-05-02.json", "2024-05-02")
    other = make_entry("notes.txt", "2024-05-02")
    ledger.commit([sent])

    selector = CandidateSelector(FakeRemote([sent, other, fresh]), ledger, "rel_*.json")

    assert selector.select() == [fresh]


def test_selector_repeats_uncommitted_candidates(ledger):
    entries = [make_entry("rel_b.json", "2024-05-02"), make_entry("rel_a.json", "2024-05-01")]
    selector = CandidateSelector(FakeRemote(entries), ledger, "rel_*.json")

    assert selector.select() == entries
    assert selector.select() == entries


def test_same_name_on_a_new_day_is_a_new_candidate(ledger):
    ledger.commit([make_entry("rel_latest.json", "2024-05-01")])
    republished = make_entry("rel_latest.json", "2024-05-02")

    selector = CandidateSelector(FakeRemote([republished]), ledger, "rel_*.json")

    assert selector.select() == [republished]


@pytest.mark.parametrize(
    "error",
    [ListError("Failed to list files", entity="/releases"), AuthError("Failed to login to FTP server")],
)
def test_listing_failures_propagate_without_touching_ledger(ledger, error):
    selector = CandidateSelector(FakeRemote(list_error=error), ledger, "*")

    with pytest.raises(type(error)):
        selector.select()
    assert not ledger.path.exists()


def test_grouping_is_a_partition_by_day():
    entries = [
        make_entry("rel_1.json", "2024-05-02", hour=1),
        make_entry("rel_2.json", "2024-05-01", hour=23),
        make_entry("rel_3.json", "2024-05-02", hour=22),
        make_entry("rel_4.json", "2024-05-01", hour=0),
    ]

    groups = group_by_day(entries)

    assert set(groups) == {"2024-05-01", "2024-05-02"}
    assert [e.name for e in groups["2024-05-02"]] == ["rel_1.json", "rel_3.json"]
    assert [e.name for e in groups["2024-05-01"]] == ["rel_2.json", "rel_4.json"]
    assert sorted(e.name for members in groups.values() for e in members) == sorted(e.name for e in entries)


def test_grouping_empty_input():
    assert group_by_day([]) == {}
