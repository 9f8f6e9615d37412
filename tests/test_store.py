import json
from datetime import date

import pytest

from errors import StaleRecordError, StorageError
from schemas.users import AnswerEntry
from store import JsonFileUserStore

DAY = date(2026, 10, 18)


@pytest.fixture(params=["json", "sql"])
def store(request, tmp_path, sql_store):
    if request.param == "json":
        return JsonFileUserStore(tmp_path / "users.json")
    return sql_store


def played(record):
    return record.model_copy(
        update={
            "current_streak": 1,
            "longest_streak": 1,
            "last_played": DAY,
            "last_correct": True,
            "total_played": 1,
            "total_correct": 1,
            "answers": {DAY: AnswerEntry(correct=True, date=DAY)},
        }
    )


def test_get_missing_is_none(store):
    assert store.get(1) is None


def test_get_or_create_zeroes_and_is_stable(store):
    u = store.get_or_create(1)
    assert (u.current_streak, u.longest_streak, u.total_played, u.total_correct) == (0, 0, 0, 0)
    assert u.last_played is None and u.answers == {}
    assert store.get_or_create(1) == u


def test_upsert_roundtrip_bumps_version(store):
    u = store.get_or_create(1)
    saved = store.upsert(played(u))
    assert saved.version == u.version + 1
    got = store.get(1)
    assert got.answers[DAY].correct is True
    assert got.last_played == DAY
    assert got == saved


def test_upsert_with_stale_version_fails(store):
    u = store.get_or_create(1)
    store.upsert(played(u))
    with pytest.raises(StaleRecordError):
        store.upsert(u.model_copy(update={"username": "late"}))
    assert store.get(1).username is None


def test_all_records(store):
    for fid in (1, 2, 3):
        store.get_or_create(fid)
    assert sorted(r.fid for r in store.all_records()) == [1, 2, 3]


def test_json_store_missing_or_corrupt_file_is_empty(tmp_path):
    p = tmp_path / "users.json"
    s = JsonFileUserStore(p)
    assert s.all_records() == []
    p.write_text("{not json")
    assert s.all_records() == []
    assert s.get(1) is None
    # a write replaces the corrupt file
    s.get_or_create(1)
    assert json.loads(p.read_text())["users"]["1"]["fid"] == 1


def test_json_store_non_object_entries_read_as_missing(tmp_path):
    p = tmp_path / "users.json"
    p.write_text(json.dumps({"users": {"1": "junk", "2": [1, 2], "3": {"fid": 3}}}))
    s = JsonFileUserStore(p)
    assert s.get(2) is None
    assert [r.fid for r in s.all_records()] == [3]

    u = s.get_or_create(1)
    assert u.fid == 1 and u.total_played == 0
    saved = s.upsert(u.model_copy(update={"username": "fixed"}))
    assert s.get(1) == saved
    assert "2" not in json.loads(p.read_text())["users"]


def test_json_store_reads_original_layout(tmp_path):
    p = tmp_path / "users.json"
    p.write_text(
        json.dumps(
            {
                "users": {
                    "77": {
                        "fid": 77,
                        "username": "carol",
                        "currentStreak": 1,
                        "longestStreak": 2,
                        "lastPlayed": "2026-10-17",
                        "lastCorrect": True,
                        "totalPlayed": 2,
                        "totalCorrect": 2,
                        "answers": {
                            "2026-10-16": {"correct": True, "date": "2026-10-16"},
                            "2026-10-17": {"correct": True, "date": "2026-10-17"},
                        },
                    }
                }
            }
        )
    )
    u = JsonFileUserStore(p).get(77)
    assert u.username == "carol" and u.longest_streak == 2
    assert u.answers[date(2026, 10, 17)].correct is True


def test_json_store_write_failure_propagates(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    s = JsonFileUserStore(blocker / "users.json")
    with pytest.raises(StorageError):
        s.get_or_create(1)
