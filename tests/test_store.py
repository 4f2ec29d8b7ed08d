"""
Tests for the date-partitioned session store.
Run: python -m pytest tests/test_store.py -v
"""
import json
import os
from datetime import datetime

import pytest

from errors import InvalidRecordError, NotFoundError, PersistError
import store as store_module
from store import SessionStore, is_safe_session_id


class StepClock:
    def __init__(self, when):
        self.when = when

    def __call__(self):
        return self.when


@pytest.fixture
def clock():
    return StepClock(datetime(2026, 10, 18, 9, 30))


@pytest.fixture
def store(tmp_path, clock):
    return SessionStore(str(tmp_path / "performance"), clock=clock)


class TestIngest:

    def test_writes_one_file_under_receipt_date(self, store, sample_record, tmp_path):
        store.ingest(sample_record, received_from="10.0.0.5")
        path = tmp_path / "performance" / "2026" / "10" / "18" / "1760000000000-abc123xyz.json"
        assert path.exists()
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["receivedFrom"] == "10.0.0.5"
        assert saved["recordedAt"].endswith("Z")
        assert saved["wordsShown"] == ["ka lem", "ki tap", "ör nek"]

    def test_round_trip(self, store, sample_record):
        store.ingest(sample_record, received_from="10.0.0.5")
        record = store.get(sample_record["sessionId"]).to_dict()
        assert record.pop("receivedFrom") == "10.0.0.5"
        record.pop("recordedAt")
        assert record == sample_record

    def test_missing_fields_rejected(self, store, sample_record):
        del sample_record["durations"]
        with pytest.raises(InvalidRecordError) as exc_info:
            store.ingest(sample_record)
        assert "durations" in exc_info.value.message
        assert isinstance(exc_info.value, PersistError)

    def test_legacy_field_names_accepted(self, store, sample_record):
        sample_record["countMode"] = sample_record.pop("mode")
        sample_record["words"] = sample_record.pop("wordsShown")
        record = store.ingest(sample_record)
        assert record.mode == "2"
        assert record.words_shown == ["ka lem", "ki tap", "ör nek"]

    @pytest.mark.parametrize("session_id", ["../escape", "a/b", "", ".hidden"])
    def test_unsafe_session_id_rejected(self, store, sample_record, session_id):
        sample_record["sessionId"] = session_id
        with pytest.raises(InvalidRecordError):
            store.ingest(sample_record)

    def test_same_id_same_day_last_write_wins(self, store, sample_record):
        store.ingest(sample_record)
        sample_record["targetCount"] = 10
        store.ingest(sample_record)
        assert store.get(sample_record["sessionId"]).target_count == 10
        assert len(store.list_sessions()) == 1

    def test_storage_failure_raises_persist_error(self, tmp_path, sample_record, clock):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = SessionStore(str(blocker), clock=clock)
        with pytest.raises(PersistError) as exc_info:
            store.ingest(sample_record)
        assert exc_info.value.status_code == 500

    def test_overwrite_failure_keeps_previous_file(self, store, sample_record, monkeypatch, tmp_path):
        store.ingest(sample_record)

        def half_write(obj, f, **kwargs):
            f.write('{"sessionId": ')
            raise OSError("disk full")

        monkeypatch.setattr(store_module.json, "dump", half_write)
        sample_record["targetCount"] = 10
        with pytest.raises(PersistError):
            store.ingest(sample_record)

        monkeypatch.undo()
        assert store.get(sample_record["sessionId"]).target_count == 3
        partition = tmp_path / "performance" / "2026" / "10" / "18"
        assert sorted(p.name for p in partition.iterdir()) == ["1760000000000-abc123xyz.json"]


class TestRecordValues:
    """Values are stored exactly as sent, so malformed ones are turned away."""

    def test_int_mode_round_trips_unchanged(self, store, sample_record):
        sample_record["mode"] = 3
        store.ingest(sample_record)
        record = store.get(sample_record["sessionId"])
        assert record.mode == 3
        assert record.target_count == 3

    def test_random_and_digit_string_modes_accepted(self, store, sample_record):
        for mode in ("random", "4"):
            sample_record["mode"] = mode
            assert store.ingest(sample_record).mode == mode

    @pytest.mark.parametrize("mode", [0, -2, "0", "abc", "", True, 2.0])
    def test_invalid_mode_rejected(self, store, sample_record, mode):
        sample_record["mode"] = mode
        with pytest.raises(InvalidRecordError):
            store.ingest(sample_record)

    @pytest.mark.parametrize("target", [3.9, "3", True])
    def test_non_integer_target_count_rejected(self, store, sample_record, target):
        sample_record["targetCount"] = target
        with pytest.raises(InvalidRecordError) as exc_info:
            store.ingest(sample_record)
        assert "targetCount" in exc_info.value.message

    def test_non_string_session_id_rejected(self, store, sample_record):
        sample_record["sessionId"] = 1760000000000
        with pytest.raises(InvalidRecordError):
            store.ingest(sample_record)

    def test_negative_duration_rejected(self, store, sample_record):
        sample_record["durations"] = [2.5, -1]
        with pytest.raises(InvalidRecordError) as exc_info:
            store.ingest(sample_record)
        assert "non-negative" in exc_info.value.message

    def test_non_numeric_duration_rejected(self, store, sample_record):
        sample_record["durations"] = [2.5, "x"]
        with pytest.raises(InvalidRecordError):
            store.ingest(sample_record)

    def test_non_string_word_rejected(self, store, sample_record):
        sample_record["wordsShown"] = ["ka lem", 7, "ör nek"]
        with pytest.raises(InvalidRecordError) as exc_info:
            store.ingest(sample_record)
        assert "wordsShown" in exc_info.value.message

    @pytest.mark.parametrize("key", ["startedAt", "finishedAt"])
    def test_non_string_timestamp_rejected(self, store, sample_record, key):
        sample_record[key] = 12345
        with pytest.raises(InvalidRecordError) as exc_info:
            store.ingest(sample_record)
        assert key in exc_info.value.message

    @pytest.mark.parametrize("durations", [[2.5], [2.5, 3.5, 1.0]])
    def test_duration_count_must_match_words(self, store, sample_record, durations):
        sample_record["durations"] = durations
        with pytest.raises(InvalidRecordError):
            store.ingest(sample_record)

    def test_rejected_record_is_not_written(self, store, sample_record):
        sample_record["durations"] = [-5, "x"]
        with pytest.raises(InvalidRecordError):
            store.ingest(sample_record)
        assert store.list_sessions() == []


class TestLookup:

    def test_list_projects_summaries(self, store, sample_record):
        store.ingest(sample_record, received_from="10.0.0.5")
        summaries = [s.to_dict() for s in store.list_sessions()]
        assert summaries == [{
            "sessionId": "1760000000000-abc123xyz",
            "startedAt": "2026-10-18T09:00:00.000Z",
            "finishedAt": "2026-10-18T09:00:06.000Z",
            "mode": "2",
            "targetCount": 3,
            "origin": "10.0.0.5",
        }]

    def test_list_spans_partitions(self, store, clock, sample_record):
        store.ingest(sample_record)
        clock.when = datetime(2026, 11, 2, 8, 0)
        sample_record["sessionId"] = "second"
        store.ingest(sample_record)
        assert {s.session_id for s in store.list_sessions()} == {
            "1760000000000-abc123xyz", "second"}

    def test_empty_store(self, store):
        assert store.list_sessions() == []
        with pytest.raises(NotFoundError):
            store.get("missing")

    def test_unknown_id(self, store, sample_record):
        store.ingest(sample_record)
        with pytest.raises(NotFoundError):
            store.get("missing")

    def test_resend_after_midnight_keeps_both_and_get_returns_latest(
            self, store, clock, sample_record):
        clock.when = datetime(2026, 10, 18, 23, 59)
        store.ingest(sample_record)
        clock.when = datetime(2026, 10, 19, 0, 1)
        sample_record["targetCount"] = 7
        store.ingest(sample_record)

        assert len(store.list_sessions()) == 2
        assert store.get(sample_record["sessionId"]).target_count == 7

    def test_unreadable_file_skipped_in_list(self, store, sample_record, tmp_path):
        store.ingest(sample_record)
        junk = tmp_path / "performance" / "2026" / "10" / "18" / "junk.json"
        junk.write_text("{broken", encoding="utf-8")
        assert [s.session_id for s in store.list_sessions()] == ["1760000000000-abc123xyz"]

    def test_non_record_files_ignored(self, store, sample_record, tmp_path):
        store.ingest(sample_record)
        other = tmp_path / "performance" / "notes.txt"
        other.write_text("hello")
        assert len(store.list_sessions()) == 1


def test_is_safe_session_id():
    assert is_safe_session_id("1760000000000-abc123xyz")
    assert not is_safe_session_id("..")
    assert not is_safe_session_id("a b")
    assert not is_safe_session_id(None)
