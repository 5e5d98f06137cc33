"""Unit tests for draft persistence."""

import json
from datetime import date

import pytest

from invoice_builder.storage import (
    CURRENT_VERSION,
    STORAGE_PREFIX,
    DraftAutosaver,
    FileStore,
    FormStorage,
    KeyValueStore,
    MemoryStore,
    cleanup_expired,
)

HOUR_MS = 60 * 60 * 1000


class FakeClock:
    """Settable clock returning epoch milliseconds (or seconds for the autosaver)."""

    def __init__(self, now: float = 1_000_000_000_000):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, amount: float) -> None:
        self.now += amount


class BrokenStore(KeyValueStore):
    """Store whose every operation fails like an unavailable disk."""

    def get(self, key):
        raise OSError("disk unavailable")

    def set(self, key, value):
        raise OSError("disk unavailable")

    def delete(self, key):
        raise OSError("disk unavailable")

    def keys(self, prefix=""):
        raise OSError("disk unavailable")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def storage(store, clock) -> FormStorage:
    return FormStorage(store, "user-1", clock=clock)


class TestFormStorage:
    """Save, load and expiry of one draft."""

    def test_round_trip_with_dates(self, storage, store, sample_form) -> None:
        """Saved forms load back with dates as ISO strings."""
        assert storage.save(sample_form) is True
        loaded = storage.load()
        assert loaded["business"]["name"] == "Acme Studio"
        assert loaded["details"]["issue_date"] == "2026-01-05"
        record = json.loads(store.get(f"{STORAGE_PREFIX}user-1"))
        assert record["version"] == CURRENT_VERSION
        assert isinstance(record["data"], str)

    def test_missing_draft(self, storage) -> None:
        """Nothing saved loads as None."""
        assert storage.load() is None
        assert storage.exists() is False

    def test_expired_draft_deleted(self, storage, store, clock) -> None:
        """A draft older than the expiry loads as None and is removed."""
        storage.save({"a": 1})
        clock.advance(24 * HOUR_MS + 1)
        assert storage.exists() is False
        assert storage.load() is None
        assert store.keys(STORAGE_PREFIX) == []

    def test_not_yet_expired(self, storage, clock) -> None:
        """A draft exactly at the limit is still valid."""
        storage.save({"a": 1})
        clock.advance(24 * HOUR_MS)
        assert storage.exists() is True
        assert storage.load() == {"a": 1}

    def test_version_mismatch_cleared(self, storage, store, clock) -> None:
        """Drafts written by another version are discarded."""
        store.set(storage.key, json.dumps({"data": "{}", "timestamp": clock(), "version": "0.9"}))
        assert storage.load() is None
        assert store.get(storage.key) is None

    def test_corrupt_draft_cleared(self, storage, store) -> None:
        """Unparseable drafts are discarded."""
        store.set(storage.key, "{not json")
        assert storage.load() is None
        assert store.get(storage.key) is None

    def test_oversized_not_written(self, store, clock) -> None:
        """Data over the size cap is rejected without touching the store."""
        small = FormStorage(store, "user-1", max_size=50, clock=clock)
        assert small.save({"notes": "x" * 100}) is False
        assert store.keys() == []

    def test_unserializable_rejected(self, storage, store) -> None:
        """Values JSON cannot represent are rejected."""
        assert storage.save({"bad": object()}) is False
        assert store.keys() == []

    def test_clear(self, storage) -> None:
        """Clearing removes the draft."""
        storage.save({"a": 1})
        storage.clear()
        assert storage.load() is None

    def test_storage_info(self, storage) -> None:
        """Info reports size, availability and presence."""
        assert storage.storage_info() == {"used": 0, "available": True, "exists": False}
        storage.save({"a": 1})
        info = storage.storage_info()
        assert info["used"] > 0
        assert info["exists"] is True

    def test_failing_store_never_raises(self, clock) -> None:
        """Backend errors are reported, not raised."""
        broken = FormStorage(BrokenStore(), "user-1", clock=clock)
        assert broken.save({"a": 1}) is False
        assert broken.load() is None
        assert broken.exists() is False
        broken.clear()
        assert broken.storage_info() == {"used": 0, "available": False, "exists": False}


def test_cleanup_expired(store, clock) -> None:
    """Expired and corrupt drafts are removed, fresh ones and other keys kept."""
    FormStorage(store, "old", clock=clock).save({"a": 1})
    clock.advance(25 * HOUR_MS)
    FormStorage(store, "fresh", clock=clock).save({"a": 2})
    store.set(f"{STORAGE_PREFIX}corrupt", "???")
    store.set("unrelated", "???")

    assert cleanup_expired(store, clock=clock) == 2
    assert sorted(store.keys()) == [f"{STORAGE_PREFIX}fresh", "unrelated"]


def test_cleanup_with_failing_store() -> None:
    """A broken backend cleans up nothing and does not raise."""
    assert cleanup_expired(BrokenStore()) == 0


def test_incomplete_backend_rejected() -> None:
    """A backend missing part of the interface cannot be instantiated."""
    class GetOnly(KeyValueStore):
        def get(self, key):
            return None

    with pytest.raises(TypeError):
        KeyValueStore()
    with pytest.raises(TypeError):
        GetOnly()


class TestFileStore:
    """One JSON file per draft."""

    def test_set_get_delete(self, tmp_path) -> None:
        """Values persist in files named after the key."""
        fs = FileStore(tmp_path / "drafts")
        fs.set("invoice_form_a", "value")
        assert fs.get("invoice_form_a") == "value"
        assert (tmp_path / "drafts" / "invoice_form_a.json").exists()
        assert fs.keys("invoice_form_") == ["invoice_form_a"]
        fs.delete("invoice_form_a")
        fs.delete("invoice_form_a")
        assert fs.get("invoice_form_a") is None

    def test_unsafe_keys(self, tmp_path) -> None:
        """Keys with path characters stay inside the directory."""
        fs = FileStore(tmp_path)
        fs.set("../escape", "v")
        assert fs.get("../escape") == "v"
        assert list(tmp_path.parent.glob("escape*")) == []

    def test_similar_keys_do_not_collide(self, tmp_path) -> None:
        """Keys differing only in characters a file name cannot hold stay separate."""
        fs = FileStore(tmp_path)
        fs.set("invoice_form_john doe", "first")
        fs.set("invoice_form_john_doe", "second")
        assert fs.get("invoice_form_john doe") == "first"
        assert fs.get("invoice_form_john_doe") == "second"
        assert fs.keys("invoice_form_john") == ["invoice_form_john doe", "invoice_form_john_doe"]

    def test_with_form_storage(self, tmp_path, clock, sample_form) -> None:
        """FormStorage works unchanged on the file backend."""
        storage = FormStorage(FileStore(tmp_path), "user 1", clock=clock)
        assert storage.save(sample_form)
        assert storage.load()["details"]["invoice_number"] == "INV-00209"


class TestDraftAutosaver:
    """Throttled autosave."""

    @pytest.fixture
    def seconds(self) -> FakeClock:
        return FakeClock(now=100.0)

    def test_waits_for_interval(self, storage, seconds) -> None:
        """A change is written once it has been pending for the interval."""
        saver = DraftAutosaver(storage, debounce_seconds=1.0, clock=seconds)
        assert saver.update({"n": 1}) is False
        seconds.advance(0.5)
        assert saver.update({"n": 2}) is False
        assert storage.load() is None
        seconds.advance(0.6)
        assert saver.update({"n": 2}) is True
        assert storage.load() == {"n": 2}

    def test_every_edit_different(self, storage, seconds) -> None:
        """Edits that all differ still reach storage, each rerun carrying the newest form."""
        saver = DraftAutosaver(storage, debounce_seconds=1.0, clock=seconds)
        saver.update({"n": 1})
        seconds.advance(30)
        assert saver.update({"n": 2}) is True
        assert storage.load() == {"n": 2}
        seconds.advance(30)
        saver.update({"n": 3})
        assert storage.load() is not None

    def test_continuous_editing_throttled(self, storage, seconds) -> None:
        """Rapid edits are written at most once per interval."""
        saver = DraftAutosaver(storage, debounce_seconds=1.0, clock=seconds)
        writes = 0
        for n in range(20):
            writes += saver.update({"n": n})
            seconds.advance(0.25)
        assert writes == 4
        assert saver.pending is True
        saver.flush()
        assert storage.load() == {"n": 19}

    def test_unchanged_form_not_rewritten(self, storage, seconds) -> None:
        """Once saved, the same form is not written again."""
        saver = DraftAutosaver(storage, debounce_seconds=0, clock=seconds)
        assert saver.update({"n": 1}) is True
        assert saver.update({"n": 1}) is False
        assert saver.pending is False

    def test_flush_writes_pending(self, storage, seconds) -> None:
        """Flush saves a pending change immediately."""
        saver = DraftAutosaver(storage, debounce_seconds=5, clock=seconds)
        saver.update({"n": 1})
        assert saver.pending is True
        assert saver.flush() is True
        assert storage.load() == {"n": 1}
        assert saver.flush() is False

    def test_excluded_fields(self, storage, seconds) -> None:
        """Excluded top-level fields are not stored."""
        saver = DraftAutosaver(storage, debounce_seconds=0, exclude_fields=["secret"], clock=seconds)
        saver.update({"n": 1, "secret": "x"})
        assert storage.load() == {"n": 1}

    def test_mark_saved(self, storage, seconds) -> None:
        """A restored form is not immediately written back."""
        saver = DraftAutosaver(storage, debounce_seconds=0, clock=seconds)
        saver.mark_saved({"d": date(2026, 1, 1)})
        assert saver.update({"d": date(2026, 1, 1)}) is False
        assert storage.load() is None
