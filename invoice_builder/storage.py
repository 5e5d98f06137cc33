"""
Draft persistence.

A draft is the raw form state saved under ``invoice_form_<key>`` as::

    {"data": "<form as JSON>", "timestamp": <epoch ms>, "version": "1.0"}

Drafts expire after a day, are capped at 1 MiB and are discarded on a
version change. Nothing in this module raises on storage problems: failures
are logged and reported as ``False``/``None`` so the form keeps working.
"""

import json
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
from urllib.parse import quote, unquote

from .logs import logger
from .utils import json_default

log = logger(__name__)

STORAGE_PREFIX = "invoice_form_"
DEFAULT_EXPIRATION_HOURS = 24
DEFAULT_MAX_SIZE = 1024 * 1024
CURRENT_VERSION = "1.0"

_PROBE_KEY = "__storage_probe__"


def now_ms() -> int:
    return int(time.time() * 1000)


# ---- Key/value backends ----

class KeyValueStore(ABC):
    """String key/value store, the only thing ``FormStorage`` needs from a backend."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        ...


class MemoryStore(KeyValueStore):
    """Process-local store; the Streamlit app shares one across sessions via ``st.cache_resource``."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def delete(self, key):
        self._data.pop(key, None)

    def keys(self, prefix=""):
        return [k for k in self._data if k.startswith(prefix)]


class FileStore(KeyValueStore):
    """One ``<key>.json`` file per entry. Keys are percent-encoded, so distinct keys never share a file."""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _safe(key: str) -> str:
        return quote(key, safe="")

    def _path(self, key: str) -> Path:
        return self.directory / f"{self._safe(key)}.json"

    def get(self, key):
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key, value):
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def delete(self, key):
        self._path(key).unlink(missing_ok=True)

    def keys(self, prefix=""):
        names = (unquote(p.stem) for p in self.directory.glob("*.json"))
        return sorted(k for k in names if k.startswith(prefix))


# ---- Drafts ----

class FormStorage:
    """Save, load and expire one form draft."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        expiration_hours: float = DEFAULT_EXPIRATION_HOURS,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.key = STORAGE_PREFIX + key
        self.expiration_ms = (expiration_hours or DEFAULT_EXPIRATION_HOURS) * 60 * 60 * 1000
        self.max_size = max_size or DEFAULT_MAX_SIZE
        self.clock = clock

    def available(self) -> bool:
        try:
            self.store.set(_PROBE_KEY, _PROBE_KEY)
            self.store.delete(_PROBE_KEY)
            return True
        except OSError:
            return False

    def save(self, data: Any) -> bool:
        try:
            serialized = json.dumps(data, default=json_default)
        except (TypeError, ValueError) as e:
            log.error("Failed to serialize form data: %s", e)
            return False
        if len(serialized) > self.max_size:
            log.warning("Form data too large to store (%d > %d)", len(serialized), self.max_size)
            return False

        record = {"data": serialized, "timestamp": self.clock(), "version": CURRENT_VERSION}
        try:
            self.store.set(self.key, json.dumps(record))
        except OSError as e:
            log.error("Failed to save form data: %s", e)
            return False
        log.debug("Saved draft %s (%d chars)", self.key, len(serialized))
        return True

    def _read(self) -> Optional[str]:
        try:
            return self.store.get(self.key)
        except OSError as e:
            log.error("Failed to read form data: %s", e)
            return None

    def load(self) -> Optional[Any]:
        """The stored form, or None; expired, outdated or corrupt drafts are deleted."""
        raw = self._read()
        if not raw:
            return None
        try:
            record = json.loads(raw)
            timestamp = float(record["timestamp"])
            if self.clock() - timestamp > self.expiration_ms:
                log.info("Draft %s expired", self.key)
                self.clear()
                return None
            if record.get("version") != CURRENT_VERSION:
                log.warning("Stored form data version mismatch, clearing")
                self.clear()
                return None
            return json.loads(record["data"])
        except (ValueError, TypeError, KeyError) as e:
            log.error("Failed to load form data: %s", e)
            self.clear()
            return None

    def clear(self) -> None:
        try:
            self.store.delete(self.key)
        except OSError as e:
            log.error("Failed to clear form data: %s", e)

    def exists(self) -> bool:
        """A draft is present and not expired (it may still fail to load)."""
        raw = self._read()
        if not raw:
            return False
        try:
            return self.clock() - float(json.loads(raw)["timestamp"]) <= self.expiration_ms
        except (ValueError, TypeError, KeyError):
            return False

    def storage_info(self) -> Dict[str, Any]:
        raw = self._read()
        return {"used": len(raw) if raw else 0, "available": self.available(), "exists": self.exists()}


def cleanup_expired(
    store: KeyValueStore,
    expiration_hours: float = DEFAULT_EXPIRATION_HOURS,
    clock: Callable[[], int] = now_ms,
) -> int:
    """Delete expired or unreadable drafts; returns how many were removed."""
    limit = expiration_hours * 60 * 60 * 1000
    removed = 0
    try:
        for key in store.keys(STORAGE_PREFIX):
            try:
                raw = store.get(key)
                if raw is None:
                    continue
                expired = clock() - float(json.loads(raw)["timestamp"]) > limit
            except (ValueError, TypeError, KeyError):
                expired = True
            if expired:
                store.delete(key)
                removed += 1
    except OSError as e:
        log.error("Failed to clean up expired form data: %s", e)
        return removed
    if removed:
        log.info("Cleaned up %d expired form data entries", removed)
    return removed


# ---- Autosave ----

class DraftAutosaver:
    """
    Throttled autosave.

    ``update`` is called with the current form on every rerun. Streamlit only
    reruns on input, so there is no timer: the draft is written on the first
    update at least ``debounce_seconds`` after the oldest unsaved change, and
    continuous editing saves at most once per interval. ``flush`` writes any
    pending change immediately.
    """

    def __init__(
        self,
        storage: FormStorage,
        debounce_seconds: float = 1.0,
        exclude_fields: Iterable[str] = (),
        clock: Callable[[], float] = time.monotonic,
    ):
        self.storage = storage
        self.debounce_seconds = debounce_seconds
        self.exclude_fields = set(exclude_fields)
        self.clock = clock
        self._pending: Optional[Dict[str, Any]] = None
        self._pending_since = 0.0
        self._saved: Optional[str] = None

    def _filter(self, form: Mapping[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in form.items() if k not in self.exclude_fields}

    @staticmethod
    def _fingerprint(form: Mapping[str, Any]) -> str:
        return json.dumps(form, default=json_default, sort_keys=True)

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def update(self, form: Mapping[str, Any]) -> bool:
        """Record ``form``; returns True when this call wrote the draft."""
        data = self._filter(form)
        fingerprint = self._fingerprint(data)
        if fingerprint == self._saved:
            self._pending = None
            return False
        if self._pending is None:
            self._pending_since = self.clock()
        self._pending = data
        if self.clock() - self._pending_since >= self.debounce_seconds:
            return self.flush()
        return False

    def flush(self) -> bool:
        if self._pending is None:
            return False
        data, self._pending = self._pending, None
        ok = self.storage.save(data)
        if ok:
            self._saved = self._fingerprint(data)
        return ok

    def mark_saved(self, form: Mapping[str, Any]) -> None:
        """Treat ``form`` as already stored, e.g. right after restoring it."""
        self._saved = self._fingerprint(self._filter(form))
        self._pending = None
