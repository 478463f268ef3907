"""In-memory store of captured upstream errors for diagnosis."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Optional

MAX_ENTRIES_PER_KEY = 3


@dataclass
class DebugErrorEntry:
    """One captured error with its full request context."""

    request_id: str
    key_hash: str
    model: str
    api_path: str
    is_stream: bool
    created_at: str
    status_code: int
    error_type: str
    error_message: str
    key_alias: Optional[str] = None
    upstream_status: Optional[int] = None
    upstream_body: Optional[str] = None
    request_body: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DebugErrorStore:
    """Keeps at most three entries per key, oldest evicted first.

    Recording only happens while the store is enabled; disabling it drops
    everything captured so far.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._entries: dict[str, DebugErrorEntry] = {}
        self._key_index: dict[str, deque[str]] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        with self._lock:
            self._enabled = value
            if not value:
                self._entries.clear()
                self._key_index.clear()

    def record(self, entry: DebugErrorEntry) -> None:
        """Store ``entry`` if enabled, evicting the key's oldest entries past the limit."""
        with self._lock:
            if not self._enabled:
                return
            self._entries[entry.request_id] = entry
            ids = self._key_index.setdefault(entry.key_hash, deque())
            ids.append(entry.request_id)
            while len(ids) > MAX_ENTRIES_PER_KEY:
                self._entries.pop(ids.popleft(), None)

    def get(self, request_id: str) -> Optional[DebugErrorEntry]:
        with self._lock:
            return self._entries.get(request_id)

    def list_for_key(self, key_hash: str) -> list[DebugErrorEntry]:
        """Entries for ``key_hash``, oldest first."""
        with self._lock:
            ids = self._key_index.get(key_hash, ())
            return [self._entries[i] for i in ids if i in self._entries]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_index.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)