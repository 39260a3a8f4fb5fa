"""Infrastructure layer for record persistence.

Records live in memory; :class:`JsonFileRecordRepository` mirrors them to a
single JSON snapshot that is reloaded at start-up. Saving is periodic and
fire-and-forget after every mutation, so a crash can lose the writes made
since the last successful snapshot.
"""
from __future__ import annotations

import asyncio
import contextlib
import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Protocol

from backend.core.identifiers import generate_id
from backend.domain import Collection, StoreState, utc_now_iso

logger = logging.getLogger(__name__)

Predicate = Callable[[dict[str, Any]], bool]


class PersistenceWriteFailure(RuntimeError):
    """Raised internally when the snapshot file cannot be written."""


class RecordRepository(Protocol):
    """Persistence contract for intake records."""

    def put(self, collection: Collection, record: dict[str, Any]) -> str: ...

    def get(self, collection: Collection, record_id: str) -> dict[str, Any] | None: ...

    def list(self, collection: Collection, predicate: Predicate | None = None) -> list[dict[str, Any]]: ...

    def find_user_by_email(self, email: str) -> dict[str, Any] | None: ...

    def stats(self) -> dict[str, object]: ...


class InMemoryRecordRepository:
    """Simple in-memory repository for fast iteration and tests."""

    def __init__(self, state: StoreState | None = None) -> None:
        self._state = state or StoreState()
        # one coarse lock: snapshots serialise from worker threads
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # hooks
    # ------------------------------------------------------------------
    def _after_mutation(self) -> None:
        """Called after every successful write."""

    # ------------------------------------------------------------------
    # CRUD operations
    # ------------------------------------------------------------------
    def put(self, collection: Collection, record: dict[str, Any]) -> str:
        collection = Collection(collection)
        with self._lock:
            items = self._state.collection(collection)
            record_id = str(record.get("id") or generate_id(collection.default_prefix))
            existing = items.get(record_id) or {}
            now = utc_now_iso()

            stored = copy.deepcopy(record)
            stored["id"] = record_id
            stored["createdAt"] = existing.get("createdAt") or now
            stored["updatedAt"] = now
            for stamp in collection.creation_stamps:
                stored[stamp] = existing.get(stamp) or now
            if collection is Collection.USERS:
                stored.setdefault("active", True)

            items[record_id] = stored
        self._after_mutation()
        return record_id

    def get(self, collection: Collection, record_id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._state.collection(Collection(collection)).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def list(self, collection: Collection, predicate: Predicate | None = None) -> list[dict[str, Any]]:
        with self._lock:
            records = [copy.deepcopy(item) for item in self._state.collection(Collection(collection)).values()]
        if predicate is None:
            return records
        return [item for item in records if predicate(item)]

    def find_user_by_email(self, email: str) -> dict[str, Any] | None:
        # linear scan; subscribers are not unique by email
        for user in self.list(Collection.USERS):
            if user.get("email") == email:
                return user
        return None

    def stats(self) -> dict[str, object]:
        with self._lock:
            return {
                "totalInquiries": len(self._state.inquiries),
                "totalContacts": len(self._state.contacts),
                "totalUsers": len(self._state.users),
                "totalDocuments": len(self._state.documents),
                "lastUpdated": self._state.last_updated,
            }


class JsonFileRecordRepository(InMemoryRecordRepository):
    """In-memory repository mirrored to a JSON snapshot on disk."""

    def __init__(self, path: Path, *, autosave_interval: float = 300.0, save_on_write: bool = True) -> None:
        super().__init__()
        self._path = Path(path)
        self._autosave_interval = autosave_interval
        self._save_on_write = save_on_write
        self._write_lock = threading.Lock()
        self._pending: set[asyncio.Task[bool]] = set()
        self._autosave_task: asyncio.Task[None] | None = None

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # loading & saving
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Replace in-memory state with the snapshot, or start empty."""

        state = StoreState()
        if not self._path.exists():
            logger.info("No snapshot at %s, starting with empty collections", self._path)
        else:
            try:
                data = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
                logger.warning("Ignoring unreadable snapshot %s: %s", self._path, exc)
            else:
                if isinstance(data, dict):
                    state = StoreState.from_json(data)
                else:
                    logger.warning("Ignoring snapshot %s: top level is not an object", self._path)
        with self._lock:
            self._state = state
        logger.info("Record store initialised from %s", self._path)

    def _write(self, payload: str) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise PersistenceWriteFailure(f"could not write snapshot {self._path}: {exc}") from exc

    def snapshot(self) -> bool:
        """Write the full state to disk. Failures are logged, never raised."""

        with self._write_lock:
            with self._lock:
                self._state.last_updated = utc_now_iso()
                payload = json.dumps(self._state.to_json(), indent=2, ensure_ascii=False, default=str)
            try:
                self._write(payload)
            except PersistenceWriteFailure:
                logger.exception("Snapshot save failed; in-memory state remains authoritative")
                return False
        return True

    def schedule_save(self) -> None:
        """Save in the background when an event loop is running, else inline."""

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.snapshot()
            return
        task = loop.create_task(asyncio.to_thread(self.snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _after_mutation(self) -> None:
        if self._save_on_write:
            self.schedule_save()

    async def flush(self) -> None:
        """Wait for any scheduled background saves to finish."""

        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------
    # periodic autosave
    # ------------------------------------------------------------------
    async def _autosave_loop(self) -> None:
        while True:
            await asyncio.sleep(self._autosave_interval)
            await asyncio.to_thread(self.snapshot)

    def start_autosave(self) -> None:
        if self._autosave_task is None or self._autosave_task.done():
            self._autosave_task = asyncio.get_running_loop().create_task(self._autosave_loop())

    async def stop_autosave(self) -> None:
        """Cancel the timer, drain pending saves and write a final snapshot."""

        task, self._autosave_task = self._autosave_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.flush()
        await asyncio.to_thread(self.snapshot)
