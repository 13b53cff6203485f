"""In-memory record store."""
import threading
import structlog
from .base import RecordStore
from ..record_models import EncryptedRecord, StoredRecord, utc_now_iso

log = structlog.get_logger()


class InMemoryRecordStore(RecordStore):
    """Thread-safe in-memory implementation of the record store."""

    def __init__(self):
        self._records: dict[int, StoredRecord] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    async def list_all(self) -> list[StoredRecord]:
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

    async def get(self, record_id: int) -> StoredRecord | None:
        with self._lock:
            return self._records.get(record_id)

    async def create(self, record: EncryptedRecord) -> StoredRecord:
        with self._lock:
            stored = StoredRecord.new(self._next_id, record)
            self._records[stored.id] = stored
            self._next_id += 1
        log.info("record.stored", id=stored.id, adapter="memory")
        return stored

    async def update(self, record_id: int, record: EncryptedRecord) -> StoredRecord | None:
        with self._lock:
            existing = self._records.get(record_id)
            if existing is None:
                return None
            stored = StoredRecord(
                id=record_id,
                created_at=existing.created_at,
                updated_at=utc_now_iso(),
                **record.model_dump(),
            )
            self._records[record_id] = stored
        log.info("record.replaced", id=record_id, adapter="memory")
        return stored

    async def delete(self, record_id: int) -> bool:
        with self._lock:
            removed = self._records.pop(record_id, None) is not None
        if removed:
            log.info("record.removed", id=record_id, adapter="memory")
        return removed

    async def health_check(self) -> bool:
        """In-memory store is always healthy."""
        return True

    def clear(self) -> None:
        """Remove all records and restart ids at 1."""
        with self._lock:
            self._records.clear()
            self._next_id = 1
