"""File-backed repository implementations for runtime state."""

from __future__ import annotations

import json
import os
import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Generic, List, Optional, TypeVar

import yaml

from ...io_utils import FileLock, atomic_write_text
from ..domain.models import (
    BankAccount,
    Bid,
    CalendarEvent,
    Invoice,
    Job,
    Notification,
    Transaction,
    UserProfile,
    WorkTask,
    now_iso,
    parse_iso,
)
from .interfaces import (
    BankAccountRepository,
    BidRepository,
    CalendarEventRepository,
    EventRepository,
    InvoiceRepository,
    JobRepository,
    NotificationRepository,
    TransactionRepository,
    UserProfileRepository,
    WorkTaskRepository,
)

STATE_VERSION = 1

T = TypeVar("T")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class _YamlCollectionRepo(Generic[T]):
    def __init__(
        self,
        path: Path,
        lock_path: Path,
        key: str,
        loader: Callable[[dict[str, Any]], T],
        dumper: Callable[[T], dict[str, Any]],
    ) -> None:
        """Initialize the YamlCollectionRepo.

        Args:
            path (Path): YAML file path containing this repository collection.
            lock_path (Path): Lock file path used for cross-process synchronization.
            key (str): Top-level YAML key that stores serialized collection items.
            loader (Callable[[dict[str, Any]], T]): Callable converting raw dictionaries
                into domain models.
            dumper (Callable[[T], dict[str, Any]]): Callable converting domain models
                into dictionaries for persistence.
        """
        self._path = path
        self._lock = FileLock(lock_path)
        self._thread_lock = threading.RLock()
        self._key = key
        self._loader = loader
        self._dumper = dumper

    def _load(self) -> list[T]:
        if not self._path.exists():
            return []
        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            return []
        items = raw.get(self._key, [])
        if not isinstance(items, list):
            return []
        out: list[T] = []
        for item in items:
            if isinstance(item, dict):
                out.append(self._loader(item))
        return out

    def _save(self, items: list[T]) -> None:
        payload = {"version": STATE_VERSION, self._key: [self._dumper(item) for item in items]}
        atomic_write_text(self._path, yaml.safe_dump(payload, sort_keys=False))


class _FileRecordRepository(Generic[T]):
    """YAML-backed list/get/upsert shared by the marketplace record repositories."""
    def __init__(
        self,
        path: Path,
        lock_path: Path,
        key: str,
        loader: Callable[[dict[str, Any]], T],
    ) -> None:
        self._repo = _YamlCollectionRepo[T](
            path,
            lock_path,
            key,
            loader=loader,
            dumper=lambda item: item.to_dict(),  # type: ignore[attr-defined]
        )

    def list(self) -> list[T]:
        """Load all persisted records.

        Returns:
            list[T]: All persisted records in storage order.
        """
        with self._repo._thread_lock:
            with self._repo._lock:
                return self._repo._load()

    def get(self, record_id: str) -> Optional[T]:
        """Fetch a single record by identifier.

        Args:
            record_id (str): Identifier for the target record.

        Returns:
            Optional[T]: Requested value when available; otherwise `None`.
        """
        for item in self.list():
            if item.id == record_id:  # type: ignore[attr-defined]
                return item
        return None

    def upsert(self, record: T) -> T:
        """Insert or replace a record by id.

        Args:
            record (T): Record to insert or replace.

        Returns:
            T: Persisted record after the write operation.
        """
        with self._repo._thread_lock:
            with self._repo._lock:
                items = self._repo._load()
                for idx, existing in enumerate(items):
                    if existing.id == record.id:  # type: ignore[attr-defined]
                        items[idx] = record
                        self._repo._save(items)
                        return record
                items.append(record)
                self._repo._save(items)
        return record


class FileNotificationRepository(NotificationRepository):
    """YAML-backed notification ledger with an atomic conditional insert."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        """Initialize the FileNotificationRepository.

        Args:
            path (Path): YAML file path for ledger entries.
            lock_path (Path): Lock file path used while mutating ledger data.
        """
        self._repo = _YamlCollectionRepo[Notification](
            path,
            lock_path,
            "notifications",
            loader=Notification.from_dict,
            dumper=lambda n: n.to_dict(),
        )

    def list(self) -> list[Notification]:
        """Load every ledger entry in insertion order.

        Returns:
            list[Notification]: All persisted entries.
        """
        with self._repo._thread_lock:
            with self._repo._lock:
                return self._repo._load()

    def get(self, notification_id: str) -> Optional[Notification]:
        """Fetch a single entry by identifier.

        Args:
            notification_id (str): Identifier for the target entry.

        Returns:
            Optional[Notification]: Requested value when available; otherwise `None`.
        """
        for item in self.list():
            if item.id == notification_id:
                return item
        return None

    def for_recipient(self, recipient_id: str, *, unread_only: bool = False) -> List[Notification]:
        """List a recipient's entries newest first.

        Entries sharing a timestamp keep reverse insertion order, so the
        later write still sorts first.

        Args:
            recipient_id (str): User the entries are addressed to.
            unread_only (bool): Skip entries already marked read.

        Returns:
            List[Notification]: Matching entries, newest first.
        """
        indexed = [
            (idx, item)
            for idx, item in enumerate(self.list())
            if item.recipient_id == recipient_id and not (unread_only and item.read)
        ]
        indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [item for _, item in indexed]

    def insert_if_absent(self, notification: Notification) -> tuple[Notification, bool]:
        """Insert ``notification`` unless an unread duplicate already exists.

        Args:
            notification (Notification): Candidate entry carrying ``metadata.uniqueKey``.

        Returns:
            tuple[Notification, bool]: Stored entry and whether it was newly inserted.
        """
        key = notification.unique_key
        with self._repo._thread_lock:
            with self._repo._lock:
                items = self._repo._load()
                for existing in items:
                    if (
                        not existing.read
                        and existing.recipient_id == notification.recipient_id
                        and existing.event_kind == notification.event_kind
                        and existing.unique_key == key
                    ):
                        return existing, False
                items.append(notification)
                self._repo._save(items)
        return notification, True

    def append(self, notification: Notification) -> Notification:
        """Append one entry without any duplicate check.

        Args:
            notification (Notification): Entry to store.

        Returns:
            Notification: Stored entry.
        """
        with self._repo._thread_lock:
            with self._repo._lock:
                items = self._repo._load()
                items.append(notification)
                self._repo._save(items)
        return notification

    def mark_read(self, notification_id: str, recipient_id: Optional[str] = None) -> Optional[Notification]:
        """Flag one entry as read and stamp ``read_at``.

        Args:
            notification_id (str): Identifier for the target entry.
            recipient_id (Optional[str]): When given, entries addressed to
                anyone else are left untouched.

        Returns:
            Optional[Notification]: Updated entry, or `None` when no entry matches.
        """
        with self._repo._thread_lock:
            with self._repo._lock:
                items = self._repo._load()
                for item in items:
                    if item.id == notification_id:
                        if recipient_id is not None and item.recipient_id != recipient_id:
                            return None
                        if not item.read:
                            item.read = True
                            item.read_at = now_iso()
                            self._repo._save(items)
                        return item
        return None


class FileInvoiceRepository(_FileRecordRepository[Invoice], InvoiceRepository):
    """YAML-backed invoice repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        super().__init__(path, lock_path, "invoices", Invoice.from_dict)

    def find_by_invoice_id(self, invoice_id: str) -> Optional[Invoice]:
        for item in self.list():
            if item.invoice_id == invoice_id:
                return item
        return None

    def list_overdue(self, freelancer_id: str) -> List[Invoice]:
        return [item for item in self.list() if item.freelancer_id == freelancer_id and item.status == "Overdue"]


class FileTransactionRepository(_FileRecordRepository[Transaction], TransactionRepository):
    """YAML-backed transaction repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        super().__init__(path, lock_path, "transactions", Transaction.from_dict)

    def find_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        for item in self.list():
            if item.transaction_id == transaction_id:
                return item
        return None

    def latest_for_user(self, user_id: str) -> Optional[Transaction]:
        """Return the newest transaction by ``date``; unparseable dates sort oldest.

        Args:
            user_id (str): Owner of the transactions.

        Returns:
            Optional[Transaction]: Newest transaction, or `None` when the user has none.
        """
        owned = [item for item in self.list() if item.user_id == user_id]
        if not owned:
            return None
        return max(owned, key=lambda item: parse_iso(item.date) or _EPOCH)


class FileWorkTaskRepository(_FileRecordRepository[WorkTask], WorkTaskRepository):
    """YAML-backed task-board repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        super().__init__(path, lock_path, "tasks", WorkTask.from_dict)

    def for_user(self, user_id: str) -> List[WorkTask]:
        return [item for item in self.list() if item.user_id == user_id]


class FileCalendarEventRepository(_FileRecordRepository[CalendarEvent], CalendarEventRepository):
    """YAML-backed calendar repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        super().__init__(path, lock_path, "calendar_events", CalendarEvent.from_dict)

    def for_user(self, user_id: str) -> List[CalendarEvent]:
        return [item for item in self.list() if item.user_id == user_id]


class FileJobRepository(_FileRecordRepository[Job], JobRepository):
    """YAML-backed job posting repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        super().__init__(path, lock_path, "jobs", Job.from_dict)

    def list_open(self) -> List[Job]:
        return [item for item in self.list() if item.status == "Open"]


class FileBidRepository(_FileRecordRepository[Bid], BidRepository):
    """YAML-backed bid repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        super().__init__(path, lock_path, "bids", Bid.from_dict)

    def for_freelancer(self, freelancer_id: str) -> List[Bid]:
        return [item for item in self.list() if item.freelancer_id == freelancer_id]


class FileUserProfileRepository(_FileRecordRepository[UserProfile], UserProfileRepository):
    """YAML-backed profile repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        super().__init__(path, lock_path, "users", UserProfile.from_dict)


class FileBankAccountRepository(_FileRecordRepository[BankAccount], BankAccountRepository):
    """YAML-backed bank account repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        super().__init__(path, lock_path, "bank_accounts", BankAccount.from_dict)

    def for_user(self, user_id: str) -> Optional[BankAccount]:
        for item in self.list():
            if item.user_id == user_id:
                return item
        return None


class FileEventRepository(EventRepository):
    """JSONL-backed event stream repository."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        """Initialize the FileEventRepository.

        Args:
            path (Path): JSONL file path where event envelopes are appended.
            lock_path (Path): Lock file path used while writing or reading events.
        """
        self._path = path
        self._lock = FileLock(lock_path)
        self._thread_lock = threading.RLock()

    def append(self, *, channel: str, event_type: str, entity_id: str, payload: dict[str, Any], project_id: str) -> dict[str, Any]:
        """Append one event envelope to the JSONL stream.

        Args:
            channel (str): Channel namespace for the event stream.
            event_type (str): Specific event type emitted in the channel.
            entity_id (str): Identifier for the related entity.
            payload (dict[str, Any]): JSON-serializable event payload body.
            project_id (str): Identifier for the related project.

        Returns:
            dict[str, Any]: Persisted event envelope including generated id and timestamp.
        """
        event = {
            "id": f"aud-{uuid.uuid4().hex[:10]}",
            "ts": now_iso(),
            "channel": channel,
            "type": event_type,
            "entity_id": entity_id,
            "payload": payload,
            "project_id": project_id,
        }
        with self._thread_lock:
            with self._lock:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as handle:
                    handle.write(json.dumps(event) + "\n")
                    handle.flush()
                    os.fsync(handle.fileno())
        return event

    def list_recent(self, limit: int = 100) -> list[dict[str, Any]]:
        """Read the newest events up to ``limit``.

        Args:
            limit (int): Maximum number of newest events to return.

        Returns:
            list[dict[str, Any]]: Parsed event envelopes from the tail of the stream.
        """
        if limit <= 0 or not self._path.exists():
            return []
        with self._thread_lock:
            with self._lock:
                with self._path.open("r", encoding="utf-8") as handle:
                    selected = list(deque(handle, maxlen=limit))
        events: list[dict[str, Any]] = []
        for line in selected:
            try:
                parsed = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(parsed, dict):
                events.append(parsed)
        return events


class FileConfigRepository:
    """YAML-backed repository for runtime configuration."""
    def __init__(self, path: Path, lock_path: Path) -> None:
        """Initialize the FileConfigRepository.

        Args:
            path (Path): YAML file path for runtime configuration.
            lock_path (Path): Lock file path used while reading or writing config.
        """
        self._path = path
        self._lock = FileLock(lock_path)
        self._thread_lock = threading.RLock()

    def load(self) -> dict[str, Any]:
        """Load configuration from disk.

        Returns:
            dict[str, Any]: Configuration mapping from disk, or an empty mapping.
        """
        with self._thread_lock:
            with self._lock:
                if not self._path.exists():
                    return {}
                raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
                return raw if isinstance(raw, dict) else {}

    def save(self, config: dict[str, Any]) -> dict[str, Any]:
        """Persist configuration to disk atomically.

        Args:
            config (dict[str, Any]): Configuration mapping to persist.

        Returns:
            dict[str, Any]: Saved configuration mapping.
        """
        with self._thread_lock:
            with self._lock:
                atomic_write_text(self._path, yaml.safe_dump(config, sort_keys=False))
        return config
