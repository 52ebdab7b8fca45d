"""Repository interfaces for runtime persistence abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

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
)

T = TypeVar("T")


class RecordRepository(ABC, Generic[T]):
    """Common CRUD contract for marketplace records keyed by ``id``."""
    @abstractmethod
    def list(self) -> List[T]:
        """List every persisted record.

        Returns:
            List[T]: All records currently stored, in storage order.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, record_id: str) -> Optional[T]:
        """Fetch a record by id, or ``None`` when no record exists.

        Args:
            record_id (str): Identifier for the target record.

        Returns:
            Optional[T]: Requested value when available; otherwise `None`.
        """
        raise NotImplementedError

    @abstractmethod
    def upsert(self, record: T) -> T:
        """Create or update a record.

        Args:
            record (T): Record to persist; replaces an existing one with the same id.

        Returns:
            T: Persisted record after the write operation.
        """
        raise NotImplementedError


class NotificationRepository(ABC):
    """Persistence contract for the notification ledger."""
    @abstractmethod
    def list(self) -> List[Notification]:
        """List every ledger entry in insertion order."""
        raise NotImplementedError

    @abstractmethod
    def get(self, notification_id: str) -> Optional[Notification]:
        """Fetch a ledger entry by id, or ``None`` when no entry exists."""
        raise NotImplementedError

    @abstractmethod
    def for_recipient(self, recipient_id: str, *, unread_only: bool = False) -> List[Notification]:
        """List entries addressed to one recipient, newest first.

        Args:
            recipient_id (str): User the entries are addressed to.
            unread_only (bool): Restrict the result to entries with ``read = False``.

        Returns:
            List[Notification]: Matching entries ordered by creation time, newest first.
        """
        raise NotImplementedError

    @abstractmethod
    def insert_if_absent(self, notification: Notification) -> tuple[Notification, bool]:
        """Atomically insert ``notification`` unless an equivalent unread entry exists.

        Two entries are equivalent when they share recipient, event kind and
        ``metadata.uniqueKey``. The lookup and the insert happen under one lock.

        Args:
            notification (Notification): Candidate entry; must carry a ``uniqueKey``.

        Returns:
            tuple[Notification, bool]: The stored entry (new or pre-existing) and
            whether a new entry was inserted.
        """
        raise NotImplementedError

    @abstractmethod
    def append(self, notification: Notification) -> Notification:
        """Insert ``notification`` unconditionally."""
        raise NotImplementedError

    @abstractmethod
    def mark_read(self, notification_id: str, recipient_id: Optional[str] = None) -> Optional[Notification]:
        """Flag one entry as read.

        Args:
            notification_id (str): Identifier for the target entry.
            recipient_id (Optional[str]): When given, only an entry addressed to
                this recipient is matched.

        Returns:
            Optional[Notification]: Updated entry, or `None` when no entry matches.
        """
        raise NotImplementedError


class InvoiceRepository(RecordRepository[Invoice]):
    """Persistence contract for invoices."""
    @abstractmethod
    def find_by_invoice_id(self, invoice_id: str) -> Optional[Invoice]:
        """Fetch an invoice by its business ``invoice_id``."""
        raise NotImplementedError

    @abstractmethod
    def list_overdue(self, freelancer_id: str) -> List[Invoice]:
        """List invoices issued by ``freelancer_id`` whose status is ``Overdue``."""
        raise NotImplementedError


class TransactionRepository(RecordRepository[Transaction]):
    """Persistence contract for bank transactions."""
    @abstractmethod
    def find_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        """Fetch a transaction by its business ``transaction_id``."""
        raise NotImplementedError

    @abstractmethod
    def latest_for_user(self, user_id: str) -> Optional[Transaction]:
        """Return the user's most recent transaction by ``date``.

        Args:
            user_id (str): Owner of the transactions.

        Returns:
            Optional[Transaction]: Newest transaction, or `None` when the user has none.
        """
        raise NotImplementedError


class WorkTaskRepository(RecordRepository[WorkTask]):
    """Persistence contract for task-board items."""
    @abstractmethod
    def for_user(self, user_id: str) -> List[WorkTask]:
        """List every task owned by ``user_id``."""
        raise NotImplementedError


class CalendarEventRepository(RecordRepository[CalendarEvent]):
    """Persistence contract for calendar entries."""
    @abstractmethod
    def for_user(self, user_id: str) -> List[CalendarEvent]:
        """List every calendar entry owned by ``user_id``."""
        raise NotImplementedError


class JobRepository(RecordRepository[Job]):
    """Persistence contract for job postings."""
    @abstractmethod
    def list_open(self) -> List[Job]:
        """List postings whose status is ``Open``."""
        raise NotImplementedError


class BidRepository(RecordRepository[Bid]):
    """Persistence contract for submitted bids."""
    @abstractmethod
    def for_freelancer(self, freelancer_id: str) -> List[Bid]:
        """List bids submitted by ``freelancer_id``."""
        raise NotImplementedError


class UserProfileRepository(RecordRepository[UserProfile]):
    """Persistence contract for freelancer profiles keyed by user id."""


class BankAccountRepository(RecordRepository[BankAccount]):
    """Persistence contract for linked bank accounts."""
    @abstractmethod
    def for_user(self, user_id: str) -> Optional[BankAccount]:
        """Return the account linked by ``user_id``, if any."""
        raise NotImplementedError


class EventRepository(ABC):
    """Persistence contract for the runtime audit event stream."""
    @abstractmethod
    def append(self, *, channel: str, event_type: str, entity_id: str, payload: dict[str, Any], project_id: str) -> dict[str, Any]:
        """Append an event envelope and return the persisted record.

        Args:
            channel (str): Event channel name (for example ``agents`` or ``actions``).
            event_type (str): Event type label within the channel namespace.
            entity_id (str): Identifier for the related entity.
            payload (dict[str, Any]): JSON-serializable event payload.
            project_id (str): Identifier for the related project.

        Returns:
            dict[str, Any]: Persisted event envelope including id and timestamp metadata.
        """
        raise NotImplementedError

    @abstractmethod
    def list_recent(self, limit: int = 100) -> List[dict[str, Any]]:
        """List the most recent events, capped at ``limit`` records.

        Args:
            limit (int): Maximum number of newest event records to return.

        Returns:
            List[dict[str, Any]]: Most recent event envelopes, newest-last by storage order.
        """
        raise NotImplementedError
