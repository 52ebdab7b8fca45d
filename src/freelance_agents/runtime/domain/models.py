"""Domain model dataclasses and normalization helpers."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Optional, cast


DomainName = Literal["Hunter", "Collections", "CFO", "Productivity", "Tax", "System"]
TaskPriority = Literal["low", "medium", "high"]

DOMAINS: tuple[str, ...] = ("Hunter", "Collections", "CFO", "Productivity", "Tax")
_VALID_DOMAINS = {*DOMAINS, "System"}
_VALID_TASK_PRIORITIES = {"low", "medium", "high"}


def now_iso() -> str:
    """Get the current UTC timestamp formatted as ISO-8601 text."""
    return datetime.now(timezone.utc).isoformat()


def _id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


def parse_iso(value: Any) -> Optional[datetime]:
    """Parse ISO-8601 text (or a datetime) into an aware UTC datetime.

    Naive values are assumed to be UTC. Returns ``None`` for empty or
    unparseable input.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        if not isinstance(value, str) or not value.strip():
            return None
        raw = value.strip().replace("Z", "+00:00")
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default


def _opt_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


@dataclass
class Notification:
    """One ledger entry addressed to a user.

    ``metadata`` carries the originating action's parameters together with the
    ``uniqueKey`` dedup token and an optional ``priority``.
    """
    id: str = field(default_factory=lambda: _id("ntf"))
    recipient_id: str = ""
    domain: Optional[str] = None
    event_kind: str = ""
    message: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    read: bool = False
    created_at: str = field(default_factory=now_iso)
    read_at: Optional[str] = None

    @property
    def unique_key(self) -> Optional[str]:
        """Return the dedup token stored in metadata, if any."""
        raw = self.metadata.get("uniqueKey") if isinstance(self.metadata, dict) else None
        return str(raw) if raw is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the notification to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Notification":
        """Deserialize a notification; unknown domain tags are dropped to ``None``."""
        raw_domain = data.get("domain")
        domain = str(raw_domain) if raw_domain in _VALID_DOMAINS else None
        return cls(
            id=str(data.get("id") or _id("ntf")),
            recipient_id=str(data.get("recipient_id") or ""),
            domain=domain,
            event_kind=str(data.get("event_kind") or ""),
            message=str(data.get("message") or ""),
            metadata=dict(data.get("metadata") or {}),
            read=_as_bool(data.get("read"), False),
            created_at=str(data.get("created_at") or now_iso()),
            read_at=_opt_str(data.get("read_at")),
        )


@dataclass
class Invoice:
    """Invoice issued by a freelancer to a client."""
    id: str = field(default_factory=lambda: _id("inv"))
    invoice_id: str = ""
    freelancer_id: str = ""
    client_id: str = "unknown"
    amount_due: float = 0.0
    currency: str = "INR"
    status: str = "PENDING"
    due_date: Optional[str] = None
    days_overdue: Optional[int] = None
    communication_history: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the invoice."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Invoice":
        """Deserialize an invoice, falling back to ``amount`` for the amount due."""
        raw_days = data.get("days_overdue")
        try:
            days_overdue = int(raw_days) if raw_days is not None else None
        except (TypeError, ValueError):
            days_overdue = None
        record_id = str(data.get("id") or _id("inv"))
        history = [item for item in list(data.get("communication_history") or []) if isinstance(item, dict)]
        return cls(
            id=record_id,
            invoice_id=str(data.get("invoice_id") or record_id),
            freelancer_id=str(data.get("freelancer_id") or ""),
            client_id=str(data.get("client_id") or "unknown"),
            amount_due=_as_float(data.get("amount_due", data.get("amount"))),
            currency=str(data.get("currency") or "INR"),
            status=str(data.get("status") or "PENDING"),
            due_date=_opt_str(data.get("due_date")),
            days_overdue=days_overdue,
            communication_history=history,
        )


@dataclass
class Transaction:
    """Bank transaction imported for a user."""
    id: str = field(default_factory=lambda: _id("txn"))
    transaction_id: str = ""
    user_id: str = ""
    amount: float = 0.0
    type: str = "DEBIT"
    narration: str = ""
    date: str = field(default_factory=now_iso)
    balance_after_transaction: Optional[float] = None
    category: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the transaction."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """Deserialize a transaction, accepting the legacy ``txnId`` field."""
        record_id = str(data.get("id") or _id("txn"))
        return cls(
            id=record_id,
            transaction_id=str(data.get("transaction_id") or data.get("txnId") or record_id),
            user_id=str(data.get("user_id") or ""),
            amount=_as_float(data.get("amount")),
            type=str(data.get("type") or "DEBIT").upper(),
            narration=str(data.get("narration") or data.get("description") or ""),
            date=str(data.get("date") or now_iso()),
            balance_after_transaction=_as_optional_float(data.get("balance_after_transaction")),
            category=_opt_str(data.get("category") or data.get("transaction_category")),
        )


@dataclass
class WorkTask:
    """To-do item on a freelancer's task board."""
    id: str = field(default_factory=lambda: _id("task"))
    user_id: str = ""
    title: str = ""
    due_date: Optional[str] = None
    est_hours: float = 2.0
    done: bool = False
    priority: TaskPriority = "medium"

    def to_dict(self) -> dict[str, Any]:
        """Serialize the task."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkTask":
        """Deserialize a task, defaulting unknown priorities to ``medium``."""
        priority = str(data.get("priority") or "medium").lower()
        if priority not in _VALID_TASK_PRIORITIES:
            priority = "medium"
        est_hours = _as_float(data.get("est_hours", data.get("estHours")), 2.0)
        return cls(
            id=str(data.get("id") or _id("task")),
            user_id=str(data.get("user_id") or ""),
            title=str(data.get("title") or ""),
            due_date=_opt_str(data.get("due_date") or data.get("dueDate")),
            est_hours=est_hours if est_hours > 0 else 2.0,
            done=_as_bool(data.get("done"), False),
            priority=cast(TaskPriority, priority),
        )


@dataclass
class CalendarEvent:
    """Calendar entry occupying part of a user's day."""
    id: str = field(default_factory=lambda: _id("evt"))
    user_id: str = ""
    title: str = ""
    start_time: str = ""
    end_time: str = ""
    type: str = "meeting"
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize the calendar event."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CalendarEvent":
        """Deserialize a calendar event."""
        return cls(
            id=str(data.get("id") or data.get("event_id") or _id("evt")),
            user_id=str(data.get("user_id") or ""),
            title=str(data.get("title") or ""),
            start_time=str(data.get("start_time") or ""),
            end_time=str(data.get("end_time") or ""),
            type=str(data.get("type") or "meeting"),
            description=str(data.get("description") or ""),
        )


@dataclass
class Job:
    """Job posting published by a client."""
    id: str = field(default_factory=lambda: _id("job"))
    job_id: str = ""
    client_id: str = ""
    title: str = ""
    description: str = ""
    skills: list[str] = field(default_factory=list)
    budget: float = 0.0
    status: str = "Open"
    created_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the job posting."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        """Deserialize a job posting."""
        record_id = str(data.get("id") or _id("job"))
        return cls(
            id=record_id,
            job_id=str(data.get("job_id") or record_id),
            client_id=str(data.get("client_id") or data.get("clientId") or ""),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            skills=[str(item) for item in list(data.get("skills") or []) if str(item).strip()],
            budget=_as_float(data.get("budget")),
            status=str(data.get("status") or "Open"),
            created_at=str(data.get("created_at") or now_iso()),
        )


@dataclass
class Bid:
    """Proposal submitted by a freelancer for a job."""
    id: str = field(default_factory=lambda: _id("bid"))
    bid_id: str = ""
    job_id: str = ""
    freelancer_id: str = ""
    bid_amount: float = 0.0
    proposal_text: str = ""
    status: str = "Pending"
    submitted_at: str = field(default_factory=now_iso)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the bid."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Bid":
        """Deserialize a bid."""
        record_id = str(data.get("id") or _id("bid"))
        return cls(
            id=record_id,
            bid_id=str(data.get("bid_id") or record_id),
            job_id=str(data.get("job_id") or ""),
            freelancer_id=str(data.get("freelancer_id") or ""),
            bid_amount=_as_float(data.get("bid_amount")),
            proposal_text=str(data.get("proposal_text") or ""),
            status=str(data.get("status") or "Pending"),
            submitted_at=str(data.get("submitted_at") or now_iso()),
        )


@dataclass
class UserProfile:
    """Freelancer profile fields read by the agents and the resume pipeline."""
    id: str = ""
    name: str = ""
    skills: list[str] = field(default_factory=list)
    experience_years: int = 0
    credibility_score: int = 0
    accepting_new_jobs: bool = True
    resume_uploaded_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the profile."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProfile":
        """Deserialize a profile, coercing numeric fields."""
        try:
            experience_years = max(0, int(data.get("experience_years") or 0))
        except (TypeError, ValueError):
            experience_years = 0
        try:
            credibility_score = int(data.get("credibility_score") or 0)
        except (TypeError, ValueError):
            credibility_score = 0
        return cls(
            id=str(data.get("id") or data.get("user_id") or ""),
            name=str(data.get("name") or ""),
            skills=[str(item) for item in list(data.get("skills") or []) if str(item).strip()],
            experience_years=experience_years,
            credibility_score=credibility_score,
            accepting_new_jobs=_as_bool(data.get("accepting_new_jobs"), True),
            resume_uploaded_at=_opt_str(data.get("resume_uploaded_at")),
        )


@dataclass
class BankAccount:
    """Linked bank account with named allocation buckets."""
    id: str = field(default_factory=lambda: _id("acct"))
    user_id: str = ""
    balance: float = 0.0
    buckets: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the account."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BankAccount":
        """Deserialize an account; non-numeric bucket values are dropped."""
        raw_buckets = data.get("buckets")
        buckets: dict[str, float] = {}
        if isinstance(raw_buckets, dict):
            for key, value in raw_buckets.items():
                amount = _as_optional_float(value)
                if amount is not None:
                    buckets[str(key)] = amount
        return cls(
            id=str(data.get("id") or _id("acct")),
            user_id=str(data.get("user_id") or ""),
            balance=_as_float(data.get("balance")),
            buckets=buckets,
        )
