"""Apply a user-confirmed agent action to the marketplace records."""

from __future__ import annotations

from typing import Any, Callable, Optional

from ..domain.models import Bid, CalendarEvent, _as_float, now_iso
from ..events.bus import EventBus
from ..notifications.ledger import NotificationLedger
from ..storage.container import Container

Handler = Callable[[str, dict[str, Any]], dict[str, Any]]


class UnknownActionError(ValueError):
    """Raised for a (domain, event kind) pair with no executor."""


class NotificationNotFoundError(LookupError):
    """Raised when the notification to resolve is unknown or addressed to another user."""


class ActionExecutor:
    """Execute confirmed actions, one mutation per call.

    The originating notification is marked read only after the mutation
    succeeds, so a failed execution leaves it pending and safe to retry.
    """

    def __init__(self, container: Container, bus: EventBus) -> None:
        self._container = container
        self._bus = bus
        self._ledger = NotificationLedger(container.notifications)
        self._handlers: dict[tuple[str, str], Handler] = {
            ("Hunter", "create_bid"): self._submit_bid,
            ("Hunter", "job_bid"): self._submit_bid,
            ("Productivity", "create_deep_work_block"): self._create_deep_work_block,
            ("Productivity", "suggest_reprioritize"): self._reprioritize_tasks,
            ("Productivity", "block_new_jobs"): self._pause_new_jobs,
            ("Tax", "categorize_expense"): self._categorize_expense,
            ("CFO", "smart_split"): self._allocate_funds,
            ("Collections", "invoice_nudge"): self._send_invoice_nudge,
        }

    def supports(self, domain: str, event_kind: str) -> bool:
        return (domain, event_kind) in self._handlers

    def execute(
        self,
        user_id: str,
        domain: str,
        event_kind: str,
        payload: dict[str, Any],
        notification_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Apply one confirmed action.

        Args:
            user_id (str): User confirming the action.
            domain (str): Agent domain of the action.
            event_kind (str): Action kind, for example ``smart_split``.
            payload (dict[str, Any]): Action parameters from the notification.
            notification_id (Optional[str]): Ledger entry to resolve on success.

        Returns:
            dict[str, Any]: ``message`` plus an optional ``data`` or ``count``.

        Raises:
            UnknownActionError: If no handler exists for ``(domain, event_kind)``.
            NotificationNotFoundError: If ``notification_id`` does not name one
                of ``user_id``'s notifications.
        """
        if not self.supports(domain, event_kind):
            raise UnknownActionError(f"Unknown action type: {domain}/{event_kind}")
        if notification_id:
            pending = self._container.notifications.get(notification_id)
            if pending is None or pending.recipient_id != user_id:
                raise NotificationNotFoundError(f"Notification not found: {notification_id}")
        result = self._handlers[(domain, event_kind)](user_id, dict(payload or {}))
        if notification_id:
            self._ledger.mark_read(notification_id, user_id)
        self._bus.emit(
            channel="actions",
            event_type="action.executed",
            entity_id=notification_id or f"{domain}:{event_kind}",
            payload={"user_id": user_id, "domain": domain, "event_kind": event_kind, "message": result.get("message")},
        )
        return result

    def _submit_bid(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        job_id = str(payload.get("job_id") or payload.get("jobId") or "")
        if not job_id:
            raise ValueError("job_id is required to submit a bid")
        bid = Bid(
            job_id=job_id,
            freelancer_id=user_id,
            bid_amount=_as_float(payload.get("bid_amount") or payload.get("amount")),
            proposal_text=str(payload.get("proposal_draft") or payload.get("proposal") or ""),
            status="Pending",
        )
        bid.bid_id = bid.id
        self._container.bids.upsert(bid)
        self._ledger.append(
            user_id,
            "system",
            f"Bid submitted successfully for Job ID: {job_id}",
            domain="Hunter",
        )
        return {"message": "Bid submitted successfully", "data": bid.to_dict()}

    def _create_deep_work_block(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        start = str(payload.get("start") or "")
        end = str(payload.get("end") or "")
        if not start or not end:
            raise ValueError("start and end are required for a deep work block")
        event = CalendarEvent(
            user_id=user_id,
            title="Deep Work Block",
            start_time=start,
            end_time=end,
            type="focus",
            description="Scheduled by Productivity Agent",
        )
        self._container.calendar_events.upsert(event)
        return {"message": "Deep work block scheduled", "data": event.to_dict()}

    def _reprioritize_tasks(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        suggestions = [item for item in list(payload.get("suggestions") or []) if isinstance(item, dict)]
        if not suggestions:
            return {"message": "No suggestions to apply"}
        wanted = {str(item.get("taskId")): str(item.get("suggestedPriority") or "high") for item in suggestions}
        updated = 0
        for task in self._container.tasks.for_user(user_id):
            priority = wanted.get(task.id)
            if priority not in {"low", "medium", "high"}:
                continue
            task.priority = priority  # type: ignore[assignment]
            self._container.tasks.upsert(task)
            updated += 1
        return {"message": "Tasks reprioritized", "count": updated}

    def _pause_new_jobs(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        profile = self._container.users.get(user_id)
        if profile is None:
            return {"message": "New jobs paused (Simulated)"}
        profile.accepting_new_jobs = False
        self._container.users.upsert(profile)
        return {"message": "New jobs paused", "data": profile.to_dict()}

    def _categorize_expense(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        txn = self._container.transactions.find_by_transaction_id(str(payload.get("transaction_id") or ""))
        if txn is None or txn.user_id != user_id:
            return {"message": "Transaction categorized (Simulated)"}
        txn.category = str(payload.get("category") or "") or None
        self._container.transactions.upsert(txn)
        return {"message": "Transaction categorized", "data": txn.to_dict()}

    def _allocate_funds(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        account = self._container.bank_accounts.for_user(user_id)
        if account is None:
            return {"message": "Funds allocated (Simulated)"}
        allocations = payload.get("allocations")
        if isinstance(allocations, dict):
            for bucket, amount in allocations.items():
                account.buckets[str(bucket)] = round(account.buckets.get(str(bucket), 0.0) + _as_float(amount), 2)
        self._container.bank_accounts.upsert(account)
        return {"message": "Funds allocated successfully", "data": account.to_dict()}

    def _send_invoice_nudge(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        invoice = self._container.invoices.find_by_invoice_id(str(payload.get("invoice_id") or ""))
        if invoice is None or invoice.freelancer_id != user_id:
            return {"message": "Reminder sent (Simulated)"}
        invoice.status = "PENDING"
        invoice.communication_history.append(
            {"ts": now_iso(), "type": "email", "message": "Reminder sent via Collections Agent"}
        )
        self._container.invoices.upsert(invoice)
        return {"message": "Reminder sent successfully"}
