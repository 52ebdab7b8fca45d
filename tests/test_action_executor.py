from __future__ import annotations

from pathlib import Path

import pytest

from freelance_agents.runtime.domain.models import (
    BankAccount,
    Invoice,
    Transaction,
    UserProfile,
    WorkTask,
)
from freelance_agents.runtime.events import EventBus
from freelance_agents.runtime.notifications import NotificationLedger
from freelance_agents.runtime.orchestrator import ActionExecutor, NotificationNotFoundError, UnknownActionError
from freelance_agents.runtime.storage.container import Container


def _setup(tmp_path: Path) -> tuple[Container, ActionExecutor, NotificationLedger]:
    container = Container(tmp_path)
    executor = ActionExecutor(container, EventBus(container.events, container.project_id))
    return container, executor, NotificationLedger(container.notifications)


def test_smart_split_marks_exactly_its_notification_read(tmp_path: Path) -> None:
    container, executor, ledger = _setup(tmp_path)
    container.bank_accounts.upsert(BankAccount(user_id="u1", balance=150000, buckets={"tax": 100.0}))
    target, _ = ledger.create_if_absent("u1", "smart_split", "Split A", {"uniqueKey": "cfo_a"}, domain="CFO")
    other, _ = ledger.create_if_absent("u1", "smart_split", "Split B", {"uniqueKey": "cfo_b"}, domain="CFO")

    result = executor.execute(
        "u1",
        "CFO",
        "smart_split",
        {"allocations": {"tax": 300, "savings": 200, "operating": 500}},
        notification_id=target.id,
    )

    assert result["message"] == "Funds allocated successfully"
    assert container.notifications.get(target.id).read is True
    assert container.notifications.get(other.id).read is False
    account = container.bank_accounts.for_user("u1")
    assert account is not None
    assert account.buckets == {"tax": 400.0, "savings": 200.0, "operating": 500.0}

    event = container.events.list_recent(1)[0]
    assert event["type"] == "action.executed"
    assert event["entity_id"] == target.id


def test_smart_split_without_account_is_simulated(tmp_path: Path) -> None:
    _, executor, _ = _setup(tmp_path)
    assert executor.execute("u1", "CFO", "smart_split", {})["message"] == "Funds allocated (Simulated)"


def test_unknown_action_is_rejected_without_writes(tmp_path: Path) -> None:
    container, executor, ledger = _setup(tmp_path)
    pending, _ = ledger.create_if_absent("u1", "smart_split", "Split", {"uniqueKey": "cfo_a"}, domain="CFO")

    with pytest.raises(UnknownActionError):
        executor.execute("u1", "CFO", "invoice_nudge", {}, notification_id=pending.id)
    with pytest.raises(UnknownActionError):
        executor.execute("u1", "Marketing", "launch", {})

    assert container.notifications.get(pending.id).read is False
    assert container.events.list_recent() == []


def test_failed_mutation_leaves_notification_unread(tmp_path: Path) -> None:
    container, executor, ledger = _setup(tmp_path)
    pending, _ = ledger.create_if_absent("u1", "job_match", "Bid", {"uniqueKey": "job_1"}, domain="Hunter")

    with pytest.raises(ValueError):
        executor.execute("u1", "Hunter", "create_bid", {}, notification_id=pending.id)

    assert container.notifications.get(pending.id).read is False
    assert container.bids.list() == []


def test_bid_submission_creates_bid_and_confirmation(tmp_path: Path) -> None:
    container, executor, _ = _setup(tmp_path)

    result = executor.execute("u1", "Hunter", "job_bid", {"jobId": "job_1", "proposal": "Hello", "amount": 950})

    assert result["message"] == "Bid submitted successfully"
    bids = container.bids.for_freelancer("u1")
    assert len(bids) == 1
    assert (bids[0].job_id, bids[0].bid_amount, bids[0].proposal_text, bids[0].status) == ("job_1", 950.0, "Hello", "Pending")

    confirmations = [item for item in container.notifications.list() if item.event_kind == "system"]
    assert len(confirmations) == 1
    assert confirmations[0].domain == "Hunter"
    assert confirmations[0].message == "Bid submitted successfully for Job ID: job_1"


def test_deep_work_block_creates_focus_event(tmp_path: Path) -> None:
    container, executor, _ = _setup(tmp_path)

    executor.execute(
        "u1",
        "Productivity",
        "create_deep_work_block",
        {"title": "Build dashboard", "start": "2025-03-11T09:00:00+00:00", "end": "2025-03-11T12:00:00+00:00"},
    )

    events = container.calendar_events.for_user("u1")
    assert len(events) == 1
    assert events[0].type == "focus"
    assert events[0].start_time == "2025-03-11T09:00:00+00:00"


def test_reprioritize_updates_only_suggested_tasks(tmp_path: Path) -> None:
    container, executor, _ = _setup(tmp_path)
    soon = container.tasks.upsert(WorkTask(user_id="u1", title="Fix login bug", priority="medium"))
    later = container.tasks.upsert(WorkTask(user_id="u1", title="Docs", priority="low"))

    result = executor.execute(
        "u1",
        "Productivity",
        "suggest_reprioritize",
        {"suggestions": [{"taskId": soon.id, "suggestedPriority": "high"}]},
    )

    assert result == {"message": "Tasks reprioritized", "count": 1}
    assert container.tasks.get(soon.id).priority == "high"
    assert container.tasks.get(later.id).priority == "low"
    assert executor.execute("u1", "Productivity", "suggest_reprioritize", {})["message"] == "No suggestions to apply"


def test_block_new_jobs_pauses_intake(tmp_path: Path) -> None:
    container, executor, _ = _setup(tmp_path)
    container.users.upsert(UserProfile(id="u1", name="Asha"))

    executor.execute("u1", "Productivity", "block_new_jobs", {"reason": "Over capacity"})

    assert container.users.get("u1").accepting_new_jobs is False


def test_categorize_expense_sets_category(tmp_path: Path) -> None:
    container, executor, _ = _setup(tmp_path)
    container.transactions.upsert(Transaction(transaction_id="T-2", user_id="u1", amount=1200, narration="Figma"))

    result = executor.execute("u1", "Tax", "categorize_expense", {"transaction_id": "T-2", "category": "Software & Subscriptions"})

    assert result["message"] == "Transaction categorized"
    assert container.transactions.find_by_transaction_id("T-2").category == "Software & Subscriptions"
    simulated = executor.execute("u1", "Tax", "categorize_expense", {"transaction_id": "T-404", "category": "Travel"})
    assert simulated["message"] == "Transaction categorized (Simulated)"


def test_invoice_nudge_records_reminder(tmp_path: Path) -> None:
    container, executor, _ = _setup(tmp_path)
    container.invoices.upsert(Invoice(invoice_id="inv_1", freelancer_id="u1", amount_due=5000, status="Overdue"))

    result = executor.execute("u1", "Collections", "invoice_nudge", {"invoice_id": "inv_1"})

    assert result["message"] == "Reminder sent successfully"
    invoice = container.invoices.find_by_invoice_id("inv_1")
    assert invoice.status == "PENDING"
    assert invoice.communication_history[-1]["type"] == "email"
    assert executor.execute("u1", "Collections", "invoice_nudge", {"invoice_id": "nope"})["message"] == "Reminder sent (Simulated)"


def test_notification_of_another_user_is_rejected_without_writes(tmp_path: Path) -> None:
    container, executor, ledger = _setup(tmp_path)
    container.bank_accounts.upsert(BankAccount(user_id="u1", balance=150000))
    theirs, _ = ledger.create_if_absent("u2", "smart_split", "Split", {"uniqueKey": "cfo_x"}, domain="CFO")

    with pytest.raises(NotificationNotFoundError):
        executor.execute("u1", "CFO", "smart_split", {"allocations": {"tax": 300}}, notification_id=theirs.id)
    with pytest.raises(NotificationNotFoundError):
        executor.execute("u1", "CFO", "smart_split", {}, notification_id="ntf-missing")

    assert container.notifications.get(theirs.id).read is False
    assert container.bank_accounts.for_user("u1").buckets == {}
    assert container.events.list_recent() == []


def test_records_of_another_user_are_not_modified(tmp_path: Path) -> None:
    container, executor, _ = _setup(tmp_path)
    container.transactions.upsert(Transaction(transaction_id="T-9", user_id="u2", amount=800, narration="AWS"))
    container.invoices.upsert(Invoice(invoice_id="inv_9", freelancer_id="u2", amount_due=900, status="Overdue"))

    categorized = executor.execute("u1", "Tax", "categorize_expense", {"transaction_id": "T-9", "category": "Travel"})
    nudged = executor.execute("u1", "Collections", "invoice_nudge", {"invoice_id": "inv_9"})

    assert categorized["message"] == "Transaction categorized (Simulated)"
    assert nudged["message"] == "Reminder sent (Simulated)"
    assert container.transactions.find_by_transaction_id("T-9").category is None
    invoice = container.invoices.find_by_invoice_id("inv_9")
    assert invoice.status == "Overdue"
    assert invoice.communication_history == []
