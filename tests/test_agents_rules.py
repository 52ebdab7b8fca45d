from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from freelance_agents.runtime.agents import cfo, collections, hunter, productivity, tax
from freelance_agents.runtime.domain.models import (
    BankAccount,
    CalendarEvent,
    Invoice,
    Job,
    Transaction,
    UserProfile,
    WorkTask,
)

NOW = datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)


def _iso(delta: timedelta) -> str:
    return (NOW + delta).isoformat()


# --------------- Collections ---------------


def _overdue_invoice(**overrides: object) -> Invoice:
    data: dict[str, object] = {
        "invoice_id": "inv_1",
        "freelancer_id": "u1",
        "client_id": "client_9",
        "amount_due": 5000.0,
        "status": "Overdue",
        "due_date": "2025-02-28",
    }
    data.update(overrides)
    return Invoice.from_dict(data)


def test_invoice_row_computes_days_from_due_date() -> None:
    row = collections.invoice_row(_overdue_invoice(), NOW)
    assert row.days_overdue == 10
    assert row.client_id == "client_9"


def test_invoice_row_falls_back_to_stored_then_default_days() -> None:
    assert collections.invoice_row(_overdue_invoice(due_date=None, days_overdue=15), NOW).days_overdue == 15
    assert collections.invoice_row(_overdue_invoice(due_date=None), NOW).days_overdue == 30


def test_aging_policy_gate() -> None:
    assert collections.should_act_on_invoice(collections.invoice_row(_overdue_invoice(), NOW)) is True
    assert collections.should_act_on_invoice(collections.invoice_row(_overdue_invoice(due_date="2025-03-07"), NOW)) is False
    assert collections.should_act_on_invoice(collections.invoice_row(_overdue_invoice(status="PAID"), NOW)) is False
    assert collections.should_act_on_invoice(collections.invoice_row(_overdue_invoice(amount_due=0), NOW)) is False


@pytest.mark.parametrize(
    ("due_date", "tone", "priority"),
    [
        ("2025-02-28", "friendly", "normal"),
        ("2025-01-24", "firm", "high"),
        ("2024-12-01", "final", "high"),
    ],
)
def test_reminder_tone_escalates_with_age(due_date: str, tone: str, priority: str) -> None:
    action = collections.on_invoice_aging(collections.invoice_row(_overdue_invoice(due_date=due_date), NOW), NOW)
    assert action is not None
    assert action.tone == tone
    assert action.invoice_id == "inv_1"
    assert "inv_1" in action.message
    assert collections.priority_for(action) == priority


def test_recent_reminder_suppresses_nudge() -> None:
    recent = _overdue_invoice(communication_history=[{"ts": _iso(timedelta(days=-1)), "type": "email", "message": "sent"}])
    older = _overdue_invoice(communication_history=[{"ts": _iso(timedelta(days=-5)), "type": "email", "message": "sent"}])

    assert collections.on_invoice_aging(collections.invoice_row(recent, NOW), NOW) is None
    assert collections.on_invoice_aging(collections.invoice_row(older, NOW), NOW) is not None


# --------------- CFO ---------------


def _credit(**overrides: object) -> cfo.TransactionSnapshot:
    data: dict[str, object] = {
        "transaction_id": "T-1",
        "user_id": "u1",
        "amount": 50000,
        "type": "CREDIT",
        "narration": "NEFT from Acme Corp",
        "date": "2025-03-09T10:00:00Z",
        "balance_after_transaction": 150000,
    }
    data.update(overrides)
    return cfo.transaction_snapshot(Transaction.from_dict(data))


def test_cfo_splits_large_incoming_payment() -> None:
    txn = _credit()
    assert cfo.should_act_on_transaction(txn) is True

    action = cfo.on_transaction(txn)
    assert action is not None
    assert action.allocations == {"tax": 15000.0, "savings": 10000.0, "operating": 25000.0}
    assert action.transaction_id == "T-1"


def test_cfo_ignores_small_or_outgoing_payments() -> None:
    assert cfo.should_act_on_transaction(_credit(amount=500)) is False
    assert cfo.should_act_on_transaction(_credit(type="DEBIT")) is False


def test_cfo_declines_internal_movements_and_thin_buffers() -> None:
    assert cfo.on_transaction(_credit(narration="Self transfer to savings")) is None
    assert cfo.on_transaction(_credit(balance_after_transaction=5000)) is None


def test_cfo_uses_account_balance_when_transaction_has_none() -> None:
    txn = _credit(balance_after_transaction=None)
    assert cfo.on_transaction(txn, BankAccount(user_id="u1", balance=20000)) is not None
    assert cfo.on_transaction(txn, BankAccount(user_id="u1", balance=2000)) is None
    assert cfo.on_transaction(txn) is not None


# --------------- Tax ---------------


def _debit(narration: str, **overrides: object) -> tax.Txn:
    data: dict[str, object] = {
        "transaction_id": "T-2",
        "user_id": "u1",
        "amount": 1200,
        "type": "DEBIT",
        "narration": narration,
        "date": "2025-03-09T10:00:00Z",
    }
    data.update(overrides)
    return tax.tax_txn(Transaction.from_dict(data))


def test_tax_categorizes_by_keyword() -> None:
    txn = _debit("GitHub subscription renewal")
    assert tax.should_tax_agent_act(txn) is True

    action = tax.categorize_transaction(txn)
    assert action is not None
    assert action.category == "Software & Subscriptions"
    assert action.deductible is True
    assert action.confidence == pytest.approx(0.9)


def test_tax_skips_credits_and_categorized_transactions() -> None:
    assert tax.should_tax_agent_act(_debit("Invoice payment", type="CREDIT")) is False
    assert tax.should_tax_agent_act(_debit("Figma", category="Software & Subscriptions")) is False
    assert tax.should_tax_agent_act(_debit("   ")) is False


def test_tax_returns_none_without_keyword_match() -> None:
    assert tax.categorize_transaction(_debit("Grocery store")) is None


# --------------- Productivity ---------------


def _overloaded_tasks() -> list[WorkTask]:
    return [
        WorkTask(id="task-big", user_id="u1", title="Build dashboard", due_date=_iso(timedelta(days=3)), est_hours=40),
        WorkTask(id="task-soon", user_id="u1", title="Fix login bug", due_date=_iso(timedelta(days=1)), est_hours=10),
        WorkTask(id="task-done", user_id="u1", title="Old", due_date=_iso(timedelta(days=1)), est_hours=30, done=True),
    ]


def test_capacity_constants() -> None:
    assert productivity.Capacity().hours_for(7) == pytest.approx(6 * 240 / 365 * 7)


def test_evaluate_schedule_can_return_three_actions() -> None:
    schedule = productivity.build_schedule("u1", _overloaded_tasks(), [])
    assert productivity.should_evaluate_schedule("calendar_updated", schedule) is True

    result = productivity.evaluate_schedule(schedule, NOW)

    assert [action.kind for action in result.actions] == [
        "block_new_jobs",
        "create_deep_work_block",
        "suggest_reprioritize",
    ]
    assert result.committed_hours == 50.0
    block, deep, reprioritize = result.actions
    assert block.committed_hours == 50.0
    assert deep.task_id == "task-big"
    assert deep.start == "2025-03-11T09:00:00+00:00"
    assert deep.end == "2025-03-11T12:00:00+00:00"
    assert [item["taskId"] for item in reprioritize.suggestions] == ["task-soon"]


def test_existing_focus_block_suppresses_deep_work_suggestion() -> None:
    focus = CalendarEvent(
        user_id="u1",
        title="Focus",
        start_time=_iso(timedelta(days=1, hours=-6)),
        end_time=_iso(timedelta(days=1, hours=-3)),
        type="focus",
    )
    schedule = productivity.build_schedule("u1", _overloaded_tasks(), [focus])
    kinds = [action.kind for action in productivity.evaluate_schedule(schedule, NOW).actions]
    assert "create_deep_work_block" not in kinds


def test_deep_work_slot_skips_busy_mornings() -> None:
    meeting = CalendarEvent(user_id="u1", title="Standup", start_time="2025-03-11T09:30:00Z", end_time="2025-03-11T10:00:00Z")
    tasks = [WorkTask(id="task-big", user_id="u1", title="Write report", due_date=_iso(timedelta(days=5)), est_hours=4)]
    result = productivity.evaluate_schedule(productivity.build_schedule("u1", tasks, [meeting]), NOW)

    assert [action.kind for action in result.actions] == ["create_deep_work_block"]
    assert result.actions[0].start == "2025-03-12T09:00:00+00:00"


def test_schedule_gate_requires_known_trigger_and_content() -> None:
    schedule = productivity.build_schedule("u1", _overloaded_tasks(), [])
    assert productivity.should_evaluate_schedule("invoice_paid", schedule) is False
    assert productivity.should_evaluate_schedule("daily_review", productivity.build_schedule("u1", [], [])) is False


def test_calm_schedule_yields_no_actions() -> None:
    tasks = [WorkTask(id="t", user_id="u1", title="Small", due_date=_iso(timedelta(days=5)), est_hours=2)]
    assert productivity.evaluate_schedule(productivity.build_schedule("u1", tasks, []), NOW).actions == []


# --------------- Hunter ---------------


def _profile(**overrides: object) -> UserProfile:
    data: dict[str, object] = {"id": "u1", "name": "Asha", "skills": ["Python", "FastAPI"], "experience_years": 4}
    data.update(overrides)
    return UserProfile.from_dict(data)


def _job(**overrides: object) -> Job:
    data: dict[str, object] = {
        "job_id": "job_1",
        "client_id": "client_9",
        "title": "API backend",
        "skills": ["python", "fastapi", "react"],
        "budget": 1000,
        "status": "Open",
    }
    data.update(overrides)
    return Job.from_dict(data)


def test_hunter_matches_on_skill_overlap() -> None:
    action = hunter.evaluate_job(_job(), _profile())
    assert action is not None
    assert action.match_score == pytest.approx(0.67)
    assert action.bid_amount == 950.0
    assert "API backend" in action.proposal_draft
    assert hunter.evaluate_job(_job(skills=["react", "vue"]), _profile()) is None


def test_hunter_proposal_opens_with_the_freelancer_name() -> None:
    named = hunter.evaluate_job(_job(), _profile())
    assert named is not None
    assert named.proposal_draft.startswith("Hi, Asha here.")
    assert "4 years of experience" in named.proposal_draft

    anonymous = hunter.evaluate_job(_job(), _profile(name=""))
    assert anonymous is not None
    assert anonymous.proposal_draft.startswith("Hi there.")


def test_hunter_skips_own_closed_and_already_bid_jobs() -> None:
    profile = _profile()
    assert hunter.should_act_on_job(_job(client_id="u1"), profile, set()) is False
    assert hunter.should_act_on_job(_job(status="Closed"), profile, set()) is False
    assert hunter.should_act_on_job(_job(), profile, {"job_1"}) is False
    assert hunter.should_act_on_job(_job(), profile, set()) is True


def test_hunter_returns_nothing_without_an_accepting_profile() -> None:
    jobs = [_job()]
    assert hunter.process_job_matches(jobs, None, set()) == []
    assert hunter.process_job_matches(jobs, _profile(accepting_new_jobs=False), set()) == []
    assert len(hunter.process_job_matches(jobs, _profile(), set())) == 1
