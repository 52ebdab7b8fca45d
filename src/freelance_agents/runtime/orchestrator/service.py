"""Run orchestration: scan every agent domain for one user."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from ...config import get_agent_run_config
from ..agents import cfo, collections, dedup, hunter, productivity, tax
from ..domain.actions import (
    Action,
    BlockNewJobsAction,
    CategorizeExpenseAction,
    DeepWorkBlockAction,
    ReprioritizeAction,
)
from ..domain.models import DOMAINS
from ..events.bus import EventBus
from ..notifications.ledger import NotificationLedger, StatusReporter
from ..storage.container import Container

logger = logging.getLogger(__name__)

# Productivity is evaluated as if the calendar just changed.
RUN_TRIGGER = "calendar_updated"

_START_MESSAGES: dict[str, str] = {
    "Hunter": "Hunter: Scanning for job matches...",
    "Collections": "Collections: Checking overdue invoices...",
    "CFO": "CFO: Analyzing recent transactions...",
    "Productivity": "Productivity: Evaluating schedule...",
    "Tax": "Tax: Reviewing expenses...",
}

_IDLE_MESSAGES: dict[str, str] = {
    "Hunter": "Scanned latest jobs. No new high-match opportunities found.",
    "Collections": "No overdue invoices need escalation.",
    "CFO": "Financial health check complete. Cash flow within normal parameters.",
    "Productivity": "Schedule optimized. No conflicts or overload detected.",
    "Tax": "Expense categorization up to date.",
}


def action_message(action: Action) -> str:
    """Notification text for a proposed action."""
    if isinstance(action, BlockNewJobsAction):
        return action.reason
    if isinstance(action, DeepWorkBlockAction):
        return f"Schedule Deep Work: {action.title}"
    if isinstance(action, ReprioritizeAction):
        return action.message or "Reprioritize tasks"
    if isinstance(action, CategorizeExpenseAction):
        return f"Categorize {action.narration}"
    message = getattr(action, "message", "")
    return message or f"{action.domain} suggestion"


@dataclass
class DomainOutcome:
    """What one domain contributed to a run."""
    domain: str
    logs: list[str] = field(default_factory=list)
    candidates: int = 0
    created: int = 0
    idle_message: Optional[str] = None
    failed: bool = False


@dataclass
class RunResult:
    user_id: str
    logs: list[str]
    action_count: int
    outcomes: list[DomainOutcome] = field(default_factory=list)


class AgentRunService:
    """Run the five agent domains for a user and write their notifications.

    Each domain is isolated: an exception while loading or evaluating one
    domain becomes a ``"<Domain> Error: ..."`` log line and the remaining
    domains still run. A run therefore always returns a :class:`RunResult`.
    """

    def __init__(
        self,
        container: Container,
        bus: EventBus,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize the AgentRunService.

        Args:
            container (Container): Repositories for the project.
            bus (EventBus): Bus receiving the run-completed event.
            clock (Optional[Callable[[], datetime]]): Source of the current UTC
                time; overdue days, the schedule horizon and daily dedup keys
                are computed from it.
        """
        self.container = container
        self.bus = bus
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.ledger = NotificationLedger(container.notifications)
        self.reporter = StatusReporter(self.ledger)
        self._scanners: dict[str, Callable[[DomainOutcome, str, datetime], None]] = {
            "Hunter": self._scan_hunter,
            "Collections": self._scan_collections,
            "CFO": self._scan_cfo,
            "Productivity": self._scan_productivity,
            "Tax": self._scan_tax,
        }

    def run_all_agents(self, user_id: str) -> RunResult:
        """Scan every domain for ``user_id``.

        Args:
            user_id (str): User whose records are scanned.

        Returns:
            RunResult: Log lines in fixed domain order and the number of newly
            created action notifications.
        """
        now = self._clock()
        run_cfg = get_agent_run_config(config=self.container.config.load())
        if run_cfg.concurrency > 1:
            with ThreadPoolExecutor(
                max_workers=min(run_cfg.concurrency, len(DOMAINS)),
                thread_name_prefix="agents-domain",
            ) as pool:
                futures = [pool.submit(self._run_domain, domain, user_id, now) for domain in DOMAINS]
                outcomes = [future.result() for future in futures]
        else:
            outcomes = [self._run_domain(domain, user_id, now) for domain in DOMAINS]

        logs = [line for outcome in outcomes for line in outcome.logs]
        result = RunResult(
            user_id=user_id,
            logs=logs,
            action_count=sum(outcome.created for outcome in outcomes),
            outcomes=outcomes,
        )
        self.bus.emit(
            channel="agents",
            event_type="agents.run.completed",
            entity_id=user_id,
            payload={
                "action_count": result.action_count,
                "failed_domains": [outcome.domain for outcome in outcomes if outcome.failed],
            },
        )
        return result

    def _run_domain(self, domain: str, user_id: str, now: datetime) -> DomainOutcome:
        outcome = DomainOutcome(domain=domain)
        outcome.logs.append(_START_MESSAGES[domain])
        try:
            self._scanners[domain](outcome, user_id, now)
            if outcome.candidates == 0:
                self.reporter.report(user_id, domain, outcome.idle_message or _IDLE_MESSAGES[domain])
        except Exception as exc:
            logger.exception("%s agent failed for user %s", domain, user_id)
            outcome.failed = True
            outcome.logs.append(f"{domain} Error: {exc}")
        return outcome

    def _submit(
        self,
        outcome: DomainOutcome,
        user_id: str,
        event_kind: str,
        action: Action,
        unique_key: str,
        *,
        success_line: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> None:
        outcome.candidates += 1
        metadata = action.to_payload()
        metadata["uniqueKey"] = unique_key
        if priority:
            metadata["priority"] = priority
        try:
            _, created = self.ledger.create_if_absent(
                user_id,
                event_kind,
                action_message(action),
                metadata,
                domain=outcome.domain,
            )
        except Exception as exc:
            logger.exception("Ledger write failed for %s candidate %s", outcome.domain, unique_key)
            outcome.logs.append(f"{outcome.domain} Error: {exc}")
            return
        if created:
            outcome.created += 1
            if success_line:
                outcome.logs.append(success_line)
        else:
            outcome.logs.append(f"{outcome.domain}: {action.kind} already pending ({unique_key}).")

    def _scan_hunter(self, outcome: DomainOutcome, user_id: str, now: datetime) -> None:
        profile = self.container.users.get(user_id)
        bid_job_ids = {bid.job_id for bid in self.container.bids.for_freelancer(user_id)}
        matches = hunter.process_job_matches(self.container.jobs.list_open(), profile, bid_job_ids)
        if matches:
            # Matches surface in the job feed; only a confirmed bid writes a notification.
            outcome.candidates += len(matches)
            outcome.logs.append(f"Hunter: Found {len(matches)} new matches.")

    def _scan_collections(self, outcome: DomainOutcome, user_id: str, now: datetime) -> None:
        invoices = self.container.invoices.list_overdue(user_id)
        outcome.idle_message = f"Monitored {len(invoices)} overdue invoices. No immediate escalation needed."
        for invoice in invoices:
            row = collections.invoice_row(invoice, now)
            if not collections.should_act_on_invoice(row):
                continue
            action = collections.on_invoice_aging(row, now)
            if action is None:
                continue
            self._submit(
                outcome,
                user_id,
                "invoice_nudge",
                action,
                dedup.invoice_nudge_key(invoice.invoice_id, now.date()),
                success_line=f"Collections: Action generated for {invoice.invoice_id}",
                priority=collections.priority_for(action),
            )

    def _scan_cfo(self, outcome: DomainOutcome, user_id: str, now: datetime) -> None:
        txn = self.container.transactions.latest_for_user(user_id)
        if txn is None:
            return
        snapshot = cfo.transaction_snapshot(txn)
        if not cfo.should_act_on_transaction(snapshot):
            return
        action = cfo.on_transaction(snapshot, self.container.bank_accounts.for_user(user_id))
        if action is None:
            return
        self._submit(
            outcome,
            user_id,
            "smart_split",
            action,
            dedup.smart_split_key(txn.id),
            success_line=f"CFO: Smart split suggested for {txn.transaction_id}",
        )

    def _scan_productivity(self, outcome: DomainOutcome, user_id: str, now: datetime) -> None:
        schedule = productivity.build_schedule(
            user_id,
            self.container.tasks.for_user(user_id),
            self.container.calendar_events.for_user(user_id),
        )
        if not productivity.should_evaluate_schedule(RUN_TRIGGER, schedule):
            return
        evaluation = productivity.evaluate_schedule(schedule, now)
        for action in evaluation.actions:
            self._submit(
                outcome,
                user_id,
                "schedule_alert",
                action,
                dedup.schedule_alert_key(action.kind),
            )
        if evaluation.actions:
            outcome.logs.append(f"Productivity: Generated {len(evaluation.actions)} schedule suggestions.")

    def _scan_tax(self, outcome: DomainOutcome, user_id: str, now: datetime) -> None:
        txn = self.container.transactions.latest_for_user(user_id)
        if txn is None:
            return
        snapshot = tax.tax_txn(txn)
        if not tax.should_tax_agent_act(snapshot):
            return
        action = tax.categorize_transaction(snapshot)
        if action is None:
            return
        self._submit(
            outcome,
            user_id,
            "tax_review",
            action,
            dedup.tax_review_key(txn.id),
            success_line=f"Tax: Categorization suggestion for {txn.narration}",
        )
