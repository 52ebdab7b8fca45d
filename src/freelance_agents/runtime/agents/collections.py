"""Collections agent: payment reminders for overdue invoices."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..domain.actions import InvoiceNudgeAction
from ..domain.models import Invoice, parse_iso

AGING_THRESHOLD_DAYS = 7
FIRM_TONE_DAYS = 30
FINAL_NOTICE_DAYS = 60
REMINDER_COOLDOWN_DAYS = 3
DEFAULT_DAYS_OVERDUE = 30


@dataclass(frozen=True)
class InvoiceRow:
    """Snapshot of the invoice fields the aging policy looks at."""
    invoice_id: str
    amount_due: float
    currency: str
    status: str
    days_overdue: int
    client_id: str
    last_reminder_at: Optional[datetime] = None


def _days_overdue(invoice: Invoice, now: datetime) -> int:
    due = parse_iso(invoice.due_date)
    if due is not None:
        return max(0, (now.date() - due.date()).days)
    if invoice.days_overdue is not None:
        return max(0, invoice.days_overdue)
    return DEFAULT_DAYS_OVERDUE


def _last_reminder_at(invoice: Invoice) -> Optional[datetime]:
    stamps = [parse_iso(entry.get("ts")) for entry in invoice.communication_history if entry.get("type") == "email"]
    known = [stamp for stamp in stamps if stamp is not None]
    return max(known) if known else None


def invoice_row(invoice: Invoice, now: datetime) -> InvoiceRow:
    """Build the aging snapshot for ``invoice`` as of ``now``."""
    return InvoiceRow(
        invoice_id=invoice.invoice_id,
        amount_due=invoice.amount_due,
        currency=invoice.currency or "INR",
        status=invoice.status,
        days_overdue=_days_overdue(invoice, now),
        client_id=invoice.client_id or "unknown",
        last_reminder_at=_last_reminder_at(invoice),
    )


def should_act_on_invoice(row: InvoiceRow) -> bool:
    """Return whether the invoice has aged past the reminder threshold."""
    return row.status == "Overdue" and row.amount_due > 0 and row.days_overdue >= AGING_THRESHOLD_DAYS


def _tone(days_overdue: int) -> str:
    if days_overdue >= FINAL_NOTICE_DAYS:
        return "final"
    if days_overdue >= FIRM_TONE_DAYS:
        return "firm"
    return "friendly"


def _reminder_message(row: InvoiceRow, tone: str) -> str:
    amount = f"{row.currency} {row.amount_due:,.2f}"
    if tone == "final":
        return f"Final notice: invoice {row.invoice_id} for {amount} is {row.days_overdue} days overdue. Escalate with {row.client_id}."
    if tone == "firm":
        return f"Invoice {row.invoice_id} for {amount} is {row.days_overdue} days overdue. Send a firm reminder to {row.client_id}."
    return f"Invoice {row.invoice_id} for {amount} is {row.days_overdue} days overdue. Send a friendly reminder to {row.client_id}."


def on_invoice_aging(row: InvoiceRow, now: datetime) -> Optional[InvoiceNudgeAction]:
    """Build the reminder for an aged invoice.

    Declines when a reminder email already went out within the cooldown
    window, even though the invoice passes :func:`should_act_on_invoice`.
    """
    if row.last_reminder_at is not None and now - row.last_reminder_at < timedelta(days=REMINDER_COOLDOWN_DAYS):
        return None
    tone = _tone(row.days_overdue)
    return InvoiceNudgeAction(
        invoice_id=row.invoice_id,
        client_id=row.client_id,
        amount_due=row.amount_due,
        currency=row.currency,
        days_overdue=row.days_overdue,
        tone=tone,
        message=_reminder_message(row, tone),
    )


def priority_for(action: InvoiceNudgeAction) -> str:
    return "high" if action.days_overdue >= FIRM_TONE_DAYS else "normal"
