"""Notification ledger and pending-actions feed."""

from .ledger import STATUS_REPORT_KIND, NotificationLedger, StatusReporter
from .pending import DOMAIN_BY_EVENT_KIND, PendingActionsReader, resolve_domain

__all__ = [
    "DOMAIN_BY_EVENT_KIND",
    "STATUS_REPORT_KIND",
    "NotificationLedger",
    "PendingActionsReader",
    "StatusReporter",
    "resolve_domain",
]
