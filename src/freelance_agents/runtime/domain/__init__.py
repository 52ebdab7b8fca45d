"""Domain models for the agent runtime."""

from .actions import (
    Action,
    BlockNewJobsAction,
    CategorizeExpenseAction,
    DeepWorkBlockAction,
    InvoiceNudgeAction,
    JobBidAction,
    ReprioritizeAction,
    SmartSplitAction,
)
from .models import (
    DOMAINS,
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

__all__ = [
    "DOMAINS",
    "Action",
    "BankAccount",
    "Bid",
    "BlockNewJobsAction",
    "CalendarEvent",
    "CategorizeExpenseAction",
    "DeepWorkBlockAction",
    "Invoice",
    "InvoiceNudgeAction",
    "Job",
    "JobBidAction",
    "Notification",
    "ReprioritizeAction",
    "SmartSplitAction",
    "Transaction",
    "UserProfile",
    "WorkTask",
]
