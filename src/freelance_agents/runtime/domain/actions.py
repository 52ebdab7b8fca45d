"""Actions proposed by the domain agents.

An action is never persisted on its own: the run orchestrator wraps it into a
notification (``to_payload`` becomes the notification metadata) and the action
executor later applies it once the user confirms.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Union


@dataclass
class _ActionBase:
    domain: ClassVar[str] = ""
    kind: ClassVar[str] = ""

    def to_payload(self) -> dict[str, Any]:
        """Serialize the action fields plus its ``type`` tag."""
        payload = asdict(self)
        payload["type"] = self.kind
        return payload


@dataclass
class JobBidAction(_ActionBase):
    """Submit a bid on a matching job posting."""
    domain: ClassVar[str] = "Hunter"
    kind: ClassVar[str] = "create_bid"

    job_id: str = ""
    job_title: str = ""
    match_score: float = 0.0
    bid_amount: float = 0.0
    proposal_draft: str = ""


@dataclass
class InvoiceNudgeAction(_ActionBase):
    """Send a payment reminder for an overdue invoice."""
    domain: ClassVar[str] = "Collections"
    kind: ClassVar[str] = "invoice_nudge"

    invoice_id: str = ""
    client_id: str = ""
    amount_due: float = 0.0
    currency: str = "INR"
    days_overdue: int = 0
    tone: str = "friendly"
    message: str = ""


@dataclass
class SmartSplitAction(_ActionBase):
    """Allocate an incoming payment across tax, savings and operating buckets."""
    domain: ClassVar[str] = "CFO"
    kind: ClassVar[str] = "smart_split"

    transaction_id: str = ""
    amount: float = 0.0
    allocations: dict[str, float] = field(default_factory=dict)
    message: str = ""


@dataclass
class BlockNewJobsAction(_ActionBase):
    """Pause new job intake while the schedule is over capacity."""
    domain: ClassVar[str] = "Productivity"
    kind: ClassVar[str] = "block_new_jobs"

    reason: str = ""
    committed_hours: float = 0.0
    available_hours: float = 0.0


@dataclass
class DeepWorkBlockAction(_ActionBase):
    """Reserve a focus block on the calendar for a large task."""
    domain: ClassVar[str] = "Productivity"
    kind: ClassVar[str] = "create_deep_work_block"

    title: str = ""
    start: str = ""
    end: str = ""
    task_id: str = ""


@dataclass
class ReprioritizeAction(_ActionBase):
    """Raise the priority of tasks that are about to slip."""
    domain: ClassVar[str] = "Productivity"
    kind: ClassVar[str] = "suggest_reprioritize"

    suggestions: list[dict[str, Any]] = field(default_factory=list)
    message: str = ""


@dataclass
class CategorizeExpenseAction(_ActionBase):
    """Tag a transaction with a tax-deductible expense category."""
    domain: ClassVar[str] = "Tax"
    kind: ClassVar[str] = "categorize_expense"

    transaction_id: str = ""
    category: str = ""
    deductible: bool = True
    confidence: float = 0.0
    narration: str = ""


Action = Union[
    JobBidAction,
    InvoiceNudgeAction,
    SmartSplitAction,
    BlockNewJobsAction,
    DeepWorkBlockAction,
    ReprioritizeAction,
    CategorizeExpenseAction,
]

ProductivityAction = Union[BlockNewJobsAction, DeepWorkBlockAction, ReprioritizeAction]
