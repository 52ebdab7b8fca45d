"""Tax agent: deductible-expense categorization for outgoing payments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..domain.actions import CategorizeExpenseAction
from ..domain.models import Transaction

# Ordered: the first category with a matching keyword wins.
EXPENSE_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Software & Subscriptions", ("subscription", "software", "saas", "github", "figma", "adobe", "notion", "aws", "hosting", "domain")),
    ("Internet & Phone", ("internet", "broadband", "wifi", "mobile", "phone bill", "airtel", "jio")),
    ("Office & Coworking", ("coworking", "office", "workspace", "rent")),
    ("Equipment", ("laptop", "monitor", "keyboard", "hardware", "equipment")),
    ("Travel", ("uber", "ola", "flight", "train", "hotel", "travel")),
    ("Professional Services", ("accountant", "legal", "consultant", "ca fees")),
)


@dataclass(frozen=True)
class Txn:
    transaction_id: str
    user_id: str
    amount: float
    narration: str
    date: str
    type: str = "DEBIT"
    category: Optional[str] = None


def tax_txn(txn: Transaction) -> Txn:
    return Txn(
        transaction_id=txn.transaction_id,
        user_id=txn.user_id,
        amount=txn.amount,
        narration=txn.narration,
        date=txn.date,
        type=txn.type,
        category=txn.category,
    )


def should_tax_agent_act(txn: Txn) -> bool:
    """Return whether ``txn`` is an uncategorized outgoing payment."""
    return txn.type != "CREDIT" and txn.amount != 0 and not txn.category and bool(txn.narration.strip())


def categorize_transaction(txn: Txn) -> Optional[CategorizeExpenseAction]:
    """Match the narration against :data:`EXPENSE_CATEGORIES`.

    Confidence grows with the number of matching keywords, capped at 0.95.
    Returns ``None`` when no category keyword appears.
    """
    narration = txn.narration.lower()
    for category, keywords in EXPENSE_CATEGORIES:
        hits = sum(1 for keyword in keywords if keyword in narration)
        if hits:
            return CategorizeExpenseAction(
                transaction_id=txn.transaction_id,
                category=category,
                deductible=True,
                confidence=min(0.95, 0.7 + 0.1 * hits),
                narration=txn.narration,
            )
    return None
