"""CFO agent: smart split of incoming client payments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..domain.actions import SmartSplitAction
from ..domain.models import BankAccount, Transaction

MIN_INCOME_AMOUNT = 1000.0
OPERATING_BUFFER = 10000.0
SPLIT_RATIOS: dict[str, float] = {"tax": 0.30, "savings": 0.20, "operating": 0.50}

_INTERNAL_MOVEMENT = re.compile(r"\b(self[- ]?transfer|refund|reversal|own account)\b", re.IGNORECASE)


@dataclass(frozen=True)
class TransactionSnapshot:
    transaction_id: str
    user_id: str
    amount: float
    type: str
    narration: str
    date: str
    balance_after_transaction: Optional[float] = None


def transaction_snapshot(txn: Transaction) -> TransactionSnapshot:
    return TransactionSnapshot(
        transaction_id=txn.transaction_id,
        user_id=txn.user_id,
        amount=txn.amount,
        type=txn.type,
        narration=txn.narration,
        date=txn.date,
        balance_after_transaction=txn.balance_after_transaction,
    )


def should_act_on_transaction(txn: TransactionSnapshot) -> bool:
    """Return whether ``txn`` is an incoming payment large enough to split."""
    return txn.type == "CREDIT" and txn.amount >= MIN_INCOME_AMOUNT


def on_transaction(txn: TransactionSnapshot, account: Optional[BankAccount] = None) -> Optional[SmartSplitAction]:
    """Propose a tax/savings/operating split for an incoming payment.

    The balance after the payment comes from the transaction itself, else the
    linked account. No split is proposed for internal movements or when the
    balance would leave less than the operating buffer.
    """
    if _INTERNAL_MOVEMENT.search(txn.narration or ""):
        return None
    balance = txn.balance_after_transaction
    if balance is None and account is not None:
        balance = account.balance
    if balance is not None and balance < OPERATING_BUFFER:
        return None

    allocations = {bucket: round(txn.amount * ratio, 2) for bucket, ratio in SPLIT_RATIOS.items()}
    message = (
        f"Received {txn.amount:,.2f}. Set aside {allocations['tax']:,.2f} for tax and "
        f"{allocations['savings']:,.2f} for savings; {allocations['operating']:,.2f} stays operating."
    )
    return SmartSplitAction(
        transaction_id=txn.transaction_id,
        amount=txn.amount,
        allocations=allocations,
        message=message,
    )
