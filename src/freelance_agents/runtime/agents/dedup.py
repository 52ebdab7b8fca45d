"""Dedup key builders, one per notification event kind.

The notification ledger suppresses a write when an unread entry with the same
(recipient, event kind, key) exists. Each builder below fixes how long the
"same" event stays the same:

- ``daily``: stable for one calendar day, so a reminder can fire again tomorrow.
- ``per_record``: stable for the lifetime of the source record.
- ``unique``: never repeats; every suggestion is its own event.
"""

from __future__ import annotations

import time
import uuid
from datetime import date
from typing import Literal

DedupPolicy = Literal["daily", "per_record", "unique"]

DEDUP_POLICIES: dict[str, DedupPolicy] = {
    "invoice_nudge": "daily",
    "smart_split": "per_record",
    "tax_review": "per_record",
    "schedule_alert": "unique",
}


def invoice_nudge_key(invoice_id: str, day: date) -> str:
    return f"col_{invoice_id}_{day.isoformat()}"


def smart_split_key(transaction_record_id: str) -> str:
    return f"cfo_{transaction_record_id}"


def tax_review_key(transaction_record_id: str) -> str:
    return f"tax_{transaction_record_id}"


def schedule_alert_key(action_kind: str) -> str:
    # Several schedule alerts may legitimately coexist in one run.
    return f"prod_{action_kind}_{time.time_ns()}_{uuid.uuid4().hex[:8]}"
