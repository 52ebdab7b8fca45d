"""Agent orchestration and notification ledger for a freelance marketplace."""

__version__ = "0.1.0"
