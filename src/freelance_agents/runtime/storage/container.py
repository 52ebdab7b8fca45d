"""Dependency container for runtime repositories."""

from __future__ import annotations

from pathlib import Path

from .bootstrap import ensure_state_root
from .file_repos import (
    FileBankAccountRepository,
    FileBidRepository,
    FileCalendarEventRepository,
    FileConfigRepository,
    FileEventRepository,
    FileInvoiceRepository,
    FileJobRepository,
    FileNotificationRepository,
    FileTransactionRepository,
    FileUserProfileRepository,
    FileWorkTaskRepository,
)


class Container:
    """Wire file-backed repositories and project-scoped runtime settings."""
    def __init__(self, project_dir: Path) -> None:
        """Initialize the Container.

        Args:
            project_dir (Path): Directory holding the ``.freelance_agents`` state root.
        """
        self.project_dir = project_dir.resolve()
        self.state_root = ensure_state_root(self.project_dir)

        root = self.state_root
        self.notifications = FileNotificationRepository(root / "notifications.yaml", root / "notifications.lock")
        self.invoices = FileInvoiceRepository(root / "invoices.yaml", root / "invoices.lock")
        self.transactions = FileTransactionRepository(root / "transactions.yaml", root / "transactions.lock")
        self.tasks = FileWorkTaskRepository(root / "tasks.yaml", root / "tasks.lock")
        self.calendar_events = FileCalendarEventRepository(root / "calendar_events.yaml", root / "calendar_events.lock")
        self.jobs = FileJobRepository(root / "jobs.yaml", root / "jobs.lock")
        self.bids = FileBidRepository(root / "bids.yaml", root / "bids.lock")
        self.users = FileUserProfileRepository(root / "users.yaml", root / "users.lock")
        self.bank_accounts = FileBankAccountRepository(root / "bank_accounts.yaml", root / "bank_accounts.lock")
        self.events = FileEventRepository(root / "events.jsonl", root / "events.lock")
        self.config = FileConfigRepository(root / "config.yaml", root / "config.lock")

    @property
    def project_id(self) -> str:
        """Expose the stable project identifier derived from directory name.

        Returns:
            str: Name of the project directory.
        """
        return self.project_dir.name
