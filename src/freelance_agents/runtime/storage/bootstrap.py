from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import yaml

from .file_repos import STATE_VERSION, FileConfigRepository

STATE_DIR_NAME = ".freelance_agents"

STATE_FILES = {
    "notifications": "notifications.yaml",
    "invoices": "invoices.yaml",
    "transactions": "transactions.yaml",
    "tasks": "tasks.yaml",
    "calendar_events": "calendar_events.yaml",
    "jobs": "jobs.yaml",
    "bids": "bids.yaml",
    "users": "users.yaml",
    "bank_accounts": "bank_accounts.yaml",
    "events": "events.jsonl",
    "config": "config.yaml",
}

DEFAULT_TEXT_GENERATION = {
    "model": "gemini-2.0-flash-lite-preview-02-05",
    "endpoint": "https://generativelanguage.googleapis.com/v1beta/models",
    "api_keys_env": "GEMINI_API_KEY",
    "timeout_seconds": 30,
    "max_output_tokens": 1200,
}


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def _schema_version(path: Path) -> int | None:
    if not path.exists():
        return None
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        return None
    value = raw.get("schema_version")
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _needs_archive(base: Path) -> bool:
    if not base.exists():
        return False
    if not (base / "config.yaml").exists():
        return True
    return _schema_version(base / "config.yaml") != STATE_VERSION


def _ensure_gitignored(project_dir: Path) -> None:
    """Add the runtime state directory to the project's .gitignore if missing."""
    gitignore = project_dir / ".gitignore"
    entry = f"{STATE_DIR_NAME}/"
    if gitignore.exists():
        content = gitignore.read_text(encoding="utf-8")
        existing = {line.strip() for line in content.splitlines()}
        if entry in existing or entry.rstrip("/") in existing:
            return
        if content and not content.endswith("\n"):
            content += "\n"
        content += f"\n# Freelance agents runtime data\n{entry}\n"
        gitignore.write_text(content, encoding="utf-8")
    else:
        gitignore.write_text(f"# Freelance agents runtime data\n{entry}\n", encoding="utf-8")


def ensure_state_root(project_dir: Path) -> Path:
    """Create (or migrate) the runtime state directory under ``project_dir``.

    State written by an incompatible schema is moved aside to a timestamped
    ``.freelance_agents_legacy_*`` directory instead of being read.
    """
    state_root = project_dir / STATE_DIR_NAME

    if _needs_archive(state_root):
        archive_target = project_dir / f"{STATE_DIR_NAME}_legacy_{_utc_stamp()}"
        state_root.rename(archive_target)

    state_root.mkdir(parents=True, exist_ok=True)
    _ensure_gitignored(project_dir)

    for file_name in STATE_FILES.values():
        target = state_root / file_name
        if file_name.endswith(".yaml") and not target.exists():
            target.write_text(f"version: {STATE_VERSION}\n", encoding="utf-8")
        if file_name.endswith(".jsonl") and not target.exists():
            target.touch()

    config_repo = FileConfigRepository(state_root / "config.yaml", state_root / "config.lock")
    config = config_repo.load()
    config["schema_version"] = STATE_VERSION
    config.setdefault("agents", {"concurrency": 1})
    config.setdefault("text_generation", dict(DEFAULT_TEXT_GENERATION))
    config_repo.save(config)

    return state_root
