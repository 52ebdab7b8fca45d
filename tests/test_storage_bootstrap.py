from __future__ import annotations

from pathlib import Path

import yaml

from freelance_agents.config import get_agent_run_config, get_text_generation_config
from freelance_agents.runtime.domain.models import Invoice, Transaction
from freelance_agents.runtime.storage.bootstrap import ensure_state_root
from freelance_agents.runtime.storage.container import Container


def test_state_root_archives_legacy_state(tmp_path: Path) -> None:
    legacy_root = tmp_path / ".freelance_agents"
    legacy_root.mkdir(parents=True)
    (legacy_root / "notifications.yaml").write_text("notifications: []\n", encoding="utf-8")

    state_root = ensure_state_root(tmp_path)

    assert state_root == tmp_path / ".freelance_agents"
    config = yaml.safe_load((state_root / "config.yaml").read_text(encoding="utf-8"))
    assert config["schema_version"] == 1

    archives = sorted(tmp_path.glob(".freelance_agents_legacy_*"))
    assert len(archives) == 1
    assert (archives[0] / "notifications.yaml").exists()


def test_state_root_archives_other_schema_versions(tmp_path: Path) -> None:
    state_root = tmp_path / ".freelance_agents"
    state_root.mkdir(parents=True)
    (state_root / "config.yaml").write_text("schema_version: 2\n", encoding="utf-8")

    ensure_state_root(tmp_path)

    config = yaml.safe_load((state_root / "config.yaml").read_text(encoding="utf-8"))
    assert config["schema_version"] == 1
    assert len(list(tmp_path.glob(".freelance_agents_legacy_*"))) == 1


def test_state_root_is_reused_and_gitignored_once(tmp_path: Path) -> None:
    ensure_state_root(tmp_path)
    ensure_state_root(tmp_path)

    assert list(tmp_path.glob(".freelance_agents_legacy_*")) == []
    gitignore = (tmp_path / ".gitignore").read_text(encoding="utf-8")
    assert gitignore.count(".freelance_agents/") == 1


def test_default_config_resolves_to_sequential_runs(tmp_path: Path) -> None:
    container = Container(tmp_path)
    cfg = container.config.load()

    assert get_agent_run_config(config=cfg).concurrency == 1
    tg = get_text_generation_config(config=cfg, environ={})
    assert tg.api_keys == ()
    assert tg.model == "gemini-2.0-flash-lite-preview-02-05"


def test_agent_concurrency_is_clamped(tmp_path: Path) -> None:
    assert get_agent_run_config(config={"agents": {"concurrency": 50}}).concurrency == 5
    assert get_agent_run_config(config={"agents": {"concurrency": 0}}).concurrency == 1
    assert get_agent_run_config(config={"agents": "bogus"}).concurrency == 1


def test_api_keys_are_read_from_named_environment_variable() -> None:
    cfg = {"text_generation": {"api_keys_env": "RESUME_KEYS"}}
    tg = get_text_generation_config(config=cfg, environ={"RESUME_KEYS": "a, b,,c ", "GEMINI_API_KEY": "ignored"})
    assert tg.api_keys == ("a", "b", "c")


def test_record_repositories_round_trip_through_yaml(tmp_path: Path) -> None:
    container = Container(tmp_path)
    container.invoices.upsert(Invoice(invoice_id="inv_1", freelancer_id="u1", amount_due=1200, status="Overdue"))
    container.transactions.upsert(Transaction(transaction_id="t-old", user_id="u1", amount=10, date="2025-01-01T00:00:00Z"))
    container.transactions.upsert(Transaction(transaction_id="t-new", user_id="u1", amount=20, date="2025-02-01T00:00:00Z"))
    container.transactions.upsert(Transaction(transaction_id="t-other", user_id="u2", amount=30, date="2025-03-01T00:00:00Z"))

    reloaded = Container(tmp_path)
    invoice = reloaded.invoices.find_by_invoice_id("inv_1")
    assert invoice is not None
    assert invoice.amount_due == 1200
    assert [item.invoice_id for item in reloaded.invoices.list_overdue("u1")] == ["inv_1"]
    assert reloaded.invoices.list_overdue("u2") == []

    latest = reloaded.transactions.latest_for_user("u1")
    assert latest is not None
    assert latest.transaction_id == "t-new"
    assert reloaded.transactions.latest_for_user("nobody") is None


def test_upsert_replaces_existing_record(tmp_path: Path) -> None:
    container = Container(tmp_path)
    invoice = container.invoices.upsert(Invoice(invoice_id="inv_1", freelancer_id="u1", status="Overdue"))
    invoice.status = "PAID"
    container.invoices.upsert(invoice)

    items = container.invoices.list()
    assert len(items) == 1
    assert items[0].status == "PAID"
