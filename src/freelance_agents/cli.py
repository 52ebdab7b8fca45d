"""Command-line entry point: run agent scans, list the pending feed, or serve the API."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from .runtime.events import EventBus
from .runtime.notifications import PendingActionsReader
from .runtime.orchestrator import AgentRunService
from .runtime.storage import Container

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="freelance-agents",
        description="Freelance agents - per-user agent scans and notification ledger",
    )
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=Path("."),
        help="Project directory holding the runtime state (default: current directory)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Run every agent domain for one user")
    scan.add_argument("--user-id", type=str, required=True, help="User whose records are scanned")

    pending = subparsers.add_parser("pending", help="Print the user's unread notifications")
    pending.add_argument("--user-id", type=str, required=True, help="Recipient of the notifications")

    serve = subparsers.add_parser("serve", help="Serve the HTTP API")
    serve.add_argument("--host", type=str, default=DEFAULT_HOST, help=f"Bind address (default: {DEFAULT_HOST})")
    serve.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Bind port (default: {DEFAULT_PORT})")
    return parser.parse_args(argv)


def _scan(project_dir: Path, user_id: str) -> int:
    container = Container(project_dir)
    bus = EventBus(container.events, container.project_id)
    result = AgentRunService(container, bus).run_all_agents(user_id)
    for line in result.logs:
        print(line)
    print(f"\n{result.action_count} new action(s)")
    return 0


def _pending(project_dir: Path, user_id: str) -> int:
    container = Container(project_dir)
    actions = PendingActionsReader(container.notifications).list(user_id)
    print(json.dumps(actions, indent=2))
    return 0


def _serve(project_dir: Path, host: str, port: int) -> int:
    import uvicorn

    from .server.api import create_app

    uvicorn.run(create_app(project_dir=project_dir), host=host, port=port)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    project_dir = args.project_dir.expanduser().resolve()
    if args.command == "scan":
        return _scan(project_dir, args.user_id)
    if args.command == "pending":
        return _pending(project_dir, args.user_id)
    return _serve(project_dir, args.host, args.port)


if __name__ == "__main__":
    raise SystemExit(main())
