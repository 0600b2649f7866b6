#!/usr/bin/env python3
"""
Circle demo: run one full round of a three-member savings circle.

Creates a circle for alice, bob and carol, confirms everyone, lets bob miss
the first deposit, then executes every cycle and prints the payouts,
reputation scores and the validated event chain.

Usage:
    python3 scripts/demo_circle.py                   # in-memory SQLite
    python3 scripts/demo_circle.py --policy my.yaml  # custom policy set
    DATABASE_URL=postgresql://... python3 scripts/demo_circle.py
"""

import argparse
import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from circle_config import get_active_policy  # noqa: E402
from circle_kernel.db.engine import (  # noqa: E402
    create_tables,
    init_engine_from_url,
    session_scope,
)
from circle_kernel.domain.clock import DeterministicClock  # noqa: E402
from circle_kernel.domain.token_transfer import InMemoryTokenLedger  # noqa: E402
from circle_kernel.logging_config import configure_logging  # noqa: E402
from circle_kernel.services.circle_service import CircleService  # noqa: E402

DEFAULT_DB_URL = "sqlite://"
ASSET = "USDC"
DEPOSIT = 100
INTERVAL_SECS = 7 * 24 * 3600
MEMBERS = ("alice", "bob", "carol")

W = 72


def banner(title: str) -> None:
    print()
    print("=" * W)
    print(f"  {title}")
    print("=" * W)


def field(name: str, value, indent: int = 4) -> None:
    print(f"{' ' * indent}{name}: {value}")


def run(policy_path: str | None, database_url: str) -> int:
    init_engine_from_url(database_url)
    create_tables()

    policy = get_active_policy(policy_path)
    clock = DeterministicClock()
    ledger = InMemoryTokenLedger()
    for member in MEMBERS:
        ledger.mint(ASSET, member, DEPOSIT * len(MEMBERS))

    banner("Setup")
    with session_scope() as session:
        service = CircleService(session, ledger, clock, policy)
        circle = service.create_circle(
            owner="alice",
            token_asset=ASSET,
            deposit_amount=DEPOSIT,
            members=MEMBERS,
            cycle_interval_secs=INTERVAL_SECS,
            join_deadline_secs=24 * 3600,
        )
        for member in MEMBERS:
            service.join_circle(circle.id, member)
        circle_id = circle.id
    field("circle", circle_id)
    field("members", ", ".join(MEMBERS))
    field("payout policy", policy.payout_policy.value)

    for cycle in range(1, len(MEMBERS) + 1):
        banner(f"Cycle {cycle}")
        with session_scope() as session:
            service = CircleService(session, ledger, clock, policy)
            for member in MEMBERS:
                if cycle == 1 and member == "bob":
                    print("    bob skips this deposit")
                    continue
                service.deposit(circle_id, member)
                field("deposit", member)

        clock.advance(INTERVAL_SECS)
        with session_scope() as session:
            result = CircleService(session, ledger, clock, policy).execute_cycle(
                circle_id, "keeper"
            )
        field("recipient", result.recipient)
        field("payout", result.payout_amount)
        field("penalized", ", ".join(result.penalized) or "(none)")

    banner("Final state")
    with session_scope() as session:
        service = CircleService(session, ledger, clock, policy)
        snapshot = service.get_circle(circle_id)
        field("phase", snapshot.phase.value)
        field("escrow", snapshot.escrow_balance)
        for member in MEMBERS:
            state = service.get_member_state(circle_id, member)
            field(
                member,
                f"reputation={state.reputation_score} "
                f"penalties={state.penalties_accrued} "
                f"balance={ledger.balance_of(ASSET, member)}",
            )
        field("event chain valid", service.validate_event_chain(circle_id))
        field("events", len(service.list_events(circle_id)))
    print()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a demo savings circle")
    parser.add_argument("--policy", help="Path to a policy YAML file")
    parser.add_argument(
        "--database-url",
        default=os.environ.get("DATABASE_URL", DEFAULT_DB_URL),
        help="SQLAlchemy database URL (default: $DATABASE_URL or in-memory SQLite)",
    )
    parser.add_argument("--verbose", action="store_true", help="Emit structured logs")
    args = parser.parse_args()

    configure_logging(level=logging.INFO if args.verbose else logging.WARNING)
    return run(args.policy, args.database_url)


if __name__ == "__main__":
    sys.exit(main())
