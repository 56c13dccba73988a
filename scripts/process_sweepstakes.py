"""
Run a single sweepstake resolution tick against the configured project.

Useful for resolving a backlog by hand or debugging the scheduled job
outside of Cloud Scheduler.
"""

from __future__ import annotations

import argparse
import sys

from firebase_admin import firestore

from findr import create_app
from findr.messaging import PushNotifier
from findr.sweepstakes.services import SweepstakeResolver


def main() -> None:
    """Main entry point for the resolver script."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="Number of ticks to run back to back (each resolves at most one).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate push notifications with FCM without delivering them.",
    )
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        try:
            resolver = SweepstakeResolver.from_config(
                firestore.client(),
                PushNotifier(dry_run=args.dry_run or app.config["FCM_DRY_RUN"]),
                app.config,
            )
        except Exception as e:
            print(f"An error occurred while connecting to Firestore: {e}")
            sys.exit(1)

        resolved = []
        for _ in range(args.count):
            sweepstake_id = resolver.run_once()
            if sweepstake_id is None:
                break
            resolved.append(sweepstake_id)

    print(f"Resolved {len(resolved)} sweepstake(s): {', '.join(resolved) or '-'}")


if __name__ == "__main__":
    main()
