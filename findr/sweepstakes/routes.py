"""Scheduler entry point for sweepstake resolution."""

from firebase_admin import firestore
from flask import current_app, jsonify

from findr.messaging import PushNotifier

from . import bp
from .services import SweepstakeResolver


@bp.route("/process", methods=["POST"])
def process_sweepstake():
    """Resolve at most one ended sweepstake (invoked every 5 minutes)."""
    try:
        resolver = SweepstakeResolver.from_config(
            firestore.client(),
            PushNotifier(dry_run=current_app.config.get("FCM_DRY_RUN", False)),
            current_app.config,
        )
    except Exception as e:
        current_app.logger.error(f"Error initializing sweepstake resolver: {e}")
        return jsonify(status="error", processed=None), 200

    sweepstake_id = resolver.run_once()
    return jsonify(status="ok", processed=sweepstake_id), 200
