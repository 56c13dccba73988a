"""Firestore trigger for post moderation counters."""

from firebase_admin import firestore
from flask import current_app, jsonify, request

from findr.messaging import PushNotifier
from findr.utils import parse_change_event

from . import bp
from .services import ModerationService


@bp.route("/<string:post_id>", methods=["POST"])
def post_updated(post_id):
    """Handle an update to posts/{post_id}."""
    before, after = parse_change_event(request.get_json(silent=True))

    try:
        service = ModerationService(
            firestore.client(),
            PushNotifier(dry_run=current_app.config.get("FCM_DRY_RUN", False)),
            current_app.config["ADMIN_ALERT_TOPIC"],
        )
        reasons = service.handle_post_update(post_id, before, after)
    except Exception as e:
        current_app.logger.error(f"Error processing moderation alerts: {e}")
        return jsonify(status="error", removed=False, reasons=[]), 200

    return jsonify(status="ok", removed=bool(reasons), reasons=reasons), 200
