"""Firestore trigger for matched and hunted posts."""

from firebase_admin import firestore
from flask import current_app, jsonify, request

from findr.messaging import PushNotifier
from findr.utils import parse_change_event

from . import bp
from .services import PostNotificationService


@bp.route("/<string:user_id>", methods=["POST"])
def user_updated(user_id):
    """Handle an update to users/{user_id}."""
    before, after = parse_change_event(request.get_json(silent=True))

    try:
        service = PostNotificationService(
            firestore.client(),
            PushNotifier(dry_run=current_app.config.get("FCM_DRY_RUN", False)),
        )
        sent = service.handle_user_update(user_id, before, after)
    except Exception as e:
        current_app.logger.error(f"Error processing post notifications: {e}")
        return jsonify(status="error", notified={}), 200

    return jsonify(status="ok", notified=sent), 200
