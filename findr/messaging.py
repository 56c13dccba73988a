"""Push notification delivery through Firebase Cloud Messaging."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import exceptions, messaging
from flask import current_app

if TYPE_CHECKING:
    import firebase_admin


class PushNotifier:
    """Best-effort sender for FCM push notifications.

    Delivery failures are logged and swallowed; a missed notification never
    rolls back the state change that triggered it.
    """

    def __init__(
        self, app: firebase_admin.App | None = None, dry_run: bool = False
    ) -> None:
        """Initialize the notifier for the given Firebase app."""
        self.app = app
        self.dry_run = dry_run

    @staticmethod
    def build_message(
        title: str,
        body: str,
        token: str | None = None,
        topic: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> messaging.Message:
        """Build an FCM message addressed to exactly one token or topic."""
        if bool(token) == bool(topic):
            raise ValueError("Exactly one of token or topic must be provided.")

        return messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            token=token,
            topic=topic,
            # FCM only accepts string values in the data payload
            data={k: str(v) for k, v in data.items()} if data else None,
        )

    def send(
        self,
        title: str,
        body: str,
        token: str | None = None,
        topic: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> str | None:
        """Send a notification and return the FCM message id, or None on failure."""
        message = self.build_message(title, body, token=token, topic=topic, data=data)
        target = f"topic {topic}" if topic else "device token"
        try:
            current_app.logger.info(f"Sending push notification to {target}")
            response = messaging.send(message, dry_run=self.dry_run, app=self.app)
        except (exceptions.FirebaseError, ValueError) as e:
            current_app.logger.error(f"Error sending push notification: {e}")
            return None

        current_app.logger.info(f"Push notification sent successfully: {response}")
        return response
