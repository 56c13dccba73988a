"""Service for removing posts that cross moderation thresholds."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore
from flask import current_app

from findr.core.constants import (
    INAPPROPRIATE_THRESHOLD,
    POST_INAPPROPRIATE_COUNT,
    POST_INAPPROPRIATE_COUNT_LEGACY,
    POST_POSTER,
    POST_REMOVED_AT,
    POST_UNFAIRNESS,
    POSTS_COLLECTION,
    REASON_INAPPROPRIATE,
    REASON_UNFAIR,
    UNFAIRNESS_THRESHOLD,
    USER_FCM_TOKEN,
    USERS_COLLECTION,
)
from findr.utils import as_count

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client

    from findr.messaging import PushNotifier


POST_REMOVED_TITLE = "Post Removed"


def inappropriate_count(post: Mapping[str, Any]) -> int:
    """Read the inappropriate counter, falling back to the legacy field name."""
    if POST_INAPPROPRIATE_COUNT in post:
        return as_count(post.get(POST_INAPPROPRIATE_COUNT))
    return as_count(post.get(POST_INAPPROPRIATE_COUNT_LEGACY))


def detect_crossed_thresholds(
    before: Mapping[str, Any], after: Mapping[str, Any]
) -> list[str]:
    """Return the moderation reasons whose threshold was crossed by this update."""
    reasons = []

    unfairness_before = as_count(before.get(POST_UNFAIRNESS))
    unfairness_after = as_count(after.get(POST_UNFAIRNESS))
    if unfairness_after >= UNFAIRNESS_THRESHOLD > unfairness_before:
        reasons.append(REASON_UNFAIR)

    if inappropriate_count(after) >= INAPPROPRIATE_THRESHOLD > inappropriate_count(
        before
    ):
        reasons.append(REASON_INAPPROPRIATE)

    return reasons


def build_reason_message(reasons: list[str]) -> str:
    """Describe why a post was removed."""
    if REASON_UNFAIR in reasons and REASON_INAPPROPRIATE in reasons:
        return "being flagged as both unfair and inappropriate"
    if REASON_UNFAIR in reasons:
        return "receiving multiple unfairness flags"
    return "containing inappropriate content"


class ModerationService:
    """Removes posts that cross moderation thresholds and alerts people."""

    def __init__(self, db: Client, notifier: PushNotifier, admin_topic: str) -> None:
        """Initialize the service."""
        self.db = db
        self.notifier = notifier
        self.admin_topic = admin_topic

    def handle_post_update(
        self, post_id: str, before: Mapping[str, Any], after: Mapping[str, Any]
    ) -> list[str]:
        """React to a post update; return the reasons it was removed for."""
        if after.get(POST_REMOVED_AT) is not None:
            current_app.logger.info(f"Post {post_id} already removed")
            return []

        reasons = detect_crossed_thresholds(before, after)
        if reasons:
            self.remove_post(post_id, after, reasons)
        return reasons

    def remove_post(
        self, post_id: str, post_data: Mapping[str, Any], reasons: list[str]
    ) -> None:
        """Mark the post removed, then notify its poster and the admins."""
        post_id = str(post_id)
        self.db.collection(POSTS_COLLECTION).document(post_id).update(
            {POST_REMOVED_AT: firestore.SERVER_TIMESTAMP}
        )

        reason_message = build_reason_message(reasons)
        joined_reasons = ",".join(reasons)

        fcm_token = self._poster_token(post_id, post_data.get(POST_POSTER))
        if fcm_token:
            self.notifier.send(
                POST_REMOVED_TITLE,
                f"Your post was removed for {reason_message}.",
                token=fcm_token,
                data={
                    "postId": post_id,
                    "type": "post_removed",
                    "reasons": joined_reasons,
                },
            )

        # Admins review every removal, reachable poster or not
        self.notifier.send(
            POST_REMOVED_TITLE,
            f"Post {post_id} removed for {reason_message}",
            topic=self.admin_topic,
            data={
                "postId": post_id,
                "reasons": joined_reasons,
                "action": "review_required",
            },
        )
        current_app.logger.info(f"Post {post_id} removed and notifications sent")

    def _poster_token(self, post_id: str, poster_id: str | None) -> str | None:
        if not poster_id:
            current_app.logger.error(f"Post {post_id} has no poster")
            return None

        poster_doc = cast(
            "DocumentSnapshot",
            self.db.collection(USERS_COLLECTION).document(poster_id).get(),
        )
        if not poster_doc.exists:
            current_app.logger.error(f"Poster {poster_id} not found")
            return None

        fcm_token = (poster_doc.to_dict() or {}).get(USER_FCM_TOKEN)
        if not fcm_token:
            current_app.logger.error(f"No FCM token for poster {poster_id}")
        return fcm_token
