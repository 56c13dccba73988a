"""Service for matched and hunted post notifications."""

from __future__ import annotations

import datetime
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, cast

from flask import current_app

from findr.core.constants import (
    POST_CITY,
    POST_POSTER,
    POSTS_COLLECTION,
    USER_FCM_TOKEN,
    USER_FOLLOWING_POSTS,
    USER_MATCHED_POSTS,
    USER_USERNAME,
    USERS_COLLECTION,
)
from findr.errors import NotFoundError

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

    from findr.core.types import PostDocument
    from findr.messaging import PushNotifier


MATCHED = "matched"
HUNTED = "hunted"


def new_entries(before: Iterable[Any] | None, after: Iterable[Any] | None) -> list[Any]:
    """Return the ids present in ``after`` but not in ``before``."""
    # Entries may be maps, so compare by equality rather than hashing
    previous = list(before or [])
    return [post_id for post_id in after or [] if post_id not in previous]


class PostNotificationService:
    """Notifies posters when their posts are matched or hunted."""

    def __init__(
        self,
        db: Client,
        notifier: PushNotifier,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        """Initialize the service."""
        self.db = db
        self.notifier = notifier
        self.clock = clock or (
            lambda: datetime.datetime.now(datetime.timezone.utc)
        )

    def handle_user_update(
        self, user_id: str, before: Mapping[str, Any], after: Mapping[str, Any]
    ) -> dict[str, list[str]]:
        """Send notifications for posts newly added to a user's lists.

        Returns the post ids a notification was sent for, keyed by type.
        """
        current_app.logger.info(f"Checking post lists of user {user_id}")
        new_matched = new_entries(
            before.get(USER_MATCHED_POSTS), after.get(USER_MATCHED_POSTS)
        )
        new_hunted = new_entries(
            before.get(USER_FOLLOWING_POSTS), after.get(USER_FOLLOWING_POSTS)
        )

        actor_name = after.get(USER_USERNAME) or "Someone"
        return {
            MATCHED: self.process_posts(new_matched, MATCHED, actor_name),
            HUNTED: self.process_posts(new_hunted, HUNTED, actor_name),
        }

    def process_posts(
        self, post_ids: list[str], kind: str, actor_name: str
    ) -> list[str]:
        """Notify the poster of each post; skip posts that cannot be notified."""
        if not post_ids:
            current_app.logger.info(f"No new {kind} posts found")
            return []

        notified = []
        for post_id in post_ids:
            post_id = str(post_id)
            try:
                post_data, fcm_token = self._load_recipient(post_id, kind)
            except NotFoundError as e:
                current_app.logger.error(e.message)
                continue
            except Exception as e:
                current_app.logger.error(
                    f"Error loading {kind} post {post_id}: {e}"
                )
                continue

            if not fcm_token:
                current_app.logger.error(f"No FCM token for {kind} post recipient")
                continue

            try:
                if kind == MATCHED:
                    response = self.send_match_notification(
                        post_id, post_data, actor_name, fcm_token
                    )
                else:
                    response = self.send_hunt_notification(
                        post_id, actor_name, fcm_token
                    )
            except Exception as e:
                current_app.logger.error(
                    f"Error sending {kind} notification for post {post_id}: {e}"
                )
                continue

            if response:
                current_app.logger.info(
                    f"{kind.capitalize()} notification sent for post {post_id}"
                )
                notified.append(post_id)
        return notified

    def _load_recipient(
        self, post_id: str, kind: str
    ) -> tuple[PostDocument, str | None]:
        post_doc = self.db.collection(POSTS_COLLECTION).document(post_id).get()
        if not post_doc.exists:
            raise NotFoundError(f"{kind} Post {post_id} not found")

        post_data = cast("PostDocument", post_doc.to_dict() or {})
        poster_id = post_data.get(POST_POSTER)
        if not poster_id:
            raise NotFoundError(f"{kind} Post {post_id} has no poster")

        poster_doc = self.db.collection(USERS_COLLECTION).document(poster_id).get()
        if not poster_doc.exists:
            raise NotFoundError(f"Poster {poster_id} not found for {kind} post")

        return post_data, (poster_doc.to_dict() or {}).get(USER_FCM_TOKEN)

    def send_match_notification(
        self,
        post_id: str,
        post_data: Mapping[str, Any],
        matcher_name: str,
        fcm_token: str,
    ) -> str | None:
        """Tell a poster that someone matched their post."""
        city = post_data.get(POST_CITY) or "your area"
        current_time = self.clock().strftime("%H:%M")
        return self.notifier.send(
            "📬 New Post Match!",
            f"{matcher_name} matched your post in {city} at {current_time}",
            token=fcm_token,
        )

    def send_hunt_notification(
        self, post_id: str, hunter_name: str, fcm_token: str
    ) -> str | None:
        """Tell a poster that someone hunted their post."""
        return self.notifier.send(
            "🎯 Post Hunted!",
            f"{hunter_name} hunted your post",
            token=fcm_token,
            data={"postId": post_id, "type": "post_hunted"},
        )
