"""Service layer for resolving expired sweepstakes."""

from __future__ import annotations

import datetime
import random
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, cast

from firebase_admin import firestore
from flask import current_app

from findr.core.constants import (
    SWEEPSTAKE_COMPLETED_AT,
    SWEEPSTAKE_END_DATE,
    SWEEPSTAKE_ENTERED_USERS,
    SWEEPSTAKE_IS_COMPLETED,
    SWEEPSTAKE_IS_PROCESSING,
    SWEEPSTAKE_PROCESSING_STARTED_AT,
    SWEEPSTAKE_TITLE,
    SWEEPSTAKE_WINNER,
    SWEEPSTAKES_COLLECTION,
    USER_FCM_TOKEN,
    USER_WINS,
    USERS_COLLECTION,
)

from .draw import draw_winner

if TYPE_CHECKING:
    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.client import Client
    from google.cloud.firestore_v1.document import DocumentReference
    from google.cloud.firestore_v1.transaction import Transaction

    from findr.core.types import SweepstakeDocument, UserDocument
    from findr.messaging import PushNotifier


WINNER_NOTIFICATION_TITLE = "Congratulations!"


def utcnow() -> datetime.datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def build_winner_message(sweepstake_title: str) -> tuple[str, str]:
    """Return the title and body of the congratulations notification."""
    return (
        WINNER_NOTIFICATION_TITLE,
        f"You've won the sweepstake: {sweepstake_title}! 🎉",
    )


class SweepstakeResolver:
    """Resolves at most one expired sweepstake per scheduler tick.

    A tick selects an eligible sweepstake, claims it inside a Firestore
    transaction, draws a winner weighted by entry count, records the outcome
    and the winner's ``wins`` entry in one batch, then notifies the winner.
    """

    def __init__(  # noqa: PLR0913
        self,
        db: Client,
        notifier: PushNotifier,
        rng: random.Random | None = None,
        clock: Callable[[], datetime.datetime] | None = None,
        claim_timeout: datetime.timedelta | None = None,
    ) -> None:
        """Initialize the resolver with its collaborators."""
        self.db = db
        self.notifier = notifier
        self.rng = rng or random.SystemRandom()
        self.clock = clock or utcnow
        self.claim_timeout = claim_timeout

    @classmethod
    def from_config(
        cls, db: Client, notifier: PushNotifier, config: Mapping[str, Any]
    ) -> SweepstakeResolver:
        """Build a resolver using the app configuration."""
        timeout_minutes = int(config.get("SWEEPSTAKE_CLAIM_TIMEOUT_MINUTES") or 0)
        claim_timeout = (
            datetime.timedelta(minutes=timeout_minutes) if timeout_minutes > 0 else None
        )
        return cls(db, notifier, claim_timeout=claim_timeout)

    def run_once(self) -> str | None:
        """Process one eligible sweepstake.

        Returns the id of the resolved sweepstake, or None when there was
        nothing to do or the tick failed. Errors are logged, never raised.
        """
        now = self.clock()
        try:
            snapshot = self.find_eligible(now)
            if snapshot is None:
                current_app.logger.info("No sweepstakes to process.")
                return None

            sweepstake_id = snapshot.id
            data = self.claim(snapshot.reference, now)
            if data is None:
                current_app.logger.info(
                    f"Sweepstake {sweepstake_id} was claimed by another run."
                )
                return None

            current_app.logger.info(f"Processing sweepstake: {sweepstake_id}")
            self.resolve(sweepstake_id, data)
            current_app.logger.info(
                f"Sweepstake {sweepstake_id} processed successfully."
            )
            return sweepstake_id
        except Exception as e:
            current_app.logger.error(f"Error processing sweepstake: {e}")
            return None

    def find_eligible(self, now: datetime.datetime) -> DocumentSnapshot | None:
        """Return the first ended sweepstake nobody has completed or claimed."""
        sweepstakes_ref = self.db.collection(SWEEPSTAKES_COLLECTION)
        query = (
            sweepstakes_ref.where(
                filter=firestore.FieldFilter(SWEEPSTAKE_IS_COMPLETED, "==", False)
            )
            .where(filter=firestore.FieldFilter(SWEEPSTAKE_IS_PROCESSING, "==", False))
            .where(filter=firestore.FieldFilter(SWEEPSTAKE_END_DATE, "<=", now))
            .limit(1)
        )
        for snapshot in query.stream():
            return snapshot

        stale_before = self._stale_before(now)
        if stale_before is None:
            return None

        stale_query = (
            sweepstakes_ref.where(
                filter=firestore.FieldFilter(SWEEPSTAKE_IS_COMPLETED, "==", False)
            )
            .where(filter=firestore.FieldFilter(SWEEPSTAKE_IS_PROCESSING, "==", True))
            .where(
                filter=firestore.FieldFilter(
                    SWEEPSTAKE_PROCESSING_STARTED_AT, "<=", stale_before
                )
            )
            .limit(1)
        )
        for snapshot in stale_query.stream():
            current_app.logger.warning(
                f"Reclaiming sweepstake {snapshot.id} stuck in processing."
            )
            return snapshot
        return None

    def claim(
        self, sweepstake_ref: DocumentReference, now: datetime.datetime
    ) -> SweepstakeDocument | None:
        """Mark a sweepstake as processing inside a transaction.

        Returns the sweepstake data read in the transaction, or None when the
        document is gone, completed, or held by a claim that is not stale.
        """
        transaction = self.db.transaction()
        claim_in_transaction = firestore.transactional(self._claim_in_transaction)
        return claim_in_transaction(
            transaction, sweepstake_ref, now, self._stale_before(now)
        )

    @staticmethod
    def _claim_in_transaction(
        transaction: Transaction,
        sweepstake_ref: DocumentReference,
        now: datetime.datetime,
        stale_before: datetime.datetime | None,
    ) -> SweepstakeDocument | None:
        snapshot = sweepstake_ref.get(transaction=transaction)
        if not snapshot.exists:
            return None

        data = cast("SweepstakeDocument", snapshot.to_dict() or {})
        if data.get(SWEEPSTAKE_IS_COMPLETED):
            return None

        if data.get(SWEEPSTAKE_IS_PROCESSING):
            started_at = data.get(SWEEPSTAKE_PROCESSING_STARTED_AT)
            if stale_before is None or started_at is None or started_at > stale_before:
                return None

        transaction.update(
            sweepstake_ref,
            {
                SWEEPSTAKE_IS_PROCESSING: True,
                SWEEPSTAKE_PROCESSING_STARTED_AT: now,
            },
        )
        return data

    def resolve(self, sweepstake_id: str, data: Mapping[str, Any]) -> str | None:
        """Draw the winner of a claimed sweepstake and record the outcome."""
        sweepstake_ref = self.db.collection(SWEEPSTAKES_COLLECTION).document(
            sweepstake_id
        )

        winner_id = data.get(SWEEPSTAKE_WINNER)
        if winner_id:
            # Winner recorded by an earlier run whose completion did not land
            current_app.logger.warning(
                f"Sweepstake {sweepstake_id} already has winner {winner_id}; "
                "completing without a new draw."
            )
        else:
            winner_id = draw_winner(
                data.get(SWEEPSTAKE_ENTERED_USERS) or [], self.rng
            )

        if winner_id is None:
            current_app.logger.info(f"No participants in sweepstake: {sweepstake_id}")
            sweepstake_ref.update(self._completion_fields(None))
            return None

        user_ref = self.db.collection(USERS_COLLECTION).document(winner_id)
        user_doc = user_ref.get()

        batch = self.db.batch()
        batch.update(sweepstake_ref, self._completion_fields(winner_id))
        if user_doc.exists:
            batch.update(user_ref, {USER_WINS: firestore.ArrayUnion([sweepstake_id])})
        else:
            current_app.logger.warning(f"User document for {winner_id} not found.")
        batch.commit()

        current_app.logger.info(f"Winner determined: {winner_id}")

        if user_doc.exists:
            current_app.logger.info(
                f"Sweepstake {sweepstake_id} added to winner's wins array: "
                f"{winner_id}"
            )
            self.notify_winner(
                winner_id,
                cast("UserDocument", user_doc.to_dict() or {}),
                sweepstake_id,
                data.get(SWEEPSTAKE_TITLE, ""),
            )
        return winner_id

    def notify_winner(
        self,
        winner_id: str,
        user_data: UserDocument,
        sweepstake_id: str,
        sweepstake_title: str,
    ) -> str | None:
        """Send the congratulations push, if the winner has a token."""
        fcm_token = user_data.get(USER_FCM_TOKEN)
        if not fcm_token:
            current_app.logger.info(f"FCM Token not found for user {winner_id}")
            return None

        title, body = build_winner_message(sweepstake_title)
        return self.notifier.send(
            title,
            body,
            token=fcm_token,
            data={"sweepstakeId": sweepstake_id, "type": "sweepstake_won"},
        )

    @staticmethod
    def _completion_fields(winner_id: str | None) -> dict[str, Any]:
        return {
            SWEEPSTAKE_WINNER: winner_id,
            SWEEPSTAKE_IS_COMPLETED: True,
            SWEEPSTAKE_IS_PROCESSING: False,
            SWEEPSTAKE_COMPLETED_AT: firestore.SERVER_TIMESTAMP,
        }

    def _stale_before(self, now: datetime.datetime) -> datetime.datetime | None:
        if self.claim_timeout is None:
            return None
        return now - self.claim_timeout
