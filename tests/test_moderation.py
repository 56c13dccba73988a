"""Tests for post moderation alerts."""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock, call, patch

import pytest
from mockfirestore import MockFirestore

from findr import create_app
from findr.moderation.services import (
    ModerationService,
    build_reason_message,
    detect_crossed_thresholds,
)
from tests.conftest import make_mock_firestore_module, patch_mockfirestore

patch_mockfirestore()


@pytest.mark.parametrize(
    ("before", "after", "expected"),
    [
        ({"unfairness": 5}, {"unfairness": 6}, ["unfair"]),
        ({"unfairness": 6}, {"unfairness": 7}, []),
        ({}, {"unfairness": 9}, ["unfair"]),
        ({"inappropriateCount": 2}, {"inappropriateCount": 3}, ["inappropriate"]),
        ({"inapropriateCount": 2}, {"inapropriateCount": 3}, ["inappropriate"]),
        ({"inappropriateCount": 3}, {"inappropriateCount": 4}, []),
        (
            {"unfairness": 5, "inappropriateCount": 2},
            {"unfairness": 6, "inappropriateCount": 3},
            ["unfair", "inappropriate"],
        ),
        ({"unfairness": 2}, {"unfairness": 3}, []),
    ],
)
def test_detect_crossed_thresholds(before, after, expected):
    assert detect_crossed_thresholds(before, after) == expected  # nosec B101


def test_build_reason_message():
    assert (  # nosec B101
        build_reason_message(["unfair", "inappropriate"])
        == "being flagged as both unfair and inappropriate"
    )
    assert (  # nosec B101
        build_reason_message(["unfair"]) == "receiving multiple unfairness flags"
    )
    assert (  # nosec B101
        build_reason_message(["inappropriate"]) == "containing inappropriate content"
    )


class ModerationServiceTestCase(unittest.TestCase):
    """Test case for removing posts and sending moderation alerts."""

    def setUp(self) -> None:
        self.mock_db = MockFirestore()
        self.mock_firestore_module = make_mock_firestore_module(self.mock_db)
        patcher = patch(
            "findr.moderation.services.firestore", new=self.mock_firestore_module
        )
        patcher.start()
        self.addCleanup(patcher.stop)

        self.app = create_app({"TESTING": True})
        self.app_context = self.app.app_context()
        self.app_context.push()
        self.addCleanup(self.app_context.pop)

        self.notifier = MagicMock()
        self.service = ModerationService(self.mock_db, self.notifier, "admin_alerts")

        self.mock_db.collection("users").document("poster1").set(
            {"username": "poster", "fcmToken": "poster-token"}
        )
        self.post = {"poster": "poster1", "unfairness": 6, "inappropriateCount": 0}
        self.mock_db.collection("posts").document("p1").set(self.post)

    def post_data(self) -> dict:
        return self.mock_db.collection("posts").document("p1").get().to_dict()

    def test_crossing_removes_post_and_notifies_poster_and_admins(self) -> None:
        reasons = self.service.handle_post_update("p1", {"unfairness": 5}, self.post)

        self.assertEqual(reasons, ["unfair"])
        self.assertEqual(self.post_data()["removedAt"], "SERVER_TIMESTAMP")
        self.notifier.send.assert_has_calls(
            [
                call(
                    "Post Removed",
                    "Your post was removed for receiving multiple unfairness flags.",
                    token="poster-token",
                    data={"postId": "p1", "type": "post_removed", "reasons": "unfair"},
                ),
                call(
                    "Post Removed",
                    "Post p1 removed for receiving multiple unfairness flags",
                    topic="admin_alerts",
                    data={
                        "postId": "p1",
                        "reasons": "unfair",
                        "action": "review_required",
                    },
                ),
            ]
        )

    def test_both_reasons_are_joined(self) -> None:
        after = dict(self.post, inappropriateCount=3)

        self.service.handle_post_update("p1", {}, after)

        user_call = self.notifier.send.call_args_list[0]
        self.assertEqual(user_call[1]["data"]["reasons"], "unfair,inappropriate")
        self.assertIn("both unfair and inappropriate", user_call[0][1])

    def test_already_removed_post_is_skipped(self) -> None:
        after = dict(self.post, removedAt="2026-01-01")

        self.assertEqual(self.service.handle_post_update("p1", {}, after), [])
        self.assertNotIn("removedAt", self.post_data())
        self.notifier.send.assert_not_called()

    def test_no_crossing_changes_nothing(self) -> None:
        after = dict(self.post, unfairness=7)

        self.assertEqual(
            self.service.handle_post_update("p1", {"unfairness": 6}, after), []
        )
        self.assertNotIn("removedAt", self.post_data())
        self.notifier.send.assert_not_called()

    def test_poster_without_token_still_alerts_admins(self) -> None:
        self.mock_db.collection("users").document("poster1").set({"username": "x"})

        self.service.handle_post_update("p1", {}, self.post)

        self.assertEqual(self.post_data()["removedAt"], "SERVER_TIMESTAMP")
        self.notifier.send.assert_called_once()
        self.assertEqual(self.notifier.send.call_args[1]["topic"], "admin_alerts")

    def test_missing_poster_still_alerts_admins(self) -> None:
        after = dict(self.post, poster="nobody")

        self.service.handle_post_update("p1", {}, after)

        self.assertEqual(self.post_data()["removedAt"], "SERVER_TIMESTAMP")
        self.notifier.send.assert_called_once_with(
            "Post Removed",
            "Post p1 removed for receiving multiple unfairness flags",
            topic="admin_alerts",
            data={"postId": "p1", "reasons": "unfair", "action": "review_required"},
        )


if __name__ == "__main__":
    unittest.main()
