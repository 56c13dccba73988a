"""Core data types for the Findr backend."""

from typing import Any, List, Optional, TypedDict  # noqa: UP035


class FirestoreDocument(TypedDict, total=False):
    """Generic Firestore document structure."""

    id: str
    path: str


class EnteredUser(TypedDict):
    """A participant record inside a sweepstake."""

    userId: str
    entryCount: int


class SweepstakeDocument(FirestoreDocument, total=False):
    """Fields of a document in the sweepstakes collection."""

    endDate: Any
    isCompleted: bool
    isProcessing: bool
    processingStartedAt: Any
    completedAt: Any
    enteredUsers: List[EnteredUser]  # noqa: UP006
    winner: Optional[str]
    title: str


class UserDocument(FirestoreDocument, total=False):
    """Fields of a users document read or written by the handlers."""

    username: str
    fcmToken: Optional[str]
    wins: List[str]  # noqa: UP006
    matchedPosts: List[str]  # noqa: UP006
    followingPosts: List[str]  # noqa: UP006


class PostDocument(FirestoreDocument, total=False):
    """Fields of a posts document read or written by the handlers."""

    poster: str
    city: str
    unfairness: int
    inappropriateCount: int
    removedAt: Any
