"""Core module for the Findr backend."""

from .types import (
    EnteredUser,
    FirestoreDocument,
    PostDocument,
    SweepstakeDocument,
    UserDocument,
)

__all__ = [
    "EnteredUser",
    "FirestoreDocument",
    "PostDocument",
    "SweepstakeDocument",
    "UserDocument",
]
