"""Weighted winner selection for sweepstakes."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import random


def entry_weight(entry: Mapping[str, Any]) -> int:
    """Return the usable entry count of a participant record."""
    count = entry.get("entryCount", 0)
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        return 0
    return count


def build_entry_pool(entered_users: Iterable[Mapping[str, Any]]) -> list[str]:
    """Expand participant records into one user id per entry.

    Participant order is preserved; users without an id are ignored.
    """
    pool: list[str] = []
    for entry in entered_users or []:
        user_id = entry.get("userId")
        if not user_id:
            continue
        pool.extend([user_id] * entry_weight(entry))
    return pool


def draw_winner(
    entered_users: Iterable[Mapping[str, Any]], rng: random.Random
) -> str | None:
    """Draw one winner, each user weighted by their entry count.

    Returns None when nobody holds an entry.
    """
    pool = build_entry_pool(entered_users)
    if not pool:
        return None
    return pool[rng.randrange(len(pool))]


def win_probabilities(entered_users: Iterable[Mapping[str, Any]]) -> dict[str, float]:
    """Exact win probability per user: entryCount / total entries."""
    totals: dict[str, int] = {}
    for user_id in build_entry_pool(entered_users):
        totals[user_id] = totals.get(user_id, 0) + 1

    total_entries = sum(totals.values())
    if not total_entries:
        return {}
    return {user_id: count / total_entries for user_id, count in totals.items()}
