from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import aiosqlite

from studymate.db.sqlite import (
    count_flashcards,
    count_notes,
    recent_review_times,
)
from studymate.models.dashboard import DashboardStats

RECENT_REVIEWS = 30
WEEK_DAYS = 7


def review_streak(review_days: list[date], today: date) -> int:
    """Consecutive days ending today with at least one review."""
    days = set(review_days)
    if today not in days:
        return 0
    streak = 0
    day = today
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def weekly_reviews(review_days: list[date], today: date) -> list[int]:
    """Review counts for the last seven days, oldest first, today last."""
    return [
        review_days.count(today - timedelta(days=offset))
        for offset in range(WEEK_DAYS - 1, -1, -1)
    ]


async def get_dashboard_stats(db: aiosqlite.Connection, now: datetime) -> DashboardStats:
    times = await recent_review_times(db, limit=RECENT_REVIEWS)
    review_days = [t.astimezone(timezone.utc).date() for t in times]
    today = now.astimezone(timezone.utc).date()
    return DashboardStats(
        total_flashcards=await count_flashcards(db),
        flashcards_due_today=await count_flashcards(db, due_before=now),
        total_notes=await count_notes(db),
        review_streak=review_streak(review_days, today),
        weekly_reviews=weekly_reviews(review_days, today),
    )
