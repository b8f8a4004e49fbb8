from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_flashcards: int
    flashcards_due_today: int
    total_notes: int
    review_streak: int
    weekly_reviews: list[int]  # last 7 days, oldest first
