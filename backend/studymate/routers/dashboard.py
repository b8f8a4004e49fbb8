import aiosqlite
from fastapi import APIRouter, Depends

from studymate.db.sqlite import get_db, utcnow
from studymate.models.dashboard import DashboardStats
from studymate.services.stats import get_dashboard_stats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def stats(db: aiosqlite.Connection = Depends(get_db)):
    """Totals, due count, review streak and last-7-day review counts."""
    return await get_dashboard_stats(db, utcnow())
