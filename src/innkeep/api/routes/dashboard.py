"""Dashboard endpoints.

GET /dashboard/stats  → headline counts and revenue
GET /dashboard/rooms  → per-room occupancy for tonight
"""

from fastapi import APIRouter, Query

from innkeep.domain.dashboard import dashboard_rooms, dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
def get_dashboard_stats() -> dict:
    return dashboard_stats()


@router.get("/rooms")
def get_dashboard_rooms(
    limit: int | None = Query(None, ge=1, description="Only the newest N rooms"),
) -> list[dict]:
    return dashboard_rooms(limit=limit)
