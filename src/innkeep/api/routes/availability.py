"""Availability endpoint.

GET /availability?room_name=...&start=...&end=...
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Query

from innkeep.domain.availability import compute_availability

router = APIRouter(tags=["availability"])


@router.get("/availability")
def get_availability(
    room_name: str = Query(..., min_length=1, description="Room name"),
    start: datetime = Query(..., description="First night (inclusive); date or instant"),
    end: datetime = Query(..., description="Departure day (exclusive); date or instant"),
) -> dict:
    """Free units of a room for [start, end).

    Only paid confirmed/checked-out stays count as reserved. A room under
    maintenance is reported with no free units.
    """
    return compute_availability(room_name, start, end).to_dict()
