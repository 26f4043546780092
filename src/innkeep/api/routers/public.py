"""Public-facing routes (APP_ROLE=public and worker)."""

from fastapi import APIRouter

from ..routes import availability, bookings, dashboard, maintenance, payments, rooms

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


router.include_router(availability.router)
router.include_router(bookings.router)
router.include_router(payments.router)
router.include_router(rooms.router)
router.include_router(dashboard.router)
router.include_router(maintenance.router)
