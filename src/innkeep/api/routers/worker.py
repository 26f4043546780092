"""Worker routes (APP_ROLE=worker)."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/tasks/health")
def tasks_health(request: Request) -> dict:
    """Tasks subsystem health check, including the auto-checkout scheduler."""
    scheduler = getattr(request.app.state, "auto_checkout", None)
    return {
        "status": "ok",
        "subsystem": "tasks",
        "autoCheckoutRunning": bool(scheduler and scheduler.running),
    }
