"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from rpi_camera_bot.services.status import format_memory_usage, format_uptime

if TYPE_CHECKING:
    from rpi_camera_bot.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/status", dependencies=[Depends(require_admin)])
async def bot_status(request: Request) -> dict[str, object]:
    """Return process and capture queue status."""
    container: AppContainer = request.app.state.container
    return {
        "uptime": format_uptime(container.launched),
        "memory_usage": format_memory_usage(),
        "queue_depth": container.capture_queue.depth,
        "queue_capacity": container.capture_queue.capacity,
        "is_in_maintenance": container.config.is_in_maintenance,
    }


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(request: Request) -> dict[str, object]:
    """Return the session of every authorized user."""
    container: AppContainer = request.app.state.container
    return {
        "sessions": [
            {
                "user_id": session.user_id,
                "status": session.status.value,
                "last_update_id": session.last_update_id,
            }
            for session in container.sessions.snapshot()
        ]
    }
