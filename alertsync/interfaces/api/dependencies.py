"""FastAPI dependency utilities."""

from fastapi import HTTPException, Request, status

from alertsync.application.session import NotificationSession


def get_session(request: Request) -> NotificationSession:
    """Return the notification session owned by the running application."""

    runtime = getattr(request.app.state, "notification_runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification engine not initialized",
        )
    return runtime.session
