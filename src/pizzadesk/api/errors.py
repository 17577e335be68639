"""HTTP translation of service errors."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status


def bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def store_unavailable(exc: Exception) -> HTTPException:
    logging.warning(f"Record store unavailable: {exc}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"notices": [{"level": "error", "message": f"Record store unavailable: {exc}"}]},
    )


def unexpected(action: str, exc: Exception) -> HTTPException:
    logging.exception(f"Error while trying to {action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(exc)}",
    )
