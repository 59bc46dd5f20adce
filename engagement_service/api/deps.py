"""FastAPI dependencies for caller identity, clock and database sessions."""

from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from engagement_service.core.clock import Clock, utc_now
from engagement_service.core.db import get_db
from engagement_service.services.engagement_service import EngagementService, parse_user_id
from engagement_service.utils.exceptions import UnauthorizedException

# The API gateway authenticates callers and forwards the id under one of these names
USER_ID_HEADERS = ("user-id", "x-user-id", "userid")


def get_clock() -> Clock:
    """Time source for request handlers; overridden in tests."""
    return utc_now


def get_header_user_id(request: Request) -> int:
    """Read and validate the caller's user id from the gateway headers."""
    raw: Optional[str] = None
    for header in USER_ID_HEADERS:
        raw = request.headers.get(header)
        if raw:
            break

    if not raw:
        raise UnauthorizedException(
            message="User ID is required in headers",
            code="MISSING_USER_ID",
        )
    return parse_user_id(raw, "Invalid User ID format")


def get_engagement_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> EngagementService:
    return EngagementService(db, clock=clock)


# Convenience type aliases
DB = Annotated[AsyncSession, Depends(get_db)]
HeaderUserId = Annotated[int, Depends(get_header_user_id)]
EngagementServiceDep = Annotated[EngagementService, Depends(get_engagement_service)]
