"""
Business (tenant) context.

Every core operation takes an explicit business_id. This module resolves that
id from the URL slug for the HTTP layer and checks dashboard access.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Cookie, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.db import get_session
from ..errors import NotFoundError, UnauthorizedError
from .queries import get_business_by_slug


logger = logging.getLogger(__name__)

DASHBOARD_SESSION_COOKIE = "business_session"


@dataclass(frozen=True)
class BusinessContext:
    """
    Immutable context representing the tenant for a request.

    Attributes:
        business_id: The database ID of the business (businesses.id)
        slug: URL-safe identifier (e.g., "admin-shop")
        name: Human-readable business name
    """

    business_id: int
    slug: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        if self.business_id <= 0:
            raise ValueError(f"business_id must be positive, got {self.business_id}")


async def resolve_business_from_slug(
    session: AsyncSession,
    slug: str,
) -> Optional[BusinessContext]:
    business = await get_business_by_slug(session, slug)
    if not business:
        return None
    return BusinessContext(business_id=business.id, slug=business.slug, name=business.name)


async def get_business_context(
    slug: str,
    session: AsyncSession = Depends(get_session),
) -> BusinessContext:
    """FastAPI dependency: resolve {slug} in the path or raise NotFoundError."""
    ctx = await resolve_business_from_slug(session, slug)
    if ctx is None:
        raise NotFoundError("Business not found", details={"slug": slug})
    return ctx


async def require_dashboard_access(
    ctx: BusinessContext = Depends(get_business_context),
    business_session: Optional[str] = Cookie(default=None),
) -> BusinessContext:
    """
    Dashboard routes need a session cookie naming the same business.

    Issuing the cookie (login) happens outside this service.
    """
    if not business_session:
        raise UnauthorizedError("Dashboard session required")
    if business_session != str(ctx.business_id):
        logger.warning("Dashboard session for business %s used on %s", business_session, ctx.slug)
        raise UnauthorizedError("Session does not belong to this business")
    return ctx
