"""
Multi-tenancy package.

Modules:
    context: BusinessContext resolution and dashboard access checks
    queries: Tenant-scoped query helpers
"""

from .context import (
    DASHBOARD_SESSION_COOKIE,
    BusinessContext,
    get_business_context,
    require_dashboard_access,
    resolve_business_from_slug,
)

from .queries import (
    # Composable helpers
    scoped_select,
    tenant_filter,
    require_owned,
    # Business queries
    get_business_by_slug,
    # Service queries
    get_service_by_id,
    list_active_services,
    # Staff queries
    get_staff_by_id,
    list_active_staff,
    get_time_off_by_id,
    # Booking queries
    get_booking_by_id,
    list_active_bookings,
    list_bookings_on_date,
)

__all__ = [
    # Context
    "DASHBOARD_SESSION_COOKIE",
    "BusinessContext",
    "get_business_context",
    "require_dashboard_access",
    "resolve_business_from_slug",
    # Query helpers
    "scoped_select",
    "tenant_filter",
    "require_owned",
    "get_business_by_slug",
    "get_service_by_id",
    "list_active_services",
    "get_staff_by_id",
    "list_active_staff",
    "get_time_off_by_id",
    "get_booking_by_id",
    "list_active_bookings",
    "list_bookings_on_date",
]
