"""
Backend access: the async HTTP client, the business-key resolver and the
per-collection endpoint table.
"""

from .client import ApiClient, ApiError, DomainError
from .resolver import (
    FOUND_BY_ID,
    FOUND_BY_NUMBER,
    NOT_FOUND,
    BusinessKeyRoutes,
    Resolution,
    delete_by_number,
    update_by_number,
)
from .resources import ID_COLLECTIONS, NUMBERED_ROUTES, ResourceApi, build_resource_apis

__all__ = [
    "ApiClient",
    "ApiError",
    "DomainError",
    "FOUND_BY_ID",
    "FOUND_BY_NUMBER",
    "NOT_FOUND",
    "BusinessKeyRoutes",
    "Resolution",
    "delete_by_number",
    "update_by_number",
    "ID_COLLECTIONS",
    "NUMBERED_ROUTES",
    "ResourceApi",
    "build_resource_apis",
]
