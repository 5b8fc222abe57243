"""
State layer: the shared ResourceStore, the LoaderCoordinator that fills it,
and the adapters that canonicalize backend payloads on the way in.
"""

from .store import ResourceState, ResourceStore, StoreAction
from .loader import LoaderCoordinator, normalize_response

__all__ = [
    "ResourceState",
    "ResourceStore",
    "StoreAction",
    "LoaderCoordinator",
    "normalize_response",
]
