# erp_client/errors.py
from __future__ import annotations

from typing import Any, Optional


# Domain-level error the controllers surface directly (toast/message box)
class DomainError(Exception):
    pass


class ApiError(Exception):
    """
    Any failed backend call: transport error or non-2xx response.

    `message` is already user-presentable; `status` is None for transport
    failures; `payload` holds the decoded error body when there was one.
    """

    def __init__(self, message: str, status: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def not_found(self) -> bool:
        return self.status == 404
