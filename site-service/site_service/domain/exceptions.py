"""
Domain exceptions
"""
from typing import Any, Dict, Optional


class ContentApiError(Exception):
    """
    A content backend call failed.

    status_code is None when no response was received at all.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail or {}

    @property
    def no_response(self) -> bool:
        return self.status_code is None

    @property
    def server_message(self) -> Optional[str]:
        """Message supplied by the backend in the error body, if any"""
        message = self.detail.get("message")
        return message if isinstance(message, str) and message else None
