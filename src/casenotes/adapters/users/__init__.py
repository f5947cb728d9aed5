"""Public interface for the manage users adapter."""

from __future__ import annotations

from .client import ManageUsersClient, parse_user_details
from .schema import UserDetailsPayload

__all__ = ["ManageUsersClient", "UserDetailsPayload", "parse_user_details"]
