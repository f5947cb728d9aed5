"""Process-wide cache of the service account used to author generated notes."""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from casenotes.domain.model import UserDetails
    from casenotes.domain.ports.clients import UserDetailsClient

log = getLogger(__name__)

SYSTEM_USERNAME: Final[str] = "PRISONER_MANAGER_API"


class SystemUserCache:
    """Lazily resolves the system user; lookup failures are never fatal.

    Once found, the user is kept and reads take no lock. A failed or empty lookup is
    retried on the next call. Call :meth:`invalidate` to force another lookup.
    """

    def __init__(self, client: UserDetailsClient, *, username: str = SYSTEM_USERNAME) -> None:
        self._client = client
        self._username = username
        self._lock = threading.Lock()
        self._user: UserDetails | None = None

    @property
    def username(self) -> str:
        return self._username

    def get(self) -> UserDetails | None:
        if self._user is not None:
            return self._user
        with self._lock:
            if self._user is None:
                self._user = self._lookup()
            return self._user

    def invalidate(self) -> None:
        with self._lock:
            self._user = None

    def _lookup(self) -> UserDetails | None:
        try:
            return self._client.get_user_details(self._username)
        except Exception:
            log.exception("Unable to resolve system user %s, using defaults", self._username)
            return None
