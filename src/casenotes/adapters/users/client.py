"""HTTP client for the manage users API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from casenotes.adapters.http_resilience import ResilientClient, raise_unless_found
from casenotes.config.apis import get_manage_users_api_config
from casenotes.domain.model import UserDetails

from .schema import UserDetailsPayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from casenotes.config.http_resilience import ResilienceConfig
    from casenotes.domain.ports.clients import UserDetailsClient


def _default_resilience_config() -> ResilienceConfig:
    return get_manage_users_api_config().resilience


def parse_user_details(payload: UserDetailsPayload) -> UserDetails:
    return UserDetails(
        username=payload.username,
        active=payload.active,
        name=payload.name,
        auth_source=payload.auth_source,
        user_id=payload.user_id,
        active_case_load_id=payload.active_case_load_id,
        uuid=payload.uuid,
    )


@dataclass(slots=True)
class ManageUsersClient:
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(default=ResilientClient)

    def get_user_details(self, username: str) -> UserDetails | None:
        return asyncio.run(self._get_user_details_async(username))

    async def _get_user_details_async(self, username: str) -> UserDetails | None:
        async with self.client_factory(self.resilience) as client:
            response = await client.get(f"/users/{username}")
        if not raise_unless_found(response):
            return None
        return parse_user_details(UserDetailsPayload.model_validate(response.json()))


if TYPE_CHECKING:
    _client_check: UserDetailsClient = ManageUsersClient()
