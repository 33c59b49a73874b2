"""Forward requests to the game-server bridge plugin over HTTP."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from minepanel.core.exceptions import UpstreamUnreachable

if TYPE_CHECKING:
    from minepanel.core.config import Settings

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Panel-Secret"
ACTOR_HEADER = "X-Panel-Actor"


@dataclass
class PluginResponse:
    status_code: int
    data: Any


class PluginClient:
    """Thin async client for the plugin API.

    Only the backend knows the shared secret; every call also names the
    acting panel user so the plugin can log it. Status and JSON body are
    returned as-is for the caller to relay.
    """

    def __init__(
        self,
        base_url: str,
        shared_secret: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={SECRET_HEADER: shared_secret},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PluginClient":
        return cls(
            base_url=settings.PLUGIN_BASE_URL,
            shared_secret=settings.PLUGIN_SHARED_SECRET,
            timeout=settings.PLUGIN_TIMEOUT_SECONDS,
        )

    async def request(
        self,
        method: str,
        path: str,
        actor: str | None = None,
        json: Any = None,
    ) -> PluginResponse:
        headers = {ACTOR_HEADER: actor} if actor else {}
        body = json if method.upper() != "GET" else None
        try:
            response = await self._client.request(method, path, headers=headers, json=body)
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error("Plugin request timed out: %s %s", method, path)
            raise UpstreamUnreachable("Plugin unreachable") from e
        except httpx.HTTPError as e:
            logger.error("Plugin request failed: %s %s: %s", method, path, e)
            raise UpstreamUnreachable("Plugin unreachable") from e
        except ValueError as e:
            logger.error("Plugin returned a non-JSON body: %s %s", method, path)
            raise UpstreamUnreachable("Plugin unreachable") from e
        return PluginResponse(status_code=response.status_code, data=data)

    async def get(self, path: str, actor: str | None = None) -> PluginResponse:
        return await self.request("GET", path, actor=actor)

    async def post(self, path: str, actor: str | None = None, json: Any = None) -> PluginResponse:
        return await self.request("POST", path, actor=actor, json=json)

    async def aclose(self) -> None:
        await self._client.aclose()
