"""
Game-server endpoints, proxied to the bridge plugin.

- GET health / players / player / whitelist require any authenticated user.
- Inventory and ender-chest views require MOD and are audited.
- Whitelist changes and console commands require MOD and are audited
  *before* forwarding; console commands must also pass the command allowlist.

The plugin's status code and JSON body are relayed unchanged.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from minepanel.api.v1.deps import (get_db, get_plugin_client, require_mod,
                                   require_viewer)
from minepanel.core.exceptions import PolicyDenied
from minepanel.schemas.mc import CommandRequest, WhitelistRequest
from minepanel.schemas.token import Identity
from minepanel.services.audit import record_audit
from minepanel.services.command_policy import (build_command_line,
                                               is_command_allowed)
from minepanel.services.plugin_proxy import PluginClient, PluginResponse

router = APIRouter(prefix="/mc", tags=["minecraft"])
logger = logging.getLogger(__name__)


def _relay(result: PluginResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.data)


# ── Read-only (VIEWER) ──────────────────────────────────────────────
@router.get("/health")
async def server_health(
    identity: Identity = Depends(require_viewer),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    return _relay(await plugin.get("/api/health", actor=identity.username))


@router.get("/players")
async def list_players(
    identity: Identity = Depends(require_viewer),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    return _relay(await plugin.get("/api/players", actor=identity.username))


@router.get("/player/{uuid}")
async def get_player(
    uuid: UUID,
    identity: Identity = Depends(require_viewer),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    return _relay(await plugin.get(f"/api/player/{uuid}", actor=identity.username))


@router.get("/whitelist")
async def get_whitelist(
    identity: Identity = Depends(require_viewer),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    return _relay(await plugin.get("/api/whitelist", actor=identity.username))


# ── Sensitive reads (MOD) ───────────────────────────────────────────
@router.get("/player/{uuid}/inventory")
async def get_player_inventory(
    request: Request,
    uuid: UUID,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_mod),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    await record_audit(db, request, "VIEW_INVENTORY", str(uuid))
    return _relay(await plugin.get(f"/api/player/{uuid}/inventory", actor=identity.username))


@router.get("/player/{uuid}/enderchest")
async def get_player_enderchest(
    request: Request,
    uuid: UUID,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_mod),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    await record_audit(db, request, "VIEW_ENDERCHEST", str(uuid))
    return _relay(await plugin.get(f"/api/player/{uuid}/enderchest", actor=identity.username))


# ── Mutations (MOD) ─────────────────────────────────────────────────
@router.post("/whitelist/add")
async def whitelist_add(
    request: Request,
    body: WhitelistRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_mod),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    await record_audit(db, request, "WHITELIST_ADD", body.name)
    result = await plugin.post(
        "/api/whitelist/add", actor=identity.username, json={"name": body.name}
    )
    return _relay(result)


@router.post("/whitelist/remove")
async def whitelist_remove(
    request: Request,
    body: WhitelistRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_mod),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    await record_audit(db, request, "WHITELIST_REMOVE", body.name)
    result = await plugin.post(
        "/api/whitelist/remove", actor=identity.username, json={"name": body.name}
    )
    return _relay(result)


@router.post("/command")
async def run_command(
    request: Request,
    body: CommandRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require_mod),
    plugin: PluginClient = Depends(get_plugin_client),
) -> JSONResponse:
    """Run an allowlisted console command on the server."""
    command_line = build_command_line(body.command, body.args)

    if not is_command_allowed(command_line):
        await record_audit(db, request, "COMMAND_DENIED", details={"command": command_line})
        logger.warning("Command denied for %s: %r", identity.username, command_line)
        raise PolicyDenied(f"Command not allowed: {body.command}")

    # Audited as attempted; the plugin's outcome is not awaited first
    await record_audit(db, request, "COMMAND_EXEC", details={"command": command_line})
    result = await plugin.post(
        "/api/command",
        actor=identity.username,
        json={"command": body.command, "args": body.args},
    )
    return _relay(result)
