"""
V1 API router aggregator. Wires all endpoint modules together.
"""

from fastapi import APIRouter

from minepanel.api.v1.endpoints import audit, auth, mc, users

api_router = APIRouter()

# Login, refresh, logout
api_router.include_router(auth.router)

# Account management
api_router.include_router(users.router)

# Audit trail
api_router.include_router(audit.router)

# Game-server proxy
api_router.include_router(mc.router)
