# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from src.api.v1 import rbac

api_router = APIRouter()

# RBAC routes (nested under organizations)
api_router.include_router(rbac.router)
