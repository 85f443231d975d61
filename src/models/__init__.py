# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.base import Base, TimestampMixin
from src.models.enums import RiskLevel, RoleScope, RoleType
from src.models.org_policy import OrgPolicy
from src.models.role import Role
from src.models.role_assignment import UserRoleAssignment
from src.models.role_capability import RoleCapability
from src.models.site import Site

__all__ = [
    "Base",
    "OrgPolicy",
    "RiskLevel",
    "Role",
    "RoleCapability",
    "RoleScope",
    "RoleType",
    "Site",
    "TimestampMixin",
    "UserRoleAssignment",
]
