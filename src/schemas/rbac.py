# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""RBAC request and response schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import RiskLevel, RoleScope, RoleType


class CapabilitySchema(BaseModel):
    """Schema representing a registry capability and its org policy state."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    module: str
    label: str
    description: str | None
    risk_level: RiskLevel
    is_dangerous: bool
    can_be_policy_controlled: bool
    blocked_for_custom_roles: bool
    policy_enabled: bool = True


class RoleSchema(BaseModel):
    """Schema representing a role with its granted capability keys."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    name: str
    description: str | None
    scope: RoleScope
    type: RoleType
    capability_keys: list[str]
    created_at: datetime
    updated_at: datetime


class RoleCreateSchema(BaseModel):
    """Schema for creating a new custom role."""

    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    scope: RoleScope
    capability_keys: list[str] = []


class RoleUpdateSchema(BaseModel):
    """Schema for updating a custom role."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    capability_keys: list[str] | None = None


class AssignmentRoleSchema(BaseModel):
    """Compact role summary embedded in an assignment."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    scope: RoleScope
    type: RoleType


class AssignmentSchema(BaseModel):
    """Schema representing a role assignment."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    organization_id: uuid.UUID
    user_id: uuid.UUID
    role_id: uuid.UUID
    site_id: uuid.UUID | None
    assigned_by_id: uuid.UUID | None
    assigned_at: datetime
    role: AssignmentRoleSchema


class AssignmentCreateSchema(BaseModel):
    """Schema for assigning a role to a user."""

    user_id: uuid.UUID
    role_id: uuid.UUID
    site_id: uuid.UUID | None = None


class PolicyUpdateSchema(BaseModel):
    """Schema for toggling an organization policy."""

    enabled: bool


class PolicySchema(BaseModel):
    """Schema representing a persisted policy row."""

    model_config = ConfigDict(from_attributes=True)

    capability_key: str
    enabled: bool
    updated_by_id: uuid.UUID | None
    updated_at: datetime


class EffectivePermissionSchema(BaseModel):
    """Resolved decision for one capability."""

    model_config = ConfigDict(from_attributes=True)

    allowed: bool
    policy_enabled: bool
    reason: str
    role_sources: list[str]
