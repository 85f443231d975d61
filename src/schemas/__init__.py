"""Pydantic schemas package."""
from src.schemas.rbac import (
    AssignmentCreateSchema,
    AssignmentSchema,
    CapabilitySchema,
    EffectivePermissionSchema,
    PolicySchema,
    PolicyUpdateSchema,
    RoleCreateSchema,
    RoleSchema,
    RoleUpdateSchema,
)

__all__ = [
    "AssignmentCreateSchema",
    "AssignmentSchema",
    "CapabilitySchema",
    "EffectivePermissionSchema",
    "PolicySchema",
    "PolicyUpdateSchema",
    "RoleCreateSchema",
    "RoleSchema",
    "RoleUpdateSchema",
]
