# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role model."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import Enum, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin
from src.models.enums import RoleScope, RoleType

if TYPE_CHECKING:
    from src.models.role_assignment import UserRoleAssignment
    from src.models.role_capability import RoleCapability


class Role(Base, TimestampMixin):
    """A named bundle of capabilities owned by one organization."""

    __tablename__ = "roles"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    organization_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Fixed at creation
    scope: Mapped[RoleScope] = mapped_column(Enum(RoleScope), nullable=False)
    type: Mapped[RoleType] = mapped_column(Enum(RoleType), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "name", "scope", name="_role_org_name_scope_uc"
        ),
    )

    capabilities: Mapped[list[RoleCapability]] = relationship(
        "RoleCapability",
        back_populates="role",
        cascade="all, delete-orphan",
        order_by="RoleCapability.capability_key",
    )
    # No cascade: a role with assignments cannot be deleted
    assignments: Mapped[list[UserRoleAssignment]] = relationship(
        "UserRoleAssignment",
        back_populates="role",
    )

    @property
    def is_system(self) -> bool:
        """Return True for platform-provisioned roles."""
        return self.type == RoleType.SYSTEM

    @property
    def capability_keys(self) -> list[str]:
        """Sorted capability keys granted by this role."""
        return sorted(rc.capability_key for rc in self.capabilities)
