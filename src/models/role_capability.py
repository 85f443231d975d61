# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Association between roles and the capability keys they grant."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base

if TYPE_CHECKING:
    from src.models.role import Role


class RoleCapability(Base):
    """Capability key granted by a role.

    Keys reference the in-process capability registry, not a table.
    """

    __tablename__ = "role_capabilities"

    role_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    capability_key: Mapped[str] = mapped_column(String(100), primary_key=True)

    role: Mapped[Role] = relationship("Role", back_populates="capabilities")
