# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Organization-level capability toggle."""

import uuid as uuid_lib

from sqlalchemy import Boolean, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin


class OrgPolicy(Base, TimestampMixin):
    """Enable/disable switch for a policy-controllable capability.

    A missing row means the capability is enabled. A disabled policy only
    ever removes access; it never grants a capability on its own.
    """

    __tablename__ = "org_policies"

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
    capability_key: Mapped[str] = mapped_column(String(100), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    updated_by_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "capability_key", name="_org_policy_key_uc"
        ),
    )
