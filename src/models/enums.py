# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for RBAC models."""

from enum import Enum


class RoleScope(str, Enum):
    """Where a role applies.

    ORG roles are assigned without a site and apply organization-wide.
    SITE roles are always assigned together with one site of the organization.
    """

    ORG = "ORG"
    SITE = "SITE"


class RoleType(str, Enum):
    """Role origin enumeration."""

    SYSTEM = "SYSTEM"  # Provisioned by the platform, immutable
    CUSTOM = "CUSTOM"  # Created and edited by organization administrators


class RiskLevel(str, Enum):
    """Risk classification of a capability."""

    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"
