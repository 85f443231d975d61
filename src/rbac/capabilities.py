# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Capability catalog.

Every action the platform gates is listed here. Keys follow the
``{module}.{action}`` format (e.g. ``builder.publish``). The catalog is
frozen at import time; there is no runtime registration.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from src.models.enums import RiskLevel


@dataclass(frozen=True)
class CapabilityDefinition:
    """Describes one capability in the registry."""

    key: str
    module: str
    label: str
    risk_level: RiskLevel
    description: str | None = None
    # UI warning only, never consulted by the resolver
    is_dangerous: bool = False
    can_be_policy_controlled: bool = False
    blocked_for_custom_roles: bool = False


LOW, MED, HIGH = RiskLevel.LOW, RiskLevel.MED, RiskLevel.HIGH

CAPABILITIES: tuple[CapabilityDefinition, ...] = (
    # Organization -------------------------------------------------------
    CapabilityDefinition(
        key="org.view_dashboard", module="org", label="View Organization Dashboard",
        description="View organization dashboard and overview", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="org.users.view", module="org", label="View Users",
        description="View organization users list", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="org.users.invite", module="org", label="Invite Users",
        description="Invite new users to organization", risk_level=MED,
    ),
    CapabilityDefinition(
        key="org.users.remove", module="org", label="Remove Users",
        description="Remove users from organization", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="org.roles.view", module="org", label="View Roles",
        description="View organization roles and permissions", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="org.roles.manage", module="org", label="Manage Roles",
        description="Create, edit, and delete custom roles", risk_level=HIGH,
        is_dangerous=True, blocked_for_custom_roles=True,
    ),
    CapabilityDefinition(
        key="org.policies.view", module="org", label="View Policies",
        description="View organization policies (capability toggles)",
        risk_level=LOW,
    ),
    CapabilityDefinition(
        key="org.policies.manage", module="org", label="Manage Policies",
        description="Enable/disable capabilities via organization policies",
        risk_level=HIGH, is_dangerous=True, blocked_for_custom_roles=True,
    ),
    # Billing (system roles only) ----------------------------------------
    CapabilityDefinition(
        key="billing.view_plan", module="billing", label="View Plan",
        description="View current subscription plan", risk_level=LOW,
        blocked_for_custom_roles=True,
    ),
    CapabilityDefinition(
        key="billing.change_plan", module="billing", label="Change Plan",
        description="Change subscription plan", risk_level=HIGH,
        is_dangerous=True, blocked_for_custom_roles=True,
    ),
    CapabilityDefinition(
        key="billing.view_invoices", module="billing", label="View Invoices",
        description="View billing invoices", risk_level=LOW,
        blocked_for_custom_roles=True,
    ),
    CapabilityDefinition(
        key="billing.manage_payment_methods", module="billing",
        label="Manage Payment Methods",
        description="Add, update, or remove payment methods", risk_level=MED,
        blocked_for_custom_roles=True,
    ),
    # Sites --------------------------------------------------------------
    CapabilityDefinition(
        key="sites.view", module="sites", label="View Sites",
        description="View list of sites in organization", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="sites.create", module="sites", label="Create Sites",
        description="Create new sites", risk_level=MED,
    ),
    CapabilityDefinition(
        key="sites.delete", module="sites", label="Delete Sites",
        description="Delete sites", risk_level=HIGH, is_dangerous=True,
    ),
    CapabilityDefinition(
        key="sites.settings.view", module="sites", label="View Site Settings",
        description="View site settings", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="sites.settings.manage", module="sites", label="Manage Site Settings",
        description="Edit site settings", risk_level=MED,
    ),
    # Builder ------------------------------------------------------------
    CapabilityDefinition(
        key="builder.view", module="builder", label="View Builder",
        description="View page builder interface", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="builder.edit", module="builder", label="Edit Builder",
        description="Edit pages in builder", risk_level=MED,
    ),
    CapabilityDefinition(
        key="builder.draft.save", module="builder", label="Save Draft",
        description="Save draft changes", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="builder.publish", module="builder", label="Publish",
        description="Publish pages to production", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="builder.rollback", module="builder", label="Rollback",
        description="Rollback to previous version", risk_level=HIGH,
        is_dangerous=True, can_be_policy_controlled=True,
    ),
    CapabilityDefinition(
        key="builder.history.view", module="builder", label="View History",
        description="View page version history", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="builder.assets.upload", module="builder", label="Upload Assets",
        description="Upload assets to builder", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="builder.assets.delete", module="builder", label="Delete Assets",
        description="Delete builder assets", risk_level=MED,
    ),
    CapabilityDefinition(
        key="builder.custom_code", module="builder", label="Custom Code",
        description="Manage custom code", risk_level=HIGH, is_dangerous=True,
    ),
    CapabilityDefinition(
        key="builder.site_roles.manage", module="builder",
        label="Manage Site Roles", description="Manage roles for a site",
        risk_level=HIGH, is_dangerous=True,
    ),
    # Content ------------------------------------------------------------
    CapabilityDefinition(
        key="content.view", module="content", label="View Content",
        description="View content entries", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="content.create", module="content", label="Create Content",
        description="Create new content entries", risk_level=MED,
    ),
    CapabilityDefinition(
        key="content.edit", module="content", label="Edit Content",
        description="Edit content entries", risk_level=MED,
    ),
    CapabilityDefinition(
        key="content.delete", module="content", label="Delete Content",
        description="Delete content entries", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="content.publish", module="content", label="Publish Content",
        description="Publish content entries", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="content.media.manage", module="content", label="Manage Media",
        description="Upload and delete media files", risk_level=MED,
    ),
    # Hosting ------------------------------------------------------------
    CapabilityDefinition(
        key="hosting.usage.view", module="hosting", label="View Usage",
        description="View hosting usage statistics", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="hosting.deploy", module="hosting", label="Deploy",
        description="Deploy sites to hosting", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="hosting.files.view", module="hosting", label="View Files",
        description="View hosting files", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="hosting.files.edit", module="hosting", label="Edit Files",
        description="Edit hosting files", risk_level=HIGH, is_dangerous=True,
    ),
    CapabilityDefinition(
        key="hosting.logs.view", module="hosting", label="View Logs",
        description="View hosting logs", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="hosting.backups.manage", module="hosting", label="Manage Backups",
        description="Create and restore backups", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="hosting.restart.manage", module="hosting",
        label="Restart Services", description="Restart hosting services",
        risk_level=HIGH, is_dangerous=True,
    ),
    # Domains ------------------------------------------------------------
    CapabilityDefinition(
        key="domains.view", module="domains", label="View Domains",
        description="View domain configurations", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="domains.assign", module="domains", label="Assign Domains",
        description="Assign domains to sites", risk_level=MED,
    ),
    CapabilityDefinition(
        key="domains.dns.manage", module="domains", label="Manage DNS",
        description="Manage DNS records", risk_level=HIGH, is_dangerous=True,
    ),
    CapabilityDefinition(
        key="domains.ssl.manage", module="domains", label="Manage SSL",
        description="Manage SSL certificates", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="domains.add_remove", module="domains", label="Add/Remove Domains",
        description="Add or remove domains", risk_level=HIGH,
        is_dangerous=True,
    ),
    # Marketing ----------------------------------------------------------
    CapabilityDefinition(
        key="marketing.view", module="marketing", label="View Marketing",
        description="View marketing dashboard", risk_level=LOW,
    ),
    CapabilityDefinition(
        key="marketing.content.edit", module="marketing",
        label="Edit Marketing Content", description="Edit marketing content",
        risk_level=MED,
    ),
    CapabilityDefinition(
        key="marketing.schedule", module="marketing", label="Schedule Posts",
        description="Schedule social media posts", risk_level=MED,
        can_be_policy_controlled=True,
    ),
    CapabilityDefinition(
        key="marketing.publish", module="marketing", label="Publish Marketing",
        description="Publish marketing content", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="marketing.campaign.manage", module="marketing",
        label="Manage Campaigns",
        description="Create and manage marketing campaigns", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="marketing.social.connect", module="marketing",
        label="Connect Social Accounts",
        description="Connect social media accounts", risk_level=HIGH,
        is_dangerous=True,
    ),
    CapabilityDefinition(
        key="marketing.ads.manage", module="marketing", label="Manage Ads",
        description="Manage advertising campaigns", risk_level=HIGH,
        is_dangerous=True, can_be_policy_controlled=True,
    ),
    CapabilityDefinition(
        key="marketing.stats.view", module="marketing",
        label="View Marketing Stats", description="View marketing statistics",
        risk_level=LOW,
    ),
    # Analytics ----------------------------------------------------------
    CapabilityDefinition(
        key="analytics.view", module="analytics", label="View Analytics",
        description="View analytics and reports", risk_level=LOW,
    ),
)


def _build_registry(
    definitions: tuple[CapabilityDefinition, ...],
) -> Mapping[str, CapabilityDefinition]:
    registry: dict[str, CapabilityDefinition] = {}
    for definition in definitions:
        if definition.key in registry:
            raise ValueError(f"Duplicate capability key: {definition.key}")
        if not definition.key.startswith(f"{definition.module}."):
            raise ValueError(
                f"Capability {definition.key} is not prefixed by its module "
                f"{definition.module}"
            )
        registry[definition.key] = definition
    return MappingProxyType(registry)


CAPABILITY_REGISTRY: Mapping[str, CapabilityDefinition] = _build_registry(
    CAPABILITIES
)
