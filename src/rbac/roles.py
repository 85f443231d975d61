# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""System roles provisioned for every organization."""

from src.models.enums import RoleScope

from .capabilities import CAPABILITIES

# Org Owner always gets every capability
ORG_OWNER_CAPABILITIES = [c.key for c in CAPABILITIES]

# Org Admin gets everything except billing and role management
ORG_ADMIN_CAPABILITIES = [
    c.key
    for c in CAPABILITIES
    if c.module != "billing" and c.key != "org.roles.manage"
]

# All of these are SYSTEM roles: immutable once provisioned.
# Organizations build anything else as CUSTOM roles.
SYSTEM_ROLES = [
    {
        "name": "Org Owner",
        "scope": RoleScope.ORG,
        "description": "Full access to organization including billing and role management.",
        "capabilities": ORG_OWNER_CAPABILITIES,
    },
    {
        "name": "Org Admin",
        "scope": RoleScope.ORG,
        "description": "Full technical access except billing and role management.",
        "capabilities": ORG_ADMIN_CAPABILITIES,
    },
    {
        "name": "Org Member",
        "scope": RoleScope.ORG,
        "description": "Basic organization member with minimal permissions.",
        "capabilities": ["org.view_dashboard", "sites.view"],
    },
    {
        "name": "Site Admin",
        "scope": RoleScope.SITE,
        "description": "Full access to site builder, content, and site settings.",
        "capabilities": [
            "builder.view",
            "builder.edit",
            "builder.draft.save",
            "builder.publish",
            "builder.rollback",
            "builder.history.view",
            "builder.assets.upload",
            "builder.assets.delete",
            "builder.custom_code",
            "builder.site_roles.manage",
            "content.view",
            "content.create",
            "content.edit",
            "content.delete",
            "content.publish",
            "content.media.manage",
            "sites.settings.view",
            "sites.settings.manage",
            "marketing.view",
            "marketing.content.edit",
            "marketing.publish",
            "marketing.campaign.manage",
            "marketing.stats.view",
        ],
    },
    {
        "name": "Editor-in-Chief",
        "scope": RoleScope.SITE,
        "description": "Can edit, save drafts, publish, and rollback.",
        "capabilities": [
            "builder.view",
            "builder.edit",
            "builder.draft.save",
            "builder.publish",
            "builder.rollback",
            "builder.history.view",
            "content.view",
            "content.create",
            "content.edit",
            "content.publish",
            "content.media.manage",
        ],
    },
    {
        "name": "Editor",
        "scope": RoleScope.SITE,
        "description": "Can edit and save drafts, but cannot publish.",
        "capabilities": [
            "builder.view",
            "builder.edit",
            "builder.draft.save",
            "builder.history.view",
            "content.view",
            "content.create",
            "content.edit",
            "content.media.manage",
        ],
    },
    {
        "name": "Publisher",
        "scope": RoleScope.SITE,
        "description": "Can publish and rollback, but cannot edit.",
        "capabilities": [
            "builder.view",
            "builder.publish",
            "builder.rollback",
            "builder.history.view",
            "content.view",
            "content.publish",
        ],
    },
    {
        "name": "Viewer",
        "scope": RoleScope.SITE,
        "description": "Read-only access to builder, content, and analytics.",
        "capabilities": ["builder.view", "content.view", "analytics.view"],
    },
    {
        "name": "Marketing Manager",
        "scope": RoleScope.SITE,
        "description": "Full marketing access including campaigns and ads.",
        "capabilities": [
            "marketing.view",
            "marketing.content.edit",
            "marketing.publish",
            "marketing.campaign.manage",
            "marketing.stats.view",
            "marketing.schedule",
            "marketing.ads.manage",
        ],
    },
    {
        "name": "Marketing Editor",
        "scope": RoleScope.SITE,
        "description": "Can edit marketing content.",
        "capabilities": ["marketing.view", "marketing.content.edit"],
    },
    {
        "name": "Marketing Publisher",
        "scope": RoleScope.SITE,
        "description": "Can publish marketing content.",
        "capabilities": ["marketing.view", "marketing.publish"],
    },
    {
        "name": "Marketing Viewer",
        "scope": RoleScope.SITE,
        "description": "Read-only access to marketing.",
        "capabilities": ["marketing.view", "marketing.stats.view"],
    },
]
