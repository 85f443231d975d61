# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for policy_service."""

import uuid

import pytest

from src.rbac import registry
from src.rbac.errors import CapabilityNotFoundError, NotPolicyControlledError
from src.services import policy_service


def test_policies_default_to_enabled(db_session, org_id):
    assert policy_service.get_policies(db_session, org_id) == {
        "builder.rollback": True,
        "marketing.schedule": True,
        "marketing.ads.manage": True,
    }
    assert policy_service.list_policy_rows(db_session, org_id) == []


def test_set_policy_creates_then_updates_row(db_session, org_id):
    actor = uuid.uuid4()
    policy = policy_service.set_policy(
        db_session, org_id, "builder.rollback", False, actor_id=actor
    )
    assert policy.enabled is False
    assert policy.updated_by_id == actor
    assert policy_service.get_policies(db_session, org_id)["builder.rollback"] is False

    again = policy_service.set_policy(db_session, org_id, "builder.rollback", True)
    assert again.id == policy.id
    assert policy_service.get_policies(db_session, org_id)["builder.rollback"] is True
    assert len(policy_service.list_policy_rows(db_session, org_id)) == 1


def test_policies_are_per_organization(db_session, org_id, other_org_id):
    policy_service.set_policy(db_session, org_id, "marketing.ads.manage", False)
    assert policy_service.get_policies(db_session, other_org_id)["marketing.ads.manage"] is True


@pytest.mark.parametrize(
    "key", [c.key for c in registry.get_all() if not c.can_be_policy_controlled]
)
@pytest.mark.parametrize("enabled", [False, True])
def test_set_policy_rejects_uncontrolled_capability(db_session, org_id, key, enabled):
    with pytest.raises(NotPolicyControlledError) as exc_info:
        policy_service.set_policy(db_session, org_id, key, enabled)
    assert exc_info.value.key == key
    assert policy_service.list_policy_rows(db_session, org_id) == []


def test_set_policy_rejects_unknown_capability(db_session, org_id):
    with pytest.raises(CapabilityNotFoundError):
        policy_service.set_policy(db_session, org_id, "builder.teleport", False)


def test_with_defaults_ignores_uncontrolled_rows():
    assert policy_service.with_defaults(
        {"builder.rollback": False, "content.view": False}
    ) == {
        "builder.rollback": False,
        "marketing.schedule": True,
        "marketing.ads.manage": True,
    }
