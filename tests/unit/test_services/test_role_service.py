# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for role_service."""

import uuid

import pytest

from src.models import Role, RoleScope, RoleType
from src.rbac.errors import (
    BlockedCapabilityError,
    DuplicateRoleError,
    ImmutableRoleError,
    InvalidCapabilityError,
    RoleInUseError,
    RoleNotFoundError,
)
from src.services import assignment_service, role_service


def _custom_role(db_session, org_id, name="Reviewer", scope=RoleScope.ORG, keys=None):
    return role_service.create_role(
        db_session,
        org_id,
        name=name,
        scope=scope,
        role_type=RoleType.CUSTOM,
        capability_keys=keys if keys is not None else ["content.view", "content.edit"],
    )


def test_create_and_get_role(db_session, org_id):
    role = _custom_role(db_session, org_id, keys=["content.edit", "content.view", "content.view"])

    assert role.id is not None
    assert role.type == RoleType.CUSTOM
    assert role.capability_keys == ["content.edit", "content.view"]
    assert role_service.get_role(db_session, role.id) == role
    assert role_service.get_role(db_session, role.id, org_id) == role


def test_get_role_in_other_org_is_not_found(db_session, org_id, other_org_id):
    role = _custom_role(db_session, org_id)
    with pytest.raises(RoleNotFoundError):
        role_service.get_role(db_session, role.id, other_org_id)
    with pytest.raises(RoleNotFoundError):
        role_service.get_role(db_session, uuid.uuid4())


def test_create_role_rejects_unknown_keys(db_session, org_id):
    with pytest.raises(InvalidCapabilityError) as exc_info:
        _custom_role(db_session, org_id, keys=["content.view", "content.teleport"])
    assert exc_info.value.keys == ["content.teleport"]
    assert db_session.query(Role).count() == 0


def test_custom_role_rejects_blocked_keys(db_session, org_id):
    with pytest.raises(BlockedCapabilityError) as exc_info:
        _custom_role(
            db_session, org_id, keys=["content.view", "billing.change_plan"]
        )
    assert exc_info.value.keys == ["billing.change_plan"]
    assert db_session.query(Role).count() == 0


def test_system_role_may_hold_blocked_keys(db_session, org_id):
    role = role_service.create_role(
        db_session,
        org_id,
        name="Billing Owner",
        scope=RoleScope.ORG,
        role_type=RoleType.SYSTEM,
        capability_keys=["billing.change_plan", "org.roles.manage"],
    )
    assert role.capability_keys == ["billing.change_plan", "org.roles.manage"]


def test_duplicate_name_in_same_scope_rejected(db_session, org_id):
    _custom_role(db_session, org_id, name="Reviewer")
    with pytest.raises(DuplicateRoleError):
        _custom_role(db_session, org_id, name="Reviewer")


def test_same_name_allowed_across_scopes_and_orgs(db_session, org_id, other_org_id):
    _custom_role(db_session, org_id, name="Reviewer", scope=RoleScope.ORG)
    _custom_role(db_session, org_id, name="Reviewer", scope=RoleScope.SITE)
    _custom_role(db_session, other_org_id, name="Reviewer", scope=RoleScope.ORG)
    assert db_session.query(Role).count() == 3


def test_list_roles_orders_system_first(db_session, org_id, system_roles):
    _custom_role(db_session, org_id, name="AAA Custom")

    roles = role_service.list_roles(db_session, org_id)
    assert len(roles) == len(system_roles) + 1
    assert roles[-1].name == "AAA Custom"
    assert all(r.type == RoleType.SYSTEM for r in roles[:-1])

    site_roles = role_service.list_roles(db_session, org_id, RoleScope.SITE)
    assert site_roles
    assert all(r.scope == RoleScope.SITE for r in site_roles)


def test_update_role_capabilities_replaces_set(db_session, org_id):
    role = _custom_role(db_session, org_id)
    updated = role_service.update_role_capabilities(
        db_session, role.id, ["content.view", "content.publish"]
    )
    assert updated.capability_keys == ["content.publish", "content.view"]


def test_update_role_name_and_description(db_session, org_id):
    role = _custom_role(db_session, org_id)
    updated = role_service.update_role(
        db_session, role.id, name="Senior Reviewer", description="Reviews things"
    )
    assert updated.name == "Senior Reviewer"
    assert updated.description == "Reviews things"
    assert updated.capability_keys == ["content.edit", "content.view"]


def test_update_rejects_blocked_keys_without_changes(db_session, org_id):
    role = _custom_role(db_session, org_id)
    with pytest.raises(BlockedCapabilityError):
        role_service.update_role_capabilities(
            db_session, role.id, ["content.view", "org.policies.manage"]
        )
    db_session.refresh(role)
    assert role.capability_keys == ["content.edit", "content.view"]


def test_update_rejects_duplicate_name(db_session, org_id):
    _custom_role(db_session, org_id, name="Reviewer")
    other = _custom_role(db_session, org_id, name="Writer")
    with pytest.raises(DuplicateRoleError):
        role_service.update_role(db_session, other.id, name="Reviewer")


def test_system_role_is_immutable(db_session, org_id, system_roles):
    viewer = system_roles["Viewer"]
    with pytest.raises(ImmutableRoleError):
        role_service.update_role_capabilities(db_session, viewer.id, ["content.view"])
    with pytest.raises(ImmutableRoleError):
        role_service.delete_role(db_session, viewer.id)
    db_session.refresh(viewer)
    assert viewer.capability_keys == ["analytics.view", "builder.view", "content.view"]


def test_delete_unassigned_role(db_session, org_id):
    role = _custom_role(db_session, org_id)
    role_service.delete_role(db_session, role.id, org_id)
    with pytest.raises(RoleNotFoundError):
        role_service.get_role(db_session, role.id)


def test_delete_role_in_use_rejected(db_session, org_id):
    role = _custom_role(db_session, org_id)
    assignment_service.assign(db_session, org_id, uuid.uuid4(), role.id)

    with pytest.raises(RoleInUseError) as exc_info:
        role_service.delete_role(db_session, role.id)
    assert exc_info.value.assignment_count == 1
    assert role_service.count_assignments(db_session, role.id) == 1


def test_custom_role_cannot_manage_roles(db_session, org_id):
    with pytest.raises(BlockedCapabilityError) as exc_info:
        _custom_role(
            db_session,
            org_id,
            name="Custom Auditor",
            scope=RoleScope.SITE,
            keys=["org.roles.manage"],
        )
    assert exc_info.value.keys == ["org.roles.manage"]


def test_concurrent_duplicate_create_is_duplicate_error(db_session, org_id, monkeypatch):
    _custom_role(db_session, org_id, name="Reviewer")

    # The pre-check misses, as when another worker commits in between
    real_find_by_name = role_service._find_by_name
    calls = []

    def find_after_first_call(*args):
        calls.append(args)
        return None if len(calls) == 1 else real_find_by_name(*args)

    monkeypatch.setattr(role_service, "_find_by_name", find_after_first_call)
    with pytest.raises(DuplicateRoleError):
        _custom_role(db_session, org_id, name="Reviewer")

    assert len(calls) == 2
    assert db_session.query(Role).count() == 1
