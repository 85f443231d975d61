# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for assignment_service."""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from src.models import UserRoleAssignment
from src.rbac.errors import (
    AssignmentNotFoundError,
    CrossOrgSiteError,
    RoleNotFoundError,
    ScopeMismatchError,
    SiteNotFoundError,
)
from src.services import assignment_service


def test_assign_org_role(db_session, org_id, system_roles):
    user_id, actor_id = uuid.uuid4(), uuid.uuid4()
    assignment = assignment_service.assign(
        db_session,
        org_id,
        user_id,
        system_roles["Org Admin"].id,
        assigned_by_id=actor_id,
    )
    assert assignment.site_id is None
    assert assignment.assigned_by_id == actor_id
    assert assignment.role.name == "Org Admin"
    assert assignment_service.get_assignment(db_session, assignment.id, org_id) == assignment


def test_assign_site_role(db_session, org_id, site, system_roles):
    assignment = assignment_service.assign(
        db_session, org_id, uuid.uuid4(), system_roles["Editor"].id, site_id=site.id
    )
    assert assignment.site_id == site.id


def test_assign_is_idempotent(db_session, org_id, site, system_roles):
    user_id = uuid.uuid4()
    role_id = system_roles["Editor"].id
    first = assignment_service.assign(db_session, org_id, user_id, role_id, site_id=site.id)
    second = assignment_service.assign(db_session, org_id, user_id, role_id, site_id=site.id)

    assert first.id == second.id
    assert db_session.query(UserRoleAssignment).count() == 1


def test_same_role_on_two_sites_is_two_assignments(
    db_session, org_id, site, second_site, system_roles
):
    user_id = uuid.uuid4()
    role_id = system_roles["Editor"].id
    assignment_service.assign(db_session, org_id, user_id, role_id, site_id=site.id)
    assignment_service.assign(db_session, org_id, user_id, role_id, site_id=second_site.id)
    assert len(assignment_service.list_for_user(db_session, org_id, user_id)) == 2


def test_site_role_requires_site(db_session, org_id, system_roles):
    with pytest.raises(ScopeMismatchError):
        assignment_service.assign(db_session, org_id, uuid.uuid4(), system_roles["Editor"].id)


def test_org_role_rejects_site(db_session, org_id, site, system_roles):
    with pytest.raises(ScopeMismatchError):
        assignment_service.assign(
            db_session, org_id, uuid.uuid4(), system_roles["Org Admin"].id, site_id=site.id
        )


def test_site_from_other_org_rejected(db_session, org_id, foreign_site, system_roles):
    with pytest.raises(CrossOrgSiteError):
        assignment_service.assign(
            db_session,
            org_id,
            uuid.uuid4(),
            system_roles["Editor"].id,
            site_id=foreign_site.id,
        )
    assert db_session.query(UserRoleAssignment).count() == 0


def test_unknown_site_rejected(db_session, org_id, system_roles):
    with pytest.raises(SiteNotFoundError):
        assignment_service.assign(
            db_session, org_id, uuid.uuid4(), system_roles["Editor"].id, site_id=uuid.uuid4()
        )


def test_role_from_other_org_rejected(db_session, org_id, other_org_id, system_roles):
    with pytest.raises(RoleNotFoundError):
        assignment_service.assign(
            db_session, other_org_id, uuid.uuid4(), system_roles["Org Admin"].id
        )


def test_revoke_is_idempotent(db_session, org_id, system_roles):
    assignment = assignment_service.assign(
        db_session, org_id, uuid.uuid4(), system_roles["Org Member"].id
    )
    assignment_id = assignment.id

    assignment_service.revoke(db_session, assignment_id)
    assignment_service.revoke(db_session, assignment_id)
    assignment_service.revoke(db_session, uuid.uuid4())

    with pytest.raises(AssignmentNotFoundError):
        assignment_service.get_assignment(db_session, assignment_id)


def test_get_assignment_in_other_org_is_not_found(
    db_session, org_id, other_org_id, system_roles
):
    assignment = assignment_service.assign(
        db_session, org_id, uuid.uuid4(), system_roles["Org Member"].id
    )
    with pytest.raises(AssignmentNotFoundError):
        assignment_service.get_assignment(db_session, assignment.id, other_org_id)


def test_list_assignments_filters(db_session, org_id, site, second_site, system_roles):
    alice, bob = uuid.uuid4(), uuid.uuid4()
    assignment_service.assign(db_session, org_id, alice, system_roles["Org Member"].id)
    assignment_service.assign(
        db_session, org_id, alice, system_roles["Editor"].id, site_id=site.id
    )
    assignment_service.assign(
        db_session, org_id, bob, system_roles["Viewer"].id, site_id=second_site.id
    )

    assert len(assignment_service.list_assignments(db_session, org_id)) == 3
    assert len(assignment_service.list_assignments(db_session, org_id, user_id=alice)) == 2
    at_site = assignment_service.list_assignments(db_session, org_id, site_id=site.id)
    assert [a.role.name for a in at_site] == ["Editor"]


@pytest.mark.parametrize("use_site", [False, True])
def test_database_rejects_duplicate_tuple(db_session, org_id, site, system_roles, use_site):
    role = system_roles["Editor"] if use_site else system_roles["Org Member"]
    site_id = site.id if use_site else None
    user_id = uuid.uuid4()
    assignment_service.assign(db_session, org_id, user_id, role.id, site_id=site_id)

    db_session.add(
        UserRoleAssignment(
            organization_id=org_id, user_id=user_id, role_id=role.id, site_id=site_id
        )
    )
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_concurrent_assign_returns_existing(db_session, org_id, system_roles, monkeypatch):
    user_id = uuid.uuid4()
    role_id = system_roles["Org Member"].id
    first = assignment_service.assign(db_session, org_id, user_id, role_id)
    first_id = first.id

    # The pre-check misses, as when another worker commits in between
    real_find_existing = assignment_service._find_existing
    calls = []

    def find_after_first_call(*args):
        calls.append(args)
        return None if len(calls) == 1 else real_find_existing(*args)

    monkeypatch.setattr(assignment_service, "_find_existing", find_after_first_call)
    second = assignment_service.assign(db_session, org_id, user_id, role_id)

    assert second.id == first_id
    assert len(calls) == 2
    assert db_session.query(UserRoleAssignment).count() == 1
