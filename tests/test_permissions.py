import pytest
from sqlmodel import select

from conftest import API, auth
from core.errors import ProjectNotFound
from core.permissions import is_admin_or_owner, is_member_or_owner, is_owner
from models.models import MemberRole, MemberStatus, ProjectMember


def test_owner_passes_every_check_without_member_row(session, make_user, make_project):
    owner = make_user("owner@example.com")
    project = make_project(owner)

    # Drop the creator's ProjectMember row; ownership alone must still grant access
    for member in session.exec(select(ProjectMember).where(ProjectMember.project_id == project.id)).all():
        session.delete(member)
    session.commit()

    assert is_owner(session, owner.id, project.id)
    assert is_member_or_owner(session, owner.id, project.id)
    assert is_admin_or_owner(session, owner.id, project.id)


@pytest.mark.parametrize(
    "role,status,member,admin",
    [
        (MemberRole.MEMBER.value, MemberStatus.ACTIVE.value, True, False),
        (MemberRole.ADMIN.value, MemberStatus.ACTIVE.value, True, True),
        (MemberRole.ADMIN.value, MemberStatus.PENDING.value, False, False),
        (MemberRole.MEMBER.value, MemberStatus.INACTIVE.value, False, False),
    ],
)
def test_member_capabilities_follow_role_and_status(
    session, make_user, make_project, add_member, role, status, member, admin
):
    owner = make_user("owner@example.com")
    other = make_user("other@example.com")
    project = make_project(owner)
    add_member(project, other, role=role, status=status)

    assert not is_owner(session, other.id, project.id)
    assert is_member_or_owner(session, other.id, project.id) is member
    assert is_admin_or_owner(session, other.id, project.id) is admin


def test_unknown_project_raises(session, make_user):
    user = make_user("lost@example.com")
    with pytest.raises(ProjectNotFound):
        is_member_or_owner(session, user.id, "missing-project")


def test_guard_maps_failures_to_status_codes(client, make_user, make_project):
    owner = make_user("owner@example.com")
    stranger = make_user("stranger@example.com")
    project = make_project(owner)

    assert client.get(f"{API}/projects/{project.id}").status_code == 401
    assert client.get(f"{API}/projects/missing", headers=auth(owner)).status_code == 404

    response = client.get(f"{API}/projects/{project.id}", headers=auth(stranger))
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this project."

    assert client.get(f"{API}/projects/{project.id}", headers=auth(owner)).status_code == 200


def test_inactive_account_is_rejected(client, make_user, make_project):
    owner = make_user("owner@example.com")
    project = make_project(owner)
    dormant = make_user("dormant@example.com", active=False)

    response = client.get(f"{API}/projects/{project.id}", headers=auth(dormant))
    assert response.status_code == 403
