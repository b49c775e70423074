# core/permissions.py
"""
Project-scoped authorization checks.

The ``is_*`` functions are read-only decisions against the store. The
``require_project_*`` dependencies wrap them for routes that carry a
``project_id`` path parameter and turn a denial into the matching error:
no user -> 401, unknown project -> 404, missing capability -> 403.
"""
from typing import Callable, Optional

from fastapi import Depends
from sqlmodel import Session, select

from core.database import get_session
from core.errors import Forbidden, ProjectNotFound, Unauthenticated
from core.security import get_optional_user
from models.models import MemberRole, MemberStatus, Project, ProjectMember, User


def get_project_or_404(session: Session, project_id: str) -> Project:
    project = session.get(Project, project_id)
    if not project:
        raise ProjectNotFound()
    return project


def _active_membership(session: Session, user_id: str, project_id: str) -> Optional[ProjectMember]:
    return session.exec(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.user_id == user_id,
            ProjectMember.member_status == MemberStatus.ACTIVE.value,
        )
    ).first()


def is_owner(session: Session, user_id: str, project_id: str) -> bool:
    project = get_project_or_404(session, project_id)
    return project.owner_id == user_id


def is_member_or_owner(session: Session, user_id: str, project_id: str) -> bool:
    if is_owner(session, user_id, project_id):
        return True
    return _active_membership(session, user_id, project_id) is not None


def is_admin_or_owner(session: Session, user_id: str, project_id: str) -> bool:
    if is_owner(session, user_id, project_id):
        return True
    member = _active_membership(session, user_id, project_id)
    return member is not None and member.role == MemberRole.ADMIN.value


# ========================================
# 🛡️ Route dependencies
# ========================================
def _project_guard(check: Callable[[Session, str, str], bool], denial: str):
    def dependency(
        project_id: str,
        user: Optional[User] = Depends(get_optional_user),
        session: Session = Depends(get_session),
    ) -> Project:
        if user is None:
            raise Unauthenticated()
        if not user.is_active:
            raise Forbidden("Account is inactive")
        if not check(session, user.id, project_id):
            raise Forbidden(denial)
        return session.get(Project, project_id)

    return dependency


require_project_owner = _project_guard(is_owner, "Invalid permissions.")
require_project_admin = _project_guard(is_admin_or_owner, "Invalid permissions.")
require_project_member = _project_guard(
    is_member_or_owner, "You do not have permission to access this project."
)
