# routes/project_members.py
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from core.database import get_session
from core.errors import Conflict, MemberNotFound, UserNotFound
from core.permissions import get_project_or_404, require_project_admin, require_project_member
from core.security import get_current_user
from core.validators import parse_choice
from models.models import MemberRole, MemberStatus, Project, ProjectMember, User
from schemas.project_member_schema import (
    ProjectMemberCreate,
    ProjectMemberRead,
    ProjectMemberRoleUpdate,
    ProjectMemberStatusUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Project Members"])

INVALID_ROLE = "Invalid role. Valid roles are: ADMIN, MEMBER"
INVALID_STATUS = "Invalid member status. Valid statuses are: PENDING, ACTIVE, INACTIVE"


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
def _to_read(member: ProjectMember) -> ProjectMemberRead:
    data = ProjectMemberRead.model_validate(member)
    if member.user:
        data.email = member.user.email
        data.name = member.user.name
    return data


def _get_member(session: Session, project: Project, user_id: str) -> ProjectMember:
    member = session.exec(
        select(ProjectMember).where(
            ProjectMember.project_id == project.id,
            ProjectMember.user_id == user_id,
        )
    ).first()
    if not member:
        raise MemberNotFound()
    return member


def _guard_owner_row(project: Project, member: ProjectMember) -> None:
    if member.user_id == project.owner_id:
        raise Conflict("The project owner's membership cannot be changed.")


def _commit(session: Session, member: ProjectMember) -> ProjectMemberRead:
    session.add(member)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(member)
    return _to_read(member)


# ----------------------------------------------------------------------
# ✅ List Members
# ----------------------------------------------------------------------
@router.get("/{project_id}", response_model=List[ProjectMemberRead])
def list_members(
    project: Project = Depends(require_project_member),
    session: Session = Depends(get_session),
):
    members = session.exec(
        select(ProjectMember).where(ProjectMember.project_id == project.id).order_by(ProjectMember.created_at)
    ).all()
    return [_to_read(member) for member in members]


# ----------------------------------------------------------------------
# ✅ Add Member (admin or owner), starts PENDING
# ----------------------------------------------------------------------
@router.post("/{project_id}", response_model=ProjectMemberRead, status_code=status.HTTP_201_CREATED)
def add_member(
    data: ProjectMemberCreate,
    project: Project = Depends(require_project_admin),
    session: Session = Depends(get_session),
):
    role = parse_choice(MemberRole, data.role, INVALID_ROLE)
    if not session.get(User, data.user_id):
        raise UserNotFound()

    existing = session.exec(
        select(ProjectMember).where(
            ProjectMember.project_id == project.id,
            ProjectMember.user_id == data.user_id,
        )
    ).first()
    if existing:
        raise Conflict("User is already a member of the project.")

    member = ProjectMember(project_id=project.id, user_id=data.user_id, role=role)
    session.add(member)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("User is already a member of the project.")
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(member)

    logger.info("User %s invited to project %s as %s", data.user_id, project.id, role)
    return _to_read(member)


# ----------------------------------------------------------------------
# ✅ Accept Invitation (the invited user)
# ----------------------------------------------------------------------
@router.patch("/accept/{project_id}", response_model=ProjectMemberRead)
def accept_membership(
    project_id: str,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    project = get_project_or_404(session, project_id)
    member = _get_member(session, project, current_user.id)
    if member.member_status != MemberStatus.PENDING.value:
        raise Conflict("Membership is not pending.")

    member.member_status = MemberStatus.ACTIVE.value
    return _commit(session, member)


# ----------------------------------------------------------------------
# ✅ Update Role / Status (admin or owner)
# ----------------------------------------------------------------------
@router.patch("/update-role/{project_id}/{user_id}", response_model=ProjectMemberRead)
def update_role(
    user_id: str,
    data: ProjectMemberRoleUpdate,
    project: Project = Depends(require_project_admin),
    session: Session = Depends(get_session),
):
    member = _get_member(session, project, user_id)
    _guard_owner_row(project, member)
    member.role = parse_choice(MemberRole, data.role, INVALID_ROLE)
    return _commit(session, member)


@router.patch("/update-status/{project_id}/{user_id}", response_model=ProjectMemberRead)
def update_status(
    user_id: str,
    data: ProjectMemberStatusUpdate,
    project: Project = Depends(require_project_admin),
    session: Session = Depends(get_session),
):
    member = _get_member(session, project, user_id)
    _guard_owner_row(project, member)
    member.member_status = parse_choice(MemberStatus, data.member_status, INVALID_STATUS)
    return _commit(session, member)


# ----------------------------------------------------------------------
# ✅ Remove Member (admin or owner)
# ----------------------------------------------------------------------
@router.delete("/{project_id}/{user_id}")
def remove_member(
    user_id: str,
    project: Project = Depends(require_project_admin),
    session: Session = Depends(get_session),
):
    member = _get_member(session, project, user_id)
    _guard_owner_row(project, member)

    member.tickets.clear()
    session.delete(member)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    logger.info("User %s removed from project %s", user_id, project.id)
    return {"message": "Project member removed successfully"}
