# routes/projects.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from typing import List
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import desc, or_

from core.database import get_session
from core.permissions import require_project_admin, require_project_member, require_project_owner
from core.security import get_current_user
from core.validators import parse_choice
from models.models import MemberStatus, Project, ProjectMember, ProjectStatus, User
from schemas.project_schema import ProjectCreate, ProjectDescriptionUpdate, ProjectRead, ProjectStatusUpdate
from services.project_service import create_project, delete_project

router = APIRouter(tags=["Projects"])


def _save(session: Session, project: Project) -> ProjectRead:
    project.updated_at = datetime.utcnow()
    session.add(project)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(project)
    return ProjectRead.model_validate(project)


# ==================================================================
#  ✅ Create New Project (with BASE feature + creator as ADMIN)
# ==================================================================
@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create(
    data: ProjectCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    project = create_project(session, current_user, data.name, data.description, data.project_type)
    return ProjectRead.model_validate(project)


# ==================================================================
#  ✅ Get All Projects (owned or joined)
# ==================================================================
@router.get("", response_model=List[ProjectRead])
def get_projects(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    joined = select(ProjectMember.project_id).where(
        ProjectMember.user_id == current_user.id,
        ProjectMember.member_status == MemberStatus.ACTIVE.value,
    )
    projects = session.exec(
        select(Project)
        .where(or_(Project.owner_id == current_user.id, Project.id.in_(joined)))
        .order_by(desc(Project.created_at))
    ).all()
    return [ProjectRead.model_validate(project) for project in projects]


# ==================================================================
#  ✅ Get Single Project
# ==================================================================
@router.get("/{project_id}", response_model=ProjectRead)
def get_project(project: Project = Depends(require_project_member)):
    return ProjectRead.model_validate(project)


# ==================================================================
#  ✅ Update Description (admin or owner)
# ==================================================================
@router.patch("/update-description/{project_id}", response_model=ProjectRead)
def update_description(
    data: ProjectDescriptionUpdate,
    project: Project = Depends(require_project_admin),
    session: Session = Depends(get_session),
):
    project.description = data.description
    return _save(session, project)


# ==================================================================
#  ✅ Update Status (owner only)
# ==================================================================
@router.patch("/update-status/{project_id}", response_model=ProjectRead)
def update_status(
    data: ProjectStatusUpdate,
    project: Project = Depends(require_project_owner),
    session: Session = Depends(get_session),
):
    project.status = parse_choice(
        ProjectStatus, data.status,
        "The status field is required and must be either ACTIVE or ARCHIVED.",
    )
    return _save(session, project)


# ==================================================================
#  ✅ Delete Project (owner only, must be archived)
# ==================================================================
@router.delete("/{project_id}")
def delete(
    project: Project = Depends(require_project_owner),
    session: Session = Depends(get_session),
):
    delete_project(session, project)
    return {"message": "Project deleted successfully"}
