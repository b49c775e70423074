# services/project_service.py
"""
Multi-row project operations. Each one commits exactly once so a reader never
sees a project without its BASE feature and owner membership, or a half
deleted project.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from core.errors import Conflict
from core.validators import parse_choice, require_text
from models.models import (
    BASE_FEATURE_TITLE,
    Feature,
    MemberRole,
    MemberStatus,
    Project,
    ProjectMember,
    ProjectStatus,
    ProjectType,
    User,
)

logger = logging.getLogger(__name__)

INVALID_PROJECT_TYPE = "Invalid project type. Allowed values are: KANBAN, SCRUM, WATERFALL."


def create_project(
    session: Session,
    owner: User,
    name: Optional[str],
    description: Optional[str] = None,
    project_type: Optional[str] = ProjectType.KANBAN.value,
) -> Project:
    name = require_text(name, "name")
    project_type = parse_choice(ProjectType, project_type or ProjectType.KANBAN.value, INVALID_PROJECT_TYPE)

    duplicate = session.exec(
        select(Project).where(Project.owner_id == owner.id, Project.name == name)
    ).first()
    if duplicate:
        raise Conflict("A project with this name already exists.")

    project = Project(name=name, description=description, project_type=project_type, owner_id=owner.id)
    session.add(project)
    session.flush()

    session.add(Feature(title=BASE_FEATURE_TITLE, description="Default feature", project_id=project.id))
    session.add(
        ProjectMember(
            project_id=project.id,
            user_id=owner.id,
            role=MemberRole.ADMIN.value,
            member_status=MemberStatus.ACTIVE.value,
        )
    )

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("A project with this name already exists.")
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(project)

    logger.info("User %s created project %s (%s)", owner.id, project.id, project.name)
    return project


def purge_project(session: Session, project: Project) -> None:
    """Stage deletion of a project and everything under it. Does not commit."""
    for feature in list(project.features):
        for ticket in list(feature.tickets):
            ticket.assignees.clear()
            session.delete(ticket)
        session.delete(feature)
    for member in list(project.members):
        session.delete(member)
    # Link rows, tickets and members must be gone before their parents
    session.flush()
    session.expire(project)
    session.delete(project)


def delete_project(session: Session, project: Project) -> None:
    if project.status != ProjectStatus.ARCHIVED.value:
        raise Conflict("Project must be archived before deleting")

    project_id = project.id
    try:
        purge_project(session, project)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    logger.info("Deleted project %s", project_id)
