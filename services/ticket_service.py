# services/ticket_service.py
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.errors import AlreadyAssigned, TicketNotFound, UserNotAMember
from models.models import Feature, MemberStatus, ProjectMember, Ticket

logger = logging.getLogger(__name__)


def get_project_ticket(session: Session, project_id: str, ticket_id: str) -> Ticket:
    """Load a ticket only if its feature belongs to ``project_id``."""
    ticket = session.exec(
        select(Ticket)
        .join(Feature, Ticket.feature_id == Feature.id)
        .where(Ticket.id == ticket_id, Feature.project_id == project_id)
    ).first()
    if not ticket:
        raise TicketNotFound()
    return ticket


def _find_member(session: Session, project_id: str, user_id: str, active_only: bool) -> Optional[ProjectMember]:
    query = select(ProjectMember).where(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id,
    )
    if active_only:
        query = query.where(ProjectMember.member_status == MemberStatus.ACTIVE.value)
    return session.exec(query).first()


def _commit(session: Session, ticket: Ticket) -> Ticket:
    ticket.updated_at = datetime.utcnow()
    session.add(ticket)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(ticket)
    return ticket


def add_assignee(session: Session, ticket: Ticket, user_id: str) -> Ticket:
    """Assign an ACTIVE project member to ``ticket``."""
    project_id = ticket.feature.project_id
    member = _find_member(session, project_id, user_id, active_only=True)
    if not member:
        raise UserNotAMember("User is not an active member of this project")
    if member in ticket.assignees:
        raise AlreadyAssigned()

    ticket.assignees.append(member)
    logger.info("Assigned member %s to ticket %s", member.id, ticket.id)
    return _commit(session, ticket)


def remove_assignee(session: Session, ticket: Ticket, user_id: str) -> Ticket:
    """Unassign a project member of any status. Unlinked members are a no-op."""
    project_id = ticket.feature.project_id
    member = _find_member(session, project_id, user_id, active_only=False)
    if not member:
        raise UserNotAMember()

    if member in ticket.assignees:
        ticket.assignees.remove(member)
        logger.info("Unassigned member %s from ticket %s", member.id, ticket.id)
    return _commit(session, ticket)
