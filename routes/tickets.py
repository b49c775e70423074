# routes/tickets.py
import logging
import math
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.database import get_session
from core.errors import FeatureNotFound, InvalidInput
from core.permissions import require_project_member
from core.validators import parse_choice
from models.models import Feature, Project, Ticket, TicketPriority, TicketSection, TicketStatus
from schemas.ticket_schema import (
    AssigneeRequest,
    TicketCreate,
    TicketDescriptionUpdate,
    TicketPriorityUpdate,
    TicketRead,
    TicketSectionUpdate,
    TicketStatusUpdate,
    TicketTitleUpdate,
    TicketUpdate,
    TimeLogUpdate,
)
from services.ticket_service import add_assignee, get_project_ticket, remove_assignee

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tickets"])

INVALID_STATUS = "Invalid status. Valid statuses are: UNASSIGNED, IN_PROGRESS, IN_REVIEW, COMPLETED"
INVALID_PRIORITY = "Invalid priority. Valid priorities are: NONE, LOW, MODERATE, HIGH, URGENT"
INVALID_SECTION = "Invalid section. Valid sections are: ACTIVE, ARCHIVED, BACKLOG"
INVALID_TIME_LOG = "timeLog is required and must be a non-negative number"


# ==================================================================
#  Helpers
# ==================================================================
def _feature_in_project(session: Session, project: Project, feature_id: int) -> Feature:
    feature = session.get(Feature, feature_id)
    if not feature or feature.project_id != project.id:
        raise FeatureNotFound("Feature not found in this project")
    return feature


def _save(session: Session, ticket: Ticket) -> TicketRead:
    ticket.updated_at = datetime.utcnow()
    session.add(ticket)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(ticket)
    return TicketRead.model_validate(ticket)


def _ticket(
    ticket_id: str,
    project: Project = Depends(require_project_member),
    session: Session = Depends(get_session),
) -> Ticket:
    return get_project_ticket(session, project.id, ticket_id)


# ==================================================================
#  ✅ List / Read
# ==================================================================
@router.get("/{project_id}", response_model=List[TicketRead])
def list_tickets(
    section: Optional[str] = None,
    project: Project = Depends(require_project_member),
    session: Session = Depends(get_session),
):
    query = (
        select(Ticket)
        .join(Feature, Ticket.feature_id == Feature.id)
        .where(Feature.project_id == project.id)
    )
    if section:
        query = query.where(Ticket.section == parse_choice(TicketSection, section, INVALID_SECTION))
    tickets = session.exec(query.order_by(Ticket.created_at)).all()
    return [TicketRead.model_validate(ticket) for ticket in tickets]


@router.get("/{project_id}/{ticket_id}", response_model=TicketRead)
def get_ticket(ticket: Ticket = Depends(_ticket)):
    return TicketRead.model_validate(ticket)


# ==================================================================
#  ✅ Create
# ==================================================================
@router.post("/{project_id}", response_model=TicketRead, status_code=status.HTTP_201_CREATED)
def create_ticket(
    data: TicketCreate,
    project: Project = Depends(require_project_member),
    session: Session = Depends(get_session),
):
    feature = _feature_in_project(session, project, data.feature_id)
    ticket = Ticket(
        title=data.title.strip(),
        description=data.description,
        feature_id=feature.id,
        status=parse_choice(TicketStatus, data.status or TicketStatus.UNASSIGNED.value, INVALID_STATUS),
        priority=parse_choice(TicketPriority, data.priority or TicketPriority.NONE.value, INVALID_PRIORITY),
        section=parse_choice(TicketSection, data.section or TicketSection.ACTIVE.value, INVALID_SECTION),
    )
    read = _save(session, ticket)
    logger.info("Ticket %s created in project %s", ticket.id, project.id)
    return read


# ==================================================================
#  ✅ Update (any subset of fields)
# ==================================================================
@router.put("/{project_id}/{ticket_id}", response_model=TicketRead)
def update_ticket(
    data: TicketUpdate,
    ticket: Ticket = Depends(_ticket),
    project: Project = Depends(require_project_member),
    session: Session = Depends(get_session),
):
    if data.title is not None:
        ticket.title = data.title.strip()
    if data.description is not None:
        ticket.description = data.description
    if data.status is not None:
        ticket.status = parse_choice(TicketStatus, data.status, INVALID_STATUS)
    if data.priority is not None:
        ticket.priority = parse_choice(TicketPriority, data.priority, INVALID_PRIORITY)
    if data.section is not None:
        ticket.section = parse_choice(TicketSection, data.section, INVALID_SECTION)
    if data.feature_id is not None:
        ticket.feature_id = _feature_in_project(session, project, data.feature_id).id
    return _save(session, ticket)


@router.delete("/{project_id}/{ticket_id}")
def delete_ticket(
    ticket: Ticket = Depends(_ticket),
    session: Session = Depends(get_session),
):
    ticket_id = ticket.id
    ticket.assignees.clear()
    session.delete(ticket)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    logger.info("Ticket %s deleted", ticket_id)
    return {"message": "Ticket deleted successfully"}


# ==================================================================
#  ✅ Assignees
# ==================================================================
@router.post("/{project_id}/{ticket_id}/assignees", response_model=TicketRead)
def assign(
    data: AssigneeRequest,
    ticket: Ticket = Depends(_ticket),
    session: Session = Depends(get_session),
):
    return TicketRead.model_validate(add_assignee(session, ticket, data.user_id))


@router.delete("/{project_id}/{ticket_id}/assignees/{user_id}", response_model=TicketRead)
def unassign(
    user_id: str,
    ticket: Ticket = Depends(_ticket),
    session: Session = Depends(get_session),
):
    return TicketRead.model_validate(remove_assignee(session, ticket, user_id))


# ==================================================================
#  ✅ Time log (minutes)
# ==================================================================
@router.get("/{project_id}/{ticket_id}/timelog")
def get_time_log(ticket: Ticket = Depends(_ticket)):
    return {"time_log": ticket.time_log}


@router.patch("/{project_id}/{ticket_id}/timelog", response_model=TicketRead)
def set_time_log(
    data: TimeLogUpdate,
    ticket: Ticket = Depends(_ticket),
    session: Session = Depends(get_session),
):
    if data.time_log is None or not math.isfinite(data.time_log) or data.time_log < 0:
        raise InvalidInput(INVALID_TIME_LOG)
    ticket.time_log = data.time_log
    return _save(session, ticket)


@router.delete("/{project_id}/{ticket_id}/timelog", response_model=TicketRead)
def clear_time_log(
    ticket: Ticket = Depends(_ticket),
    session: Session = Depends(get_session),
):
    ticket.time_log = 0.0
    return _save(session, ticket)


# ==================================================================
#  ✅ Single-field updates
# ==================================================================
@router.patch("/{project_id}/{ticket_id}/title", response_model=TicketRead)
def update_title(data: TicketTitleUpdate, ticket: Ticket = Depends(_ticket), session: Session = Depends(get_session)):
    ticket.title = data.title.strip()
    return _save(session, ticket)


@router.patch("/{project_id}/{ticket_id}/description", response_model=TicketRead)
def update_description(data: TicketDescriptionUpdate, ticket: Ticket = Depends(_ticket), session: Session = Depends(get_session)):
    ticket.description = data.description
    return _save(session, ticket)


@router.patch("/{project_id}/{ticket_id}/status", response_model=TicketRead)
def update_status(data: TicketStatusUpdate, ticket: Ticket = Depends(_ticket), session: Session = Depends(get_session)):
    ticket.status = parse_choice(TicketStatus, data.status, INVALID_STATUS)
    return _save(session, ticket)


@router.patch("/{project_id}/{ticket_id}/priority", response_model=TicketRead)
def update_priority(data: TicketPriorityUpdate, ticket: Ticket = Depends(_ticket), session: Session = Depends(get_session)):
    ticket.priority = parse_choice(TicketPriority, data.priority, INVALID_PRIORITY)
    return _save(session, ticket)


@router.patch("/{project_id}/{ticket_id}/section", response_model=TicketRead)
def update_section(data: TicketSectionUpdate, ticket: Ticket = Depends(_ticket), session: Session = Depends(get_session)):
    ticket.section = parse_choice(TicketSection, data.section, INVALID_SECTION)
    return _save(session, ticket)
