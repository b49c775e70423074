# routes/features.py
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from core.database import get_session
from core.errors import Conflict, FeatureNotFound, InvalidInput
from core.permissions import require_project_admin, require_project_member
from core.validators import require_text
from models.models import BASE_FEATURE_TITLE, Feature, Project, Ticket
from schemas.feature_schema import FeatureCreate, FeatureRead

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Features"])

DUPLICATE_TITLE = "A feature with this title already exists in the project."


# ==================================================================
#  ✅ List Features
# ==================================================================
@router.get("/{project_id}", response_model=List[FeatureRead])
def list_features(
    project: Project = Depends(require_project_member),
    session: Session = Depends(get_session),
):
    return session.exec(
        select(Feature).where(Feature.project_id == project.id).order_by(Feature.id)
    ).all()


# ==================================================================
#  ✅ Add Feature (admin or owner)
# ==================================================================
@router.post("/{project_id}", response_model=FeatureRead, status_code=status.HTTP_201_CREATED)
def add_feature(
    data: FeatureCreate,
    project: Project = Depends(require_project_admin),
    session: Session = Depends(get_session),
):
    title = require_text(data.title, "title")
    if title.upper() == BASE_FEATURE_TITLE:
        raise InvalidInput("Invalid title. 'Base' is a reserved title.")

    existing = session.exec(
        select(Feature).where(
            Feature.project_id == project.id,
            func.lower(Feature.title) == title.lower(),
        )
    ).first()
    if existing:
        raise Conflict(DUPLICATE_TITLE)

    feature = Feature(title=title, description=data.description, project_id=project.id)
    session.add(feature)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict(DUPLICATE_TITLE)
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(feature)

    logger.info("Feature %s added to project %s", feature.id, project.id)
    return feature


# ==================================================================
#  ✅ Remove Feature (admin or owner; never BASE, never with tickets)
# ==================================================================
@router.delete("/{project_id}/{feature_id}")
def remove_feature(
    feature_id: int,
    project: Project = Depends(require_project_admin),
    session: Session = Depends(get_session),
):
    feature = session.get(Feature, feature_id)
    if not feature or feature.project_id != project.id:
        raise FeatureNotFound()
    if feature.is_base:
        raise Conflict("The base feature may not be deleted.")

    has_tickets = session.exec(select(Ticket.id).where(Ticket.feature_id == feature.id)).first()
    if has_tickets:
        raise Conflict("Cannot delete feature with assigned tickets. Please reassign or delete the tickets first.")

    session.delete(feature)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    logger.info("Feature %s removed from project %s", feature_id, project.id)
    return {"message": "Feature deleted successfully"}
