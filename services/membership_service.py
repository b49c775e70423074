# services/membership_service.py
import calendar
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.errors import InvalidInput
from models.models import (
    Membership,
    MembershipDuration,
    MembershipStatus,
    NextMembership,
    User,
)

logger = logging.getLogger(__name__)


class ScheduledMembership(BaseModel):
    """A pending tier change. ``None`` in its place means nothing is scheduled."""

    status: MembershipStatus
    starts_at: datetime
    ends_at: datetime

    model_config = ConfigDict(from_attributes=True, frozen=True)


# ============================================================
# Date helpers
# ============================================================
def add_months(moment: datetime, months: int) -> datetime:
    """Calendar-month arithmetic; the day is clamped to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def compute_ends_at(anchor: datetime, duration: MembershipDuration) -> datetime:
    if duration == MembershipDuration.YEAR:
        return add_months(anchor, 12)
    return add_months(anchor, 1)


def _as_naive_utc(moment: datetime) -> datetime:
    # Timestamps are stored naive in UTC
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def _parse(status: Union[str, MembershipStatus], duration: Union[str, MembershipDuration], message: str):
    try:
        return MembershipStatus(status), MembershipDuration(duration)
    except ValueError:
        raise InvalidInput(message)


# ============================================================
# MEMBERSHIP LIFECYCLE
# ============================================================
class MembershipService:
    """
    Current tier + optional scheduled tier for a user.

    - ``set_membership`` switches the tier immediately.
    - ``schedule_next_membership`` upserts the single pending change.
    - ``reconcile_membership`` applies the pending change once it is due.
      It runs on demand; there is no background job.
    """

    @staticmethod
    def get_membership(session: Session, user: User) -> Membership:
        membership = session.exec(
            select(Membership).where(Membership.user_id == user.id)
        ).first()
        if membership is None:
            # Every user is created with one; recreate FREE if it went missing
            membership = Membership(user_id=user.id, status=MembershipStatus.FREE.value)
            session.add(membership)
        return membership

    @staticmethod
    def get_scheduled_membership(session: Session, user: User) -> Optional[ScheduledMembership]:
        pending = session.exec(
            select(NextMembership).where(NextMembership.user_id == user.id)
        ).first()
        if pending is None:
            return None
        return ScheduledMembership.model_validate(pending)

    @staticmethod
    def set_membership(
        session: Session,
        user: User,
        status: Union[str, MembershipStatus],
        duration: Union[str, MembershipDuration],
        now: Optional[datetime] = None,
    ) -> Membership:
        tier, period = _parse(status, duration, "Invalid membership status or expiry parameter")
        now = now or datetime.utcnow()

        membership = MembershipService.get_membership(session, user)
        membership.status = tier.value
        membership.started_at = now
        membership.ends_at = compute_ends_at(now, period)
        session.add(membership)

        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.refresh(membership)

        logger.info("User %s membership set to %s until %s", user.id, tier.value, membership.ends_at)
        return membership

    @staticmethod
    def schedule_next_membership(
        session: Session,
        user: User,
        status: Union[str, MembershipStatus],
        starts_at: datetime,
        duration: Union[str, MembershipDuration],
        now: Optional[datetime] = None,
    ) -> ScheduledMembership:
        tier, period = _parse(status, duration, "Invalid nextMembership status or expiry parameter")
        if not isinstance(starts_at, datetime):
            raise InvalidInput("Invalid nextMembership status or expiry parameter")

        starts_at = _as_naive_utc(starts_at)
        now = now or datetime.utcnow()
        if starts_at <= now:
            raise InvalidInput("startsAt must be a future date")

        pending = session.exec(
            select(NextMembership).where(NextMembership.user_id == user.id)
        ).first()
        if pending is None:
            pending = NextMembership(user_id=user.id, status=tier.value, starts_at=starts_at,
                                     ends_at=compute_ends_at(starts_at, period))
        else:
            pending.status = tier.value
            pending.starts_at = starts_at
            pending.ends_at = compute_ends_at(starts_at, period)
        session.add(pending)

        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.refresh(pending)

        logger.info("User %s scheduled %s from %s", user.id, tier.value, starts_at.isoformat())
        return ScheduledMembership.model_validate(pending)

    @staticmethod
    def reconcile_membership(
        session: Session,
        user: User,
        now: Optional[datetime] = None,
    ) -> Tuple[bool, User]:
        """
        Promote a due NextMembership into Membership.

        Returns ``(applied, user)``. The copy and the delete of the pending row
        commit together, so a second call finds nothing to apply.
        """
        now = now or datetime.utcnow()
        pending = session.exec(
            select(NextMembership).where(NextMembership.user_id == user.id)
        ).first()
        if pending is None or pending.starts_at > now:
            return False, user

        membership = MembershipService.get_membership(session, user)
        membership.status = pending.status
        membership.started_at = pending.starts_at
        membership.ends_at = pending.ends_at
        session.add(membership)
        session.delete(pending)

        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.refresh(user)

        logger.info("User %s membership promoted to %s", user.id, membership.status)
        return True, user
