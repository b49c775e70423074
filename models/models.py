# models/models.py
from typing import Optional, List, Dict, Any
from datetime import datetime, timedelta
from enum import Enum
import secrets
import uuid

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint, Column, JSON
from pydantic import EmailStr


def _uuid() -> str:
    return str(uuid.uuid4())


# ============================================================
# ENUMS
# ============================================================
class ProjectType(str, Enum):
    KANBAN = "KANBAN"
    SCRUM = "SCRUM"
    WATERFALL = "WATERFALL"


class ProjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class MemberRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class MemberStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class TicketStatus(str, Enum):
    UNASSIGNED = "UNASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    COMPLETED = "COMPLETED"


class TicketPriority(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TicketSection(str, Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    BACKLOG = "BACKLOG"


class MembershipStatus(str, Enum):
    FREE = "FREE"
    STARTUP = "STARTUP"
    TEAM = "TEAM"
    ENTERPRISE = "ENTERPRISE"


class MembershipDuration(str, Enum):
    MONTH = "MONTH"
    YEAR = "YEAR"


BASE_FEATURE_TITLE = "BASE"


# ============================================================
# LINK MODEL
# ============================================================
class TicketAssigneeLink(SQLModel, table=True):
    __tablename__ = "ticket_assignee_link"
    ticket_id: str = Field(foreign_key="ticket.id", primary_key=True)
    project_member_id: str = Field(foreign_key="project_member.id", primary_key=True)


# ============================================================
# USER
# ============================================================
class User(SQLModel, table=True):
    __tablename__ = "user"

    id: str = Field(default_factory=_uuid, primary_key=True)
    email: EmailStr = Field(index=True, unique=True, max_length=255, nullable=False)
    name: Optional[str] = Field(default=None, max_length=100)
    password_hash: str = Field(nullable=False)

    # Accounts start inactive until an emailed activation token is consumed
    is_active: bool = Field(default=False)
    settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    membership: Optional["Membership"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"uselist": False}
    )
    next_membership: Optional["NextMembership"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"uselist": False}
    )
    projects_owned: List["Project"] = Relationship(back_populates="owner")
    projects_joined: List["ProjectMember"] = Relationship(back_populates="user")
    token: Optional["Token"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"uselist": False}
    )


# ============================================================
# MEMBERSHIP (current tier)
# ============================================================
class Membership(SQLModel, table=True):
    __tablename__ = "membership"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", unique=True, index=True, nullable=False)
    status: str = Field(default=MembershipStatus.FREE.value, max_length=20)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    ends_at: Optional[datetime] = None  # None -> non-expiring (FREE)

    user: "User" = Relationship(back_populates="membership")


# ============================================================
# NEXT MEMBERSHIP (scheduled tier change)
# ============================================================
class NextMembership(SQLModel, table=True):
    __tablename__ = "next_membership"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", unique=True, index=True, nullable=False)
    status: str = Field(max_length=20, nullable=False)
    starts_at: datetime = Field(nullable=False)
    ends_at: datetime = Field(nullable=False)

    user: "User" = Relationship(back_populates="next_membership")


# ============================================================
# PROJECT
# ============================================================
class Project(SQLModel, table=True):
    __tablename__ = "project"
    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_owner_project_name"),)

    id: str = Field(default_factory=_uuid, primary_key=True)
    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    project_type: str = Field(default=ProjectType.KANBAN.value, max_length=20)
    status: str = Field(default=ProjectStatus.ACTIVE.value, max_length=20, index=True)
    owner_id: str = Field(foreign_key="user.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    owner: "User" = Relationship(back_populates="projects_owned")
    features: List["Feature"] = Relationship(back_populates="project")
    members: List["ProjectMember"] = Relationship(back_populates="project")


# ============================================================
# PROJECT MEMBER
# ============================================================
class ProjectMember(SQLModel, table=True):
    __tablename__ = "project_member"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id: str = Field(default_factory=_uuid, primary_key=True)
    project_id: str = Field(foreign_key="project.id", nullable=False, index=True)
    user_id: str = Field(foreign_key="user.id", nullable=False, index=True)
    role: str = Field(default=MemberRole.MEMBER.value, max_length=20)
    member_status: str = Field(default=MemberStatus.PENDING.value, max_length=20)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    project: "Project" = Relationship(back_populates="members")
    user: "User" = Relationship(back_populates="projects_joined")
    tickets: List["Ticket"] = Relationship(back_populates="assignees", link_model=TicketAssigneeLink)


# ============================================================
# FEATURE
# ============================================================
class Feature(SQLModel, table=True):
    __tablename__ = "feature"
    __table_args__ = (UniqueConstraint("project_id", "title", name="uq_project_feature_title"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    project_id: str = Field(foreign_key="project.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    project: "Project" = Relationship(back_populates="features")
    tickets: List["Ticket"] = Relationship(back_populates="feature")

    @property
    def is_base(self) -> bool:
        return self.title.strip().upper() == BASE_FEATURE_TITLE


# ============================================================
# TICKET
# ============================================================
class Ticket(SQLModel, table=True):
    __tablename__ = "ticket"

    id: str = Field(default_factory=_uuid, primary_key=True)
    title: str = Field(max_length=200)
    description: str = Field(default="", max_length=5000)
    status: str = Field(default=TicketStatus.UNASSIGNED.value, max_length=20)
    priority: str = Field(default=TicketPriority.NONE.value, max_length=20)
    section: str = Field(default=TicketSection.ACTIVE.value, max_length=20)
    time_log: float = Field(default=0.0)  # minutes
    feature_id: int = Field(foreign_key="feature.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    feature: "Feature" = Relationship(back_populates="tickets")
    assignees: List["ProjectMember"] = Relationship(back_populates="tickets", link_model=TicketAssigneeLink)


# ============================================================
# EPHEMERAL TOKEN (activation / deactivation / reset / MFA)
# ============================================================
class Token(SQLModel, table=True):
    __tablename__ = "token"

    id: str = Field(default_factory=_uuid, primary_key=True)
    token: str = Field(default_factory=lambda: secrets.token_urlsafe(32), max_length=255, unique=True, index=True)
    user_id: str = Field(foreign_key="user.id", unique=True, index=True, nullable=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: datetime = Field(default_factory=lambda: datetime.utcnow() + timedelta(minutes=5))

    user: "User" = Relationship(back_populates="token")

    def is_expired(self) -> bool:
        return datetime.utcnow() > self.expires_at


# ============================================================
# EXPORTS
# ============================================================
__all__ = [
    "User",
    "Membership",
    "NextMembership",
    "Project",
    "ProjectMember",
    "Feature",
    "Ticket",
    "TicketAssigneeLink",
    "Token",
    "ProjectType",
    "ProjectStatus",
    "MemberRole",
    "MemberStatus",
    "TicketStatus",
    "TicketPriority",
    "TicketSection",
    "MembershipStatus",
    "MembershipDuration",
    "BASE_FEATURE_TITLE",
]
