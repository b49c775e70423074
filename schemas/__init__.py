from .feature_schema import FeatureCreate, FeatureRead
from .project_member_schema import (
    ProjectMemberCreate, ProjectMemberRead,
    ProjectMemberRoleUpdate, ProjectMemberStatusUpdate,
)
from .project_schema import ProjectCreate, ProjectRead, ProjectDescriptionUpdate, ProjectStatusUpdate
from .ticket_schema import (
    TicketCreate, TicketRead, TicketUpdate,
    TicketTitleUpdate, TicketDescriptionUpdate, TicketStatusUpdate,
    TicketPriorityUpdate, TicketSectionUpdate,
    TimeLogUpdate, AssigneeRequest,
)
from .user_schema import (
    UserCreate, UserLogin, UserRead, EmailRequest, RefreshRequest,
    MembershipRead, NextMembershipRead, AuthResponse,
    SettingsUpdate, PasswordUpdate, MembershipUpdate, NextMembershipUpdate,
    MessageResponse,
)

__all__ = [
    # Feature
    "FeatureCreate", "FeatureRead",

    # Project member
    "ProjectMemberCreate", "ProjectMemberRead",
    "ProjectMemberRoleUpdate", "ProjectMemberStatusUpdate",

    # Project
    "ProjectCreate", "ProjectRead", "ProjectDescriptionUpdate", "ProjectStatusUpdate",

    # Ticket
    "TicketCreate", "TicketRead", "TicketUpdate",
    "TicketTitleUpdate", "TicketDescriptionUpdate", "TicketStatusUpdate",
    "TicketPriorityUpdate", "TicketSectionUpdate",
    "TimeLogUpdate", "AssigneeRequest",

    # User
    "UserCreate", "UserLogin", "UserRead", "EmailRequest", "RefreshRequest",
    "MembershipRead", "NextMembershipRead", "AuthResponse",
    "SettingsUpdate", "PasswordUpdate", "MembershipUpdate", "NextMembershipUpdate",
    "MessageResponse",
]
