import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SENDGRID_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from core.database import get_session
from core.security import create_access_token
from main import app
from models.models import MemberRole, MemberStatus, Project, ProjectMember, Token, User
from services.project_service import create_project
from services.user_service import create_user

API = "/pmboard/api/v1"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture()
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def client(session):
    def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(session):
    def _make_user(email: str, password: str = "password123", active: bool = True, name: str = None) -> User:
        user = create_user(session, email, password, name or email.split("@")[0])
        if active:
            user.is_active = True
            session.add(user)
            session.commit()
            session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_project(session):
    def _make_project(owner: User, name: str = "Proj", project_type: str = "KANBAN") -> Project:
        return create_project(session, owner, name, "", project_type)

    return _make_project


@pytest.fixture()
def add_member(session):
    def _add_member(project: Project, user: User, role: str = MemberRole.MEMBER.value,
                    status: str = MemberStatus.ACTIVE.value) -> ProjectMember:
        member = ProjectMember(project_id=project.id, user_id=user.id, role=role, member_status=status)
        session.add(member)
        session.commit()
        session.refresh(member)
        return member

    return _add_member


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def token_for(session: Session, user: User) -> str:
    session.expire_all()
    return session.exec(select(Token).where(Token.user_id == user.id)).one().token
