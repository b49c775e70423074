import pytest
from sqlmodel import select

import conftest
from models.models import Project, ProjectMember, Ticket, User
from scripts import seed


@pytest.fixture()
def seeded_engine(session, monkeypatch):
    monkeypatch.setattr(seed, "engine", conftest.engine)
    monkeypatch.setattr(seed, "create_db_and_tables", lambda: None)
    return session


def test_seed_is_idempotent(seeded_engine):
    seed.main([])
    seed.main([])

    session = seeded_engine
    projects = session.exec(select(Project)).all()
    assert [p.name for p in projects] == ["Demo Project"]
    assert len(session.exec(select(Ticket)).all()) == 1
    assert len(session.exec(select(ProjectMember)).all()) == 2


def test_seed_arguments_are_applied(seeded_engine):
    seed.main(["--project-name", "Sandbox", "--no-member"])

    session = seeded_engine
    assert [p.name for p in session.exec(select(Project)).all()] == ["Sandbox"]
    assert [u.email for u in session.exec(select(User)).all()] == ["owner@demo.com"]
    assert len(session.exec(select(ProjectMember)).all()) == 1
