# scripts/seed.py

import os
import sys
import argparse

from sqlmodel import Session, select

# Ensure root path for relative imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.database import create_db_and_tables, engine
from models.models import MemberStatus, Project, ProjectMember, Ticket, User
from services.project_service import create_project
from services.user_service import create_user

DEMO_PROJECT = "Demo Project"


def _ensure_user(session: Session, email: str, password: str, name: str) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        return user
    user = create_user(session, email, password, name)
    user.is_active = True
    session.add(user)
    session.commit()
    session.refresh(user)
    print(f"✅ Added {email}")
    return user


def seed_dev_data(project_name: str = DEMO_PROJECT, with_member: bool = True) -> None:
    """Seed development database with a demo owner, an optional member and one project."""
    print("🌱 Seeding development data...")
    create_db_and_tables()

    with Session(engine) as session:
        # -----------------------------
        # 👑 Owner + 👥 Member
        # -----------------------------
        owner = _ensure_user(session, "owner@demo.com", "owner1234", "Demo Owner")
        member = _ensure_user(session, "member@demo.com", "member1234", "Demo Member") if with_member else None

        # -----------------------------
        # 📁 Demo Project
        # -----------------------------
        project = session.exec(
            select(Project).where(Project.owner_id == owner.id, Project.name == project_name)
        ).first()
        if project:
            print(f"🌱 {project_name} already present, nothing to do.")
            return

        project = create_project(session, owner, project_name, "Seeded for local development", "KANBAN")
        if member:
            session.add(
                ProjectMember(
                    project_id=project.id,
                    user_id=member.id,
                    member_status=MemberStatus.ACTIVE.value,
                )
            )
        base = project.features[0]
        session.add(Ticket(title="Set up the board", description="First seeded ticket", feature_id=base.id))
        session.commit()
        print(f"✅ Added {project_name} with BASE feature and one ticket")

    print("🌱 Development data seeding complete.")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Seed the PMBoard development database.")
    parser.add_argument("--project-name", default=DEMO_PROJECT, help="Name of the seeded project")
    parser.add_argument("--no-member", action="store_true", help="Skip the demo member account")
    args = parser.parse_args(argv)
    seed_dev_data(project_name=args.project_name, with_member=not args.no_member)


if __name__ == "__main__":
    main()
