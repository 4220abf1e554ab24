"""
services/directory.py

Account / profile / project lookups and the cascading deletes.

Deletes always run children first (project averages, projects, profile,
account) and are meant to be called inside ``app.core.database.transaction``
so a failure at any step leaves every row in place.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.models.profile import Profile, ProjectAverage
from app.models.project import Project
from app.models.user import AccountType, User


# ─── Lookups ──────────────────────────────────────────────────────────────────

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user(db: Session, user_id: UUID) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_profile(db: Session, user_id: UUID) -> Optional[Profile]:
    return (
        db.query(Profile)
        .options(selectinload(Profile.project_averages), selectinload(Profile.user))
        .filter(Profile.user_id == user_id)
        .first()
    )


def get_project(db: Session, project_id: UUID, owner_id: UUID) -> Optional[Project]:
    return (
        db.query(Project)
        .filter(Project.id == project_id, Project.owner_id == owner_id)
        .first()
    )


def list_pro_users(db: Session) -> list[User]:
    return (
        db.query(User)
        .options(
            selectinload(User.profile).selectinload(Profile.project_averages),
            selectinload(User.projects),
        )
        .filter(User.user_type == AccountType.PRO)
        .order_by(User.created_at.desc())
        .all()
    )


# ─── Cascading deletes ────────────────────────────────────────────────────────

def delete_project_averages(db: Session, profile_id: UUID) -> int:
    return (
        db.query(ProjectAverage)
        .filter(ProjectAverage.profile_id == profile_id)
        .delete(synchronize_session=False)
    )


def delete_projects(db: Session, owner_id: UUID) -> int:
    return (
        db.query(Project)
        .filter(Project.owner_id == owner_id)
        .delete(synchronize_session=False)
    )


def delete_profile_record(db: Session, profile_id: UUID) -> int:
    return (
        db.query(Profile)
        .filter(Profile.id == profile_id)
        .delete(synchronize_session=False)
    )


def delete_profile_cascade(db: Session, profile: Profile):
    delete_project_averages(db, profile.id)
    delete_profile_record(db, profile.id)


def delete_user_cascade(db: Session, user: User):
    profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    if profile:
        delete_project_averages(db, profile.id)
    delete_projects(db, user.id)
    if profile:
        delete_profile_record(db, profile.id)
    db.query(User).filter(User.id == user.id).delete(synchronize_session=False)
