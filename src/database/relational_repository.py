"""Repository pattern for relational store data access."""

import logging
from typing import Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .search import contains_pattern
from .relational_models import Project, User

logger = logging.getLogger(__name__)


class UserRepository:
    """Data access for users."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> Sequence[User]:
        result = await self.session.execute(select(User).order_by(User.id))
        return result.scalars().all()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def find_by_id_with_projects(self, user_id: int) -> Optional[User]:
        stmt = (
            select(User)
            .options(selectinload(User.projects))
            .filter(User.id == user_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).filter(User.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).filter(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def search(self, query: str) -> Sequence[User]:
        """Case-insensitive substring search over username, email and names."""
        pattern = contains_pattern(query)
        stmt = (
            select(User)
            .filter(
                or_(
                    User.username.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                    User.first_name.ilike(pattern, escape="\\"),
                    User.last_name.ilike(pattern, escape="\\"),
                )
            )
            .order_by(User.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def save(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        return user

    async def delete(self, user: User) -> None:
        await self.session.delete(user)
        await self.session.flush()


class ProjectRepository:
    """Data access for projects."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_all(self) -> Sequence[Project]:
        result = await self.session.execute(select(Project).order_by(Project.id))
        return result.scalars().unique().all()

    async def find_by_id(self, project_id: int) -> Optional[Project]:
        return await self.session.get(Project, project_id)

    async def find_by_user_id(self, user_id: int) -> Sequence[Project]:
        stmt = select(Project).filter(Project.user_id == user_id).order_by(Project.id)
        result = await self.session.execute(stmt)
        return result.scalars().unique().all()

    async def search(self, query: str) -> Sequence[Project]:
        """Case-insensitive substring search over name and description."""
        pattern = contains_pattern(query)
        stmt = (
            select(Project)
            .filter(
                or_(
                    Project.name.ilike(pattern, escape="\\"),
                    Project.description.ilike(pattern, escape="\\"),
                )
            )
            .order_by(Project.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().unique().all()

    async def find_most_recent(self, limit: int) -> Sequence[Project]:
        """Newest projects first, by creation time."""
        stmt = (
            select(Project)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().unique().all()

    async def save(self, project: Project) -> Project:
        self.session.add(project)
        await self.session.flush()
        return project

    async def delete(self, project: Project) -> None:
        await self.session.delete(project)
        await self.session.flush()
