"""Relational data service for users and their projects."""

import logging
import re
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError

from database.database import DatabaseManager
from database.relational_models import Project, User
from database.relational_repository import ProjectRepository, UserRepository
from graphapp.constants import DEFAULT_RECENT_PROJECTS_LIMIT

from .errors import NotFoundError, ValidationError
from .updates import ProjectUpdate, UserUpdate

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,7}$"
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class RelationalDataService:
    """Service for managing users and projects.

    Uniqueness of usernames and emails is checked before writing and backed
    by unique constraints; a constraint violation that slips past the check
    is reported as a ``ValidationError`` as well.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the relational data service.

        Args:
            db_manager: Manager of the relational store
            clock: Returns the current time; used for project timestamps
        """
        self.db_manager = db_manager
        self.clock = clock

    def _now(self) -> datetime:
        # Timestamps are stored as naive UTC
        now = self.clock()
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc).replace(tzinfo=None)
        return now

    # ---- Users ----

    async def get_all_users(self) -> List[User]:
        async with self.db_manager.get_session() as session:
            return list(await UserRepository(session).find_all())

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        async with self.db_manager.get_session() as session:
            return await UserRepository(session).find_by_id(user_id)

    async def get_user_with_projects(self, user_id: int) -> Optional[User]:
        """Get a user with its projects loaded."""
        async with self.db_manager.get_session() as session:
            return await UserRepository(session).find_by_id_with_projects(user_id)

    def _check_username(self, username: Optional[str]) -> None:
        if _is_blank(username):
            logger.warning("Rejected user without a username")
            raise ValidationError("Username cannot be empty")

    def _check_email(self, email: Optional[str]) -> None:
        if _is_blank(email):
            logger.warning("Rejected user without an email")
            raise ValidationError("Email cannot be empty")
        if not EMAIL_PATTERN.match(email):
            logger.warning(f"Rejected malformed email '{email}'")
            raise ValidationError("Invalid email format")

    async def create_user(
        self,
        username: Optional[str],
        email: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Create a new user.

        Args:
            username: Unique username
            email: Unique email address
            first_name: Optional first name
            last_name: Optional last name

        Returns:
            The persisted user

        Raises:
            ValidationError: If a field is blank, the email is malformed, or
                the username or email is already taken
        """
        self._check_username(username)
        self._check_email(email)

        try:
            async with self.db_manager.get_session() as session:
                repo = UserRepository(session)
                if await repo.find_by_username(username) is not None:
                    logger.warning(f"Username '{username}' is already taken")
                    raise ValidationError("Username is already taken")
                if await repo.find_by_email(email) is not None:
                    logger.warning(f"Email '{email}' is already taken")
                    raise ValidationError("Email is already taken")

                user = User(
                    username=username,
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                )
                await repo.save(user)
        except IntegrityError as e:
            logger.warning(f"Constraint violation while creating user '{username}': {e.orig}")
            raise ValidationError("Username or email is already taken") from e

        logger.info(f"Created user: {username} (id: {user.id})")
        return user

    async def update_user(self, user_id: int, update: UserUpdate) -> User:
        """Apply the supplied fields of ``update`` to a user.

        Uniqueness is checked again only for a username or email that
        actually changes.

        Raises:
            NotFoundError: If no user has this id
            ValidationError: If a required field is blank, the email is
                malformed, or the new username or email is taken
        """
        changes = update.present_fields()
        if "username" in changes:
            self._check_username(changes["username"])
        if "email" in changes:
            self._check_email(changes["email"])

        try:
            async with self.db_manager.get_session() as session:
                repo = UserRepository(session)
                user = await repo.find_by_id(user_id)
                if user is None:
                    raise NotFoundError(f"User not found with id: {user_id}")

                username = changes.get("username", user.username)
                if username != user.username:
                    if await repo.find_by_username(username) is not None:
                        logger.warning(f"Username '{username}' is already taken")
                        raise ValidationError("Username is already taken")
                    user.username = username

                email = changes.get("email", user.email)
                if email != user.email:
                    if await repo.find_by_email(email) is not None:
                        logger.warning(f"Email '{email}' is already taken")
                        raise ValidationError("Email is already taken")
                    user.email = email

                if "first_name" in changes:
                    user.first_name = changes["first_name"]
                if "last_name" in changes:
                    user.last_name = changes["last_name"]

                await repo.save(user)
        except IntegrityError as e:
            logger.warning(f"Constraint violation while updating user {user_id}: {e.orig}")
            raise ValidationError("Username or email is already taken") from e

        logger.info(f"Updated user {user_id}: {sorted(changes)}")
        return user

    async def delete_user(self, user_id: int) -> bool:
        """Delete a user together with its projects.

        Returns:
            True if a user was deleted, False if none had this id
        """
        async with self.db_manager.get_session() as session:
            repo = UserRepository(session)
            user = await repo.find_by_id(user_id)
            if user is None:
                logger.debug(f"User {user_id} not found, nothing to delete")
                return False
            await repo.delete(user)

        logger.info(f"Deleted user {user_id}")
        return True

    async def search_users(self, query: str) -> List[User]:
        async with self.db_manager.get_session() as session:
            return list(await UserRepository(session).search(query))

    # ---- Projects ----

    async def get_all_projects(self) -> List[Project]:
        async with self.db_manager.get_session() as session:
            return list(await ProjectRepository(session).find_all())

    async def get_project_by_id(self, project_id: int) -> Optional[Project]:
        async with self.db_manager.get_session() as session:
            return await ProjectRepository(session).find_by_id(project_id)

    async def get_project_with_user(self, project_id: int) -> Optional[Project]:
        """Get a project with its owner loaded."""
        # The owner is always loaded together with the project
        return await self.get_project_by_id(project_id)

    async def get_projects_by_user_id(self, user_id: int) -> List[Project]:
        """List the projects owned by a user.

        Raises:
            NotFoundError: If no user has this id
        """
        async with self.db_manager.get_session() as session:
            if await UserRepository(session).find_by_id(user_id) is None:
                raise NotFoundError(f"User not found with id: {user_id}")
            return list(await ProjectRepository(session).find_by_user_id(user_id))

    async def _resolve_owner(self, repo: UserRepository, user_id: Optional[int]) -> User:
        if user_id is None:
            logger.warning("Rejected project without an owner")
            raise ValidationError("User is required")
        user = await repo.find_by_id(user_id)
        if user is None:
            logger.warning(f"Rejected project: user {user_id} not found")
            raise ValidationError(f"User not found with id: {user_id}")
        return user

    async def create_project(
        self,
        name: Optional[str],
        user_id: Optional[int],
        description: Optional[str] = None,
    ) -> Project:
        """Create a project owned by an existing user.

        Both timestamps are set to the current time.

        Raises:
            ValidationError: If the name is blank or the owner is missing or
                does not resolve
        """
        if _is_blank(name):
            logger.warning("Rejected project without a name")
            raise ValidationError("Project name cannot be empty")

        async with self.db_manager.get_session() as session:
            owner = await self._resolve_owner(UserRepository(session), user_id)

            now = self._now()
            project = Project(
                name=name,
                description=description,
                created_at=now,
                updated_at=now,
            )
            project.user = owner
            await ProjectRepository(session).save(project)

        logger.info(f"Created project: {name} (id: {project.id}, user: {owner.id})")
        return project

    async def update_project(self, project_id: int, update: ProjectUpdate) -> Project:
        """Apply the supplied fields of ``update`` to a project.

        ``updated_at`` is refreshed on every call.

        Raises:
            NotFoundError: If no project has this id
            ValidationError: If the name is blank or a new owner does not resolve
        """
        changes = update.present_fields()
        if "name" in changes and _is_blank(changes["name"]):
            logger.warning(f"Rejected blank name for project {project_id}")
            raise ValidationError("Project name cannot be empty")

        async with self.db_manager.get_session() as session:
            repo = ProjectRepository(session)
            project = await repo.find_by_id(project_id)
            if project is None:
                raise NotFoundError(f"Project not found with id: {project_id}")

            if "name" in changes:
                project.name = changes["name"]
            if "description" in changes:
                project.description = changes["description"]
            if "user_id" in changes and changes["user_id"] != project.user_id:
                project.user = await self._resolve_owner(
                    UserRepository(session), changes["user_id"]
                )
            project.updated_at = self._now()

            await repo.save(project)

        logger.info(f"Updated project {project_id}: {sorted(changes)}")
        return project

    async def delete_project(self, project_id: int) -> bool:
        """Delete a project.

        Returns:
            True if a project was deleted, False if none had this id
        """
        async with self.db_manager.get_session() as session:
            repo = ProjectRepository(session)
            project = await repo.find_by_id(project_id)
            if project is None:
                logger.debug(f"Project {project_id} not found, nothing to delete")
                return False
            await repo.delete(project)

        logger.info(f"Deleted project {project_id}")
        return True

    async def search_projects(self, query: str) -> List[Project]:
        async with self.db_manager.get_session() as session:
            return list(await ProjectRepository(session).search(query))

    async def get_recent_projects(
        self, limit: int = DEFAULT_RECENT_PROJECTS_LIMIT
    ) -> List[Project]:
        """Return at most ``limit`` projects, newest first.

        Raises:
            ValidationError: If ``limit`` is not positive
        """
        if limit <= 0:
            raise ValidationError("Limit must be greater than zero")
        async with self.db_manager.get_session() as session:
            return list(await ProjectRepository(session).find_most_recent(limit))
