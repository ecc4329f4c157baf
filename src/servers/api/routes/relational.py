"""Relational API endpoints for users and projects."""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr

from database.relational_models import Project, User
from graphapp.constants import DEFAULT_RECENT_PROJECTS_LIMIT
from servers.api.dependencies import get_relational_service
from services import (
    NotFoundError,
    ProjectUpdate,
    RelationalDataService,
    UserUpdate,
    ValidationError,
)

router = APIRouter(prefix="/relational", tags=["relational"])


class UserRequest(BaseModel):
    """Create or update user request model."""

    username: Optional[str] = None
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserRef(BaseModel):
    """Reference to an existing user; fields other than ``id`` are ignored."""

    id: Optional[int] = None


class ProjectRequest(BaseModel):
    """Create or update project request model.

    The owner may be given either as ``user`` (an object with an ``id``) or
    as ``user_id``; ``user_id`` wins when both are present.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    user: Optional[UserRef] = None
    user_id: Optional[int] = None


class UserResponse(BaseModel):
    """User response model."""

    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Create UserResponse from User model."""
        return cls(**user.to_dict())


def _as_utc(value: datetime) -> datetime:
    # Stored timestamps are naive UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ProjectResponse(BaseModel):
    """Project response model."""

    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user_id: int

    @classmethod
    def from_project(cls, project: Project) -> "ProjectResponse":
        """Create ProjectResponse from Project model."""
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            created_at=_as_utc(project.created_at),
            updated_at=_as_utc(project.updated_at),
            user_id=project.user_id,
        )


class UserWithProjectsResponse(UserResponse):
    """User response including the projects the user owns."""

    projects: List[ProjectResponse]

    @classmethod
    def from_user(cls, user: User) -> "UserWithProjectsResponse":
        return cls(
            **user.to_dict(),
            projects=[ProjectResponse.from_project(p) for p in user.projects],
        )


class ProjectWithUserResponse(ProjectResponse):
    """Project response including its owner."""

    user: UserResponse

    @classmethod
    def from_project(cls, project: Project) -> "ProjectWithUserResponse":
        return cls(
            **ProjectResponse.from_project(project).model_dump(),
            user=UserResponse.from_user(project.user),
        )


def _owner_id(data: dict) -> Optional[int]:
    """Pick the owner id out of a dumped ProjectRequest."""
    if data.get("user_id") is not None:
        return data["user_id"]
    user = data.get("user")
    return user.get("id") if user else None


def _user_not_found(user_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"User '{user_id}' not found",
    )


def _project_not_found(project_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Project '{project_id}' not found",
    )


# ---- Users ----


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    users = await relational_service.get_all_users()
    return [UserResponse.from_user(user) for user in users]


@router.get("/users/search", response_model=List[UserResponse])
async def search_users(
    query: str,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """Search users by username, email, first or last name."""
    users = await relational_service.search_users(query)
    return [UserResponse.from_user(user) for user in users]


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    user = await relational_service.get_user_by_id(user_id)
    if not user:
        raise _user_not_found(user_id)
    return UserResponse.from_user(user)


@router.get("/users/{user_id}/with-projects", response_model=UserWithProjectsResponse)
async def get_user_with_projects(
    user_id: int,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    user = await relational_service.get_user_with_projects(user_id)
    if not user:
        raise _user_not_found(user_id)
    return UserWithProjectsResponse.from_user(user)


@router.get("/users/{user_id}/projects", response_model=List[ProjectResponse])
async def get_projects_by_user(
    user_id: int,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """List the projects of a user.

    Raises:
        HTTPException: If user not found
    """
    try:
        projects = await relational_service.get_projects_by_user_id(user_id)
    except NotFoundError:
        raise _user_not_found(user_id)
    return [ProjectResponse.from_project(p) for p in projects]


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserRequest,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """Create a new user.

    Raises:
        HTTPException: If a field is missing or the username or email is taken
    """
    try:
        user = await relational_service.create_user(
            username=request.username,
            email=request.email,
            first_name=request.first_name,
            last_name=request.last_name,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return UserResponse.from_user(user)


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    request: UserRequest,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """Update the fields present in the request body.

    Raises:
        HTTPException: If user not found or update fails
    """
    update = UserUpdate.from_dict(request.model_dump(exclude_unset=True))
    try:
        user = await relational_service.update_user(user_id, update)
    except NotFoundError:
        raise _user_not_found(user_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return UserResponse.from_user(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_user(
    user_id: int,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """Delete a user together with its projects."""
    if not await relational_service.delete_user(user_id):
        raise _user_not_found(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---- Projects ----


@router.get("/projects", response_model=List[ProjectResponse])
async def list_projects(
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    projects = await relational_service.get_all_projects()
    return [ProjectResponse.from_project(p) for p in projects]


@router.get("/projects/search", response_model=List[ProjectResponse])
async def search_projects(
    query: str,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """Search projects by name or description."""
    projects = await relational_service.search_projects(query)
    return [ProjectResponse.from_project(p) for p in projects]


@router.get("/projects/recent", response_model=List[ProjectResponse])
async def get_recent_projects(
    limit: int = DEFAULT_RECENT_PROJECTS_LIMIT,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """Return the most recently created projects."""
    try:
        projects = await relational_service.get_recent_projects(limit)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [ProjectResponse.from_project(p) for p in projects]


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    project = await relational_service.get_project_by_id(project_id)
    if not project:
        raise _project_not_found(project_id)
    return ProjectResponse.from_project(project)


@router.get("/projects/{project_id}/with-user", response_model=ProjectWithUserResponse)
async def get_project_with_user(
    project_id: int,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    project = await relational_service.get_project_with_user(project_id)
    if not project:
        raise _project_not_found(project_id)
    return ProjectWithUserResponse.from_project(project)


@router.post(
    "/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED
)
async def create_project(
    request: ProjectRequest,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """Create a project owned by an existing user.

    Raises:
        HTTPException: If the name is missing or the owner does not exist
    """
    try:
        project = await relational_service.create_project(
            name=request.name,
            user_id=_owner_id(request.model_dump()),
            description=request.description,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ProjectResponse.from_project(project)


@router.put("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    request: ProjectRequest,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    """Update the fields present in the request body.

    Raises:
        HTTPException: If project not found or the update is invalid
    """
    data = request.model_dump(exclude_unset=True)
    if "user" in data or "user_id" in data:
        data["user_id"] = _owner_id(data)
        data.pop("user", None)
    try:
        project = await relational_service.update_project(
            project_id, ProjectUpdate.from_dict(data)
        )
    except NotFoundError:
        raise _project_not_found(project_id)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ProjectResponse.from_project(project)


@router.delete(
    "/projects/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_project(
    project_id: int,
    relational_service: RelationalDataService = Depends(get_relational_service),
):
    if not await relational_service.delete_project(project_id):
        raise _project_not_found(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
