"""Tests for RelationalDataService."""

from datetime import timedelta

import pytest
import pytest_asyncio

from services import NotFoundError, ProjectUpdate, UserUpdate, ValidationError


@pytest_asyncio.fixture
async def alice(relational_service):
    return await relational_service.create_user(
        "alice", "alice@example.com", first_name="Alice", last_name="Liddell"
    )


@pytest_asyncio.fixture
async def bob(relational_service):
    return await relational_service.create_user("bob", "bob@example.com")


def naive(moment):
    return moment.replace(tzinfo=None)


# ---- Users ----


@pytest.mark.asyncio
async def test_create_user(relational_service, alice):
    stored = await relational_service.get_user_by_id(alice.id)

    assert stored.to_dict() == {
        "id": alice.id,
        "username": "alice",
        "email": "alice@example.com",
        "first_name": "Alice",
        "last_name": "Liddell",
    }


@pytest.mark.asyncio
async def test_duplicate_username_is_rejected(relational_service, alice):
    with pytest.raises(ValidationError, match="Username is already taken"):
        await relational_service.create_user("alice", "other@example.com")

    assert len(await relational_service.get_all_users()) == 1


@pytest.mark.asyncio
async def test_duplicate_email_is_rejected(relational_service, alice):
    with pytest.raises(ValidationError, match="Email is already taken"):
        await relational_service.create_user("alice2", "alice@example.com")

    assert len(await relational_service.get_all_users()) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username, email, message",
    [
        ("", "x@example.com", "Username cannot be empty"),
        (None, "x@example.com", "Username cannot be empty"),
        ("x", " ", "Email cannot be empty"),
        ("x", "not-an-email", "Invalid email format"),
    ],
)
async def test_create_user_validation(relational_service, username, email, message):
    with pytest.raises(ValidationError, match=message):
        await relational_service.create_user(username, email)

    assert await relational_service.get_all_users() == []


@pytest.mark.asyncio
async def test_update_user_partial(relational_service, alice):
    updated = await relational_service.update_user(
        alice.id, UserUpdate(first_name="Alicia", last_name=None)
    )

    assert updated.username == "alice"
    assert updated.first_name == "Alicia"
    assert updated.last_name is None


@pytest.mark.asyncio
async def test_update_user_same_username_is_allowed(relational_service, alice):
    updated = await relational_service.update_user(
        alice.id, UserUpdate(username="alice", email="alice@example.com")
    )

    assert updated.username == "alice"


@pytest.mark.asyncio
async def test_update_user_taken_username(relational_service, alice, bob):
    with pytest.raises(ValidationError, match="Username is already taken"):
        await relational_service.update_user(bob.id, UserUpdate(username="alice"))

    assert (await relational_service.get_user_by_id(bob.id)).username == "bob"


@pytest.mark.asyncio
async def test_update_user_taken_email(relational_service, alice, bob):
    with pytest.raises(ValidationError, match="Email is already taken"):
        await relational_service.update_user(bob.id, UserUpdate(email="alice@example.com"))


@pytest.mark.asyncio
async def test_update_user_rejects_null_email(relational_service, alice):
    with pytest.raises(ValidationError):
        await relational_service.update_user(alice.id, UserUpdate(email=None))


@pytest.mark.asyncio
async def test_update_unknown_user(relational_service):
    with pytest.raises(NotFoundError):
        await relational_service.update_user(99, UserUpdate(first_name="Nobody"))


@pytest.mark.asyncio
async def test_search_users(relational_service, alice, bob):
    assert [u.id for u in await relational_service.search_users("LIDDELL")] == [alice.id]
    assert [u.id for u in await relational_service.search_users("example.com")] == [
        alice.id,
        bob.id,
    ]
    assert await relational_service.search_users("carol") == []


@pytest.mark.asyncio
async def test_delete_user_deletes_projects(relational_service, alice, bob):
    await relational_service.create_project("Wonderland", alice.id)
    kept = await relational_service.create_project("Builder", bob.id)

    assert await relational_service.delete_user(alice.id) is True

    assert await relational_service.get_user_by_id(alice.id) is None
    assert [p.id for p in await relational_service.get_all_projects()] == [kept.id]


@pytest.mark.asyncio
async def test_delete_unknown_user(relational_service):
    assert await relational_service.delete_user(5) is False


@pytest.mark.asyncio
async def test_get_user_with_projects(relational_service, alice):
    first = await relational_service.create_project("One", alice.id)
    second = await relational_service.create_project("Two", alice.id)

    user = await relational_service.get_user_with_projects(alice.id)

    assert [p.id for p in user.projects] == [first.id, second.id]
    assert await relational_service.get_user_with_projects(404) is None


# ---- Projects ----


@pytest.mark.asyncio
async def test_create_project_sets_timestamps(relational_service, alice, clock):
    project = await relational_service.create_project(
        "Wonderland", alice.id, description="Down the rabbit hole"
    )
    stored = await relational_service.get_project_by_id(project.id)

    assert stored.created_at == naive(clock.calls[0])
    assert stored.updated_at == stored.created_at
    assert stored.user_id == alice.id
    assert stored.description == "Down the rabbit hole"


@pytest.mark.asyncio
async def test_create_project_requires_name(relational_service, alice):
    with pytest.raises(ValidationError, match="Project name cannot be empty"):
        await relational_service.create_project(" ", alice.id)


@pytest.mark.asyncio
async def test_create_project_requires_existing_owner(relational_service):
    with pytest.raises(ValidationError, match="User is required"):
        await relational_service.create_project("Orphan", None)
    with pytest.raises(ValidationError, match="User not found with id: 77"):
        await relational_service.create_project("Orphan", 77)

    assert await relational_service.get_all_projects() == []


@pytest.mark.asyncio
async def test_update_project_description_only(relational_service, alice, clock):
    project = await relational_service.create_project("Wonderland", alice.id)

    updated = await relational_service.update_project(
        project.id, ProjectUpdate(description="Through the looking glass")
    )
    stored = await relational_service.get_project_by_id(project.id)

    assert updated.name == "Wonderland"
    assert stored.name == "Wonderland"
    assert stored.description == "Through the looking glass"
    assert stored.created_at == naive(clock.calls[0])
    assert stored.updated_at == naive(clock.calls[1])
    assert stored.updated_at - stored.created_at == timedelta(minutes=1)


@pytest.mark.asyncio
async def test_update_project_refreshes_timestamp_without_changes(
    relational_service, alice
):
    project = await relational_service.create_project("Wonderland", alice.id)

    updated = await relational_service.update_project(project.id, ProjectUpdate())

    assert updated.updated_at > project.updated_at


@pytest.mark.asyncio
async def test_update_project_moves_owner(relational_service, alice, bob):
    project = await relational_service.create_project("Wonderland", alice.id)

    await relational_service.update_project(project.id, ProjectUpdate(user_id=bob.id))

    assert await relational_service.get_projects_by_user_id(alice.id) == []
    moved = await relational_service.get_project_with_user(project.id)
    assert moved.user.username == "bob"


@pytest.mark.asyncio
async def test_update_project_rejects_unknown_owner(relational_service, alice):
    project = await relational_service.create_project("Wonderland", alice.id)

    with pytest.raises(ValidationError):
        await relational_service.update_project(project.id, ProjectUpdate(user_id=404))


@pytest.mark.asyncio
async def test_update_unknown_project(relational_service):
    with pytest.raises(NotFoundError):
        await relational_service.update_project(1, ProjectUpdate(name="Ghost"))


@pytest.mark.asyncio
async def test_delete_project(relational_service, alice):
    project = await relational_service.create_project("Wonderland", alice.id)

    assert await relational_service.delete_project(project.id) is True
    assert await relational_service.delete_project(project.id) is False
    assert await relational_service.get_user_by_id(alice.id) is not None


@pytest.mark.asyncio
async def test_get_projects_by_unknown_user(relational_service):
    with pytest.raises(NotFoundError):
        await relational_service.get_projects_by_user_id(404)


@pytest.mark.asyncio
async def test_search_projects(relational_service, alice):
    rabbit = await relational_service.create_project(
        "Wonderland", alice.id, description="Follow the white RABBIT"
    )
    await relational_service.create_project("Chess", alice.id)

    assert [p.id for p in await relational_service.search_projects("rabbit")] == [
        rabbit.id
    ]
    assert [p.id for p in await relational_service.search_projects("WONDER")] == [
        rabbit.id
    ]


@pytest.mark.asyncio
async def test_recent_projects_newest_first(relational_service, alice):
    await relational_service.create_project("p1", alice.id)
    p2 = await relational_service.create_project("p2", alice.id)
    p3 = await relational_service.create_project("p3", alice.id)

    recent = await relational_service.get_recent_projects(2)

    assert [p.id for p in recent] == [p3.id, p2.id]
    assert len(await relational_service.get_recent_projects()) == 3


@pytest.mark.asyncio
async def test_recent_projects_rejects_non_positive_limit(relational_service):
    with pytest.raises(ValidationError):
        await relational_service.get_recent_projects(0)
